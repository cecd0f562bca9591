import streamlit as st

from services.auth_service import AuthService
from services.permissions import ACTION_VIEW_REPORTS


def show_sidebar() -> None:
    """
    Sidebar com informações do usuário e links para as páginas do Caixa.
    """
    user = AuthService.get_current_user()
    role = user["role"] if user else None

    with st.sidebar:
        st.markdown("## 🍽️ Caixa")
        if user:
            st.markdown(f"**{user['name']}**")
            st.caption(f"Perfil: {role}")

        st.markdown("---")
        st.markdown("### Menu")
        st.page_link("app.py", label="Início", icon="🏠")
        st.page_link("pages/0_Caixa.py", label="Caixa", icon="💰")
        st.page_link("pages/1_Fiado.py", label="Fiado", icon="📒")
        if AuthService.can(ACTION_VIEW_REPORTS):
            st.page_link("pages/2_Relatorios.py", label="Relatórios", icon="📈")

        st.markdown("---")
        if st.button("Sair", use_container_width=True):
            AuthService.logout()
            if hasattr(st, "switch_page"):
                st.switch_page("app.py")
            else:
                st.rerun()
