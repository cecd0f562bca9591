import sys
from pathlib import Path

# Garante que o diretório raiz do projeto esteja no path (para rodar de qualquer cwd)
_ROOT = Path(__file__).resolve().parents[0]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from config.database import SessionLocal, init_db
from config.logging_config import configure_logging
from config.settings import LOG_JSON, LOG_LEVEL
from services.auth_service import AuthService, ensure_default_admin
from services.cash_session_service import CashSessionService
from utils.formatters import format_currency, format_date
from utils.navigation import show_sidebar


st.set_page_config(
    page_title="Caixa - Restaurante",
    page_icon="🍽️",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def initialize_app():
    """
    Configura logging, cria as tabelas e garante usuário admin padrão.
    """
    configure_logging(LOG_LEVEL, json_output=LOG_JSON)
    init_db()
    ensure_default_admin()


def login_page():
    st.markdown("# 🔐 Caixa - Restaurante")
    st.caption("Controle de caixa, fechamento e recebimentos")
    st.markdown("---")

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        st.subheader("Entrar no sistema")
        with st.form("login_form"):
            username = st.text_input("Usuário", placeholder="Ex: admin")
            password = st.text_input("Senha", type="password", placeholder="••••••••")
            submit = st.form_submit_button("Entrar", use_container_width=True, type="primary")

        if submit:
            if not username or not password:
                st.error("Por favor, preencha usuário e senha.")
            else:
                db = SessionLocal()
                try:
                    user = AuthService.authenticate(db, username, password)
                    if user:
                        AuthService.login(user)
                        st.success(f"Bem-vindo, {user.name}!")
                        st.rerun()
                    else:
                        st.error("Usuário ou senha inválidos.")
                finally:
                    db.close()


def home_page():
    user = AuthService.get_current_user()

    st.markdown("# 🏠 Início")
    if user:
        st.markdown(f"Olá, **{user['name']}**! Use o menu ao lado para navegar.")
    st.markdown("---")

    db = SessionLocal()
    try:
        sessao = CashSessionService(db).get_active_session()
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Caixa", "Aberto" if sessao else "Fechado")
        with col2:
            st.metric("Aberto desde", format_date(sessao.opened_at) if sessao else "-")
        with col3:
            st.metric("Troco inicial", format_currency(sessao.initial_balance) if sessao else "-")
    finally:
        db.close()

    st.markdown("### Como funciona")
    st.markdown(
        "1. Abra o **Caixa** no início do turno informando o troco inicial.  \n"
        "2. Pedidos entregues e recebimentos de **Fiado** entram no valor esperado.  \n"
        "3. No fim do turno, conte o dinheiro e os comprovantes e feche o caixa: a diferença "
        "(sobra ou falta) fica registrada.  \n"
        "4. Gerente/admin podem reabrir ou revisar um caixa fechado; tudo fica na auditoria.  \n"
        "5. Acompanhe os fechamentos em **Relatórios**."
    )


def main():
    initialize_app()
    AuthService.init_session_state()

    if not AuthService.is_authenticated():
        login_page()
    else:
        show_sidebar()
        home_page()


if __name__ == "__main__":
    main()
