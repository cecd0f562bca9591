"""
Helpers para deixar as telas mais intuitivas e consistentes.
"""
import streamlit as st


def page_header(title: str, icon: str, subtitle: str = ""):
    """Título da página com possível subtítulo."""
    st.markdown(
        f"<p style='margin:0 0 0.25rem 0; font-size:1.25rem;'><strong>{icon} {title}</strong></p>"
        f"<p style='margin:0; font-size:0.8rem; color:#666;'>{subtitle}</p>",
        unsafe_allow_html=True,
    )
    st.markdown("---")


def _status_box(message: str, background: str, border: str, icon: str):
    st.markdown(
        f"""
    <div style="
        background-color: {background};
        border-left: 4px solid {border};
        padding: 14px 18px;
        margin: 12px 0;
        border-radius: 0 8px 8px 0;
        font-weight: 500;
    ">
        {icon} {message}
    </div>
    """,
        unsafe_allow_html=True,
    )


def success_box(message: str):
    """Caixa de status positivo (ex.: caixa aberto)."""
    _status_box(message, "#e8f5e9", "#43a047", "✅")


def warning_box(message: str):
    """Caixa de atenção (ex.: caixa fechado)."""
    _status_box(message, "#fff3e0", "#fb8c00", "⚠️")
