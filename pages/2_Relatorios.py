import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from config.database import SessionLocal
from services.auth_service import AuthService
from services.cash_session_service import CashSessionService
from services.exceptions import CashError
from services.permissions import ACTION_VIEW_REPORTS
from services.report_service import overlapping_sessions, period_range, sessions_to_dataframe, summarize_period
from utils.formatters import format_currency, format_difference
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header

PRESET_LABELS = {
    "Hoje": "hoje",
    "Últimos 7 dias": "semana",
    "Mês atual": "mes",
    "Mês anterior": "mes_anterior",
    "Geral": "geral",
}


st.set_page_config(page_title="Relatórios", page_icon="📈", layout="wide")

AuthService.require_action(ACTION_VIEW_REPORTS)
show_sidebar()

page_header("Relatórios de caixa", "📈", "Sessões por período: esperado, informado e diferença.")

col_tipo, col1, col2 = st.columns([1, 1, 1])
with col_tipo:
    rotulo = st.selectbox("Período", options=list(PRESET_LABELS))
inicio_padrao, fim_padrao = period_range(PRESET_LABELS[rotulo])
with col1:
    data_inicio = st.date_input("Data inicial", value=inicio_padrao)
with col2:
    data_fim = st.date_input("Data final", value=fim_padrao)

db = SessionLocal()

try:
    try:
        resumos = CashSessionService(db).list_sessions(data_inicio, data_fim)
    except CashError as exc:
        st.error(str(exc))
        st.stop()

    totais = summarize_period(resumos)
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("Sessões", totais.session_count, help=f"{totais.open_count} aberta(s)")
    with c2:
        st.metric("Total esperado", format_currency(totais.expected_total))
    with c3:
        st.metric("Total informado", format_currency(totais.reported_total))
    with c4:
        st.metric("Diferença", format_difference(totais.difference_total))
    st.caption(f"Caixas com falta: {totais.shortfall_sessions} · com sobra: {totais.surplus_sessions}")

    st.markdown("---")
    df = sessions_to_dataframe(resumos)
    if df.empty:
        st.info("Nenhuma sessão de caixa no período.")
    else:
        for antes, depois in overlapping_sessions(resumos):
            st.warning(
                f"Os caixas {antes} e {depois} têm períodos sobrepostos (reabertura). "
                "Pedidos do período em comum entram no esperado dos dois."
            )
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "Baixar CSV",
            data=df.to_csv(index=False).encode("utf-8"),
            file_name="caixas.csv",
            mime="text/csv",
        )
finally:
    db.close()
