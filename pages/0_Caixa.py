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
from services.permissions import ACTION_REOPEN_SESSION, ACTION_REVIEW_SESSION
from services.report_service import overlapping_sessions
from utils.formatters import format_currency, format_date, format_difference
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header, success_box, warning_box


st.set_page_config(page_title="Caixa", page_icon="💰", layout="wide")

AuthService.require_auth()
show_sidebar()

actor = AuthService.current_actor()

page_header(
    "Caixa",
    "💰",
    "Abra o caixa no início do turno e feche ao encerrar. Pedidos entregues e recebimentos de fiado entram no esperado.",
)


def reported_form(key: str, defaults: dict | None = None):
    """Campos de valores contados (dinheiro, PIX, crédito, débito)."""
    defaults = defaults or {}
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        cash = st.number_input("Dinheiro", min_value=0.0, step=1.0, value=float(defaults.get("cash") or 0), key=f"{key}_cash")
    with c2:
        pix = st.number_input("PIX", min_value=0.0, step=1.0, value=float(defaults.get("pix") or 0), key=f"{key}_pix")
    with c3:
        credit = st.number_input("Crédito", min_value=0.0, step=1.0, value=float(defaults.get("credit") or 0), key=f"{key}_credit")
    with c4:
        debit = st.number_input("Débito", min_value=0.0, step=1.0, value=float(defaults.get("debit") or 0), key=f"{key}_debit")
    return {"cash": str(cash), "pix": str(pix), "credit": str(credit), "debit": str(debit)}


db = SessionLocal()

try:
    service = CashSessionService(db)
    sessao_aberta = service.get_active_session()

    # Status em destaque no topo
    if sessao_aberta:
        success_box(
            f"Caixa aberto desde {format_date(sessao_aberta.opened_at)} por "
            f"{sessao_aberta.opened_by_name or '-'} — Troco inicial: "
            f"{format_currency(sessao_aberta.initial_balance)}"
        )
    else:
        warning_box("Nenhum caixa aberto no momento. Abra o caixa para registrar vendas e recebimentos.")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("1. Abrir caixa")
        if sessao_aberta:
            st.info("Já existe um caixa aberto. Feche-o antes de abrir outro.")
        else:
            with st.form("abrir_caixa"):
                valor_abertura = st.number_input("Troco inicial", min_value=0.0, value=0.0, step=1.0)
                observacao = st.text_input("Observação (opcional)", placeholder="Ex: Turno da noite")
                abrir = st.form_submit_button("Abrir caixa", type="primary")
            if abrir:
                try:
                    service.open_session(str(valor_abertura), actor, observations=observacao)
                    st.success("Caixa aberto com sucesso.")
                    st.rerun()
                except CashError as exc:
                    st.error(str(exc))

    with col2:
        st.subheader("2. Fechar caixa")
        if not sessao_aberta:
            st.info("Não há caixa aberto no momento.")
        else:
            esperado = service.preview_closure()
            st.markdown(
                f"**Esperado agora:** Dinheiro {format_currency(esperado.cash)} · "
                f"PIX {format_currency(esperado.pix)} · Crédito {format_currency(esperado.credit)} · "
                f"Débito {format_currency(esperado.debit)} · Outros {format_currency(esperado.other)}"
            )
            st.markdown(
                f"**Total esperado:** {format_currency(esperado.total)} "
                f"({esperado.order_count} pedidos, fiado recebido {format_currency(esperado.settlement_total)})"
            )
            if esperado.issues:
                st.warning(f"{len(esperado.issues)} pedido(s) com pagamento inconsistente foram ajustados.")

            with st.form("fechar_caixa"):
                st.caption("Informe o valor contado em cada forma de pagamento.")
                informado = reported_form("fechar")
                obs_fechamento = st.text_area("Observações", placeholder="Ex: troco separado para amanhã")
                fechar = st.form_submit_button("Fechar caixa", type="primary")
            if fechar:
                try:
                    fechada = service.close_session(sessao_aberta.id, informado, obs_fechamento or None, actor)
                    st.success(
                        f"Caixa fechado. {format_difference(fechada.difference)}."
                    )
                    st.rerun()
                except CashError as exc:
                    st.error(str(exc))

    st.markdown("---")
    with st.expander("📋 Histórico recente de caixas"):
        resumos = service.list_sessions()[:30]
        if not resumos:
            st.info("Nenhuma sessão de caixa registrada ainda.")
        else:
            linhas = []
            for r in resumos:
                s = r.session
                linhas.append(
                    {
                        "ID": s.id,
                        "Abertura": format_date(s.opened_at),
                        "Fechamento": format_date(s.closed_at),
                        "Status": s.status,
                        "Esperado": format_currency(r.expected.total),
                        "Informado": format_currency(r.reported_total),
                        "Diferença": format_difference(r.difference),
                        "Fechado por": s.closed_by_name or "-",
                        "Obs.": s.observations or "",
                    }
                )
            st.dataframe(linhas, use_container_width=True, hide_index=True)
            for antes, depois in overlapping_sessions(resumos):
                st.warning(
                    f"Os caixas {antes} e {depois} têm períodos sobrepostos (reabertura). "
                    "Pedidos do período em comum entram no esperado dos dois."
                )

            fechadas = [r.session for r in resumos if not r.live]
            if fechadas and (AuthService.can(ACTION_REOPEN_SESSION) or AuthService.can(ACTION_REVIEW_SESSION)):
                st.markdown("#### Caixas fechados (gerente/admin)")
                escolhido = st.selectbox(
                    "Sessão",
                    options=fechadas,
                    format_func=lambda s: f"#{s.id} — {format_date(s.opened_at)} — {format_difference(s.difference)}",
                )
                if escolhido is not None:
                    if AuthService.can(ACTION_REOPEN_SESSION) and st.button("Reabrir caixa"):
                        try:
                            service.reopen_session(escolhido.id, actor)
                            st.success("Caixa reaberto.")
                            st.rerun()
                        except CashError as exc:
                            st.error(str(exc))

                    if AuthService.can(ACTION_REVIEW_SESSION):
                        with st.form("revisar_caixa"):
                            st.caption("Revisar valores informados (o esperado não muda).")
                            revisado = reported_form(
                                f"revisar_{escolhido.id}",
                                {
                                    "cash": escolhido.reported_cash,
                                    "pix": escolhido.reported_pix,
                                    "credit": escolhido.reported_credit,
                                    "debit": escolhido.reported_debit,
                                },
                            )
                            obs_revisao = st.text_area("Observações", value=escolhido.observations or "")
                            revisar = st.form_submit_button("Salvar revisão")
                        if revisar:
                            try:
                                service.review_session(escolhido.id, revisado, obs_revisao or None, actor)
                                st.success("Revisão salva.")
                                st.rerun()
                            except CashError as exc:
                                st.error(str(exc))
finally:
    db.close()
