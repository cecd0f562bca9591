import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from config.database import SessionLocal
from models.receivable import STATUS_PENDING, Receivable
from services.auth_service import AuthService
from services.exceptions import CashError
from services.settlement_service import SettlementService
from utils.formatters import format_currency, format_date
from utils.navigation import show_sidebar
from utils.ui_helpers import page_header

PAYMENT_OPTIONS = ["DINHEIRO", "PIX", "CRÉDITO", "DÉBITO"]


st.set_page_config(page_title="Fiado", page_icon="📒", layout="wide")

AuthService.require_auth()
show_sidebar()

actor = AuthService.current_actor()

page_header("Fiado", "📒", "Baixa de contas a receber. O valor recebido entra no caixa aberto.")

db = SessionLocal()

try:
    pendentes = (
        db.query(Receivable)
        .filter(Receivable.status == STATUS_PENDING)
        .order_by(Receivable.due_date.asc(), Receivable.id.asc())
        .all()
    )
    if not pendentes:
        st.info("Nenhum fiado pendente.")
    else:
        st.dataframe(
            [
                {
                    "ID": r.id,
                    "Cliente": r.debtor_name,
                    "Pedido": r.order_id or "-",
                    "Valor": format_currency(r.amount),
                    "Vencimento": format_date(r.due_date),
                    "Atrasado": "Sim" if r.is_overdue else "",
                }
                for r in pendentes
            ],
            use_container_width=True,
            hide_index=True,
        )

        with st.form("receber_fiado"):
            escolhido = st.selectbox(
                "Título",
                options=pendentes,
                format_func=lambda r: f"#{r.id} — {r.debtor_name} — {format_currency(r.amount)}",
            )
            metodo = st.selectbox("Forma de pagamento", options=PAYMENT_OPTIONS)
            receber = st.form_submit_button("Registrar recebimento", type="primary")
        if receber and escolhido is not None:
            try:
                SettlementService(db).receive_payment(escolhido.id, metodo, actor)
                st.success("Recebimento registrado e lançado no caixa.")
                st.rerun()
            except CashError as exc:
                st.error(str(exc))
finally:
    db.close()
