"""
Verificação de capacidades usada pelo controle de sessões de caixa.
O controlador recebe um `Authorizer` e não conhece perfis diretamente.
"""
from dataclasses import dataclass
from typing import Callable, Optional

from config.settings import PRIVILEGED_ROLES

ACTION_REOPEN_SESSION = "reopen_session"
ACTION_REVIEW_SESSION = "review_session"
ACTION_VIEW_REPORTS = "view_reports"

PRIVILEGED_ACTIONS = frozenset({ACTION_REOPEN_SESSION, ACTION_REVIEW_SESSION, ACTION_VIEW_REPORTS})


@dataclass(frozen=True)
class Actor:
    """Usuário que executa a operação (id + nome capturados no momento)."""

    id: Optional[int]
    name: str
    role: str = ""

    @classmethod
    def from_user(cls, user: dict) -> "Actor":
        """Monta a partir do dicionário guardado em st.session_state.user."""
        return cls(id=user.get("id"), name=user.get("name") or "", role=user.get("role") or "")


Authorizer = Callable[[Actor, str], bool]


def role_allows(actor: Actor, action: str) -> bool:
    if action in PRIVILEGED_ACTIONS:
        return actor.role in PRIVILEGED_ROLES
    return True


def allow_all(actor: Actor, action: str) -> bool:
    return True
