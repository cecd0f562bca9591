"""
Serviço de autenticação e controle de acesso do Caixa.
"""
from typing import Optional

import bcrypt
import streamlit as st
from sqlalchemy.orm import Session

from config.database import SessionLocal
from config.logging_config import get_logger
from config.settings import DEFAULT_ADMIN_PASSWORD
from models.user import User
from services.permissions import Actor, role_allows

logger = get_logger(__name__)


class AuthService:
    """
    Gerencia autenticação, sessão e permissões básicas (roles).
    """

    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Optional[User]:
        user = (
            db.query(User)
            .filter(User.username == username, User.active.is_(True))
            .first()
        )
        if user and AuthService.verify_password(password, user.password_hash):
            return user
        return None

    @staticmethod
    def create_user(db: Session, username: str, name: str, password: str, role: str) -> User:
        password_hash = AuthService.hash_password(password)
        user = User(
            username=username,
            name=name,
            password_hash=password_hash,
            role=role,
            active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    # ----- Session / estado -----

    @staticmethod
    def init_session_state() -> None:
        if "authenticated" not in st.session_state:
            st.session_state.authenticated = False
        if "user" not in st.session_state:
            st.session_state.user = None

    @staticmethod
    def login(user: User) -> None:
        st.session_state.authenticated = True
        st.session_state.user = {
            "id": user.id,
            "username": user.username,
            "name": user.name,
            "role": user.role,
        }

    @staticmethod
    def logout() -> None:
        st.session_state.authenticated = False
        st.session_state.user = None

    @staticmethod
    def is_authenticated() -> bool:
        return st.session_state.get("authenticated", False)

    @staticmethod
    def get_current_user() -> Optional[dict]:
        return st.session_state.get("user")

    @staticmethod
    def current_actor() -> Optional[Actor]:
        user = AuthService.get_current_user()
        return Actor.from_user(user) if user else None

    @staticmethod
    def can(action: str) -> bool:
        actor = AuthService.current_actor()
        return actor is not None and role_allows(actor, action)

    # ----- Requisitos de acesso -----

    @staticmethod
    def require_auth() -> None:
        """
        Garante que o usuário esteja autenticado.
        Se não estiver, mostra mensagem e interrompe a execução da página.
        """
        AuthService.init_session_state()
        if not AuthService.is_authenticated():
            st.warning("Você precisa fazer login para acessar esta página.")
            st.stop()

    @staticmethod
    def require_action(action: str) -> None:
        """
        Garante que o usuário autenticado possa executar a ação
        (perfis privilegiados vêm de PRIVILEGED_ROLES).
        """
        AuthService.require_auth()
        if not AuthService.can(action):
            st.error("Você não tem permissão para acessar esta funcionalidade.")
            st.stop()


def ensure_default_admin() -> None:
    """
    Garante a existência de um usuário admin padrão.
    Executado na inicialização da aplicação.
    """
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.role == "admin").first()
        if not admin:
            AuthService.create_user(
                db=db,
                username="admin",
                name="Administrador",
                password=DEFAULT_ADMIN_PASSWORD,
                role="admin",
            )
            logger.warning("Usuário admin padrão criado: username=admin (altere a senha em produção)")
    finally:
        db.close()
