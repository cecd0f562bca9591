"""
Configuração do banco de dados do Caixa
- Suporta SQLite para desenvolvimento local e testes
- Suporta PostgreSQL (produção) via DATABASE_URL
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import DATABASE_URL, DB_DIR

# Base para os modelos
Base = declarative_base()


def make_engine(url: str) -> Engine:
    """
    Cria o engine conforme o tipo de banco.
    """
    if url.startswith("postgresql"):
        return create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
            pool_recycle=3600,
        )

    # SQLite (desenvolvimento local / testes)
    sqlite_engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 30},
        echo=False,
    )

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


if DATABASE_URL.startswith("sqlite"):
    DB_DIR.mkdir(parents=True, exist_ok=True)

engine = make_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Dependency simples para obter uma sessão do banco de dados.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None):
    """
    Cria todas as tabelas definidas nos modelos.
    Deve ser chamada uma vez na inicialização da aplicação.
    """
    # Importa modelos aqui para registrar no metadata
    from models import (  # noqa: F401
        audit_log,
        cash_ledger,
        cash_session,
        order,
        receivable,
        user,
    )

    Base.metadata.create_all(bind=bind or engine)
