"""
Script para inicializar o banco de dados do Caixa.
- Cria todas as tabelas
- Garante a existência de um usuário admin padrão
"""
from config.database import init_db
from config.logging_config import configure_logging
from config.settings import LOG_JSON, LOG_LEVEL
from services.auth_service import ensure_default_admin


def main() -> None:
    logger = configure_logging(LOG_LEVEL, json_output=LOG_JSON)
    logger.info("Inicializando banco de dados do Caixa...")
    init_db()
    logger.info("Tabelas criadas (se não existiam).")
    ensure_default_admin()


if __name__ == "__main__":
    main()
