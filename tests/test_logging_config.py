import json
import logging

from config.logging_config import StructuredFormatter, configure_logging, get_logger


def test_get_logger_is_namespaced():
    assert get_logger("services.cash_session_service").name == "caixa.services.cash_session_service"
    assert get_logger("caixa.x").name == "caixa.x"


def test_structured_formatter_emits_json_with_extras():
    record = logging.LogRecord("caixa.test", logging.WARNING, __file__, 1, "Caixa %s fechado", (3,), None)
    record.session_id = 3

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Caixa 3 fechado"
    assert payload["session_id"] == 3


def test_configure_logging_replaces_handlers():
    logger = configure_logging("DEBUG", json_output=True)
    configure_logging("INFO")
    try:
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0].formatter, StructuredFormatter)
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
