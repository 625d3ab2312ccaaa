import logging
import sys

import pytest

from pinbank.logging_config import LOG_FORMAT, setup_logging


@pytest.fixture
def logger_name(request):
    name = f"pinbank-test-{request.node.name}"
    yield name
    logging.getLogger(name).handlers.clear()


def test_setup_logging_attaches_single_stderr_handler(logger_name) -> None:
    logger = setup_logging("info", logger_name=logger_name)

    assert logger.name == logger_name
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is sys.stderr
    assert handler.formatter._fmt == LOG_FORMAT


def test_setup_logging_replaces_existing_handlers(logger_name) -> None:
    stale = logging.NullHandler()
    logging.getLogger(logger_name).addHandler(stale)

    setup_logging("DEBUG", logger_name=logger_name)
    logger = setup_logging("ERROR", logger_name=logger_name)

    assert stale not in logger.handlers
    assert len(logger.handlers) == 1
    assert logger.level == logging.ERROR


def test_setup_logging_rejects_unknown_level(logger_name) -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging("verbose", logger_name=logger_name)

    assert logging.getLogger(logger_name).handlers == []
