"""Tests for application logging setup."""
import logging

import pytest

from app.config import settings
from app.logging_config import QUIET_LOGGERS, setup_logging

TOUCHED = ("uvicorn", "uvicorn.access", "app", "sqlalchemy.engine") + QUIET_LOGGERS


@pytest.fixture(autouse=True)
def restore_levels():
    levels = {name: logging.getLogger(name).level for name in TOUCHED}
    root_level = logging.getLogger().level
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    logging.getLogger().setLevel(root_level)


def test_explicit_level_applies_to_app_and_server_loggers():
    setup_logging("debug")

    assert logging.getLogger("uvicorn").level == logging.DEBUG
    assert logging.getLogger("app").level == logging.DEBUG
    assert logging.getLogger("app.services.scheduler").getEffectiveLevel() == logging.DEBUG
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_level_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "ERROR")

    setup_logging()

    assert logging.getLogger("uvicorn.access").level == logging.ERROR


def test_sql_logging_follows_database_echo(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_ECHO", True)
    setup_logging()
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    monkeypatch.setattr(settings, "DATABASE_ECHO", False)
    setup_logging()
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
