import logging

import pytest

from sketchparty.logging_utils import configure_logging


@pytest.fixture()
def restore_levels():
    names = ("", "werkzeug", "socketio.server", "engineio.server")
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_explicit_level_wins_over_environment(monkeypatch, restore_levels):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    configure_logging("ERROR")

    assert logging.getLogger().level == logging.ERROR
    assert logging.getLogger("werkzeug").level == logging.ERROR


def test_chatty_loggers_stay_at_warning(restore_levels):
    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("socketio.server").level == logging.WARNING
