"""Logging configuration."""

import logging

import pytest
import structlog

from dinein.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_structlog():
    yield
    structlog.reset_defaults()


def test_protean_logger_quieted():
    assert logging.getLogger("protean").level == logging.WARNING


def test_level_filter_applied(capsys):
    configure_logging("WARNING", json_output=True)
    log = structlog.get_logger("dinein.test")
    log.info("hidden")
    log.warning("synchronization_warning", order_id="ord-1")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert '"event": "synchronization_warning"' in out
    assert '"order_id": "ord-1"' in out
