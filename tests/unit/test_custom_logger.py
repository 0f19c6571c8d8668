"""
Unit tests for the custom logger.
"""

import logging

from teamspace.logging import CustomLogger, get_logger


def test_context_is_appended(caplog):
    logger = CustomLogger("tests.context")

    with caplog.at_level(logging.INFO, logger="tests.context"):
        logger.info("Invitation created", invitation_id=7)

    assert "Invitation created | invitation_id=7" in caplog.text


def test_sensitive_context_is_filtered(caplog):
    logger = CustomLogger("tests.redact")

    with caplog.at_level(logging.INFO, logger="tests.redact"):
        logger.info("Accepting invitation", token="s3cr3t-token", organization_id=3)

    assert "s3cr3t-token" not in caplog.text
    assert "token=[FILTERED]" in caplog.text
    assert caplog.records[0].custom_data["organization_id"] == 3


def test_slow_logs_as_warning(caplog):
    logger = CustomLogger("tests.slow")

    with caplog.at_level(logging.INFO, logger="tests.slow"):
        logger.slow("Slow request", duration=2.5, threshold=1.0, path="/api/user/profile")

    assert caplog.records[0].levelno == logging.WARNING
    assert "[SLOW]" in caplog.text


def test_get_logger_is_cached():
    assert get_logger("tests.cached") is get_logger("tests.cached")
