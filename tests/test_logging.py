"""Test the centralized logging functionality."""

import logging
from io import StringIO

from fabgen.log_config import get_logger, set_global_log_level, severity_level


def test_set_global_log_level():
    """Test that set_global_log_level configures logging properly."""
    set_global_log_level(logging.WARNING)
    assert logging.getLogger("fabgen").level == logging.WARNING

    set_global_log_level(logging.DEBUG)
    assert logging.getLogger("fabgen").level == logging.DEBUG

    set_global_log_level(logging.INFO)
    assert logging.getLogger("fabgen").level == logging.INFO


def test_logger_hierarchy():
    """Test that child loggers inherit from parent."""
    set_global_log_level(logging.WARNING)
    child_logger = get_logger("fabgen.validation.audits.pipeline")
    assert child_logger.getEffectiveLevel() == logging.WARNING


def test_logging_output():
    """Test that logging outputs at correct levels."""
    logger = get_logger("fabgen.test.output")

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    logger.debug("Debug message")
    logger.info("Info message")
    logger.warning("Warning message")
    logger.error("Error message")

    log_output = log_capture.getvalue()
    assert "Debug message" in log_output
    assert "Info message" in log_output
    assert "Warning message" in log_output
    assert "Error message" in log_output


def test_severity_level():
    """Test that finding severities map to matching log levels."""
    assert severity_level("error") == logging.ERROR
    assert severity_level("warning") == logging.WARNING
    assert severity_level("info") == logging.INFO
    assert severity_level("unknown") == logging.INFO


def test_findings_logged_at_their_severity(caplog, reference_topology):
    """Test that validation logs each finding at its severity."""
    from fabgen.validation import validate_topology

    reference_topology.channel_name = "bad name"
    with caplog.at_level(logging.INFO, logger="fabgen"):
        validate_topology(reference_topology)
    levels = [r.levelno for r in caplog.records if "naming.channel" in r.getMessage()]
    assert levels == [logging.WARNING]
