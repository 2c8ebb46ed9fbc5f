"""
Tests for the colored log formatter
"""

import logging
from unittest.mock import patch

from typeorm_crud_generator.colored_logging import ColoredFormatter, log_section, log_success


def make_record(message, level=logging.INFO):
    return logging.LogRecord("test", level, __file__, 1, message, None, None)


def test_colors_disabled_without_tty():
    with patch("typeorm_crud_generator.colored_logging.sys.stderr") as mock_stderr:
        mock_stderr.isatty.return_value = False
        formatter = ColoredFormatter(use_colors=True)
    assert formatter.format(make_record("✓ done")) == "INFO: ✓ done"


def test_success_and_warning_colors():
    with patch("typeorm_crud_generator.colored_logging.sys.stderr") as mock_stderr:
        mock_stderr.isatty.return_value = True
        formatter = ColoredFormatter(use_colors=True)

    success = formatter.format(make_record("✓ done"))
    warning = formatter.format(make_record("careful", logging.WARNING))

    assert success.startswith(ColoredFormatter.SPECIAL_COLORS["success"])
    assert warning.startswith(ColoredFormatter.COLORS["WARNING"])
    assert warning.endswith(ColoredFormatter.RESET)


def test_log_helpers_add_markers():
    logger = logging.getLogger("typeorm_crud_generator.tests")
    with patch.object(logger, "info") as mock_info:
        log_success(logger, "written")
        log_section(logger, "completion")
    messages = [call.args[0] for call in mock_info.call_args_list]
    assert messages == ["✓ written", "=" * 60, "  COMPLETION", "=" * 60]
