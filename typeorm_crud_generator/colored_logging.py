"""
Colored console logging for the TypeORM CRUD generator.

Success, progress and section messages get their own colors so a long
generation run is easy to follow in a terminal.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI color codes to log messages.

    Errors and warnings are always colored by level. INFO and DEBUG messages
    are colored by their leading marker (see ``log_success`` and friends).
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SPECIAL_COLORS = {
        'success': '\033[92m',    # Bright Green
        'progress': '\033[94m',   # Bright Blue
        'highlight': '\033[96m',  # Bright Cyan
    }

    SUCCESS_MARKER = "✓"
    PROGRESS_MARKER = "→"
    HIGHLIGHT_MARKER = "•"
    SECTION_MARKER = "=" * 60

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors (disabled anyway when stderr is not a TTY)
        """
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)

        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        raw_message = record.getMessage()
        message = raw_message.lstrip()

        if record.levelname in ('ERROR', 'CRITICAL', 'WARNING'):
            return f"{self.COLORS[record.levelname]}{formatted_message}{self.RESET}"

        if message.startswith(self.SUCCESS_MARKER):
            return f"{self.SPECIAL_COLORS['success']}{self.BOLD}{formatted_message}{self.RESET}"
        if message.startswith(self.PROGRESS_MARKER):
            return f"{self.SPECIAL_COLORS['progress']}{formatted_message}{self.RESET}"
        if message.startswith(self.HIGHLIGHT_MARKER):
            return f"{self.SPECIAL_COLORS['highlight']}{formatted_message}{self.RESET}"
        if raw_message.startswith(self.SECTION_MARKER) or (raw_message.startswith("  ") and raw_message.isupper()):
            return f"{self.BOLD}{self.SPECIAL_COLORS['highlight']}{formatted_message}{self.RESET}"
        if record.levelname == 'DEBUG':
            return f"{self.COLORS['DEBUG']}{formatted_message}{self.RESET}"

        # Plain INFO messages stay uncolored
        return formatted_message


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Set up colored logging on the root logger.

    Existing root handlers are removed so repeated calls (tests, re-runs of
    ``main``) do not duplicate output.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    formatter = ColoredFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def get_colored_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)


def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message."""
    logger.info(f"{ColoredFormatter.SUCCESS_MARKER} {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    """Log a progress message."""
    logger.info(f"{ColoredFormatter.PROGRESS_MARKER} {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    """Log a highlighted message."""
    logger.info(f"{ColoredFormatter.HIGHLIGHT_MARKER} {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header."""
    logger.info(ColoredFormatter.SECTION_MARKER)
    logger.info(f"  {section_name.upper()}")
    logger.info(ColoredFormatter.SECTION_MARKER)
