import logging
import shutil
import subprocess
from typing import Callable, Optional, Sequence

from .constants import DefaultConfig
from .exceptions import FormattingError


logger = logging.getLogger(__name__)

# source text, file name -> formatted source text; raises on failure
Formatter = Callable[[str, str], str]


class PrettierFormatter:
    """
    Formats TypeScript by piping it through Prettier.

    The command reads the source on stdin and writes the formatted source to
    stdout. Any failure (missing executable, syntax error, timeout) raises
    ``FormattingError``; callers keep the unformatted text in that case.
    """

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        timeout: float = DefaultConfig.FORMATTER_TIMEOUT,
    ):
        self.command = list(command or DefaultConfig.FORMATTER_COMMAND)
        self.timeout = timeout
        self.executable = shutil.which(self.command[0])
        if self.executable is None:
            logger.warning(
                f"Formatter '{self.command[0]}' not found on PATH. "
                "Generated TypeScript will not be auto-formatted."
            )

    @property
    def available(self) -> bool:
        return self.executable is not None

    def __call__(self, source: str, file_name: str = "generated.ts") -> str:
        if not self.available:
            raise FormattingError(f"Formatter '{self.command[0]}' is not installed", file_name=file_name)
        try:
            result = subprocess.run(
                [self.executable, *self.command[1:]],
                input=source,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise FormattingError(f"Formatter timed out after {self.timeout}s", file_name=file_name) from e
        except OSError as e:
            raise FormattingError(f"Could not run formatter: {e}", file_name=file_name) from e

        if result.returncode != 0:
            first_line = (result.stderr or "").strip().splitlines()[:1]
            raise FormattingError(
                f"Formatter exited with code {result.returncode}: {first_line[0] if first_line else ''}",
                file_name=file_name,
            )
        logger.debug(f"Formatted code using {self.command[0]}: {file_name}")
        return result.stdout


def format_source_code(formatter: Optional[Formatter], source: str, file_name: str) -> str:
    """
    Format generated source, falling back to the unformatted text.

    Formatting is cosmetic, so no formatter failure is allowed to fail the
    generation run.
    """
    if formatter is None:
        return source
    try:
        formatted = formatter(source, file_name)
    except Exception as e:
        logger.warning(f"Writing unformatted code for {file_name}: {e}".splitlines()[0])
        return source
    if not isinstance(formatted, str) or not formatted.strip():
        logger.warning(f"Formatter returned no output for {file_name}. Writing unformatted code.")
        return source
    return formatted


def convert_eol(text: str, eol: str) -> str:
    """Rewrite every line ending in ``text`` to ``eol``."""
    normalized = text.replace("\r\n", "\n")
    return normalized if eol == "\n" else normalized.replace("\n", eol)
