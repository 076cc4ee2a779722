# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Centralized terminal formatting utilities for groupspec."""

import os
import re

from colorama import Fore, Style, init

from groupspec.core.types import RunResults

# autoreset=True means colors reset after each print
init(autoreset=True)


def pluralize(count: int, word: str) -> str:
    """Format ``count`` with ``word``, adding an "s" unless the count is one.

    Examples:
        >>> pluralize(1, "example")
        '1 example'
        >>> pluralize(0, "failure")
        '0 failures'
    """
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class TerminalColors:
    """Centralized color scheme for consistent terminal output.

    Passed examples are green, failures red, pending examples yellow, and
    skipped examples, rerun hints and details cyan.
    """

    ERROR = Fore.RED
    WARNING = Fore.YELLOW
    SUCCESS = Fore.GREEN
    INFO = Fore.CYAN
    HIGHLIGHT = Fore.MAGENTA
    RESET = Style.RESET_ALL

    BOLD = Style.BRIGHT
    DIM = Style.DIM

    # Check if colors should be disabled (for CI/CD environments)
    NO_COLOR = os.environ.get("NO_COLOR") is not None

    # Regex pattern to match ANSI escape sequences
    ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    @classmethod
    def strip_ansi(cls, text: str) -> str:
        """Remove all ANSI escape sequences from text."""
        return cls.ANSI_ESCAPE_PATTERN.sub("", text)

    @classmethod
    def _wrap(cls, color: str, text: str) -> str:
        if cls.NO_COLOR:
            return text
        return f"{color}{text}{cls.RESET}"

    @classmethod
    def error(cls, text: str) -> str:
        """Format error text in red."""
        return cls._wrap(cls.ERROR, text)

    @classmethod
    def warning(cls, text: str) -> str:
        """Format warning text in yellow."""
        return cls._wrap(cls.WARNING, text)

    @classmethod
    def success(cls, text: str) -> str:
        """Format success text in green."""
        return cls._wrap(cls.SUCCESS, text)

    @classmethod
    def info(cls, text: str) -> str:
        """Format info text in cyan."""
        return cls._wrap(cls.INFO, text)

    @classmethod
    def highlight(cls, text: str) -> str:
        """Format highlighted text in magenta."""
        return cls._wrap(cls.HIGHLIGHT, text)

    @classmethod
    def bold(cls, text: str) -> str:
        """Format text in bold."""
        return cls._wrap(cls.BOLD, text)

    @classmethod
    def header(cls, text: str, width: int = 70, char: str = "=") -> str:
        """Format a header with separators.

        Args:
            text: Header text to display
            width: Width of separator line
            char: Character to use for separator

        Returns:
            Formatted header string with separators
        """
        separator = char * width
        return f"{cls.bold(separator)}\n{cls.bold(text)}\n{cls.bold(separator)}"

    @classmethod
    def summary_line(cls, total: int, failures: int, pending: int = 0) -> str:
        """Plain summary such as "3 examples, 1 failure, 1 pending".

        The pending part is omitted when nothing is pending.
        """
        summary = f"{pluralize(total, 'example')}, {pluralize(failures, 'failure')}"
        if pending > 0:
            summary += f", {pending} pending"
        return summary

    @classmethod
    def format_run_summary(cls, results: RunResults) -> str:
        """Colored summary of a run.

        The whole line is red when anything failed, yellow when something was
        pending, and green otherwise. Skipped examples are appended in cyan.
        """
        line = cls.summary_line(results.total, results.failed, results.pending)
        if results.failed > 0:
            line = cls.error(line)
        elif results.pending > 0:
            line = cls.warning(line)
        else:
            line = cls.success(line)
        if results.skipped > 0:
            line += ", " + cls.info(f"{results.skipped} skipped")
        return line


# Single instance for use across the codebase
terminal = TerminalColors()
