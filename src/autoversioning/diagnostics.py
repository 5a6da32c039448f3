"""Diagnostic reporting for autoversioning.

Messages go to a rich console on stderr and, for errors, to an optional
log file. Every entry is also kept in memory so callers can inspect what
was reported during a pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal

from rich.console import Console

Level = Literal["info", "warning", "error"]

_LEVEL_STYLES: dict[str, str] = {
    "info": "dim",
    "warning": "yellow",
    "error": "red",
}


def default_log_path() -> Path:
    """Get the default error log path (in the user config directory)."""
    return Path.home() / ".autoversioning" / "autoversioning_errors.log"


@dataclass
class Diagnostic:
    """A single reported message."""

    level: Level
    message: str
    error: Exception | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def error_type(self) -> str:
        if self.error is None:
            return "Message"
        return type(self.error).__name__


class Diagnostics:
    """Diagnostic sink shared by the git client, store and resolution pass."""

    def __init__(
        self,
        console: Console | None = None,
        log_path: Path | None = None,
        verbose: bool = False,
        quiet: bool = False,
    ) -> None:
        """Initialize the sink.

        Args:
            console: Console to print to. Defaults to a stderr console.
            log_path: Error log file. Errors are not written to disk if None.
            verbose: Also print info messages.
            quiet: Only print errors.
        """
        self.console = console if console is not None else Console(stderr=True)
        self.log_path = log_path
        self.verbose = verbose
        self.quiet = quiet
        self.entries: list[Diagnostic] = []

    def info(self, message: str) -> None:
        self._report(Diagnostic("info", message))

    def warning(self, message: str, error: Exception | None = None) -> None:
        self._report(Diagnostic("warning", message, error))

    def error(self, message: str, error: Exception | None = None) -> None:
        self._report(Diagnostic("error", message, error))

    @property
    def errors(self) -> list[Diagnostic]:
        """All error-level entries reported so far."""
        return [d for d in self.entries if d.level == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        """All warning-level entries reported so far."""
        return [d for d in self.entries if d.level == "warning"]

    def clear(self) -> None:
        self.entries.clear()

    def _report(self, diagnostic: Diagnostic) -> None:
        self.entries.append(diagnostic)
        if self._should_print(diagnostic.level):
            style = _LEVEL_STYLES[diagnostic.level]
            text = diagnostic.message
            if diagnostic.error is not None:
                text = f"{text}\n{diagnostic.error_type}: {diagnostic.error}"
            self.console.print(text, style=style, markup=False, highlight=False)
        if diagnostic.level == "error":
            self._write_log(diagnostic)

    def _should_print(self, level: Level) -> bool:
        if level == "error":
            return True
        if self.quiet:
            return False
        if level == "info":
            return self.verbose
        return True

    def _write_log(self, diagnostic: Diagnostic) -> None:
        """Append an error entry to the log file."""
        if self.log_path is None:
            return
        try:
            timestamp = diagnostic.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            entry = f"[{timestamp}] {diagnostic.error_type}: {diagnostic.message}"
            if diagnostic.error is not None:
                entry += f" ({diagnostic.error})"
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(entry.replace("\n", " ") + "\n")
        except OSError:
            # Don't let logging errors break a resolution pass
            pass
