"""
Progress and warning reporting for bundle runs.

The pipeline never prints directly; it emits events through a ``Reporter`` so
callers decide where they go (log records, a rich console, or an in-memory list).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from rich.console import Console
from rich.markup import escape


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    RESOLVE = "resolve"
    BUNDLE = "bundle"
    RENAME = "rename"
    INLINE = "inline"
    CSS_PATHS = "css-paths"
    CRITICAL = "critical"
    MINIFY = "minify"
    FINALIZE = "finalize"


class Level(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ReportEvent:
    """
    A single notification emitted while bundling.

    Attributes:
        level: Severity of the event.
        message: Human-readable text.
        stage: Stage the event belongs to, if it was emitted inside one.
    """
    level: Level
    message: str
    stage: Optional[Stage] = None


class Reporter:
    """
    Base reporter. Subclasses override ``emit``; the helpers only build events.
    """

    def emit(self, event: ReportEvent) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def stage(self, stage: Stage, message: str) -> None:
        """Announce the start of a pipeline stage."""
        self.emit(ReportEvent(Level.INFO, message, stage))

    def info(self, message: str, stage: Optional[Stage] = None) -> None:
        self.emit(ReportEvent(Level.INFO, message, stage))

    def success(self, message: str, stage: Optional[Stage] = None) -> None:
        self.emit(ReportEvent(Level.SUCCESS, message, stage))

    def warning(self, message: str, stage: Optional[Stage] = None) -> None:
        self.emit(ReportEvent(Level.WARNING, message, stage))

    def error(self, message: str, stage: Optional[Stage] = None) -> None:
        self.emit(ReportEvent(Level.ERROR, message, stage))


class LoggingReporter(Reporter):
    """Forward events to the standard logging system."""

    _LEVELS = {
        Level.INFO: logging.INFO,
        Level.SUCCESS: logging.INFO,
        Level.WARNING: logging.WARNING,
        Level.ERROR: logging.ERROR,
    }

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("htmlpack")

    def emit(self, event: ReportEvent) -> None:
        if event.stage is not None:
            self.logger.log(self._LEVELS[event.level], "[%s] %s", event.stage.value, event.message)
        else:
            self.logger.log(self._LEVELS[event.level], "%s", event.message)


class RichReporter(Reporter):
    """Print events to a rich console as they happen."""

    _STYLES = {
        Level.INFO: "cyan",
        Level.SUCCESS: "green",
        Level.WARNING: "bold yellow",
        Level.ERROR: "bold red",
    }

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def emit(self, event: ReportEvent) -> None:
        style = self._STYLES[event.level]
        prefix = f"[{style}]{event.level.value.upper():<7}[/]"
        if event.stage is not None:
            prefix += f" [dim]{event.stage.value}[/]"
        self.console.print(f"{prefix} {escape(event.message)}")


@dataclass
class RecordingReporter(Reporter):
    """Keep every event in memory, e.g. for tests or programmatic callers."""

    events: List[ReportEvent] = field(default_factory=list)

    def emit(self, event: ReportEvent) -> None:
        self.events.append(event)

    @property
    def warnings(self) -> List[str]:
        return [event.message for event in self.events if event.level is Level.WARNING]

    def messages(self, stage: Optional[Stage] = None) -> List[str]:
        return [event.message for event in self.events if stage is None or event.stage is stage]
