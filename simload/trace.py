import logging
import time
from typing import Callable, List, Optional, Protocol


logger = logging.getLogger("simload")


class WarningSink(Protocol):
    """Anything that accepts advisory messages from the validators."""

    def emit(self, message: str) -> None:
        ...


class CollectingSink:
    """Sink that keeps every message; handy for dry runs and tests."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def emit(self, message: str) -> None:
        self.messages.append(message)


def elapsed_since(start: Optional[float] = None) -> Callable[[], float]:
    """Clock reading seconds since start (a time.monotonic() value), default now."""
    if start is None:
        start = time.monotonic()
    return lambda: time.monotonic() - start


class Tracer:
    """Console/log tracing in model time.

    Three channels, each with its own toggle:
    - warning: non-fatal issues worth the user's attention (unused columns,
      skipped rows, missing optional data).
    - debug: internal state for troubleshooting.
    - update: high-level progress milestones.

    Messages are prefixed with the current time from ``time_source`` so they
    line up with the simulation clock when one is injected.
    """

    def __init__(
        self,
        log: Optional[logging.Logger] = None,
        time_source: Optional[Callable[[], float]] = None,
        print_warnings: bool = True,
        print_debugs: bool = False,
        print_updates: bool = True,
    ):
        self.log = log or logger
        self.time_source = time_source or elapsed_since()
        self.print_warnings = print_warnings
        self.print_debugs = print_debugs
        self.print_updates = print_updates

    @classmethod
    def from_settings(
        cls,
        settings,
        log: Optional[logging.Logger] = None,
        time_source: Optional[Callable[[], float]] = None,
    ) -> "Tracer":
        return cls(
            log=log,
            time_source=time_source,
            print_warnings=settings.PRINT_WARNINGS,
            print_debugs=settings.PRINT_DEBUGS,
            print_updates=settings.PRINT_UPDATES,
        )

    def _format(self, label: str, message: str) -> str:
        return f"{label} (time {self.time_source():.2f}): {message}"

    def warning(self, message: str) -> None:
        if self.print_warnings:
            self.log.warning(self._format("WARNING", message))

    def debug(self, message: str) -> None:
        if self.print_debugs:
            self.log.debug(self._format("DEBUG", message))

    def update(self, message: str) -> None:
        if self.print_updates:
            self.log.info(self._format("UPDATE", message))

    # WarningSink
    emit = warning
