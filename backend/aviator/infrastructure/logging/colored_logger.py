"""Colored maintenance logger — ANSI-colored console output for scheduled store jobs.

Color scheme:
    🟢 Green   — Autosave
    🔵 Blue    — Snapshots
    🟡 Yellow  — Retention sweep
    🟣 Magenta — Prediction cycle
    🔴 Red     — Errors
    ⚪ Gray    — Timing / details
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, NamedTuple


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str
    icon: str


class MaintenanceStage:
    """Predefined maintenance stages with colors and icons."""

    AUTOSAVE = Stage("AUTOSAVE", _Colors.GREEN, "💾")
    SNAPSHOT = Stage("SNAPSHOT", _Colors.BLUE, "🗄️")
    RETENTION = Stage("RETENTION", _Colors.YELLOW, "🧹")
    PREDICTION = Stage("PREDICTION", _Colors.MAGENTA, "✈️")
    SCHEDULER = Stage("SCHEDULER", _Colors.WHITE, "⏱️")


def _details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    joined = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({joined}){_Colors.RESET}"


class MaintenanceLogger:
    """Stage-colored logger used by the maintenance scheduler.

    Usage:
        log = MaintenanceLogger("MaintenanceScheduler")
        with log.timed_step(MaintenanceStage.SNAPSHOT, "Creating snapshot"):
            backups.create_snapshot()
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def started(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(
            f"{stage.color}{_Colors.BOLD}{stage.icon} [{stage.label}]{_Colors.RESET} "
            f"{stage.color}{message}{_Colors.RESET}{_details(kwargs)}"
        )

    def finished(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(
            f"{stage.color}{stage.icon} [{stage.label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}{_details(kwargs)}"
        )

    def failed(self, stage: Stage, message: str, error: BaseException | None = None) -> None:
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{stage.label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error is not None:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}{_details(kwargs)}")

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **kwargs: Any):
        """Log start and end of a step with elapsed time; failures are logged and re-raised."""
        self.started(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.failed(stage, f"{message} — failed after {time.perf_counter() - start:.2f}s", error=e)
            raise
        else:
            self.finished(stage, f"{message} — {time.perf_counter() - start:.2f}s")
