"""
Progress events for generation runs.

The orchestrator only emits events; it never computes percentages. A
ProgressEstimator subscribes to the channel and turns events (plus optional
periodic tick() calls from a UI clock) into a display percentage.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from models import RunState

logger = logging.getLogger(__name__)


class EventKind(Enum):
    RUN_STARTED = "run_started"
    TASK_DISPATCHED = "task_dispatched"
    TASK_COMPLETED = "task_completed"
    TASK_FAILED = "task_failed"
    RUN_COMPLETED = "run_completed"
    RUN_RESET = "run_reset"


@dataclass(frozen=True)
class ProgressEvent:
    kind: EventKind
    run_id: str
    session_id: Optional[str] = None
    task: Optional[str] = None       # format value, or "ideas"
    detail: Optional[str] = None     # error text or series part info
    total_tasks: int = 0
    state: Optional[RunState] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "run_id": self.run_id,
            "session_id": self.session_id,
            "task": self.task,
            "detail": self.detail,
            "total_tasks": self.total_tasks,
            "state": self.state.value if self.state else None,
            "timestamp": self.timestamp.isoformat(),
        }


Listener = Callable[[ProgressEvent], None]


class ProgressChannel:
    """Fan-out of progress events to subscribers."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: ProgressEvent):
        logger.debug(f"Progress event: {event.kind.value} task={event.task} run={event.run_id}")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken subscriber must not abort the run
                logger.exception(f"Progress listener failed on {event.kind.value}")


class ProgressEstimator:
    """
    Approximate run progress for display.

    Rises monotonically while tasks are in flight but never past 80% until
    the run completes; jumps to 100% on completion and back to 0 on reset.
    """

    IN_FLIGHT_CAP = 80.0
    TICK_FRACTION = 0.1

    # Display stage per progress range (start, end)
    STAGES = (
        ("analyzing", 0, 20),
        ("conceptualizing", 20, 45),
        ("creating", 45, 85),
        ("finalizing", 85, 100),
    )

    def __init__(self):
        self.progress = 0.0
        self.state = RunState.IDLE
        self.run_id: Optional[str] = None
        self._total = 0
        self._finished = 0

    def __call__(self, event: ProgressEvent):
        self.handle(event)

    def _advance(self, value: float):
        self.progress = max(self.progress, min(value, self.IN_FLIGHT_CAP))

    def handle(self, event: ProgressEvent):
        if event.kind == EventKind.RUN_RESET and event.run_id != self.run_id:
            return
        if event.state is not None:
            self.state = event.state

        if event.kind == EventKind.RUN_STARTED:
            self.run_id = event.run_id
            self.progress = 0.0
            self._total = max(event.total_tasks, 1)
            self._finished = 0
        elif event.kind in (EventKind.TASK_COMPLETED, EventKind.TASK_FAILED):
            self._finished += 1
            self._advance(self.IN_FLIGHT_CAP * self._finished / self._total)
        elif event.kind == EventKind.RUN_COMPLETED:
            self.progress = 100.0
        elif event.kind == EventKind.RUN_RESET:
            self.progress = 0.0
            self.state = RunState.IDLE

    def tick(self) -> float:
        """Creep toward the in-flight cap; call periodically while running."""
        if self.state in (RunState.DISPATCHING, RunState.RUNNING):
            self._advance(self.progress + (self.IN_FLIGHT_CAP - self.progress) * self.TICK_FRACTION)
        return self.progress

    @property
    def stage(self) -> str:
        for name, start, end in self.STAGES:
            if start <= self.progress < end:
                return name
        return self.STAGES[-1][0]
