"""Tell clicks from drags on the same pointer target.

Network nodes can be dragged to reposition them *and* clicked to open their
diagram. A pointer sequence counts as a drag as soon as it moves further
than ``distance_threshold`` on either axis; that decision is sticky. When a
``time_threshold_ms`` is set, a click must also be released quickly.

Times are supplied by the caller in milliseconds, so the controller can be
exercised without real pointer timing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class GestureKind(str, Enum):
    CLICK = "click"
    DRAG = "drag"


@dataclass(frozen=True)
class ClickPolicy:
    """Thresholds that decide when a pointer sequence is still a click.

    Attributes:
        distance_threshold: Largest per-axis movement in pixels for a click
        time_threshold_ms: Longest press for a click (None: no time limit)
    """

    distance_threshold: float = 5.0
    time_threshold_ms: float | None = None

    @classmethod
    def timed(cls, time_threshold_ms: float = 200.0, distance_threshold: float = 5.0) -> ClickPolicy:
        """The quick-press variant used on draggable network nodes."""
        return cls(distance_threshold=distance_threshold, time_threshold_ms=time_threshold_ms)

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> ClickPolicy:
        unknown = sorted(set(values) - {"distance_threshold", "time_threshold_ms"})
        if unknown:
            raise ValueError(f"Unknown ClickPolicy option(s): {', '.join(unknown)}")
        return cls(**values)

    def exceeds_distance(self, dx: float, dy: float) -> bool:
        return abs(dx) > self.distance_threshold or abs(dy) > self.distance_threshold

    def is_click(self, moved: bool, elapsed_ms: float) -> bool:
        if moved:
            return False
        return self.time_threshold_ms is None or elapsed_ms < self.time_threshold_ms


@dataclass(frozen=True)
class Gesture:
    """A finished pointer sequence."""

    kind: GestureKind
    target: Any
    dx: float
    dy: float
    elapsed_ms: float

    @property
    def is_click(self) -> bool:
        return self.kind is GestureKind.CLICK

    @property
    def is_drag(self) -> bool:
        return self.kind is GestureKind.DRAG


class GestureController:
    """Tracks one pointer sequence at a time.

    Args:
        policy: Click thresholds
    """

    def __init__(self, policy: ClickPolicy | None = None) -> None:
        self.policy = policy or ClickPolicy()
        self._target: Any = None
        self._start: tuple[float, float] | None = None
        self._start_ms = 0.0
        self._moved = False

    @property
    def active(self) -> bool:
        return self._start is not None

    @property
    def target(self) -> Any:
        return self._target

    @property
    def has_dragged(self) -> bool:
        return self._moved

    def pointer_down(self, target: Any, x: float, y: float, t_ms: float) -> None:
        if self.active:
            logger.debug("pointer_down on %r while a gesture on %r is active; restarting", target, self._target)
        self._target = target
        self._start = (x, y)
        self._start_ms = t_ms
        self._moved = False

    def pointer_move(self, x: float, y: float) -> bool:
        """Record movement; returns True once the sequence is a drag."""
        if self._start is None:
            return False
        sx, sy = self._start
        if self.policy.exceeds_distance(x - sx, y - sy):
            self._moved = True
        return self._moved

    def pointer_up(self, x: float, y: float, t_ms: float) -> Gesture | None:
        """Finish the sequence. Returns None when no pointer_down preceded it."""
        if self._start is None:
            return None
        sx, sy = self._start
        dx, dy = x - sx, y - sy
        if self.policy.exceeds_distance(dx, dy):
            self._moved = True
        elapsed = t_ms - self._start_ms
        kind = GestureKind.CLICK if self.policy.is_click(self._moved, elapsed) else GestureKind.DRAG
        gesture = Gesture(kind=kind, target=self._target, dx=dx, dy=dy, elapsed_ms=elapsed)
        self.cancel()
        return gesture

    def cancel(self) -> None:
        self._target = None
        self._start = None
        self._moved = False
