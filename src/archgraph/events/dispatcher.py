"""Fan diagram events out to the registered processors."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from archgraph.events.processor import EventProcessor

if TYPE_CHECKING:
    from archgraph.events.types import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Delivers every diagram event to each processor, in registration order.

    Delivery is best effort: a processor that raises is logged and the
    remaining processors still see the event, so an observer can never break
    a diagram interaction. Pass ``strict=True`` (tests do) to surface the
    first failure instead.
    """

    def __init__(
        self,
        processors: list[EventProcessor] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self._processors: list[EventProcessor] = list(processors or ())
        self._strict = strict

    @property
    def active(self) -> bool:
        """Whether emitting would reach anyone."""
        return bool(self._processors)

    def add(self, processor: EventProcessor) -> None:
        self._processors.append(processor)

    def emit(self, event: Event) -> None:
        for processor in self._processors:
            error = self._deliver(processor, lambda p: p.on_event(event), f"on {type(event).__name__}")
            if error is not None:
                raise error

    def shutdown(self) -> None:
        """Let every processor flush. In strict mode the first failure is re-raised at the end."""
        first: Exception | None = None
        for processor in self._processors:
            error = self._deliver(processor, lambda p: p.shutdown(), "during shutdown")
            if first is None:
                first = error
        if first is not None:
            raise first

    def _deliver(
        self,
        processor: EventProcessor,
        call: Callable[[EventProcessor], None],
        context: str,
    ) -> Exception | None:
        # Returns the exception only when strict; otherwise it is logged here.
        try:
            call(processor)
        except Exception as e:
            if self._strict:
                return e
            logger.warning("EventProcessor %s failed %s", processor, context, exc_info=True)
        return None
