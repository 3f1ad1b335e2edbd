"""Exceptions for the archgraph diagram engine.

Data-quality problems (dangling parents, duplicate ids, unknown categories)
are absorbed where they are found and never raised. The classes here cover
caller errors that have no safe default.
"""

from __future__ import annotations


class DiagramDataError(Exception):
    """Input has the wrong top-level shape.

    Raised when the payload handed to a loader cannot be interpreted at all,
    e.g. a string where a list of records is expected. Individual bad records
    inside a well-shaped payload are skipped instead.

    Attributes:
        expected: Description of the expected shape
        received: Type name of what was received
        message: Human-readable error message
    """

    def __init__(
        self,
        expected: str,
        received: object,
        message: str | None = None,
    ) -> None:
        self.expected = expected
        self.received = type(received).__name__
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        return f"Expected {self.expected}, got {self.received}"


class SimulationClosedError(Exception):
    """A force simulation session was used after teardown.

    Raised when ticks are scheduled or drag gestures are applied on a
    session whose ``close()`` has already run.

    Attributes:
        operation: Name of the rejected operation
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        self.message = message or f"Cannot {operation}: simulation session is closed"
        super().__init__(self.message)
