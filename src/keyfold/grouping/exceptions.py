"""Exceptions for the grouping engine.

This module defines exceptions raised while grouping and folding elements.
Every failure aborts the pass it occurs in: the engine never recovers
internally and never hands back a partially built mapping.
"""

from typing import Any


class GroupingError(Exception):
    """Base exception for grouping and aggregation failures.

    Attributes:
        message: Human-readable description of the failure.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class SourceExhaustedReuseError(GroupingError):
    """Raised when a single-use source is iterated a second time.

    Sources such as generators and file objects can only be walked once.
    Running a second aggregation against a KeyedSource built on one of them
    raises this rather than silently producing an empty mapping.
    """

    def __init__(self, source: Any, message: str | None = None) -> None:
        self.source = source
        if message is None:
            message = (
                f"Source {type(source).__name__} has already been consumed; "
                "build a new KeyedSource from a fresh iterable"
            )
        super().__init__(message)


class KeySelectionError(GroupingError):
    """Raised when the key selector fails for an element.

    Attributes:
        element: The element the key selector was applied to.
    """

    def __init__(self, element: Any, message: str | None = None) -> None:
        self.element = element
        if message is None:
            message = f"Key selector failed for element {element!r}"
        super().__init__(message)


class RuleFailureError(GroupingError):
    """Raised when an accumulation rule fails for an element.

    The original exception is chained as ``__cause__``.

    Attributes:
        key: The key of the group being folded.
        element: The element being folded into that group.
    """

    def __init__(self, key: Any, element: Any, message: str | None = None) -> None:
        self.key = key
        self.element = element
        if message is None:
            message = f"Accumulation failed for key {key!r} at element {element!r}"
        super().__init__(message)


class ArithmeticOverflowError(RuleFailureError, OverflowError):
    """Raised when a count or sum leaves the range allowed by its IntegerPolicy."""

    def __init__(self, key: Any, element: Any, message: str | None = None) -> None:
        if message is None:
            message = f"Integer overflow accumulating key {key!r} at element {element!r}"
        super().__init__(key, element, message)
