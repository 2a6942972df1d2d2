"""Accumulation rules and the derived fold, reduce and counting rules.

An accumulation rule is the single operation the aggregator understands.
It is called once per element with the group key, the group's previous
accumulator (``None`` for the first element of the group), the element
itself and a flag telling whether this is the first element of the group.
Fold, reduce, count and sum are all expressed as rules here.

Key concepts:
    - AccumulationRule: Computes a group's next accumulator value
    - KeyedFoldRule: Seed derived from key and first element, always combined
    - FoldRule: Constant seed, always combined
    - ReduceRule: First element is the seed, never combined
    - CountRule / SumRule: Integer rules used by the sink-target counters

The ``first`` flag, not ``accumulator is None``, decides whether a group is
new, since ``None`` is a legitimate accumulator value.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, cast, runtime_checkable

from typing_extensions import override

from keyfold.grouping.arithmetic import DEFAULT_INTEGER_POLICY, IntegerPolicy

_K = TypeVar("_K", contravariant=True)
_T = TypeVar("_T", contravariant=True)
_R = TypeVar("_R")


@runtime_checkable
class AccumulationRule(Protocol[_K, _T, _R]):
    def __call__(self, key: _K, accumulator: _R | None, element: _T, first: bool) -> _R:
        """Compute the next accumulator value for a group.

        Args:
            key: The group key.
            accumulator: The previous accumulator, or None when ``first`` is true.
            element: The element being folded in.
            first: Whether this is the first element seen for ``key``.

        Returns:
            The new accumulator value for ``key``.
        """
        ...


class KeyedFoldRule(AccumulationRule[Any, Any, Any]):
    """Fold whose seed depends on the key and the group's first element.

    The seed is passed through ``operation`` together with the first
    element, so every element goes through the combining operation.

    Attributes:
        _initial_selector: Computes the seed from ``(key, first_element)``.
        _operation: Combines ``(key, accumulator, element)``.
    """

    def __init__(
        self,
        initial_selector: Callable[[Any, Any], Any],
        operation: Callable[[Any, Any, Any], Any],
    ) -> None:
        self._initial_selector = initial_selector
        self._operation = operation

    @override
    def __call__(self, key: Any, accumulator: Any, element: Any, first: bool) -> Any:
        if first:
            accumulator = self._initial_selector(key, element)
        return self._operation(key, accumulator, element)


class FoldRule(AccumulationRule[Any, Any, Any]):
    """Fold with a constant seed and a key-agnostic operation."""

    def __init__(self, initial: Any, operation: Callable[[Any, Any], Any]) -> None:
        self._initial = initial
        self._operation = operation

    @override
    def __call__(self, key: Any, accumulator: Any, element: Any, first: bool) -> Any:
        return self._operation(self._initial if first else accumulator, element)


class ReduceRule(AccumulationRule[Any, Any, Any]):
    """Reduce seeded by the first element of each group.

    The first element becomes the accumulator as-is and ``operation`` is not
    called for it. Groups always hold at least one element, so there is no
    empty-group case.
    """

    def __init__(self, operation: Callable[[Any, Any, Any], Any]) -> None:
        self._operation = operation

    @override
    def __call__(self, key: Any, accumulator: Any, element: Any, first: bool) -> Any:
        if first:
            return element
        return self._operation(key, accumulator, element)


class CountRule(AccumulationRule[Any, Any, int]):
    """Counts elements per group under an IntegerPolicy."""

    def __init__(self, policy: IntegerPolicy | None = None) -> None:
        self._add = (policy if policy is not None else DEFAULT_INTEGER_POLICY).adder()

    @override
    def __call__(self, key: Any, accumulator: int | None, element: Any, first: bool) -> int:
        return self._add(0 if first else cast(int, accumulator), 1)


class SumRule(AccumulationRule[Any, Any, int]):
    """Sums ``value_of(element)`` per group under an IntegerPolicy."""

    def __init__(
        self,
        value_of: Callable[[Any], int],
        policy: IntegerPolicy | None = None,
    ) -> None:
        self._value_of = value_of
        self._add = (policy if policy is not None else DEFAULT_INTEGER_POLICY).adder()

    @override
    def __call__(self, key: Any, accumulator: int | None, element: Any, first: bool) -> int:
        return self._add(0 if first else cast(int, accumulator), self._value_of(element))
