"""Keyed element sources.

A KeyedSource pairs an iterable of elements with a key selector and is the
handle every aggregation operation hangs off. It holds no accumulated state:
each operation walks the underlying iterable once and returns (or writes
into) a mapping from key to accumulator.

Example::

    sales = grouping_by(sales_list, lambda sale: sale.store)
    sales.count_each()  # {"X": 2, "Y": 1}
    sales.sum_each_by(lambda sale: sale.total)  # {"X": 17, "Y": 5}
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping
from typing import Any, Generic, TypeVar

from keyfold.grouping import aggregator, counting
from keyfold.grouping.arithmetic import IntegerPolicy
from keyfold.grouping.exceptions import KeySelectionError, SourceExhaustedReuseError
from keyfold.grouping.rules import (
    AccumulationRule,
    CountRule,
    FoldRule,
    KeyedFoldRule,
    ReduceRule,
    SumRule,
)

_T = TypeVar("_T")
_K = TypeVar("_K")
_R = TypeVar("_R")
_S = TypeVar("_S")
_M = TypeVar("_M", bound=MutableMapping[Any, Any])


class KeyedSource(Generic[_T, _K]):
    """An element source paired with a key selector.

    Re-iterable sources (lists, tuples, ranges, views) can be aggregated any
    number of times. Single-use sources (generators, iterators, open files)
    support exactly one pass; a second one raises SourceExhaustedReuseError.

    Attributes:
        _source: The underlying iterable of elements.
        _key_selector: Function deriving the group key of an element.
        _single_use: Whether the source is its own iterator.
        _consumed: Whether a single-use source has already been walked.
    """

    def __init__(self, source: Iterable[_T], key_selector: Callable[[_T], _K]) -> None:
        self._source = source
        self._key_selector = key_selector
        self._single_use = isinstance(source, Iterator)
        self._consumed = False

    def elements(self) -> Iterator[_T]:
        """Return an iterator over the underlying source.

        Raises:
            SourceExhaustedReuseError: If the source is single-use and a pass
                has already been started.
        """
        if self._single_use:
            if self._consumed:
                raise SourceExhaustedReuseError(self._source)
            self._consumed = True
        return iter(self._source)

    def key_of(self, element: _T) -> _K:
        """Apply the key selector to an element.

        Raises:
            KeySelectionError: If the key selector raises.
        """
        try:
            return self._key_selector(element)
        except Exception as exc:
            raise KeySelectionError(element) from exc

    def keyed_elements(self) -> Iterator[tuple[_K, _T]]:
        """Lazily yield ``(key, element)`` pairs in source order."""
        key_of = self.key_of
        for element in self.elements():
            yield key_of(element), element

    # --- Generic engine ---

    def aggregate(self, rule: AccumulationRule[_K, _T, _R]) -> dict[_K, _R]:
        """Fold every group with ``rule`` into a new dict in first-seen key order."""
        return aggregator.aggregate(self, rule)

    def aggregate_to(self, destination: _M, rule: AccumulationRule[_K, _T, Any]) -> _M:
        """Fold every group with ``rule`` into ``destination`` and return it.

        Keys already in ``destination`` continue from their stored value. If the
        rule fails, ``destination`` is left unchanged.
        """
        return aggregator.aggregate_to(self, destination, rule)

    # --- Folds ---

    def fold_by_key(
        self,
        initial_selector: Callable[[_K, _T], _R],
        operation: Callable[[_K, _R, _T], _R],
    ) -> dict[_K, _R]:
        """Fold each group starting from a seed computed per key.

        For the first element ``e`` of group ``k`` the result is
        ``operation(k, initial_selector(k, e), e)``; every later element gives
        ``operation(k, previous, e)``.
        """
        return self.aggregate(KeyedFoldRule(initial_selector, operation))

    def fold_by_key_to(
        self,
        destination: _M,
        initial_selector: Callable[[_K, _T], Any],
        operation: Callable[[_K, Any, _T], Any],
    ) -> _M:
        """Like ``fold_by_key``, merging into ``destination`` and returning it."""
        return self.aggregate_to(destination, KeyedFoldRule(initial_selector, operation))

    def fold(self, initial: _R, operation: Callable[[_R, _T], _R]) -> dict[_K, _R]:
        """Fold each group starting from the same constant seed."""
        return self.aggregate(FoldRule(initial, operation))

    def fold_to(self, destination: _M, initial: Any, operation: Callable[[Any, _T], Any]) -> _M:
        """Like ``fold``, merging into ``destination`` and returning it."""
        return self.aggregate_to(destination, FoldRule(initial, operation))

    # --- Reduce ---

    def reduce(self, operation: Callable[[_K, _S, _T], _S]) -> dict[_K, _S]:
        """Reduce each group, using its first element as the seed.

        ``operation`` is only called from the second element of a group on.
        """
        return self.aggregate(ReduceRule(operation))

    def reduce_to(self, destination: _M, operation: Callable[[_K, Any, _T], Any]) -> _M:
        """Like ``reduce``, continuing from values already in ``destination``."""
        return self.aggregate_to(destination, ReduceRule(operation))

    # --- Counting ---

    def count_each(self, policy: IntegerPolicy | None = None) -> dict[_K, int]:
        """Count the elements of each group, in first-seen key order."""
        return counting.count_each(self, policy)

    def count_each_to(self, destination: _M, policy: IntegerPolicy | None = None) -> _M:
        """Add per-key element counts into ``destination``.

        This goes through the generic rule engine; only ``count_each`` has
        the direct integer fast path.
        """
        return self.aggregate_to(destination, CountRule(policy))

    def sum_each_by(
        self, value_of: Callable[[_T], int], policy: IntegerPolicy | None = None
    ) -> dict[_K, int]:
        """Sum ``value_of(element)`` over each group, in first-seen key order."""
        return counting.sum_each_by(self, value_of, policy)

    def sum_each_by_to(
        self,
        destination: _M,
        value_of: Callable[[_T], int],
        policy: IntegerPolicy | None = None,
    ) -> _M:
        """Add per-key sums of ``value_of`` into ``destination``.

        Like ``count_each_to`` this uses the generic rule engine.
        """
        return self.aggregate_to(destination, SumRule(value_of, policy))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source!r}, {self._key_selector!r})"
