"""Single-pass group-and-fold engine.

Every rule-driven operation (fold, reduce and the sink-target counters)
ends up here. The engine walks a KeyedSource exactly once, calling the rule
once per element and keeping one accumulator per key. Keys appear in the
result in the order they were first seen.

For the sink-target form, "first" is judged against the destination as
well as the current pass. Updates are staged and only written into the
destination once the pass has completed, so a failing rule leaves the
destination untouched.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar, cast

from keyfold.grouping.exceptions import (
    ArithmeticOverflowError,
    GroupingError,
    RuleFailureError,
)
from keyfold.grouping.rules import AccumulationRule

if TYPE_CHECKING:
    from keyfold.grouping.source import KeyedSource

logger = getLogger(__name__)

_T = TypeVar("_T")
_K = TypeVar("_K")
_R = TypeVar("_R")
_M = TypeVar("_M", bound=MutableMapping[Any, Any])

# Marks a key with no accumulator yet; None is a valid accumulator value.
_MISSING: Any = object()

_EMPTY: Mapping[Any, Any] = MappingProxyType({})


def _accumulate(
    source: KeyedSource[_T, _K],
    rule: AccumulationRule[_K, _T, _R],
    existing: Mapping[_K, _R],
) -> dict[_K, _R]:
    """Run one pass of ``rule`` over ``source``.

    Args:
        source: The keyed elements to fold.
        rule: The accumulation rule, called once per element.
        existing: Accumulators from before this pass, consulted (never
            modified) for keys the pass has not touched yet.

    Returns:
        A dict holding the accumulator of every key seen in this pass, in
        first-seen order.

    Raises:
        RuleFailureError: If the rule raises for some element.
        ArithmeticOverflowError: If the rule raises OverflowError.
    """
    accumulators: dict[_K, _R] = {}
    elements = 0
    for key, element in source.keyed_elements():
        elements += 1
        previous = accumulators.get(key, _MISSING)
        if previous is _MISSING:
            previous = existing.get(key, _MISSING)
        first = previous is _MISSING
        try:
            accumulators[key] = rule(key, None if first else previous, element, first)
        except GroupingError:
            raise
        except OverflowError as exc:
            raise ArithmeticOverflowError(key, element) from exc
        except Exception as exc:
            raise RuleFailureError(key, element) from exc

    logger.debug(
        "Aggregated %d elements into %d keys with %s",
        elements,
        len(accumulators),
        type(rule).__name__,
    )
    return accumulators


def aggregate(
    source: KeyedSource[_T, _K],
    rule: AccumulationRule[_K, _T, _R],
) -> dict[_K, _R]:
    """Fold every group of ``source`` with ``rule`` into a new dict.

    Args:
        source: The keyed elements to fold.
        rule: Called as ``rule(key, previous, element, first)`` once per element.

    Returns:
        A dict from each distinct key to its final accumulator, ordered by
        each key's first occurrence.
    """
    return _accumulate(source, rule, cast(Mapping[_K, _R], _EMPTY))


def aggregate_to(
    source: KeyedSource[_T, _K],
    destination: _M,
    rule: AccumulationRule[_K, _T, Any],
) -> _M:
    """Fold every group of ``source`` with ``rule`` into ``destination``.

    Keys already present in ``destination`` continue from their stored
    value; other keys start fresh and are appended in first-seen order.

    Returns:
        ``destination`` itself, so calls can be chained across sources.
    """
    destination.update(_accumulate(source, rule, destination))
    return destination
