"""Fast paths for per-key counting and summing.

``count_each`` and ``sum_each_by`` are the two hottest aggregations, so they
skip the generic rule engine and update plain ints in a dict directly: no
rule object, no first-element flag and no staging dict per call.

Only the fresh-mapping forms get this treatment. ``count_each_to`` and
``sum_each_by_to`` fall back to the generic engine with CountRule and
SumRule. Both paths share the same IntegerPolicy, so results are identical.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any, TypeVar

from keyfold.grouping.arithmetic import DEFAULT_INTEGER_POLICY, IntegerPolicy
from keyfold.grouping.exceptions import (
    ArithmeticOverflowError,
    GroupingError,
    RuleFailureError,
)

if TYPE_CHECKING:
    from keyfold.grouping.source import KeyedSource

logger = getLogger(__name__)

_T = TypeVar("_T")
_K = TypeVar("_K")


def count_each(
    source: KeyedSource[Any, _K], policy: IntegerPolicy | None = None
) -> dict[_K, int]:
    """Count the elements of each group.

    Raises:
        ArithmeticOverflowError: If a count overflows under a ``trap`` policy.
    """
    add = (policy if policy is not None else DEFAULT_INTEGER_POLICY).adder()
    counts: dict[_K, int] = {}
    get = counts.get
    for key, element in source.keyed_elements():
        try:
            counts[key] = add(get(key, 0), 1)
        except OverflowError as exc:
            raise ArithmeticOverflowError(key, element) from exc

    logger.debug("Counted %d distinct keys", len(counts))
    return counts


def sum_each_by(
    source: KeyedSource[_T, _K],
    value_of: Callable[[_T], int],
    policy: IntegerPolicy | None = None,
) -> dict[_K, int]:
    """Sum ``value_of(element)`` over the elements of each group.

    Raises:
        RuleFailureError: If ``value_of`` raises or returns something that
            cannot be added.
        ArithmeticOverflowError: If a sum overflows under a ``trap`` policy.
    """
    add = (policy if policy is not None else DEFAULT_INTEGER_POLICY).adder()
    sums: dict[_K, int] = {}
    get = sums.get
    for key, element in source.keyed_elements():
        try:
            sums[key] = add(get(key, 0), value_of(element))
        except GroupingError:
            raise
        except OverflowError as exc:
            raise ArithmeticOverflowError(key, element) from exc
        except Exception as exc:
            raise RuleFailureError(key, element) from exc

    logger.debug("Summed %d distinct keys", len(sums))
    return sums
