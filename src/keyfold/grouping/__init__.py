from collections.abc import Callable, Iterable
from typing import TypeVar

from keyfold.grouping.arithmetic import DEFAULT_INTEGER_POLICY, IntegerPolicy
from keyfold.grouping.source import KeyedSource

_T = TypeVar("_T")
_K = TypeVar("_K")

__all__ = ["DEFAULT_INTEGER_POLICY", "IntegerPolicy", "KeyedSource", "grouping_by"]


def grouping_by(elements: Iterable[_T], key_selector: Callable[[_T], _K]) -> KeyedSource[_T, _K]:
    """Pair ``elements`` with ``key_selector`` for grouped aggregation.

    Nothing is iterated until an aggregation method is called on the result.

    Example:
        >>> grouping_by(["a", "b", "a"], lambda it: it).count_each()
        {'a': 2, 'b': 1}
    """
    return KeyedSource(elements, key_selector)
