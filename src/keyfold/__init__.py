from keyfold.grouping import DEFAULT_INTEGER_POLICY, IntegerPolicy, KeyedSource, grouping_by
from keyfold.grouping.aggregator import aggregate, aggregate_to
from keyfold.grouping.exceptions import (
    ArithmeticOverflowError,
    GroupingError,
    KeySelectionError,
    RuleFailureError,
    SourceExhaustedReuseError,
)
from keyfold.grouping.rules import AccumulationRule
from keyfold._version import __version__

__all__ = [
    "grouping_by",
    "KeyedSource",
    "AccumulationRule",
    "aggregate",
    "aggregate_to",
    "IntegerPolicy",
    "DEFAULT_INTEGER_POLICY",
    "GroupingError",
    "SourceExhaustedReuseError",
    "KeySelectionError",
    "RuleFailureError",
    "ArithmeticOverflowError",
    "__version__",
]
