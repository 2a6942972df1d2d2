"""Tests for count_each / sum_each_by and their sink-target forms.

The fresh-mapping forms take a direct integer fast path while the
sink-target forms go through the generic engine, so most behaviours are
checked on both paths.
"""

import itertools

import pytest

from keyfold.grouping import IntegerPolicy, grouping_by
from keyfold.grouping.exceptions import (
    ArithmeticOverflowError,
    RuleFailureError,
    SourceExhaustedReuseError,
)
from tests.grouping.models import Sale


def test_count_each_counts_and_keeps_first_seen_order(letters_by_identity) -> None:
    """count_each counts per key in first-seen order."""
    result = letters_by_identity.count_each()
    assert result == {"a": 3, "b": 2, "c": 1}
    assert list(result) == ["a", "b", "c"]


def test_sum_each_by_sums_per_key(sales_by_store) -> None:
    """sum_each_by sums the selected value per key."""
    assert sales_by_store.sum_each_by(lambda sale: sale.total) == {"X": 17, "Y": 5}


@pytest.mark.parametrize(
    "operation",
    [
        lambda source: source.count_each(),
        lambda source: source.count_each_to({}),
        lambda source: source.sum_each_by(len),
        lambda source: source.sum_each_by_to({}, len),
    ],
    ids=["count_each", "count_each_to", "sum_each_by", "sum_each_by_to"],
)
def test_empty_source_gives_empty_mapping(operation) -> None:
    """Every counting form returns an empty mapping for an empty source."""
    assert operation(grouping_by([], lambda it: it)) == {}


def test_count_each_to_into_emptied_mapping_matches_count_each(letters_by_identity) -> None:
    """Repeating count_each_to into a cleared mapping matches count_each."""
    destination: dict[str, int] = {}

    first = dict(letters_by_identity.count_each_to(destination))
    destination.clear()
    second = dict(letters_by_identity.count_each_to(destination))

    assert first == second == letters_by_identity.count_each()
    assert list(first) == list(letters_by_identity.count_each())


def test_count_each_to_across_sources_matches_concatenation() -> None:
    """Counting two sources into one mapping equals counting their concatenation."""
    first_source = ["a", "b", "a"]
    second_source = ["c", "a", "d", "b"]
    destination: dict[str, int] = {}

    grouping_by(first_source, lambda it: it).count_each_to(destination)
    grouping_by(second_source, lambda it: it).count_each_to(destination)

    expected = grouping_by(itertools.chain(first_source, second_source), lambda it: it).count_each()
    assert destination == expected
    assert list(destination) == list(expected)


def test_sum_each_by_to_merges_with_existing_totals(sales_by_store) -> None:
    """sum_each_by_to adds onto totals already in the destination."""
    destination = {"Y": 1, "W": 2}

    result = sales_by_store.sum_each_by_to(destination, lambda sale: sale.total)

    assert result is destination
    assert destination == {"Y": 6, "W": 2, "X": 17}


def test_sum_each_by_value_failure_is_rule_failure() -> None:
    """A value that cannot be added fails as RuleFailureError."""
    sales = [Sale("X", 1), Sale("Y", "lots")]  # type: ignore[arg-type]
    source = grouping_by(sales, lambda sale: sale.store)

    with pytest.raises(RuleFailureError) as exc_info:
        source.sum_each_by(lambda sale: sale.total)

    assert exc_info.value.key == "Y"


def test_sum_each_by_to_failure_leaves_destination_untouched() -> None:
    """A failed sink-target sum leaves the destination unchanged."""
    destination = {"X": 1}

    with pytest.raises(RuleFailureError):
        grouping_by(["X", "X", None], lambda it: "X").sum_each_by_to(
            destination, lambda it: 1 if it else it
        )

    assert destination == {"X": 1}


@pytest.mark.parametrize(
    ("policy", "expected"),
    [
        (IntegerPolicy(), {"x": 200}),
        (IntegerPolicy(overflow="wrap", bits=8), {"x": -56}),
        (IntegerPolicy(overflow="wrap", bits=16), {"x": 200}),
    ],
    ids=["unbounded", "wrap8", "wrap16"],
)
def test_sum_policy_applies_equally_on_both_paths(policy, expected) -> None:
    """Fast and sink-target sums agree under every policy."""
    source = grouping_by([100, 100], lambda n: "x")

    assert source.sum_each_by(lambda n: n, policy) == expected
    assert source.sum_each_by_to({}, lambda n: n, policy) == expected


def test_count_each_wraps_under_wrap_policy() -> None:
    """Counts wrap identically on the fast and sink-target paths."""
    source = grouping_by(range(130), lambda n: "all")
    policy = IntegerPolicy(overflow="wrap", bits=8)

    assert source.count_each(policy) == {"all": -126}
    assert source.count_each_to({}, policy) == {"all": -126}


def test_count_each_traps_under_trap_policy() -> None:
    """Counts past the width raise ArithmeticOverflowError on both paths."""
    source = grouping_by(range(200), lambda n: "all")
    policy = IntegerPolicy(overflow="trap", bits=8)

    with pytest.raises(ArithmeticOverflowError) as exc_info:
        source.count_each(policy)
    assert exc_info.value.key == "all"
    assert exc_info.value.element == 127

    with pytest.raises(ArithmeticOverflowError):
        source.count_each_to({}, policy)


def test_sum_each_by_traps_under_trap_policy() -> None:
    """Sums past the width raise ArithmeticOverflowError on both paths."""
    source = grouping_by([2**31 - 1, 1], lambda n: "x")
    policy = IntegerPolicy(overflow="trap", bits=32)

    with pytest.raises(ArithmeticOverflowError):
        source.sum_each_by(lambda n: n, policy)
    with pytest.raises(ArithmeticOverflowError):
        source.sum_each_by_to({}, lambda n: n, policy)


def test_unbounded_sum_exceeds_64_bits() -> None:
    """Unbounded sums grow beyond 64 bits."""
    source = grouping_by([2**63, 2**63], lambda n: "x")
    assert source.sum_each_by(lambda n: n) == {"x": 2**64}



@pytest.mark.parametrize(
    "operation",
    [
        lambda source, value_of: source.sum_each_by(value_of),
        lambda source, value_of: source.sum_each_by_to({}, value_of),
    ],
    ids=["sum_each_by", "sum_each_by_to"],
)
def test_grouping_error_from_value_function_propagates_unchanged(operation) -> None:
    """A GroupingError raised by value_of is not rewrapped, on either path."""
    consumed = grouping_by(iter([1]), lambda it: it)
    consumed.count_each()

    source = grouping_by([1, 2], lambda n: "all")

    with pytest.raises(SourceExhaustedReuseError):
        operation(source, lambda n: consumed.count_each()[1])
