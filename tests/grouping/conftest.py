from collections.abc import Iterator

import pytest

from keyfold.grouping import KeyedSource, grouping_by
from tests.grouping.models import Order, Sale


@pytest.fixture
def letters() -> list[str]:
    return ["a", "b", "a", "c", "b", "a"]


@pytest.fixture
def letters_by_identity(letters: list[str]) -> KeyedSource[str, str]:
    return grouping_by(letters, lambda it: it)


@pytest.fixture
def sales() -> list[Sale]:
    return [Sale("X", 10), Sale("Y", 5), Sale("X", 7)]


@pytest.fixture
def sales_by_store(sales: list[Sale]) -> KeyedSource[Sale, str]:
    return grouping_by(sales, lambda sale: sale.store)


@pytest.fixture
def orders() -> list[Order]:
    return [Order("A", 3), Order("B", 9), Order("A", 5)]


@pytest.fixture
def orders_by_client(orders: list[Order]) -> KeyedSource[Order, str]:
    return grouping_by(orders, lambda order: order.client)


class CountingIterable:
    """Re-iterable source that records how many passes were started."""

    def __init__(self, items: list[str]) -> None:
        self.items = items
        self.passes = 0

    def __iter__(self) -> Iterator[str]:
        self.passes += 1
        return iter(self.items)


@pytest.fixture
def counting_iterable(letters: list[str]) -> CountingIterable:
    return CountingIterable(letters)
