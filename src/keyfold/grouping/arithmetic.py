"""Integer overflow conventions for counting and summing.

Python integers never overflow, so ``unbounded`` is the default. The bounded
modes emulate a fixed-width signed integer, either wrapping around like
two's-complement hardware or trapping with an OverflowError. Whichever mode
is chosen applies identically to the fast path (``count_each``,
``sum_each_by``) and to the generic sink-target path, so both always agree.

Example::

    policy = IntegerPolicy(overflow="wrap", bits=8)
    policy.add(127, 1)  # Returns -128
"""

import operator
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict

#: How results outside the representable range are handled
OverflowMode = Literal["unbounded", "wrap", "trap"]

#: Supported widths for the bounded modes
IntegerWidth = Literal[8, 16, 32, 64]


class IntegerPolicy(BaseModel):
    """Arithmetic convention for integer accumulators.

    Attributes:
        overflow: ``unbounded`` uses Python integers as-is, ``wrap`` wraps to
            ``bits`` bits, ``trap`` raises OverflowError when a result leaves
            the signed ``bits``-bit range.
        bits: Width of the emulated signed integer. Ignored when unbounded.
    """

    model_config = ConfigDict(frozen=True)

    overflow: OverflowMode = "unbounded"
    bits: IntegerWidth = 64

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1))

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1

    def normalize(self, value: int) -> int:
        """Bring a raw result into range according to the overflow mode.

        Raises:
            OverflowError: If the mode is ``trap`` and the value is out of range.
        """
        match self.overflow:
            case "unbounded":
                return value
            case "wrap":
                return ((value - self.min_value) & ((1 << self.bits) - 1)) + self.min_value
            case "trap":
                if not self.min_value <= value <= self.max_value:
                    raise OverflowError(
                        f"{value} does not fit in a signed {self.bits}-bit integer"
                    )
                return value

    def add(self, left: int, right: int) -> int:
        return self.normalize(left + right)

    def adder(self) -> Callable[[int, int], int]:
        """Return the cheapest addition function that honours this policy."""
        if self.overflow == "unbounded":
            return operator.add
        return self.add


DEFAULT_INTEGER_POLICY = IntegerPolicy()
