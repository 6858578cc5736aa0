"""Elements of the Mersenne-31 field, as scalars and as packed lane vectors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, MutableSequence, Sequence

P = (1 << 31) - 1
LOG_N_LANES = 4
N_LANES = 1 << LOG_N_LANES

_U32 = 0xFFFFFFFF


@dataclass(frozen=True, order=True)
class M31:
    """An element of the prime field of order 2^31 - 1, held in [0, P)."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or not 0 <= self.value < P:
            raise ValueError(f"M31 value must be an int in [0, {P}), got {self.value!r}")

    @staticmethod
    def reduce(value: int) -> M31:
        """Return the field element congruent to a non-negative integer."""
        if value < 0:
            raise ValueError("reduce expects a non-negative integer")
        return M31(value % P)

    @staticmethod
    def zero() -> M31:
        return M31(0)

    @staticmethod
    def one() -> M31:
        return M31(1)

    def is_zero(self) -> bool:
        return self.value == 0

    def is_one(self) -> bool:
        return self.value == 1

    def square(self) -> M31:
        return self * self

    def double(self) -> M31:
        return self + self

    def inverse(self) -> M31:
        if self.value == 0:
            raise ZeroDivisionError("0 has no inverse")
        return M31(pow(self.value, P - 2, P))

    def complex_conjugate(self) -> M31:
        """The base field is its own conjugate."""
        return self

    def __add__(self, other: object) -> M31:
        if not isinstance(other, M31):
            return NotImplemented
        return M31((self.value + other.value) % P)

    def __sub__(self, other: object) -> M31:
        if not isinstance(other, M31):
            return NotImplemented
        return M31((self.value - other.value) % P)

    def __mul__(self, other: object) -> M31:
        if not isinstance(other, M31):
            return NotImplemented
        return M31(self.value * other.value % P)

    def __truediv__(self, other: object) -> M31:
        if not isinstance(other, M31):
            return NotImplemented
        return self * other.inverse()

    def __neg__(self) -> M31:
        return M31((P - self.value) % P)

    def __pow__(self, exponent: int) -> M31:
        if exponent < 0:
            return self.inverse() ** (-exponent)
        return M31(pow(self.value, exponent, P))

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"M31({self.value})"


def _add_lanes(lhs: Sequence[int], rhs: Sequence[int]) -> tuple[int, ...]:
    # Each sum lies in [0, 2P]; min(c, c - P) with u32 wrap-around selects the reduced form.
    result = []
    for a, b in zip(lhs, rhs):
        c = (a + b) & _U32
        result.append(min(c, (c - P) & _U32))
    return tuple(result)


def _sub_lanes(lhs: Sequence[int], rhs: Sequence[int]) -> tuple[int, ...]:
    # Each difference lies in [-P, P]; min(c + P, c) with u32 wrap-around fixes negatives.
    result = []
    for a, b in zip(lhs, rhs):
        c = (a - b) & _U32
        result.append(min((c + P) & _U32, c))
    return tuple(result)


class PackedM31:
    """A vector of N_LANES M31 elements, each kept unreduced in [0, P]."""

    __slots__ = ("_lanes",)

    def __init__(self, lanes: Iterable[int]) -> None:
        values = tuple(lanes)
        if len(values) != N_LANES:
            raise ValueError(f"expected {N_LANES} lanes, got {len(values)}")
        for lane in values:
            if not isinstance(lane, int) or not 0 <= lane <= P:
                raise ValueError(f"lane value must be an int in [0, {P}], got {lane!r}")
        self._lanes = values

    @property
    def lanes(self) -> tuple[int, ...]:
        """The raw, possibly unreduced, lane values."""
        return self._lanes

    @staticmethod
    def broadcast(value: M31) -> PackedM31:
        """Build a vector with every lane set to `value`."""
        return PackedM31((value.value,) * N_LANES)

    @staticmethod
    def from_array(values: Iterable[M31]) -> PackedM31:
        return PackedM31(v.value for v in values)

    def to_array(self) -> tuple[M31, ...]:
        return tuple(M31(lane) for lane in self._reduced())

    def _reduced(self) -> tuple[int, ...]:
        return tuple(min(v, (v - P) & _U32) for v in self._lanes)

    def interleave(self, other: PackedM31) -> tuple[PackedM31, PackedM31]:
        """Interleave lanes: (a0, b0, a1, b1, ...) split into two halves."""
        merged = [x for pair in zip(self._lanes, other._lanes) for x in pair]
        return PackedM31(merged[:N_LANES]), PackedM31(merged[N_LANES:])

    def deinterleave(self, other: PackedM31) -> tuple[PackedM31, PackedM31]:
        """Split the concatenation of both vectors into even and odd lanes."""
        merged = self._lanes + other._lanes
        return PackedM31(merged[0::2]), PackedM31(merged[1::2])

    def pointwise_sum(self) -> M31:
        return sum(self.to_array(), M31.zero())

    def double(self) -> PackedM31:
        return self + self

    @staticmethod
    def zero() -> PackedM31:
        return PackedM31((0,) * N_LANES)

    @staticmethod
    def one() -> PackedM31:
        return PackedM31((1,) * N_LANES)

    def is_zero(self) -> bool:
        return all(v.is_zero() for v in self.to_array())

    def inverse(self) -> PackedM31:
        if self.is_zero():
            raise ZeroDivisionError("0 has no inverse")
        result = PackedM31.one()
        base = self
        exponent = P - 2
        while exponent:
            if exponent & 1:
                result = result * base
            base = base * base
            exponent >>= 1
        return result

    @staticmethod
    def load(values: Sequence[int], offset: int = 0) -> PackedM31:
        """Read N_LANES raw words starting at `offset`."""
        if offset < 0 or offset + N_LANES > len(values):
            raise IndexError("not enough values to load a packed vector")
        return PackedM31(values[offset:offset + N_LANES])

    def store(self, values: MutableSequence[int], offset: int = 0) -> None:
        """Write the raw lane words into `values` starting at `offset`."""
        if offset < 0 or offset + N_LANES > len(values):
            raise IndexError("not enough room to store a packed vector")
        values[offset:offset + N_LANES] = list(self._lanes)

    def _coerce(self, other: object) -> PackedM31 | None:
        if isinstance(other, PackedM31):
            return other
        if isinstance(other, M31):
            return PackedM31.broadcast(other)
        return None

    def __add__(self, other: object) -> PackedM31:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return PackedM31(_add_lanes(self._lanes, rhs._lanes))

    __radd__ = __add__

    def __sub__(self, other: object) -> PackedM31:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return PackedM31(_sub_lanes(self._lanes, rhs._lanes))

    def __rsub__(self, other: object) -> PackedM31:
        lhs = self._coerce(other)
        if lhs is None:
            return NotImplemented
        return PackedM31(_sub_lanes(lhs._lanes, self._lanes))

    def __mul__(self, other: object) -> PackedM31:
        rhs = self._coerce(other)
        if rhs is None:
            return NotImplemented
        return mul_doubled(self, [(b + b) & _U32 for b in rhs._lanes])

    __rmul__ = __mul__

    def __neg__(self) -> PackedM31:
        return PackedM31((P - v) & _U32 for v in self._lanes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackedM31):
            return NotImplemented
        return self._reduced() == other._reduced()

    def __hash__(self) -> int:
        return hash(self._reduced())

    def __repr__(self) -> str:
        return f"PackedM31({list(self._lanes)})"


def mul_doubled(a: PackedM31, b_double: Sequence[int]) -> PackedM31:
    """Return a * b lane by lane, given the doubles of b's lanes in [0, 2P]."""
    doubled = tuple(b_double)
    if len(doubled) != N_LANES:
        raise ValueError(f"expected {N_LANES} doubled lanes, got {len(doubled)}")
    for b in doubled:
        if not isinstance(b, int) or not 0 <= b <= 2 * P:
            raise ValueError(f"doubled lane must be an int in [0, {2 * P}], got {b!r}")
    # The 64-bit product 2ab splits as |0|hi (31)|lo (31)|0|, and ab = hi * 2^31 + lo = hi + lo mod P.
    products = [x * y for x, y in zip(a.lanes, doubled)]
    low = PackedM31(((prod & _U32) >> 1) for prod in products)
    high = PackedM31((prod >> 32) for prod in products)
    return low + high