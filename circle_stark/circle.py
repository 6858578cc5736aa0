"""The circle group over M31 and its secure extension, point indices and cosets."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterator

from circle_stark.m31 import M31, P
from circle_stark.qm31 import QM31

M31_CIRCLE_LOG_ORDER = 31
P4 = P**4
SECURE_FIELD_CIRCLE_ORDER = P4 - 1

_INDEX_MODULUS = 1 << M31_CIRCLE_LOG_ORDER
_INDEX_MASK = _INDEX_MODULUS - 1
_BYTES_PER_U128 = 16
# SECURE_FIELD_CIRCLE_ORDER fits a little over 16 times in a 128-bit integer.
_ORDER_MULTIPLE = 16


def _egcd(a: int, b: int) -> tuple[int, int, int]:
    """Return (s, t, g) with s * a + t * b == g == gcd(a, b)."""
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1
    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t
    return old_s, old_t, old_r


@dataclass(frozen=True, order=True)
class CirclePoint:
    """A point (x, y) with x^2 + y^2 = 1, treated as an additive group."""

    x: Any
    y: Any

    @staticmethod
    def zero(field: type = M31) -> CirclePoint:
        """The group identity (1, 0) over the given field."""
        return CirclePoint(field.one(), field.zero())

    def double(self) -> CirclePoint:
        return self + self

    @staticmethod
    def double_x(x: Any) -> Any:
        """Apply the x-coordinate doubling map 2x^2 - 1."""
        return x.square().double() - type(x).one()

    def log_order(self) -> int:
        """Return k such that the point has order 2^k."""
        # The identity is the only point with x = 1.
        res = 0
        cur = self.x
        while not cur.is_one():
            cur = CirclePoint.double_x(cur)
            res += 1
        return res

    def mul(self, scalar: int) -> CirclePoint:
        """Add the point to itself `scalar` times."""
        if scalar < 0:
            raise ValueError("scalar must be non-negative")
        res = CirclePoint.zero(type(self.x))
        cur = self
        while scalar > 0:
            if scalar & 1:
                res = res + cur
            cur = cur.double()
            scalar >>= 1
        return res

    def repeated_double(self, n: int) -> CirclePoint:
        res = self
        for _ in range(n):
            res = res.double()
        return res

    def conjugate(self) -> CirclePoint:
        return CirclePoint(self.x, -self.y)

    def antipode(self) -> CirclePoint:
        return CirclePoint(-self.x, -self.y)

    def into_ef(self) -> CirclePoint:
        """Return the same point with coordinates in the secure field."""
        return CirclePoint(_to_secure(self.x), _to_secure(self.y))

    def mul_signed(self, off: int) -> CirclePoint:
        if off > 0:
            return self.mul(off)
        return self.conjugate().mul(-off)

    def complex_conjugate(self) -> CirclePoint:
        return CirclePoint(self.x.complex_conjugate(), self.y.complex_conjugate())

    @staticmethod
    def get_point(index: int) -> CirclePoint:
        """Return index * SECURE_FIELD_CIRCLE_GEN."""
        if not 0 <= index < SECURE_FIELD_CIRCLE_ORDER:
            raise ValueError("index out of range of the secure circle group")
        return SECURE_FIELD_CIRCLE_GEN.mul(index)

    @staticmethod
    def get_random_point(channel: Any) -> CirclePoint:
        """Draw a uniformly random point of the secure circle group from a channel."""
        bytes_per_hash = channel.BYTES_PER_HASH
        if bytes_per_hash < _BYTES_PER_U128:
            raise ValueError("channel hash is too short to sample a circle point")
        bound = _ORDER_MULTIPLE * SECURE_FIELD_CIRCLE_ORDER
        # Retry probability for each round is about 2^-29.
        while True:
            random_bytes = channel.draw_random_bytes()
            for start in range(0, (bytes_per_hash // _BYTES_PER_U128) * _BYTES_PER_U128,
                               _BYTES_PER_U128):
                chunk = random_bytes[start:start + _BYTES_PER_U128]
                value = int.from_bytes(chunk, "little")
                if value < bound:
                    return CirclePoint.get_point(value % SECURE_FIELD_CIRCLE_ORDER)

    def __add__(self, other: object) -> CirclePoint:
        if not isinstance(other, CirclePoint):
            return NotImplemented
        x = self.x * other.x - self.y * other.y
        y = self.x * other.y + self.y * other.x
        return CirclePoint(x, y)

    def __neg__(self) -> CirclePoint:
        return self.conjugate()

    def __sub__(self, other: object) -> CirclePoint:
        if not isinstance(other, CirclePoint):
            return NotImplemented
        return self + (-other)


def _to_secure(value: Any) -> QM31:
    if isinstance(value, QM31):
        return value
    if isinstance(value, M31):
        zero = M31.zero()
        return QM31.from_m31_array((value, zero, zero, zero))
    raise TypeError(f"cannot embed {type(value).__name__} in the secure field")


M31_CIRCLE_GEN = CirclePoint(M31(2), M31(1268011823))

SECURE_FIELD_CIRCLE_GEN = CirclePoint(
    QM31.from_u32_unchecked(1, 0, 478637715, 513582971),
    QM31.from_u32_unchecked(992285211, 649143431, 740191619, 1186584352),
)


@dataclass(frozen=True, order=True)
class CirclePointIndex:
    """The integer i standing for the point i * M31_CIRCLE_GEN, taken modulo 2^31."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or self.value < 0:
            raise ValueError("point index must be a non-negative int")

    @staticmethod
    def zero() -> CirclePointIndex:
        return CirclePointIndex(0)

    @staticmethod
    def generator() -> CirclePointIndex:
        return CirclePointIndex(1)

    def reduce(self) -> CirclePointIndex:
        return CirclePointIndex(self.value & _INDEX_MASK)

    @staticmethod
    def subgroup_gen(log_size: int) -> CirclePointIndex:
        if not 0 <= log_size <= M31_CIRCLE_LOG_ORDER:
            raise ValueError(f"log_size must be in [0, {M31_CIRCLE_LOG_ORDER}]")
        return CirclePointIndex(1 << (M31_CIRCLE_LOG_ORDER - log_size))

    def to_point(self) -> CirclePoint:
        return M31_CIRCLE_GEN.mul(self.value)

    def half(self) -> CirclePointIndex:
        if self.value & 1:
            raise ValueError("cannot halve an odd index")
        return CirclePointIndex(self.value >> 1)

    def try_div(self, rhs: CirclePointIndex) -> int | None:
        """Return some x with x * rhs == self modulo 2^31, or None if there is none."""
        s, _t, g = _egcd(rhs.value, _INDEX_MODULUS)
        if self.value % g != 0:
            return None
        return s * self.value // g

    def __add__(self, other: object) -> CirclePointIndex:
        if not isinstance(other, CirclePointIndex):
            return NotImplemented
        return CirclePointIndex(self.value + other.value).reduce()

    def __sub__(self, other: object) -> CirclePointIndex:
        if not isinstance(other, CirclePointIndex):
            return NotImplemented
        return CirclePointIndex(self.value + _INDEX_MODULUS - other.value).reduce()

    def __mul__(self, other: object) -> CirclePointIndex:
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        return CirclePointIndex(self.value * other & _INDEX_MASK)

    def __truediv__(self, other: object) -> int:
        if not isinstance(other, CirclePointIndex):
            return NotImplemented
        res = self.try_div(other)
        if res is None:
            raise ValueError(f"{self} is not a multiple of {other}")
        return res

    def __neg__(self) -> CirclePointIndex:
        return CirclePointIndex(_INDEX_MODULUS - self.value).reduce()


@dataclass(frozen=True)
class Coset:
    """The coset initial + <step>, of size 2^log_size."""

    initial_index: CirclePointIndex
    initial: CirclePoint
    step_size: CirclePointIndex
    step: CirclePoint
    log_size: int

    @staticmethod
    def new(initial_index: CirclePointIndex, log_size: int) -> Coset:
        if not 0 <= log_size <= M31_CIRCLE_LOG_ORDER:
            raise ValueError(f"log_size must be in [0, {M31_CIRCLE_LOG_ORDER}]")
        step_size = CirclePointIndex.subgroup_gen(log_size)
        return Coset(
            initial_index=initial_index,
            initial=initial_index.to_point(),
            step_size=step_size,
            step=step_size.to_point(),
            log_size=log_size,
        )

    @staticmethod
    def subgroup(log_size: int) -> Coset:
        """The coset <G_n>: point indices 0, 1, ..., n - 1 in units of G_n."""
        return Coset.new(CirclePointIndex.zero(), log_size)

    @staticmethod
    def odds(log_size: int) -> Coset:
        """The coset G_2n + <G_n>: indices 1, 3, ..., 2n - 1 in units of G_2n."""
        return Coset.new(CirclePointIndex.subgroup_gen(log_size + 1), log_size)

    @staticmethod
    def half_odds(log_size: int) -> Coset:
        """The coset G_4n + <G_n>: indices 1, 5, ..., 4n - 3 in units of G_4n."""
        return Coset.new(CirclePointIndex.subgroup_gen(log_size + 2), log_size)

    def size(self) -> int:
        return 1 << self.log_size

    def __iter__(self) -> Iterator[CirclePoint]:
        cur = self.initial
        for _ in range(self.size()):
            yield cur
            cur = cur + self.step

    def iter_indices(self) -> Iterator[CirclePointIndex]:
        cur = self.initial_index
        for _ in range(self.size()):
            yield cur
            cur = cur + self.step_size

    def double(self) -> Coset:
        """The coset of all points of this one doubled."""
        if self.log_size <= 0:
            raise ValueError("cannot double a coset of size 1")
        return Coset(
            initial_index=self.initial_index * 2,
            initial=self.initial.double(),
            step_size=self.step_size * 2,
            step=self.step.double(),
            log_size=self.log_size - 1,
        )

    def repeated_double(self, n_doubles: int) -> Coset:
        coset = self
        for _ in range(n_doubles):
            coset = coset.double()
        return coset

    def is_doubling_of(self, other: Coset) -> bool:
        return (
            self.log_size <= other.log_size
            and self == other.repeated_double(other.log_size - self.log_size)
        )

    def index_at(self, index: int) -> CirclePointIndex:
        return self.initial_index + self.step_size * index

    def at(self, index: int) -> CirclePoint:
        return self.index_at(index).to_point()

    def shift(self, shift_size: CirclePointIndex) -> Coset:
        initial_index = self.initial_index + shift_size
        return replace(self, initial_index=initial_index, initial=initial_index.to_point())

    def conjugate(self) -> Coset:
        """The conjugate coset -initial - <step>."""
        initial_index = -self.initial_index
        step_size = -self.step_size
        return Coset(
            initial_index=initial_index,
            initial=initial_index.to_point(),
            step_size=step_size,
            step=step_size.to_point(),
            log_size=self.log_size,
        )

    def find(self, i: CirclePointIndex) -> int | None:
        """Return the position of index `i` in the coset, or None if it is not there."""
        res = (i - self.initial_index).try_div(self.step_size)
        if res is None:
            return None
        return res % self.size()