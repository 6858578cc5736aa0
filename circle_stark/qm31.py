"""The degree-4 secure extension of M31, as scalars and as packed lane vectors.

CM31 is M31[i] with i^2 = -1; QM31 is CM31[u] with u^2 = 2 + i.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from circle_stark.m31 import M31, PackedM31

SECURE_EXTENSION_DEGREE = 4


@dataclass(frozen=True, order=True)
class CM31:
    """The complex extension a + bi of M31."""

    a: M31
    b: M31

    @staticmethod
    def zero() -> CM31:
        return CM31(M31.zero(), M31.zero())

    @staticmethod
    def one() -> CM31:
        return CM31(M31.one(), M31.zero())

    def is_zero(self) -> bool:
        return self.a.is_zero() and self.b.is_zero()

    def square(self) -> CM31:
        return self * self

    def inverse(self) -> CM31:
        if self.is_zero():
            raise ZeroDivisionError("0 has no inverse")
        denom_inverse = (self.a.square() + self.b.square()).inverse()
        return CM31(self.a * denom_inverse, -self.b * denom_inverse)

    def __add__(self, other: object) -> CM31:
        rhs = _as_cm31(other)
        if rhs is None:
            return NotImplemented
        return CM31(self.a + rhs.a, self.b + rhs.b)

    __radd__ = __add__

    def __sub__(self, other: object) -> CM31:
        rhs = _as_cm31(other)
        if rhs is None:
            return NotImplemented
        return CM31(self.a - rhs.a, self.b - rhs.b)

    def __rsub__(self, other: object) -> CM31:
        lhs = _as_cm31(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other: object) -> CM31:
        rhs = _as_cm31(other)
        if rhs is None:
            return NotImplemented
        return CM31(
            self.a * rhs.a - self.b * rhs.b,
            self.a * rhs.b + self.b * rhs.a,
        )

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> CM31:
        rhs = _as_cm31(other)
        if rhs is None:
            return NotImplemented
        return self * rhs.inverse()

    def __neg__(self) -> CM31:
        return CM31(-self.a, -self.b)

    def __repr__(self) -> str:
        return f"CM31({self.a.value}, {self.b.value})"


def _as_cm31(value: object) -> CM31 | None:
    if isinstance(value, CM31):
        return value
    if isinstance(value, M31):
        return CM31(value, M31.zero())
    return None


# u^2 = 2 + i.
_R = CM31(M31(2), M31(1))


@dataclass(frozen=True, order=True)
class QM31:
    """The secure field element a + bu with a, b in CM31."""

    a: CM31
    b: CM31

    @staticmethod
    def from_m31_array(values: Iterable[M31]) -> QM31:
        a, b, c, d = values
        return QM31(CM31(a, b), CM31(c, d))

    def to_m31_array(self) -> tuple[M31, M31, M31, M31]:
        return (self.a.a, self.a.b, self.b.a, self.b.b)

    @staticmethod
    def from_u32_unchecked(a: int, b: int, c: int, d: int) -> QM31:
        return QM31(CM31(M31(a), M31(b)), CM31(M31(c), M31(d)))

    @staticmethod
    def zero() -> QM31:
        return QM31(CM31.zero(), CM31.zero())

    @staticmethod
    def one() -> QM31:
        return QM31(CM31.one(), CM31.zero())

    def is_zero(self) -> bool:
        return self.a.is_zero() and self.b.is_zero()

    def is_one(self) -> bool:
        return self == QM31.one()

    def square(self) -> QM31:
        return self * self

    def double(self) -> QM31:
        return self + self

    def inverse(self) -> QM31:
        if self.is_zero():
            raise ZeroDivisionError("0 has no inverse")
        # (a + bu)^-1 = (a - bu) / (a^2 - (2+i)b^2).
        denom = self.a.square() - _R * self.b.square()
        denom_inverse = denom.inverse()
        return QM31(self.a * denom_inverse, -self.b * denom_inverse)

    def complex_conjugate(self) -> QM31:
        return QM31(self.a, -self.b)

    def __add__(self, other: object) -> QM31:
        rhs = _as_qm31(other)
        if rhs is None:
            return NotImplemented
        return QM31(self.a + rhs.a, self.b + rhs.b)

    __radd__ = __add__

    def __sub__(self, other: object) -> QM31:
        rhs = _as_qm31(other)
        if rhs is None:
            return NotImplemented
        return QM31(self.a - rhs.a, self.b - rhs.b)

    def __rsub__(self, other: object) -> QM31:
        lhs = _as_qm31(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other: object) -> QM31:
        rhs = _as_qm31(other)
        if rhs is None:
            return NotImplemented
        return QM31(
            self.a * rhs.a + _R * (self.b * rhs.b),
            self.a * rhs.b + self.b * rhs.a,
        )

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> QM31:
        rhs = _as_qm31(other)
        if rhs is None:
            return NotImplemented
        return self * rhs.inverse()

    def __rtruediv__(self, other: object) -> QM31:
        lhs = _as_qm31(other)
        if lhs is None:
            return NotImplemented
        return lhs * self.inverse()

    def __neg__(self) -> QM31:
        return QM31(-self.a, -self.b)

    def __repr__(self) -> str:
        values = ", ".join(str(v.value) for v in self.to_m31_array())
        return f"QM31({values})"


def _as_qm31(value: object) -> QM31 | None:
    if isinstance(value, QM31):
        return value
    cm = _as_cm31(value)
    if cm is not None:
        return QM31(cm, CM31.zero())
    return None


@dataclass(frozen=True)
class PackedCM31:
    """A lane vector of CM31 elements, stored as packed real and imaginary parts."""

    a: PackedM31
    b: PackedM31

    @staticmethod
    def broadcast(value: CM31) -> PackedCM31:
        return PackedCM31(PackedM31.broadcast(value.a), PackedM31.broadcast(value.b))

    @staticmethod
    def from_array(values: Iterable[CM31]) -> PackedCM31:
        items = tuple(values)
        return PackedCM31(
            PackedM31.from_array(v.a for v in items),
            PackedM31.from_array(v.b for v in items),
        )

    def to_array(self) -> tuple[CM31, ...]:
        return tuple(CM31(x, y) for x, y in zip(self.a.to_array(), self.b.to_array()))

    def interleave(self, other: PackedCM31) -> tuple[PackedCM31, PackedCM31]:
        a_lhs, a_rhs = self.a.interleave(other.a)
        b_lhs, b_rhs = self.b.interleave(other.b)
        return PackedCM31(a_lhs, b_lhs), PackedCM31(a_rhs, b_rhs)

    def deinterleave(self, other: PackedCM31) -> tuple[PackedCM31, PackedCM31]:
        a_evens, a_odds = self.a.deinterleave(other.a)
        b_evens, b_odds = self.b.deinterleave(other.b)
        return PackedCM31(a_evens, b_evens), PackedCM31(a_odds, b_odds)

    def double(self) -> PackedCM31:
        return PackedCM31(self.a.double(), self.b.double())

    def square(self) -> PackedCM31:
        return self * self

    def inverse(self) -> PackedCM31:
        if self.a.is_zero() and self.b.is_zero():
            raise ZeroDivisionError("0 has no inverse")
        denom_inverse = (self.a * self.a + self.b * self.b).inverse()
        return PackedCM31(self.a * denom_inverse, -self.b * denom_inverse)

    def __add__(self, other: object) -> PackedCM31:
        rhs = _as_packed_cm31(other)
        if rhs is None:
            return NotImplemented
        return PackedCM31(self.a + rhs.a, self.b + rhs.b)

    __radd__ = __add__

    def __sub__(self, other: object) -> PackedCM31:
        rhs = _as_packed_cm31(other)
        if rhs is None:
            return NotImplemented
        return PackedCM31(self.a - rhs.a, self.b - rhs.b)

    def __rsub__(self, other: object) -> PackedCM31:
        lhs = _as_packed_cm31(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other: object) -> PackedCM31:
        if isinstance(other, (PackedM31, M31)):
            return PackedCM31(self.a * other, self.b * other)
        rhs = _as_packed_cm31(other)
        if rhs is None:
            return NotImplemented
        return PackedCM31(
            self.a * rhs.a - self.b * rhs.b,
            self.a * rhs.b + self.b * rhs.a,
        )

    __rmul__ = __mul__

    def __neg__(self) -> PackedCM31:
        return PackedCM31(-self.a, -self.b)


def _as_packed_cm31(value: object) -> PackedCM31 | None:
    if isinstance(value, PackedCM31):
        return value
    if isinstance(value, PackedM31):
        return PackedCM31(value, PackedM31.zero())
    cm = _as_cm31(value)
    if cm is not None:
        return PackedCM31.broadcast(cm)
    return None


@dataclass(frozen=True)
class PackedQM31:
    """A lane vector of QM31 elements, each represented as a + bu."""

    a: PackedCM31
    b: PackedCM31

    @staticmethod
    def broadcast(value: QM31) -> PackedQM31:
        return PackedQM31(PackedCM31.broadcast(value.a), PackedCM31.broadcast(value.b))

    @staticmethod
    def from_array(values: Iterable[QM31]) -> PackedQM31:
        items = tuple(values)
        return PackedQM31(
            PackedCM31.from_array(v.a for v in items),
            PackedCM31.from_array(v.b for v in items),
        )

    def to_array(self) -> tuple[QM31, ...]:
        return tuple(QM31(x, y) for x, y in zip(self.a.to_array(), self.b.to_array()))

    def interleave(self, other: PackedQM31) -> tuple[PackedQM31, PackedQM31]:
        a_lhs, a_rhs = self.a.interleave(other.a)
        b_lhs, b_rhs = self.b.interleave(other.b)
        return PackedQM31(a_lhs, b_lhs), PackedQM31(a_rhs, b_rhs)

    def deinterleave(self, other: PackedQM31) -> tuple[PackedQM31, PackedQM31]:
        a_evens, a_odds = self.a.deinterleave(other.a)
        b_evens, b_odds = self.b.deinterleave(other.b)
        return PackedQM31(a_evens, b_evens), PackedQM31(a_odds, b_odds)

    def pointwise_sum(self) -> QM31:
        return sum(self.to_array(), QM31.zero())

    def double(self) -> PackedQM31:
        return PackedQM31(self.a.double(), self.b.double())

    def into_packed_m31s(self) -> tuple[PackedM31, PackedM31, PackedM31, PackedM31]:
        """Vectors (a, b, c, d) with lane i equal to QM31(a_i, b_i, c_i, d_i)."""
        return (self.a.a, self.a.b, self.b.a, self.b.b)

    @staticmethod
    def from_packed_m31s(values: Iterable[PackedM31]) -> PackedQM31:
        a, b, c, d = values
        return PackedQM31(PackedCM31(a, b), PackedCM31(c, d))

    @staticmethod
    def zero() -> PackedQM31:
        zero = PackedCM31(PackedM31.zero(), PackedM31.zero())
        return PackedQM31(zero, zero)

    @staticmethod
    def one() -> PackedQM31:
        return PackedQM31(
            PackedCM31(PackedM31.one(), PackedM31.zero()),
            PackedCM31(PackedM31.zero(), PackedM31.zero()),
        )

    def is_zero(self) -> bool:
        return all(part.is_zero() for part in self.into_packed_m31s())

    def inverse(self) -> PackedQM31:
        if self.is_zero():
            raise ZeroDivisionError("0 has no inverse")
        # (a + bu)^-1 = (a - bu) / (a^2 - (2+i)b^2).
        b2 = self.b.square()
        ib2 = PackedCM31(-b2.b, b2.a)
        denom = self.a.square() - (b2 + b2 + ib2)
        denom_inverse = denom.inverse()
        return PackedQM31(self.a * denom_inverse, -self.b * denom_inverse)

    def __add__(self, other: object) -> PackedQM31:
        rhs = _as_packed_qm31(other)
        if rhs is None:
            return NotImplemented
        return PackedQM31(self.a + rhs.a, self.b + rhs.b)

    __radd__ = __add__

    def __sub__(self, other: object) -> PackedQM31:
        rhs = _as_packed_qm31(other)
        if rhs is None:
            return NotImplemented
        return PackedQM31(self.a - rhs.a, self.b - rhs.b)

    def __rsub__(self, other: object) -> PackedQM31:
        lhs = _as_packed_qm31(other)
        if lhs is None:
            return NotImplemented
        return lhs - self

    def __mul__(self, other: object) -> PackedQM31:
        if isinstance(other, (PackedM31, M31)):
            return PackedQM31(self.a * other, self.b * other)
        rhs = _as_packed_qm31(other)
        if rhs is None:
            return NotImplemented
        # Karatsuba: (a + ub)(c + ud) = ac + (2+i)bd + ((a+b)(c+d) - ac - bd)u.
        ac = self.a * rhs.a
        bd = self.b * rhs.b
        bd_times_1_plus_i = PackedCM31(bd.a - bd.b, bd.a + bd.b)
        ac_p_bd = ac + bd
        ad_p_bc = (self.a + self.b) * (rhs.a + rhs.b) - ac_p_bd
        return PackedQM31(ac_p_bd + bd_times_1_plus_i, ad_p_bc)

    __rmul__ = __mul__

    def __neg__(self) -> PackedQM31:
        return PackedQM31(-self.a, -self.b)


def _as_packed_qm31(value: object) -> PackedQM31 | None:
    if isinstance(value, PackedQM31):
        return value
    zero = PackedCM31(PackedM31.zero(), PackedM31.zero())
    if isinstance(value, PackedCM31):
        return PackedQM31(value, zero)
    if isinstance(value, PackedM31):
        return PackedQM31(PackedCM31(value, PackedM31.zero()), zero)
    qm = _as_qm31(value)
    if qm is not None:
        return PackedQM31.broadcast(qm)
    return None