"""Lane permutations that interleave the even or odd lanes of two vectors."""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")


def parity_interleave(n: int, odd: bool) -> tuple[int, ...]:
    """Indices into the concatenation of two n-lane vectors that interleave
    their even (or odd) lanes: lane i of the result takes lane 2*(i//2) (+1
    when `odd`) of the first vector for even i, and of the second for odd i.
    """
    if n < 0:
        raise ValueError("lane count must be non-negative")
    offset = 1 if odd else 0
    return tuple((i % 2) * n + (i // 2) * 2 + offset for i in range(n))


def _concat_swizzle(lo: Sequence[T], hi: Sequence[T], odd: bool) -> tuple[T, ...]:
    lo_lanes = tuple(lo)
    hi_lanes = tuple(hi)
    if len(lo_lanes) != len(hi_lanes):
        raise ValueError("both vectors must have the same number of lanes")
    combined = lo_lanes + hi_lanes
    return tuple(combined[j] for j in parity_interleave(len(lo_lanes), odd))


def interleave_evens(lo: Sequence[T], hi: Sequence[T]) -> tuple[T, ...]:
    """Interleave the even lanes of `lo` with the even lanes of `hi`."""
    return _concat_swizzle(lo, hi, odd=False)


def interleave_odds(lo: Sequence[T], hi: Sequence[T]) -> tuple[T, ...]:
    """Interleave the odd lanes of `lo` with the odd lanes of `hi`."""
    return _concat_swizzle(lo, hi, odd=True)