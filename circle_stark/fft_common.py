"""Helpers shared by the forward and inverse lane-vector circle FFTs."""

from __future__ import annotations

from typing import MutableSequence, Sequence

from circle_stark.m31 import N_LANES, P, PackedM31, mul_doubled

CACHED_FFT_LOG_SIZE = 16
MIN_FFT_LOG_SIZE = 5

_P2 = 2 * P
_NEGATION_MASK = (0, _P2, _P2, 0) * 4
_FIRST_LAYER_ORDER = (1, 1, 0, 0, 3, 3, 2, 2, 5, 5, 4, 4, 7, 7, 6, 6)


def transpose_vecs(values: MutableSequence[int], log_n_vecs: int) -> None:
    """Transpose the lane vectors of `values` in place.

    The vector index abc becomes cba, where |a| == |c| and b is empty or a
    single bit depending on the parity of `log_n_vecs`.
    """
    if log_n_vecs < 0:
        raise ValueError("log_n_vecs must be non-negative")
    if len(values) < N_LANES << log_n_vecs:
        raise ValueError("not enough values for the requested number of vectors")
    half = log_n_vecs // 2
    for b in range(1 << (log_n_vecs & 1)):
        for a in range(1 << half):
            for c in range(1 << half):
                i = (a << (log_n_vecs - half)) | (b << half) | c
                j = (c << (log_n_vecs - half)) | (b << half) | a
                if i >= j:
                    continue
                si, sj = i * N_LANES, j * N_LANES
                values[si:si + N_LANES], values[sj:sj + N_LANES] = (
                    values[sj:sj + N_LANES],
                    values[si:si + N_LANES],
                )


def compute_first_twiddles(
    twiddle1_dbl: Sequence[int],
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Derive the first layer's doubled twiddles from the second layer's.

    Returns (t0, t1), each of N_LANES doubled twiddles. Four consecutive points
    of a coset in bit-reversed order are (x, y), (-x, -y), (y, -x), (-y, x), so
    the first layer's twiddles [y, -y, -x, x] follow from the second's [x, y].
    """
    second = tuple(twiddle1_dbl)
    if len(second) != N_LANES // 2:
        raise ValueError(f"expected {N_LANES // 2} twiddles, got {len(second)}")
    t1 = second + second
    # XOR with 2P maps the double of a value to the double of its negation.
    t0 = tuple(t1[k] ^ mask for k, mask in zip(_FIRST_LAYER_ORDER, _NEGATION_MASK))
    return t0, t1


def mul_twiddle(v: PackedM31, twiddle_dbl: Sequence[int]) -> PackedM31:
    """Return v * twiddle, given the doubles of the twiddles."""
    return mul_doubled(v, twiddle_dbl)