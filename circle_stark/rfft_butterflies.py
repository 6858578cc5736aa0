"""Butterfly building blocks of the forward lane-vector circle FFT."""

from __future__ import annotations

from typing import Sequence

from circle_stark.circle import Coset
from circle_stark.fft_common import compute_first_twiddles, mul_twiddle
from circle_stark.m31 import N_LANES, PackedM31


def _bit_reverse(values: Sequence[int]) -> list[int]:
    """Return `values` permuted by bit-reversing each index."""
    n = len(values)
    if n == 0 or n & (n - 1):
        raise ValueError("length must be a power of two")
    log_n = n.bit_length() - 1
    if log_n == 0:
        return list(values)
    return [values[int(format(i, f"0{log_n}b")[::-1], 2)] for i in range(n)]


def _check_len(twiddles: Sequence[int], expected: int) -> tuple[int, ...]:
    result = tuple(twiddles)
    if len(result) != expected:
        raise ValueError(f"expected {expected} twiddles, got {len(result)}")
    return result


def simd_butterfly(
    val0: PackedM31, val1: PackedM31, twiddle_dbl: Sequence[int]
) -> tuple[PackedM31, PackedM31]:
    """Return (val0 + t * val1, val0 - t * val1), given the doubles of the twiddles t."""
    prod = mul_twiddle(val1, twiddle_dbl)
    return val0 + prod, val0 - prod


def vecwise_butterflies(
    val0: PackedM31,
    val1: PackedM31,
    twiddle1_dbl: Sequence[int],
    twiddle2_dbl: Sequence[int],
    twiddle3_dbl: Sequence[int],
) -> tuple[PackedM31, PackedM31]:
    """Run the last four FFT layers on two vectors of naturally ordered coefficients.

    Takes 8, 4 and 2 doubled twiddles for layers 1, 2 and 3; the layer 0
    twiddles are derived from those of layer 1.
    """
    twiddle2 = _check_len(twiddle2_dbl, 4)
    twiddle3 = _check_len(twiddle3_dbl, 2)

    t = twiddle3 * (N_LANES // 2)
    val0, val1 = val0.interleave(val1)
    val0, val1 = simd_butterfly(val0, val1, t)

    t = twiddle2 * (N_LANES // 4)
    val0, val1 = val0.interleave(val1)
    val0, val1 = simd_butterfly(val0, val1, t)

    t0, t1 = compute_first_twiddles(twiddle1_dbl)
    val0, val1 = val0.interleave(val1)
    val0, val1 = simd_butterfly(val0, val1, t1)

    val0, val1 = val0.interleave(val1)
    val0, val1 = simd_butterfly(val0, val1, t0)

    return val0.interleave(val1)


def get_twiddle_dbls(coset: Coset) -> list[list[int]]:
    """Return the doubled line twiddles (x coordinates) for an FFT on a coset, per layer."""
    res: list[list[int]] = []
    for _ in range(coset.log_size):
        half = coset.size() // 2
        layer = [point.x.value * 2 for _, point in zip(range(half), coset)]
        res.append(_bit_reverse(layer))
        coset = coset.double()
    return res