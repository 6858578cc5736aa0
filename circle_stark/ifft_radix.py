"""Radix-2, -4 and -8 layer passes of the inverse lane-vector circle FFT.

Values live in a flat mutable sequence of raw M31 words, transformed in
place; each lane vector occupies N_LANES consecutive words.
"""

from __future__ import annotations

from typing import MutableSequence, Sequence

from circle_stark.ifft_butterflies import simd_ibutterfly, vecwise_ibutterflies
from circle_stark.m31 import N_LANES, PackedM31


def _splat(twiddle: int) -> tuple[int, ...]:
    return (twiddle,) * N_LANES


def _take(twiddles: Sequence[int], expected: int) -> tuple[int, ...]:
    result = tuple(twiddles)
    if len(result) != expected:
        raise ValueError(f"expected {expected} twiddles, got {len(result)}")
    return result


def _cyclic(layer: Sequence[int], start: int, count: int) -> tuple[int, ...]:
    """Read `count` twiddles from `start`, wrapping around a power-of-two layer."""
    mask = len(layer) - 1
    return tuple(layer[(start + i) & mask] for i in range(count))


def _load_vectors(
    values: Sequence[int], offset: int, log_step: int, count: int
) -> list[PackedM31]:
    return [PackedM31.load(values, offset + (k << log_step)) for k in range(count)]


def _store_vectors(
    values: MutableSequence[int], vectors: Sequence[PackedM31], offset: int, log_step: int
) -> None:
    for k, vector in enumerate(vectors):
        vector.store(values, offset + (k << log_step))


def ifft3(
    values: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
    twiddles_dbl1: Sequence[int],
    twiddles_dbl2: Sequence[int],
) -> None:
    """Apply 3 inverse butterfly layers to 8 vectors spaced 2^log_step words apart.

    The layers take 4, 2 and 1 doubled twiddles; the lowest layer runs first.
    """
    t0 = _take(twiddles_dbl0, 4)
    t1 = _take(twiddles_dbl1, 2)
    (t2,) = _take(twiddles_dbl2, 1)
    v = _load_vectors(values, offset, log_step, 8)

    for k in (0, 2, 4, 6):
        v[k], v[k + 1] = simd_ibutterfly(v[k], v[k + 1], _splat(t0[k // 2]))
    for k in (0, 1, 4, 5):
        v[k], v[k + 2] = simd_ibutterfly(v[k], v[k + 2], _splat(t1[k // 4]))
    for k in range(4):
        v[k], v[k + 4] = simd_ibutterfly(v[k], v[k + 4], _splat(t2))

    _store_vectors(values, v, offset, log_step)


def ifft2(
    values: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
    twiddles_dbl1: Sequence[int],
) -> None:
    """Apply 2 inverse butterfly layers to 4 vectors spaced 2^log_step words apart."""
    t0 = _take(twiddles_dbl0, 2)
    (t1,) = _take(twiddles_dbl1, 1)
    v = _load_vectors(values, offset, log_step, 4)

    for k in (0, 2):
        v[k], v[k + 1] = simd_ibutterfly(v[k], v[k + 1], _splat(t0[k // 2]))
    for k in (0, 1):
        v[k], v[k + 2] = simd_ibutterfly(v[k], v[k + 2], _splat(t1))

    _store_vectors(values, v, offset, log_step)


def ifft1(
    values: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
) -> None:
    """Apply 1 inverse butterfly layer to 2 vectors spaced 2^log_step words apart."""
    (t0,) = _take(twiddles_dbl0, 1)
    v = _load_vectors(values, offset, log_step, 2)
    v[0], v[1] = simd_ibutterfly(v[0], v[1], _splat(t0))
    _store_vectors(values, v, offset, log_step)


def ifft3_loop(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    loop_bits: int,
    layer: int,
    index_h: int,
) -> None:
    """Apply inverse layers `layer`, `layer + 1`, `layer + 2` over 2^loop_bits blocks."""
    for index_l in range(1 << loop_bits):
        index = (index_h << loop_bits) + index_l
        offset = index << (layer + 3)
        twiddles = (
            _cyclic(twiddle_dbl[0], index * 4, 4),
            _cyclic(twiddle_dbl[1], index * 2, 2),
            _cyclic(twiddle_dbl[2], index, 1),
        )
        for l in range(0, 1 << layer, N_LANES):
            ifft3(values, offset + l, layer, *twiddles)


def ifft2_loop(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    layer: int,
    index: int,
) -> None:
    """Apply inverse layers `layer` and `layer + 1` to the block at `index`."""
    offset = index << (layer + 2)
    twiddles = (
        _cyclic(twiddle_dbl[0], index * 2, 2),
        _cyclic(twiddle_dbl[1], index, 1),
    )
    for l in range(0, 1 << layer, N_LANES):
        ifft2(values, offset + l, layer, *twiddles)


def ifft1_loop(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    layer: int,
    index: int,
) -> None:
    """Apply inverse layer `layer` to the block at `index`."""
    offset = index << (layer + 1)
    twiddles = _cyclic(twiddle_dbl[0], index, 1)
    for l in range(0, 1 << layer, N_LANES):
        ifft1(values, offset + l, layer, twiddles)


def ifft_vecwise_loop(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    loop_bits: int,
    index_h: int,
) -> None:
    """Apply the first 5 inverse FFT layers to 2^loop_bits pairs of vectors."""
    for index_l in range(1 << loop_bits):
        index = (index_h << loop_bits) + index_l
        base = index * 2 * N_LANES
        val0 = PackedM31.load(values, base)
        val1 = PackedM31.load(values, base + N_LANES)
        val0, val1 = vecwise_ibutterflies(
            val0,
            val1,
            twiddle_dbl[0][index * 8:index * 8 + 8],
            twiddle_dbl[1][index * 4:index * 4 + 4],
            twiddle_dbl[2][index * 2:index * 2 + 2],
        )
        val0, val1 = simd_ibutterfly(val0, val1, _splat(twiddle_dbl[3][index]))
        val0.store(values, base)
        val1.store(values, base + N_LANES)