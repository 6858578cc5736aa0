"""Radix-2, -4 and -8 layer passes of the forward lane-vector circle FFT.

Values live in a flat sequence of raw M31 words; each lane vector occupies
N_LANES consecutive words. `src` and `dst` may be the same sequence.
"""

from __future__ import annotations

from typing import MutableSequence, Sequence

from circle_stark.m31 import N_LANES, PackedM31
from circle_stark.rfft_butterflies import simd_butterfly, vecwise_butterflies


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
    src: Sequence[int], offset: int, log_step: int, count: int
) -> list[PackedM31]:
    return [PackedM31.load(src, offset + (k << log_step)) for k in range(count)]


def _store_vectors(
    dst: MutableSequence[int], vectors: Sequence[PackedM31], offset: int, log_step: int
) -> None:
    for k, vector in enumerate(vectors):
        vector.store(dst, offset + (k << log_step))


def fft3(
    src: Sequence[int],
    dst: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
    twiddles_dbl1: Sequence[int],
    twiddles_dbl2: Sequence[int],
) -> None:
    """Apply 3 butterfly layers to 8 vectors spaced 2^log_step words apart.

    The layers take 4, 2 and 1 doubled twiddles; the highest layer runs first.
    """
    t0 = _take(twiddles_dbl0, 4)
    t1 = _take(twiddles_dbl1, 2)
    (t2,) = _take(twiddles_dbl2, 1)
    v = _load_vectors(src, offset, log_step, 8)

    for k in range(4):
        v[k], v[k + 4] = simd_butterfly(v[k], v[k + 4], _splat(t2))
    for k in (0, 1, 4, 5):
        v[k], v[k + 2] = simd_butterfly(v[k], v[k + 2], _splat(t1[k // 4]))
    for k in (0, 2, 4, 6):
        v[k], v[k + 1] = simd_butterfly(v[k], v[k + 1], _splat(t0[k // 2]))

    _store_vectors(dst, v, offset, log_step)


def fft2(
    src: Sequence[int],
    dst: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
    twiddles_dbl1: Sequence[int],
) -> None:
    """Apply 2 butterfly layers to 4 vectors spaced 2^log_step words apart."""
    t0 = _take(twiddles_dbl0, 2)
    (t1,) = _take(twiddles_dbl1, 1)
    v = _load_vectors(src, offset, log_step, 4)

    for k in (0, 1):
        v[k], v[k + 2] = simd_butterfly(v[k], v[k + 2], _splat(t1))
    for k in (0, 2):
        v[k], v[k + 1] = simd_butterfly(v[k], v[k + 1], _splat(t0[k // 2]))

    _store_vectors(dst, v, offset, log_step)


def fft1(
    src: Sequence[int],
    dst: MutableSequence[int],
    offset: int,
    log_step: int,
    twiddles_dbl0: Sequence[int],
) -> None:
    """Apply 1 butterfly layer to 2 vectors spaced 2^log_step words apart."""
    (t0,) = _take(twiddles_dbl0, 1)
    v = _load_vectors(src, offset, log_step, 2)
    v[0], v[1] = simd_butterfly(v[0], v[1], _splat(t0))
    _store_vectors(dst, v, offset, log_step)


def fft3_loop(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    loop_bits: int,
    layer: int,
    index_h: int,
) -> None:
    """Apply layers `layer`, `layer + 1`, `layer + 2` over 2^loop_bits blocks."""
    for index_l in range(1 << loop_bits):
        index = (index_h << loop_bits) + index_l
        offset = index << (layer + 3)
        twiddles = (
            _cyclic(twiddle_dbl[0], index * 4, 4),
            _cyclic(twiddle_dbl[1], index * 2, 2),
            _cyclic(twiddle_dbl[2], index, 1),
        )
        for l in range(0, 1 << layer, N_LANES):
            fft3(src, dst, offset + l, layer, *twiddles)


def fft2_loop(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    layer: int,
    index: int,
) -> None:
    """Apply layers `layer` and `layer + 1` to the block at `index`."""
    offset = index << (layer + 2)
    twiddles = (
        _cyclic(twiddle_dbl[0], index * 2, 2),
        _cyclic(twiddle_dbl[1], index, 1),
    )
    for l in range(0, 1 << layer, N_LANES):
        fft2(src, dst, offset + l, layer, *twiddles)


def fft1_loop(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    layer: int,
    index: int,
) -> None:
    """Apply layer `layer` to the block at `index`."""
    offset = index << (layer + 1)
    twiddles = _cyclic(twiddle_dbl[0], index, 1)
    for l in range(0, 1 << layer, N_LANES):
        fft1(src, dst, offset + l, layer, twiddles)


def fft_vecwise_loop(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    loop_bits: int,
    index_h: int,
) -> None:
    """Apply the last 5 FFT layers to 2^loop_bits pairs of vectors."""
    for index_l in range(1 << loop_bits):
        index = (index_h << loop_bits) + index_l
        base = index * 2 * N_LANES
        val0 = PackedM31.load(src, base)
        val1 = PackedM31.load(src, base + N_LANES)
        val0, val1 = simd_butterfly(val0, val1, _splat(twiddle_dbl[3][index]))
        val0, val1 = vecwise_butterflies(
            val0,
            val1,
            twiddle_dbl[0][index * 8:index * 8 + 8],
            twiddle_dbl[1][index * 4:index * 4 + 4],
            twiddle_dbl[2][index * 2:index * 2 + 2],
        )
        val0.store(dst, base)
        val1.store(dst, base + N_LANES)