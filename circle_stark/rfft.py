"""The forward lane-vector circle FFT over flat sequences of raw M31 words."""

from __future__ import annotations

from typing import MutableSequence, Sequence

from circle_stark.fft_common import CACHED_FFT_LOG_SIZE, MIN_FFT_LOG_SIZE, transpose_vecs
from circle_stark.m31 import LOG_N_LANES
from circle_stark.rfft_radix import fft1_loop, fft2_loop, fft3_loop, fft_vecwise_loop

_VECWISE_FFT_BITS = LOG_N_LANES + 1


def fft(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_n_elements: int,
) -> None:
    """Evaluate the polynomial with coefficients `src`, writing the evaluations to `dst`.

    Above CACHED_FFT_LOG_SIZE the input is expected with its vectors
    transposed (see `transpose_vecs`).
    """
    if log_n_elements < MIN_FFT_LOG_SIZE:
        raise ValueError(f"log_n_elements must be at least {MIN_FFT_LOG_SIZE}")
    layers = list(twiddle_dbl)
    log_n_vecs = log_n_elements - LOG_N_LANES
    if log_n_elements <= CACHED_FFT_LOG_SIZE:
        fft_lower_with_vecwise(src, dst, layers, log_n_elements, log_n_elements)
        return

    fft_layers_pre_transpose = (log_n_vecs + 1) // 2
    fft_layers_post_transpose = log_n_vecs // 2
    fft_lower_without_vecwise(
        src,
        dst,
        layers[3 + fft_layers_pre_transpose:],
        log_n_elements,
        fft_layers_post_transpose,
    )
    transpose_vecs(dst, log_n_vecs)
    fft_lower_with_vecwise(
        dst,
        dst,
        layers[:3 + fft_layers_pre_transpose],
        log_n_elements,
        fft_layers_pre_transpose + LOG_N_LANES,
    )


def fft_lower_with_vecwise(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_size: int,
    fft_layers: int,
) -> None:
    """Apply the lowest `fft_layers` FFT layers to 2^log_size words.

    Layer i of `twiddle_dbl` holds 2^(log_size - 2 - i) doubled twiddles.
    """
    if log_size < _VECWISE_FFT_BITS:
        raise ValueError(f"log_size must be at least {_VECWISE_FFT_BITS}")
    if not _VECWISE_FFT_BITS <= fft_layers <= log_size:
        raise ValueError(f"fft_layers must be in [{_VECWISE_FFT_BITS}, {log_size}]")
    layers = list(twiddle_dbl)
    if len(layers[0]) != 1 << (log_size - 2):
        raise ValueError(
            f"first twiddle layer must hold {1 << (log_size - 2)} values, got {len(layers[0])}"
        )

    for index_h in range(1 << (log_size - fft_layers)):
        cur: Sequence[int] = src
        for layer in reversed(range(_VECWISE_FFT_BITS, fft_layers, 3)):
            remaining = fft_layers - layer
            if remaining == 1:
                fft1_loop(cur, dst, layers[layer - 1:], layer, index_h)
            elif remaining == 2:
                fft2_loop(cur, dst, layers[layer - 1:], layer, index_h)
            else:
                fft3_loop(cur, dst, layers[layer - 1:], fft_layers - layer - 3, layer, index_h)
            cur = dst
        fft_vecwise_loop(cur, dst, layers, fft_layers - _VECWISE_FFT_BITS, index_h)


def fft_lower_without_vecwise(
    src: Sequence[int],
    dst: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_size: int,
    fft_layers: int,
) -> None:
    """Apply `fft_layers` FFT layers above the lowest LOG_N_LANES index bits."""
    if log_size < LOG_N_LANES:
        raise ValueError(f"log_size must be at least {LOG_N_LANES}")
    if not 0 <= fft_layers <= log_size - LOG_N_LANES:
        raise ValueError(f"fft_layers must be in [0, {log_size - LOG_N_LANES}]")
    layers = list(twiddle_dbl)

    for index_h in range(1 << (log_size - fft_layers - LOG_N_LANES)):
        cur: Sequence[int] = src
        for layer in reversed(range(0, fft_layers, 3)):
            fixed_layer = layer + LOG_N_LANES
            remaining = fft_layers - layer
            if remaining == 1:
                fft1_loop(cur, dst, layers[layer:], fixed_layer, index_h)
            elif remaining == 2:
                fft2_loop(cur, dst, layers[layer:], fixed_layer, index_h)
            else:
                fft3_loop(
                    cur, dst, layers[layer:], fft_layers - layer - 3, fixed_layer, index_h
                )
            cur = dst