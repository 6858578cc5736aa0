"""The inverse lane-vector circle FFT, in place over flat sequences of raw M31 words."""

from __future__ import annotations

from typing import MutableSequence, Sequence

from circle_stark.fft_common import CACHED_FFT_LOG_SIZE, MIN_FFT_LOG_SIZE, transpose_vecs
from circle_stark.ifft_radix import ifft1_loop, ifft2_loop, ifft3_loop, ifft_vecwise_loop
from circle_stark.m31 import LOG_N_LANES

_VECWISE_FFT_BITS = LOG_N_LANES + 1


def ifft(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_n_elements: int,
) -> None:
    """Interpolate the bit-reversed evaluations in `values`, in place.

    The result is the coefficients scaled by 2^log_n_elements. Above
    CACHED_FFT_LOG_SIZE its vectors come out transposed (see `transpose_vecs`).
    """
    if log_n_elements < MIN_FFT_LOG_SIZE:
        raise ValueError(f"log_n_elements must be at least {MIN_FFT_LOG_SIZE}")
    layers = list(twiddle_dbl)
    log_n_vecs = log_n_elements - LOG_N_LANES
    if log_n_elements <= CACHED_FFT_LOG_SIZE:
        ifft_lower_with_vecwise(values, layers, log_n_elements, log_n_elements)
        return

    fft_layers_pre_transpose = (log_n_vecs + 1) // 2
    fft_layers_post_transpose = log_n_vecs // 2
    ifft_lower_with_vecwise(
        values,
        layers[:3 + fft_layers_pre_transpose],
        log_n_elements,
        fft_layers_pre_transpose + LOG_N_LANES,
    )
    transpose_vecs(values, log_n_vecs)
    ifft_lower_without_vecwise(
        values,
        layers[3 + fft_layers_pre_transpose:],
        log_n_elements,
        fft_layers_post_transpose,
    )


def ifft_lower_with_vecwise(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_size: int,
    fft_layers: int,
) -> None:
    """Apply the lowest `fft_layers` inverse FFT layers to 2^log_size words.

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
        ifft_vecwise_loop(values, layers, fft_layers - _VECWISE_FFT_BITS, index_h)
        for layer in range(_VECWISE_FFT_BITS, fft_layers, 3):
            remaining = fft_layers - layer
            if remaining == 1:
                ifft1_loop(values, layers[layer - 1:], layer, index_h)
            elif remaining == 2:
                ifft2_loop(values, layers[layer - 1:], layer, index_h)
            else:
                ifft3_loop(values, layers[layer - 1:], fft_layers - layer - 3, layer, index_h)


def ifft_lower_without_vecwise(
    values: MutableSequence[int],
    twiddle_dbl: Sequence[Sequence[int]],
    log_size: int,
    fft_layers: int,
) -> None:
    """Apply `fft_layers` inverse FFT layers above the lowest LOG_N_LANES index bits."""
    if log_size < LOG_N_LANES:
        raise ValueError(f"log_size must be at least {LOG_N_LANES}")
    if not 0 <= fft_layers <= log_size - LOG_N_LANES:
        raise ValueError(f"fft_layers must be in [0, {log_size - LOG_N_LANES}]")
    layers = list(twiddle_dbl)

    for index_h in range(1 << (log_size - fft_layers - LOG_N_LANES)):
        for layer in range(0, fft_layers, 3):
            fixed_layer = layer + LOG_N_LANES
            remaining = fft_layers - layer
            if remaining == 1:
                ifft1_loop(values, layers[layer:], fixed_layer, index_h)
            elif remaining == 2:
                ifft2_loop(values, layers[layer:], fixed_layer, index_h)
            else:
                ifft3_loop(
                    values, layers[layer:], fft_layers - layer - 3, fixed_layer, index_h
                )