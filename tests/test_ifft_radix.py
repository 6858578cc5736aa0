import random

import pytest

from circle_stark.circle import Coset
from circle_stark.ifft_butterflies import get_itwiddle_dbls
from circle_stark.ifft_radix import (
    ifft1,
    ifft1_loop,
    ifft2,
    ifft2_loop,
    ifft3,
    ifft3_loop,
    ifft_vecwise_loop,
)
from circle_stark.m31 import LOG_N_LANES, M31, N_LANES, P, PackedM31
from circle_stark.rfft_butterflies import get_twiddle_dbls
from circle_stark.rfft_radix import fft3_loop, fft_vecwise_loop


def _rand_m31(rng):
    return M31(rng.randrange(1, P))


def _read(buf):
    return [M31(v % P) for v in buf]


def _ground_truth_ibutterfly(v0, v1, itwiddle):
    return v0 + v1, (v0 - v1) * itwiddle


def test_ifft3():
    rng = random.Random(0)
    values = [_rand_m31(rng) for _ in range(8)]
    twiddles0 = [_rand_m31(rng) for _ in range(4)]
    twiddles1 = [_rand_m31(rng) for _ in range(2)]
    twiddles2 = [_rand_m31(rng)]

    buf = [0] * (8 * N_LANES)
    for k, v in enumerate(values):
        PackedM31.broadcast(v).store(buf, k * N_LANES)

    ifft3(
        buf,
        0,
        LOG_N_LANES,
        [t.value * 2 for t in twiddles0],
        [t.value * 2 for t in twiddles1],
        [t.value * 2 for t in twiddles2],
    )

    expected = list(values)
    for i in range(8):
        j = i ^ 1
        if i < j:
            expected[i], expected[j] = _ground_truth_ibutterfly(
                expected[i], expected[j], twiddles0[i // 2]
            )
    for i in range(8):
        j = i ^ 2
        if i < j:
            expected[i], expected[j] = _ground_truth_ibutterfly(
                expected[i], expected[j], twiddles1[i // 4]
            )
    for i in range(8):
        j = i ^ 4
        if i < j:
            expected[i], expected[j] = _ground_truth_ibutterfly(
                expected[i], expected[j], twiddles2[0]
            )

    for i in range(8):
        assert PackedM31.load(buf, i * N_LANES).to_array() == (expected[i],) * N_LANES


def test_ifft1_pinned_values():
    buf = [0] * (2 * N_LANES)
    PackedM31.broadcast(M31(5)).store(buf, 0)
    PackedM31.broadcast(M31(3)).store(buf, N_LANES)

    # Twiddle 2 (doubled: 4): (5 + 3, (5 - 3) * 2).
    ifft1(buf, 0, LOG_N_LANES, [4])

    assert _read(buf) == [M31(8)] * N_LANES + [M31(4)] * N_LANES


def test_ifft2_pinned_values():
    buf = [0] * (4 * N_LANES)
    for k, v in enumerate((1, 2, 3, 4)):
        PackedM31.broadcast(M31(v)).store(buf, k * N_LANES)

    ifft2(buf, 0, LOG_N_LANES, [2, 2], [2])

    # Layer 0: (3, -1, 7, -1); layer 1: (10, -2, -4, 0).
    expected = [M31(10), -M31(2), -M31(4), M31(0)]
    for k in range(4):
        assert PackedM31.load(buf, k * N_LANES).to_array() == (expected[k],) * N_LANES


def test_ifft2_rejects_wrong_twiddle_count():
    buf = [0] * (4 * N_LANES)
    with pytest.raises(ValueError):
        ifft2(buf, 0, LOG_N_LANES, [2], [2])


def test_ifft1_rejects_short_buffer():
    buf = [0] * N_LANES
    with pytest.raises(IndexError):
        ifft1(buf, 0, LOG_N_LANES, [2])


def test_ifft3_loop_inverts_fft3_loop_up_to_scale():
    rng = random.Random(3)
    original = [rng.randrange(P) for _ in range(16 * N_LANES)]
    tw = [[_rand_m31(rng) for _ in range(n)] for n in (8, 4, 2)]
    forward = [[t.value * 2 for t in layer] for layer in tw]
    inverse = [[t.inverse().value * 2 for t in layer] for layer in tw]

    buf = list(original)
    fft3_loop(buf, buf, forward, 1, LOG_N_LANES, 0)
    ifft3_loop(buf, inverse, 1, LOG_N_LANES, 0)

    assert _read(buf) == [M31(v) * M31(8) for v in original]


def test_ifft2_loop_leaves_other_blocks_untouched():
    rng = random.Random(4)
    original = [rng.randrange(P) for _ in range(8 * N_LANES)]
    buf = list(original)

    ifft2_loop(buf, [[2, 4, 6, 8], [2, 4]], LOG_N_LANES, 0)

    assert buf[4 * N_LANES:] == original[4 * N_LANES:]
    assert _read(buf[:4 * N_LANES]) != _read(original[:4 * N_LANES])


def test_ifft1_loop_uses_twiddle_at_index():
    buf = [0] * (4 * N_LANES)
    PackedM31.broadcast(M31(7)).store(buf, 2 * N_LANES)
    PackedM31.broadcast(M31(1)).store(buf, 3 * N_LANES)

    ifft1_loop(buf, [[2, 6]], LOG_N_LANES, 1)

    # Block 1 uses twiddle 3: (7 + 1, (7 - 1) * 3).
    assert _read(buf[: 2 * N_LANES]) == [M31(0)] * (2 * N_LANES)
    assert _read(buf[2 * N_LANES:]) == [M31(8)] * N_LANES + [M31(18)] * N_LANES


@pytest.mark.parametrize("log_size", [5, 6])
def test_ifft_vecwise_loop_inverts_fft_vecwise_loop(log_size):
    rng = random.Random(10 + log_size)
    coset = Coset.half_odds(log_size - 1)
    forward = get_twiddle_dbls(coset)
    inverse = get_itwiddle_dbls(coset)
    original = [rng.randrange(P) for _ in range(1 << log_size)]

    buf = list(original)
    ifft_vecwise_loop(buf, inverse, log_size - 5, 0)
    assert _read(buf) != _read(original)
    fft_vecwise_loop(buf, buf, forward, log_size - 5, 0)

    assert _read(buf) == [M31(v) * M31(32) for v in original]