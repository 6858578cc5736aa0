import pytest

from circle_stark.fft_common import compute_first_twiddles, mul_twiddle, transpose_vecs
from circle_stark.m31 import N_LANES, P, M31, PackedM31


def _vectors(n_vecs):
    return [k for v in range(n_vecs) for k in [v] * N_LANES]


def test_transpose_swaps_middle_vectors():
    values = _vectors(4)
    transpose_vecs(values, 2)
    assert values == [k for v in (0, 2, 1, 3) for k in [v] * N_LANES]


@pytest.mark.parametrize("log_n_vecs", [0, 1, 2, 3, 4, 5])
def test_transpose_is_involution(log_n_vecs):
    original = list(range(N_LANES << log_n_vecs))
    values = list(original)
    transpose_vecs(values, log_n_vecs)
    assert sorted(values) == original
    transpose_vecs(values, log_n_vecs)
    assert values == original


def test_transpose_keeps_vectors_whole():
    values = list(range(N_LANES << 3))
    transpose_vecs(values, 3)
    for start in range(0, len(values), N_LANES):
        chunk = values[start:start + N_LANES]
        assert chunk[0] % N_LANES == 0
        assert chunk == list(range(chunk[0], chunk[0] + N_LANES))


def test_transpose_rejects_short_input():
    with pytest.raises(ValueError):
        transpose_vecs([0] * N_LANES, 1)


def test_compute_first_twiddles_layout():
    twiddles = [M31(v) for v in (3, 0, 17, 123456, P - 1, 2, 99, 1 << 30)]
    doubles = [t.value * 2 for t in twiddles]
    t0, t1 = compute_first_twiddles(doubles)
    assert t1 == tuple(doubles) * 2
    assert len(t0) == N_LANES
    for i in range(4):
        x, y = twiddles[2 * i], twiddles[2 * i + 1]
        lanes = [M31.reduce(v // 2) for v in t0[4 * i:4 * i + 4]]
        assert lanes == [y, -y, -x, x]
        assert all(0 <= v <= 2 * P for v in t0[4 * i:4 * i + 4])


def test_compute_first_twiddles_rejects_wrong_length():
    with pytest.raises(ValueError):
        compute_first_twiddles([0] * 7)


def test_mul_twiddle_matches_field_multiplication():
    values = [M31((i * 7919 + 13) % P) for i in range(N_LANES)]
    twiddles = [M31((i * 104729 + P - 5) % P) for i in range(N_LANES)]
    res = mul_twiddle(PackedM31.from_array(values), [t.value * 2 for t in twiddles])
    assert res.to_array() == tuple(v * t for v, t in zip(values, twiddles))


def test_mul_twiddle_by_one_is_identity():
    packed = PackedM31.from_array(M31(i * 1000) for i in range(N_LANES))
    assert mul_twiddle(packed, [2] * N_LANES) == packed