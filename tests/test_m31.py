import random

import pytest

from circle_stark.m31 import N_LANES, P, M31, PackedM31, mul_doubled


def _random_array(rng):
    return tuple(M31(rng.randrange(P)) for _ in range(N_LANES))


def test_addition_works():
    rng = random.Random(0)
    lhs = _random_array(rng)
    rhs = _random_array(rng)
    res = PackedM31.from_array(lhs) + PackedM31.from_array(rhs)
    assert res.to_array() == tuple(a + b for a, b in zip(lhs, rhs))


def test_subtraction_works():
    rng = random.Random(0)
    lhs = _random_array(rng)
    rhs = _random_array(rng)
    res = PackedM31.from_array(lhs) - PackedM31.from_array(rhs)
    assert res.to_array() == tuple(a - b for a, b in zip(lhs, rhs))


def test_multiplication_works():
    rng = random.Random(0)
    lhs = _random_array(rng)
    rhs = _random_array(rng)
    res = PackedM31.from_array(lhs) * PackedM31.from_array(rhs)
    assert res.to_array() == tuple(a * b for a, b in zip(lhs, rhs))


def test_negation_works():
    rng = random.Random(0)
    values = _random_array(rng)
    res = -PackedM31.from_array(values)
    assert res.to_array() == tuple(-v for v in values)


def test_inverse_works():
    rng = random.Random(1)
    values = tuple(M31(rng.randrange(1, P)) for _ in range(N_LANES))
    res = PackedM31.from_array(values).inverse()
    assert res.to_array() == tuple(v.inverse() for v in values)


def test_load_works():
    words = list(range(16))
    res = PackedM31.load(words)
    assert [v.value for v in res.to_array()] == words


def test_load_with_offset():
    words = list(range(40))
    res = PackedM31.load(words, 16)
    assert [v.value for v in res.to_array()] == list(range(16, 32))


def test_store_works():
    packed = PackedM31.from_array(M31(i) for i in range(16))
    out = [0] * 16
    packed.store(out)
    assert out == [v.value for v in packed.to_array()]


def test_store_out_of_range_raises():
    with pytest.raises(IndexError):
        PackedM31.one().store([0] * 10)


def test_interleave_order():
    a = PackedM31(range(16))
    b = PackedM31(range(16, 32))
    lo, hi = a.interleave(b)
    assert list(lo.lanes) == [0, 16, 1, 17, 2, 18, 3, 19, 4, 20, 5, 21, 6, 22, 7, 23]
    assert list(hi.lanes) == [8, 24, 9, 25, 10, 26, 11, 27, 12, 28, 13, 29, 14, 30, 15, 31]


def test_deinterleave_order():
    a = PackedM31(range(16))
    b = PackedM31(range(16, 32))
    evens, odds = a.deinterleave(b)
    assert list(evens.lanes) == list(range(0, 32, 2))
    assert list(odds.lanes) == list(range(1, 32, 2))


def test_interleave_deinterleave_round_trip():
    rng = random.Random(3)
    a = PackedM31.from_array(_random_array(rng))
    b = PackedM31.from_array(_random_array(rng))
    x, y = a.interleave(b)
    back_a, back_b = x.deinterleave(y)
    assert back_a.lanes == a.lanes
    assert back_b.lanes == b.lanes


def test_pointwise_sum():
    assert PackedM31(range(16)).pointwise_sum() == M31(120)


def test_unreduced_p_lane_reads_as_zero():
    packed = PackedM31([P] * N_LANES)
    assert packed.to_array() == (M31(0),) * N_LANES
    assert packed.is_zero()


def test_negation_of_zero_is_zero():
    assert (-PackedM31.zero()).to_array() == (M31(0),) * N_LANES


def test_packed_inverse_of_zero_raises():
    with pytest.raises(ZeroDivisionError):
        PackedM31.zero().inverse()


def test_double_matches_addition():
    rng = random.Random(5)
    values = _random_array(rng)
    assert PackedM31.from_array(values).double().to_array() == tuple(v + v for v in values)


def test_scalar_mul_and_add_broadcast():
    rng = random.Random(7)
    values = _random_array(rng)
    scalar = M31(123456789)
    packed = PackedM31.from_array(values)
    assert (packed * scalar).to_array() == tuple(v * scalar for v in values)
    assert (packed + scalar).to_array() == tuple(v + scalar for v in values)


def test_mul_doubled_matches_mul():
    rng = random.Random(9)
    a = _random_array(rng)
    b = _random_array(rng)
    res = mul_doubled(PackedM31.from_array(a), [v.value * 2 for v in b])
    assert res.to_array() == tuple(x * y for x, y in zip(a, b))


def test_mul_doubled_rejects_out_of_range():
    with pytest.raises(ValueError):
        mul_doubled(PackedM31.one(), [2 * P + 1] * N_LANES)


def test_from_array_wrong_length_raises():
    with pytest.raises(ValueError):
        PackedM31.from_array([M31(1)] * 3)


def test_m31_reduce():
    assert M31.reduce(P) == M31(0)
    assert M31.reduce(1 << 32) == M31(2)


def test_m31_out_of_range_rejected():
    with pytest.raises(ValueError):
        M31(P)


def test_m31_inverse():
    assert M31(2).inverse() * M31(2) == M31.one()
    assert M31(2).inverse() == M31(1 << 30)


def test_m31_inverse_of_zero_raises():
    with pytest.raises(ZeroDivisionError):
        M31.zero().inverse()


def test_m31_basic_ops():
    assert M31(P - 1) + M31(1) == M31.zero()
    assert M31(0) - M31(1) == M31(P - 1)
    assert M31(3).square() == M31(9)
    assert M31(5).double() == M31(10)
    assert -M31(0) == M31(0)
    assert M31(7).complex_conjugate() == M31(7)
    assert M31.one().is_one()
    assert M31.zero().is_zero()