import random

import pytest

from circle_stark.m31 import M31, N_LANES, P, PackedM31
from circle_stark.qm31 import CM31, QM31, PackedCM31, PackedQM31


def _random_qm31(rng):
    return QM31.from_u32_unchecked(*(rng.randrange(P) for _ in range(4)))


def _random_array(rng):
    return [_random_qm31(rng) for _ in range(N_LANES)]


def test_addition_works():
    rng = random.Random(0)
    lhs, rhs = _random_array(rng), _random_array(rng)
    res = PackedQM31.from_array(lhs) + PackedQM31.from_array(rhs)
    assert res.to_array() == tuple(x + y for x, y in zip(lhs, rhs))


def test_subtraction_works():
    rng = random.Random(0)
    lhs, rhs = _random_array(rng), _random_array(rng)
    res = PackedQM31.from_array(lhs) - PackedQM31.from_array(rhs)
    assert res.to_array() == tuple(x - y for x, y in zip(lhs, rhs))


def test_multiplication_works():
    rng = random.Random(0)
    lhs, rhs = _random_array(rng), _random_array(rng)
    res = PackedQM31.from_array(lhs) * PackedQM31.from_array(rhs)
    assert res.to_array() == tuple(x * y for x, y in zip(lhs, rhs))


def test_negation_works():
    rng = random.Random(0)
    values = _random_array(rng)
    res = -PackedQM31.from_array(values)
    assert res.to_array() == tuple(-v for v in values)


def test_packed_inverse_matches_scalar():
    rng = random.Random(1)
    values = _random_array(rng)
    res = PackedQM31.from_array(values).inverse()
    assert res.to_array() == tuple(v.inverse() for v in values)


def test_packed_zero_inverse_raises():
    with pytest.raises(ZeroDivisionError):
        PackedQM31.zero().inverse()


def test_u_squared_is_two_plus_i():
    u = QM31.from_u32_unchecked(0, 0, 1, 0)
    assert u.square() == QM31.from_u32_unchecked(2, 1, 0, 0)


def test_i_squared_is_minus_one():
    i = CM31(M31(0), M31(1))
    assert i.square() == CM31(M31(P - 1), M31(0))


def test_scalar_inverse():
    rng = random.Random(2)
    for _ in range(5):
        value = _random_qm31(rng)
        assert value * value.inverse() == QM31.one()
    cm = CM31(M31(3), M31(7))
    assert cm * cm.inverse() == CM31.one()


def test_scalar_zero_inverse_raises():
    with pytest.raises(ZeroDivisionError):
        QM31.zero().inverse()
    with pytest.raises(ZeroDivisionError):
        CM31.zero().inverse()


def test_conjugate_product_lies_in_cm31():
    value = QM31.from_u32_unchecked(5, 9, 11, 13)
    product = value * value.complex_conjugate()
    assert product.b == CM31.zero()


def test_m31_array_round_trip():
    values = (M31(1), M31(2), M31(3), M31(4))
    value = QM31.from_m31_array(values)
    assert value.to_m31_array() == values
    assert value == QM31.from_u32_unchecked(1, 2, 3, 4)


def test_from_u32_unchecked_rejects_out_of_range():
    with pytest.raises(ValueError):
        QM31.from_u32_unchecked(P, 0, 0, 0)


def test_is_one_and_double():
    assert QM31.one().is_one()
    assert QM31.one().double() == QM31.from_u32_unchecked(2, 0, 0, 0)
    assert QM31.zero().is_zero()


def test_mixed_scalar_arithmetic():
    value = QM31.from_u32_unchecked(1, 2, 3, 4)
    assert value * M31(2) == QM31.from_u32_unchecked(2, 4, 6, 8)
    assert value + M31(1) == QM31.from_u32_unchecked(2, 2, 3, 4)


def test_interleave_deinterleave_round_trip():
    rng = random.Random(3)
    x = PackedQM31.from_array(_random_array(rng))
    y = PackedQM31.from_array(_random_array(rng))
    lhs, rhs = x.interleave(y)
    assert lhs.to_array()[:2] == (x.to_array()[0], y.to_array()[0])
    assert lhs.deinterleave(rhs) == (x, y)


def test_packed_m31s_round_trip():
    rng = random.Random(4)
    values = _random_array(rng)
    packed = PackedQM31.from_array(values)
    parts = packed.into_packed_m31s()
    assert parts[2].to_array() == tuple(v.to_m31_array()[2] for v in values)
    assert PackedQM31.from_packed_m31s(parts) == packed


def test_pointwise_sum_and_double():
    rng = random.Random(5)
    values = _random_array(rng)
    packed = PackedQM31.from_array(values)
    assert packed.pointwise_sum() == sum(values, QM31.zero())
    assert packed.double() == packed + packed


def test_zero_and_one():
    assert PackedQM31.zero().is_zero()
    assert PackedQM31.one().to_array() == (QM31.one(),) * N_LANES
    assert not PackedQM31.one().is_zero()


def test_packed_times_packed_m31():
    rng = random.Random(6)
    values = _random_array(rng)
    scalars = [M31(rng.randrange(P)) for _ in range(N_LANES)]
    res = PackedQM31.from_array(values) * PackedM31.from_array(scalars)
    assert res.to_array() == tuple(v * s for v, s in zip(values, scalars))


def test_packed_cm31_ops():
    rng = random.Random(7)
    values = [CM31(M31(rng.randrange(1, P)), M31(rng.randrange(P))) for _ in range(N_LANES)]
    packed = PackedCM31.from_array(values)
    assert packed.square().to_array() == tuple(v.square() for v in values)
    assert packed.inverse().to_array() == tuple(v.inverse() for v in values)
    assert packed.double().to_array() == tuple(v + v for v in values)
    assert PackedCM31.broadcast(values[0]).to_array() == (values[0],) * N_LANES
    lhs, rhs = packed.interleave(packed)
    assert lhs.deinterleave(rhs) == (packed, packed)