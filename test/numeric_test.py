from mpnewton.errors import PrecisionMismatchError
from mpnewton.numeric import BigFloat, RoundingMode

import math
import pytest


def test_from_str_rounds_to_precision():
    assert BigFloat.from_str('0.1', 53).to_float() == 0.1
    assert BigFloat.from_str('0.1', 53, RoundingMode.TOWARD_NEGATIVE) < BigFloat.from_str('0.1', 53, RoundingMode.TOWARD_POSITIVE)


def test_directed_rounding_brackets_one_third():
    one, three = BigFloat(64, 1), BigFloat(64, 3)
    down = one.div(three, RoundingMode.TOWARD_NEGATIVE)
    up = one.div(three, RoundingMode.TOWARD_POSITIVE)
    nearest = one.div(three, RoundingMode.NEAREST)

    assert down < up
    assert nearest in (down, up)
    assert one.div(three, RoundingMode.TOWARD_ZERO) == down
    # One unit in the last place apart
    assert up.sub(down, RoundingMode.NEAREST) == BigFloat.from_rational(1, 2 ** 65, 64)


def test_toward_zero_rounds_negative_values_up():
    minus_one, three = BigFloat(64, -1), BigFloat(64, 3)
    assert minus_one.div(three, RoundingMode.TOWARD_ZERO) == minus_one.div(three, RoundingMode.TOWARD_POSITIVE)
    assert minus_one.div(three, RoundingMode.TOWARD_NEGATIVE) < minus_one.div(three, RoundingMode.TOWARD_ZERO)


def test_sqrt_is_bracketed_by_directed_roundings():
    two = BigFloat(64, 2)
    low = two.sqrt(RoundingMode.TOWARD_NEGATIVE)
    high = two.sqrt(RoundingMode.TOWARD_POSITIVE)
    assert low < high
    assert low.mul(low, RoundingMode.TOWARD_NEGATIVE) < two
    assert high.mul(high, RoundingMode.TOWARD_POSITIVE) > two


def test_rounding_mode_accepts_its_string_value():
    a, b = BigFloat(64, 1), BigFloat(64, 3)
    assert a.div(b, 'toward_positive') == a.div(b, RoundingMode.TOWARD_POSITIVE)


def test_precision_mismatch_raises():
    with pytest.raises(PrecisionMismatchError):
        BigFloat(64, 1).add(BigFloat(128, 1), RoundingMode.NEAREST)
    with pytest.raises(ValueError):
        BigFloat(64, 1).mul(BigFloat(128, 1), RoundingMode.NEAREST)


@pytest.mark.parametrize('prec', [0, -5, 1.5, True])
def test_non_positive_precision_raises(prec):
    with pytest.raises(ValueError):
        BigFloat(prec)


def test_comparisons_work_across_precisions():
    assert BigFloat(64, '0.5') == BigFloat(128, '0.5')
    assert hash(BigFloat(64, '0.5')) == hash(BigFloat(128, '0.5'))
    assert BigFloat(64, 1) < BigFloat(128, 2)
    assert BigFloat(64, 1).cmp(BigFloat(128, 2)) == -1
    assert BigFloat(64, 2).cmp(BigFloat(128, 2)) == 0


def test_zero_and_sign():
    rnd = RoundingMode.NEAREST
    assert BigFloat.zero(10).is_zero()
    assert BigFloat(10, 1).sub(BigFloat(10, 1), rnd).is_zero()
    assert BigFloat(10, -3).sign() == -1
    assert BigFloat(10, -3).abs(rnd) == BigFloat(10, 3)
    assert BigFloat(10, 3).neg(rnd) == BigFloat(10, -3)


def test_division_by_exact_zero_raises():
    with pytest.raises(ZeroDivisionError):
        BigFloat(64, 1).div(BigFloat.zero(64), RoundingMode.NEAREST)


def test_integer_helpers():
    rnd = RoundingMode.NEAREST
    x = BigFloat(64, 3)
    assert x.mul_int(2, rnd).sub_int(1, rnd) == BigFloat(64, 5)
    assert x.add_int(-4, rnd) == BigFloat(64, -1)


def test_round_to_changes_precision():
    x = BigFloat(256, '0.1').round_to(53)
    assert x.prec == 53
    assert x.to_float() == 0.1


def test_from_rational_rounds_once():
    assert BigFloat.from_rational(1, 3, 64, RoundingMode.TOWARD_NEGATIVE) == \
        BigFloat(64, 1).div(BigFloat(64, 3), RoundingMode.TOWARD_NEGATIVE)
    with pytest.raises(ZeroDivisionError):
        BigFloat.from_rational(1, 0, 64)


def test_non_finite_values():
    assert not BigFloat(53, float('inf')).is_finite()
    assert not BigFloat.from_str('nan', 53).is_finite()
    assert BigFloat(53, 1.0).is_finite()


def test_string_conversion():
    assert BigFloat(128, '1.5').to_str() == '1.5'
    assert BigFloat(128, 1).div(BigFloat(128, 3), RoundingMode.NEAREST).to_str(5) == '0.33333'
    assert 'prec=128' in repr(BigFloat(128, '1.5'))


def test_precision_properties():
    x = BigFloat(128, 1)
    assert x.prec == 128
    assert x.dps == 38


def test_pow_int():
    rnd = RoundingMode.NEAREST
    x = BigFloat(128, '1.5')
    assert x.pow_int(3, rnd) == BigFloat(128, '3.375')
    assert x.pow_int(0, rnd) == BigFloat(128, 1)
    assert BigFloat(128, 2).pow_int(-2, rnd) == BigFloat(128, '0.25')
    assert BigFloat(128, -2).pow_int(3, rnd) == BigFloat(128, -8)
    with pytest.raises(ZeroDivisionError):
        BigFloat.zero(128).pow_int(-1, rnd)


def test_pow_int_with_a_huge_exponent_is_fast():
    # 1 + 2^-100 to the 10^8th power, by repeated squaring
    x = BigFloat(128, 1).add(BigFloat.from_rational(1, 2 ** 100, 128), RoundingMode.NEAREST)
    assert x.pow_int(10 ** 8, RoundingMode.NEAREST) > BigFloat(128, 1)


def test_pow_int_directed_rounding_brackets():
    x = BigFloat(64, '1.1')
    assert x.pow_int(7, RoundingMode.TOWARD_NEGATIVE) < x.pow_int(7, RoundingMode.TOWARD_POSITIVE)


def test_elementary_functions():
    rnd = RoundingMode.NEAREST
    half = BigFloat(128, '0.5')
    assert half.sin(rnd).to_float() == pytest.approx(math.sin(0.5))
    assert half.cos(rnd).to_float() == pytest.approx(math.cos(0.5))
    assert half.tan(rnd).to_float() == pytest.approx(math.tan(0.5))
    assert half.exp(rnd).to_float() == pytest.approx(math.exp(0.5))
    assert half.log(rnd).to_float() == pytest.approx(math.log(0.5))
    assert BigFloat(128, 1).log(rnd).is_zero()
    assert BigFloat.zero(128).exp(rnd) == BigFloat(128, 1)
    assert half.sin(rnd).prec == 128


def test_log_and_sqrt_of_negative_numbers_raise():
    rnd = RoundingMode.NEAREST
    with pytest.raises(ValueError):
        BigFloat(64, -1).log(rnd)
    with pytest.raises(ValueError):
        BigFloat(64, -1).sqrt(rnd)


def test_pi():
    assert BigFloat.pi(53).to_float() == math.pi
    assert BigFloat.pi(256, RoundingMode.TOWARD_NEGATIVE) < BigFloat.pi(256, RoundingMode.TOWARD_POSITIVE)
    assert BigFloat.pi(512).prec == 512
