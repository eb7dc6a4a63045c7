"""Closed-form residuals and Jacobians of the reference problems.

Each evaluator computes at the precision of the point it is given and rounds every operation with the
rounding mode it is given.
"""
from mpnewton.linalg import Vector, Matrix
from mpnewton.numeric import BigFloat, RoundingMode

from dataclasses import dataclass
from typing import Callable

ResidualFn = Callable[[Vector, RoundingMode], Vector]
JacobianFn = Callable[[Vector, RoundingMode], Matrix]
ScalarFn = Callable[[BigFloat, RoundingMode], BigFloat]


@dataclass(frozen=True)
class NonlinearSystem:
    name: str
    dimension: int
    residual: ResidualFn
    jacobian: JacobianFn


@dataclass(frozen=True)
class ScalarEquation:
    name: str
    f: ScalarFn
    df: ScalarFn


# f(x) = x^3 - 2x - 5

def cubic_f(x: BigFloat, rnd: RoundingMode) -> BigFloat:
    x2 = x.mul(x, rnd)
    x3 = x2.mul(x, rnd)
    return x3.sub(x.mul_int(2, rnd), rnd).sub_int(5, rnd)


def cubic_df(x: BigFloat, rnd: RoundingMode) -> BigFloat:
    return x.mul(x, rnd).mul_int(3, rnd).sub_int(2, rnd)


# f1(x, y) = x^2 + y^2 - 4
# f2(x, y) = x^2 - y - 1

def circle_parabola_residual(v: Vector, rnd: RoundingMode) -> Vector:
    x, y = v
    x2 = x.mul(x, rnd)
    y2 = y.mul(y, rnd)
    f1 = x2.add(y2, rnd).sub_int(4, rnd)
    f2 = x2.sub(y, rnd).sub_int(1, rnd)
    return [f1, f2]


def circle_parabola_jacobian(v: Vector, rnd: RoundingMode) -> Matrix:
    """
    J = [2x   2y]
        [2x   -1]
    """
    x, y = v
    return [[x.mul_int(2, rnd), y.mul_int(2, rnd)],
            [x.mul_int(2, rnd), BigFloat.from_int(-1, x.prec, rnd)]]


# x^2 + 1 has no real root and a stationary point at 0: Newton from 1 lands on 0 after one step

def no_real_root_f(x: BigFloat, rnd: RoundingMode) -> BigFloat:
    return x.mul(x, rnd).add_int(1, rnd)


def no_real_root_df(x: BigFloat, rnd: RoundingMode) -> BigFloat:
    return x.mul_int(2, rnd)


# f1(x, y) = x^2 + 1
# f2(x, y) = y - 1
# det J = 2x, so a step landing on x = 0 makes the Jacobian exactly singular

def decoupled_residual(v: Vector, rnd: RoundingMode) -> Vector:
    x, y = v
    return [x.mul(x, rnd).add_int(1, rnd), y.sub_int(1, rnd)]


def decoupled_jacobian(v: Vector, rnd: RoundingMode) -> Matrix:
    x, y = v
    return [[x.mul_int(2, rnd), BigFloat.zero(x.prec)],
            [BigFloat.zero(x.prec), BigFloat.from_int(1, x.prec, rnd)]]


CUBIC = ScalarEquation('x^3 - 2x - 5', cubic_f, cubic_df)
NO_REAL_ROOT = ScalarEquation('x^2 + 1', no_real_root_f, no_real_root_df)
CIRCLE_PARABOLA = NonlinearSystem('x^2 + y^2 - 4, x^2 - y - 1', 2, circle_parabola_residual, circle_parabola_jacobian)
DECOUPLED = NonlinearSystem('x^2 + 1, y - 1', 2, decoupled_residual, decoupled_jacobian)
