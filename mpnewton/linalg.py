from mpnewton.errors import SingularJacobianError, DimensionMismatchError
from mpnewton.numeric import BigFloat, RoundingMode

import numpy as np
import numpy.typing as npt
from abc import ABC, abstractmethod
from typing import List, Sequence

Vector = List[BigFloat]
Matrix = List[List[BigFloat]]


def euclidean_norm(v: Sequence[BigFloat], rounding: RoundingMode) -> BigFloat:
    """sqrt(sum v_i^2), every step rounded at the precision of the vector."""
    total = BigFloat.zero(v[0].prec)
    for vi in v:
        total = total.add(vi.mul(vi, rounding), rounding)
    return total.sqrt(rounding)


def vector_add(a: Sequence[BigFloat], b: Sequence[BigFloat], rounding: RoundingMode) -> Vector:
    if len(a) != len(b):
        raise DimensionMismatchError(f'Cannot add vectors of length {len(a)} and {len(b)}')
    return [ai.add(bi, rounding) for ai, bi in zip(a, b)]


def as_float_array(v: Sequence[BigFloat]) -> npt.NDArray:
    return np.array([vi.to_float() for vi in v], dtype=np.float64)


def check_square(jacobian: Sequence[Sequence[BigFloat]], n: int) -> None:
    if len(jacobian) != n or any(len(row) != n for row in jacobian):
        raise DimensionMismatchError(f'Jacobian must be {n}x{n} to match the residual, got row lengths '
                                     f'{[len(row) for row in jacobian]}')


class LinearSolver(ABC):
    """Solves J * delta = -f for a small dense system."""

    def solve(self, jacobian: Matrix, residual: Vector, rounding: RoundingMode) -> Vector:
        check_square(jacobian, len(residual))
        return self._solve(jacobian, residual, rounding)

    @abstractmethod
    def _solve(self, jacobian: Matrix, residual: Vector, rounding: RoundingMode) -> Vector:
        ...


class ScalarSolver(LinearSolver):
    """The one-equation case: delta = -f / f'."""

    def _solve(self, jacobian: Matrix, residual: Vector, rounding: RoundingMode) -> Vector:
        derivative = jacobian[0][0]
        if derivative.is_zero():
            raise SingularJacobianError('Derivative is zero')
        return [residual[0].neg(rounding).div(derivative, rounding)]


class CramerSolver(LinearSolver):
    """Cramer's rule for the 2x2 case."""

    def _solve(self, jacobian: Matrix, residual: Vector, rounding: RoundingMode) -> Vector:
        (j00, j01), (j10, j11) = jacobian
        det = j00.mul(j11, rounding).sub(j01.mul(j10, rounding), rounding)
        # Only an exactly zero determinant counts as singular
        if det.is_zero():
            raise SingularJacobianError('Singular Jacobian matrix (determinant is zero)')

        neg_f0 = residual[0].neg(rounding)
        neg_f1 = residual[1].neg(rounding)
        delta0 = neg_f0.mul(j11, rounding).sub(neg_f1.mul(j01, rounding), rounding).div(det, rounding)
        delta1 = j00.mul(neg_f1, rounding).sub(j10.mul(neg_f0, rounding), rounding).div(det, rounding)
        return [delta0, delta1]


class GaussianEliminationSolver(LinearSolver):
    """Gaussian elimination with partial pivoting, for any N."""

    def _solve(self, jacobian: Matrix, residual: Vector, rounding: RoundingMode) -> Vector:
        n = len(residual)
        # Augmented matrix [J | -f], rows are fresh lists so the caller's Jacobian is untouched
        rows = [list(jacobian[i]) + [residual[i].neg(rounding)] for i in range(n)]

        for col in range(n):
            # Largest absolute pivot; the first one wins ties
            pivot_row = col
            pivot_abs = rows[col][col].abs(rounding)
            for r in range(col + 1, n):
                candidate = rows[r][col].abs(rounding)
                if candidate > pivot_abs:
                    pivot_row, pivot_abs = r, candidate
            if pivot_abs.is_zero():
                raise SingularJacobianError(f'Singular Jacobian matrix (zero pivot in column {col})')
            if pivot_row != col:
                rows[col], rows[pivot_row] = rows[pivot_row], rows[col]

            pivot = rows[col][col]
            for r in range(col + 1, n):
                factor = rows[r][col].div(pivot, rounding)
                if factor.is_zero():
                    continue
                rows[r] = [rows[r][k] if k < col else rows[r][k].sub(factor.mul(rows[col][k], rounding), rounding)
                           for k in range(n + 1)]

        delta: Vector = [BigFloat.zero(residual[0].prec)] * n
        for i in reversed(range(n)):
            acc = rows[i][n]
            for k in range(i + 1, n):
                acc = acc.sub(rows[i][k].mul(delta[k], rounding), rounding)
            delta[i] = acc.div(rows[i][i], rounding)
        return delta


def default_linear_solver(n: int) -> LinearSolver:
    if n < 1:
        raise DimensionMismatchError('A system needs at least one equation')
    if n == 1:
        return ScalarSolver()
    if n == 2:
        return CramerSolver()
    return GaussianEliminationSolver()
