import mpnewton.config as cfg
from mpnewton.errors import (MalformedInputError, PrecisionMismatchError, DimensionMismatchError,
                             SingularJacobianError, NotConvergedError)
from mpnewton.linalg import (Vector, LinearSolver, default_linear_solver, euclidean_norm, vector_add,
                             as_float_array)
from mpnewton.numeric import BigFloat, RoundingMode
from mpnewton.problems import ResidualFn, JacobianFn, ScalarFn

import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)


class SolveStatus(str, Enum):
    CONVERGED = 'converged'
    NOT_CONVERGED = 'not_converged'
    SINGULAR_JACOBIAN = 'singular_jacobian'


@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    x: Vector
    f: Vector
    norm: BigFloat


@dataclass(frozen=True)
class SolveResult:
    """Outcome of one solve. ``x`` is the solution when converged, otherwise the last iterate reached."""
    status: SolveStatus
    x: Vector
    iterations: int
    residual_norm: BigFloat

    @property
    def converged(self) -> bool:
        return self.status == SolveStatus.CONVERGED

    @property
    def root(self) -> BigFloat:
        if len(self.x) != 1:
            raise ValueError(f'root is only defined for one-variable problems, this one has {len(self.x)}')
        return self.x[0]

    def unwrap(self) -> Vector:
        """The solution vector, or the failure raised as an exception."""
        if self.status == SolveStatus.SINGULAR_JACOBIAN:
            raise SingularJacobianError(f'Singular Jacobian after {self.iterations} iterations', result=self)
        if self.status == SolveStatus.NOT_CONVERGED:
            raise NotConvergedError(f'Failed to converge after {self.iterations} iterations '
                                    f'(residual norm {self.residual_norm.to_str(3)})', result=self)
        return self.x


IterationCallback = Callable[[IterationRecord], None]


class SolverState(object):
    """The current iterate of one solve, its residual and the iteration counter.

    The residual is cleared whenever the iterate moves, so it can only ever be read for the point it was
    evaluated at.
    """

    def __init__(self, initial_guess: Sequence[BigFloat]):
        self.x: Vector = list(initial_guess)
        self.iteration = 0
        self._f: Optional[Vector] = None
        self._norm: Optional[BigFloat] = None

    @property
    def f(self) -> Vector:
        if self._f is None:
            raise RuntimeError('The residual of the current iterate has not been evaluated yet')
        return self._f

    @property
    def norm(self) -> BigFloat:
        if self._norm is None:
            raise RuntimeError('The residual of the current iterate has not been evaluated yet')
        return self._norm

    def evaluate(self, residual_fn: ResidualFn, rounding: RoundingMode) -> None:
        f = list(residual_fn(self.x, rounding))
        if len(f) != len(self.x):
            raise DimensionMismatchError(f'Residual has {len(f)} components for {len(self.x)} unknowns')
        self._f = f
        self._norm = euclidean_norm(f, rounding)

    def step(self, delta: Vector, rounding: RoundingMode) -> None:
        self.x = vector_add(self.x, delta, rounding)
        self.iteration += 1
        self._f = None
        self._norm = None

    def record(self) -> IterationRecord:
        return IterationRecord(self.iteration, list(self.x), list(self.f), self.norm)

    def result(self, status: SolveStatus) -> SolveResult:
        return SolveResult(status, list(self.x), self.iteration, self.norm)


def validate_inputs(initial_guess: Sequence[BigFloat], tolerance: BigFloat, max_iterations: int) -> None:
    if len(initial_guess) == 0:
        raise MalformedInputError('Initial guess must have at least one component')
    if not all(isinstance(xi, BigFloat) for xi in initial_guess):
        raise MalformedInputError('Initial guess components must be BigFloat values')
    prec = initial_guess[0].prec
    if any(xi.prec != prec for xi in initial_guess):
        raise PrecisionMismatchError(f'Initial guess mixes precisions {sorted({xi.prec for xi in initial_guess})}')
    if not all(xi.is_finite() for xi in initial_guess):
        raise MalformedInputError('Initial guess components must be finite')
    if not isinstance(tolerance, BigFloat) or not tolerance.is_finite() or tolerance.sign() <= 0:
        raise MalformedInputError(f'Tolerance must be a positive finite BigFloat, got {tolerance!r}')
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 0:
        raise MalformedInputError(f'max_iterations must be a non-negative integer, got {max_iterations!r}')


def newton_solve(initial_guess: Sequence[BigFloat], tolerance: BigFloat, rounding: RoundingMode,
                 max_iterations: int, residual_fn: ResidualFn, jacobian_fn: JacobianFn,
                 linear_solver: Optional[LinearSolver] = None,
                 callback: Optional[IterationCallback] = None) -> SolveResult:
    """Newton's method for a system of N equations in N unknowns.

    Each pass evaluates the residual at the current iterate and stops as soon as its Euclidean norm is below
    ``tolerance``. Otherwise, unless ``max_iterations`` updates have already been made, it solves
    J * delta = -f with ``linear_solver`` (picked from the dimension when not given) and moves to x + delta.
    Failures are reported through the status of the returned result, never by raising.
    """
    rounding = RoundingMode(rounding)
    validate_inputs(initial_guess, tolerance, max_iterations)
    solver = linear_solver or default_linear_solver(len(initial_guess))
    state = SolverState(initial_guess)

    while True:
        state.evaluate(residual_fn, rounding)
        logger.debug(f'Iteration {state.iteration}: residual norm {state.norm.to_str(3)}')
        if callback is not None:
            callback(state.record())

        if state.norm < tolerance:
            logger.info(f'Converged after {state.iteration} iterations')
            return state.result(SolveStatus.CONVERGED)

        if state.iteration >= max_iterations:
            logger.warning(f'Failed to converge after {max_iterations} iterations '
                           f'(residual norm {state.norm.to_str(3)})')
            return state.result(SolveStatus.NOT_CONVERGED)

        jacobian = jacobian_fn(state.x, rounding)
        try:
            delta = solver.solve(jacobian, state.f, rounding)
        except SingularJacobianError as err:
            logger.warning(f'{err} at iteration {state.iteration}; failed to solve the linear system')
            return state.result(SolveStatus.SINGULAR_JACOBIAN)

        state.step(delta, rounding)


def newton_solve_scalar(initial_guess: BigFloat, tolerance: BigFloat, rounding: RoundingMode,
                        max_iterations: int, f: ScalarFn, df: ScalarFn,
                        callback: Optional[IterationCallback] = None) -> SolveResult:
    """Newton's method for one equation, x <- x - f(x)/f'(x), stopping when |f(x)| < tolerance."""
    rounding = RoundingMode(rounding)
    validate_inputs([initial_guess], tolerance, max_iterations)
    x = initial_guess
    iteration = 0

    while True:
        fx = f(x, rounding)
        abs_fx = fx.abs(rounding)
        logger.debug(f'Iteration {iteration}: |f(x)| {abs_fx.to_str(3)}')
        if callback is not None:
            callback(IterationRecord(iteration, [x], [fx], abs_fx))

        if abs_fx < tolerance:
            logger.info(f'Converged after {iteration} iterations')
            return SolveResult(SolveStatus.CONVERGED, [x], iteration, abs_fx)

        if iteration >= max_iterations:
            logger.warning(f'Failed to converge after {max_iterations} iterations')
            return SolveResult(SolveStatus.NOT_CONVERGED, [x], iteration, abs_fx)

        dfx = df(x, rounding)
        if dfx.is_zero():
            logger.warning(f'Derivative is zero at iteration {iteration}, cannot continue')
            return SolveResult(SolveStatus.SINGULAR_JACOBIAN, [x], iteration, abs_fx)

        x = x.sub(fx.div(dfx, rounding), rounding)
        iteration += 1


def points_approx_equal(p1: Sequence[BigFloat], p2: Sequence[BigFloat], epsilon: float = cfg.EPSILON) -> bool:
    return bool(np.linalg.norm(as_float_array(p1) - as_float_array(p2)) < 2 * epsilon)
