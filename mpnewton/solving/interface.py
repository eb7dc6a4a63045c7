import mpnewton.config as cfg
from mpnewton.linalg import Vector, as_float_array
from mpnewton.numeric import BigFloat, RoundingMode
from mpnewton.problems import NonlinearSystem
from mpnewton.solving import solve

import logging
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def solve_many(system: NonlinearSystem, initial_guesses: Sequence[Vector], tolerance: BigFloat,
               rounding: RoundingMode, max_iterations: int,
               max_workers: int = cfg.MAX_WORKERS) -> List[solve.SolveResult]:
    """Run independent solves side by side. Results come back in the order of the initial guesses."""
    def run(guess: Vector) -> solve.SolveResult:
        return solve.newton_solve(guess, tolerance, rounding, max_iterations, system.residual, system.jacobian)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(run, initial_guesses))


def random_initial_guesses(search_limits: Sequence[float], n_points: int, prec: int, rounding: RoundingMode,
                           seed: Optional[int] = None) -> List[Vector]:
    """Uniform random points in the box given as [low_0, high_0, low_1, high_1, ...]."""
    if len(search_limits) % 2 != 0 or not search_limits:
        raise ValueError('Search limits must come in (low, high) pairs, one pair per unknown')
    limits = np.array(search_limits, dtype=np.float64).reshape(-1, 2)
    if not np.all(np.isfinite(limits)) or not np.all(np.isfinite(limits[:, 1] - limits[:, 0])):
        raise ValueError(f'Search limits and their spans must be finite, got {search_limits}')
    if np.any(limits[:, 1] <= limits[:, 0]):
        raise ValueError(f'Each search limit pair must have low < high, got {search_limits}')
    rng = np.random.default_rng(seed)
    randoms = limits[:, 0] + (limits[:, 1] - limits[:, 0]) * rng.random((n_points, limits.shape[0]))
    return [[BigFloat.from_float(float(v), prec, rounding) for v in row] for row in randoms]


def find_unique_solutions(system: NonlinearSystem, search_limits: Sequence[float], prec: int,
                          tolerance: BigFloat, rounding: RoundingMode, max_iterations: int = cfg.MAX_ITERS,
                          n_points: int = cfg.MAX_SEARCH_POINTS, seed: Optional[int] = None,
                          epsilon: float = cfg.EPSILON) -> List[Vector]:
    """Do a randomised search to find unique solutions, stopping early if new unique solutions stop being found."""
    if len(search_limits) != 2 * system.dimension:
        raise ValueError(f'Expected {2 * system.dimension} search limits for {system.dimension} unknowns, '
                         f'got {len(search_limits)}')
    unique_solns: List[Vector] = []
    converged_search_points_since_last_new_soln = 0
    for guess in random_initial_guesses(search_limits, n_points, prec, rounding, seed):
        result = solve.newton_solve(guess, tolerance, rounding, max_iterations, system.residual, system.jacobian)
        if not result.converged:
            continue

        if any(solve.points_approx_equal(existing_soln, result.x, epsilon) for existing_soln in unique_solns):
            converged_search_points_since_last_new_soln += 1
        else:
            converged_search_points_since_last_new_soln = 0
            unique_solns.append(result.x)

        if converged_search_points_since_last_new_soln >= cfg.MAX_CONVERGED_SEARCH_POINTS_SINCE_LAST_NEW_SOLUTION:
            logger.info(f'End search with {len(unique_solns)} unique solutions after reaching the limit of '
                        f'{cfg.MAX_CONVERGED_SEARCH_POINTS_SINCE_LAST_NEW_SOLUTION} consecutive converged search '
                        f'points since the last new unique solution.')
            break

    # Sort so that the search returns the solutions in the same order each time for a given system of equations
    return sorted(unique_solns, key=lambda s: tuple(as_float_array(s)))
