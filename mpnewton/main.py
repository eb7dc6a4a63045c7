import mpnewton.config as cfg
import mpnewton.problems as problems
import mpnewton.utils as utils
from mpnewton.numeric import BigFloat, RoundingMode
from mpnewton.solving import solve

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger('mpnewton.main')


def run_scalar_demo(prec: int = cfg.DEFAULT_PRECISION, tolerance: str = '1e-30') -> solve.SolveResult:
    rnd = RoundingMode.NEAREST
    initial_guess = BigFloat.from_int(2, prec, rnd)
    tol = BigFloat.from_str(tolerance, prec, rnd)

    logger.info(f'Solving f(x) = {problems.CUBIC.name} = 0')
    logger.info(f'Initial guess: {initial_guess.to_str(15)}, tolerance: {tol.to_str(3)}')
    logger.info('Iter\tx_n\tf(x_n)\t|f(x_n)|')
    result = solve.newton_solve_scalar(initial_guess, tol, rnd, cfg.MAX_ITERS, problems.CUBIC.f, problems.CUBIC.df,
                                       callback=lambda record: logger.info(utils.format_iteration(record, 15)))

    if result.converged:
        logger.info(f'Root found: {result.root.to_str(cfg.REPORT_DIGITS)}')
        logger.info(f'Verification f(root) = {problems.CUBIC.f(result.root, rnd).to_str(3)}')
    return result


def run_system_demo(prec: int = cfg.DEFAULT_PRECISION, tolerance: str = cfg.DEFAULT_TOLERANCE,
                    plot_path: Optional[Path] = None) -> solve.SolveResult:
    rnd = RoundingMode.NEAREST
    initial_guess = [BigFloat.from_float(1.5, prec, rnd), BigFloat.from_float(1.5, prec, rnd)]
    tol = BigFloat.from_str(tolerance, prec, rnd)

    logger.info(f'Solving system: {problems.CIRCLE_PARABOLA.name} = 0')
    logger.info(f'Initial guess: {utils.format_vector(initial_guess, 10)}, tolerance: {tol.to_str(3)}')
    logger.info('Iter\tx\ty\tf1(x,y)\tf2(x,y)\tnorm')
    history = []

    def report(record: solve.IterationRecord) -> None:
        history.append(record)
        logger.info(utils.format_iteration(record))

    result = solve.newton_solve(initial_guess, tol, rnd, cfg.MAX_ITERS, problems.CIRCLE_PARABOLA.residual,
                                problems.CIRCLE_PARABOLA.jacobian, callback=report)

    if result.converged:
        logger.info(f'Solution found: {utils.format_vector(result.x, 25)}')
        verification = problems.CIRCLE_PARABOLA.residual(result.x, rnd)
        logger.info(f'Verification: f1 = {verification[0].to_str(3)}, f2 = {verification[1].to_str(3)}')
    if plot_path is not None:
        utils.plot_residual_history(history, plot_path)
    return result


def basic_operations_demo(prec: int = 256) -> Dict[str, BigFloat]:
    rnd = RoundingMode.NEAREST
    a = BigFloat.from_str('1.23456789012345678901234567890', prec)
    b = BigFloat.from_str('9.87654321098765432109876543210', prec)
    results = {
        'a + b': a.add(b, rnd),
        'a * b': a.mul(b, rnd),
        'a / b': a.div(b, rnd),
        'a^10': a.pow_int(10, rnd),
    }
    logger.info(f'a = {a.to_str(30)}, b = {b.to_str(30)}')
    for name, value in results.items():
        logger.info(f'{name} = {value.to_str(30)}')
    return results


def mathematical_functions_demo(prec: int = 128) -> Dict[str, BigFloat]:
    rnd = RoundingMode.NEAREST
    x = BigFloat.from_float(0.5, prec)
    results = {
        'sin(x)': x.sin(rnd),
        'cos(x)': x.cos(rnd),
        'tan(x)': x.tan(rnd),
        'exp(x)': x.exp(rnd),
        'log(x)': x.log(rnd),
        'sqrt(x)': x.sqrt(rnd),
    }
    logger.info(f'x = {x.to_str(25)}')
    for name, value in results.items():
        logger.info(f'{name} = {value.to_str(25)}')
    return results


def rounding_modes_demo(prec: int = 64) -> Dict[RoundingMode, BigFloat]:
    """1/3 rounded in each direction."""
    a = BigFloat.from_str('1.0', prec)
    b = BigFloat.from_str('3.0', prec)
    results = {mode: a.div(b, mode) for mode in RoundingMode}
    for mode, value in results.items():
        logger.info(f'1/3 ({mode.value}) = {value.to_str(20)}')
    return results


def precision_comparison_demo(low_prec: int = 64, high_prec: int = 512) -> Tuple[BigFloat, BigFloat]:
    """Pi at a low and a high precision."""
    low = BigFloat.pi(low_prec)
    high = BigFloat.pi(high_prec)
    logger.info(f'Pi with {low_prec} bits: {low.to_str(20)}')
    logger.info(f'Pi with {high_prec} bits: {high.to_str(50)}')
    return low, high


def special_values_demo(prec: int = 53) -> Dict[str, BigFloat]:
    """Infinities, NaN and zero, and where they come from. There is no signed zero."""
    rnd = RoundingMode.NEAREST
    results = {
        '+inf': BigFloat.from_str('inf', prec),
        '-inf': BigFloat.from_str('-inf', prec),
        'nan': BigFloat.from_str('nan', prec),
        '0': BigFloat.zero(prec),
        'log(0)': BigFloat.zero(prec).log(rnd),
    }
    try:
        results['sqrt(-1)'] = BigFloat.from_int(-1, prec).sqrt(rnd)
    except ValueError as err:
        logger.info(f'sqrt(-1) has no real value ({err}), reported as nan')
        results['sqrt(-1)'] = BigFloat.from_str('nan', prec)
    for name, value in results.items():
        logger.info(f'{name} = {value.to_str(10)}')
    return results


def performance_timing_demo(iterations: int = 10000, prec: int = 256) -> Dict[str, float]:
    rnd = RoundingMode.NEAREST
    a = BigFloat.from_str('1.23456789', prec)
    b = BigFloat.from_str('9.87654321', prec)

    def repeat(op):
        for _ in range(iterations):
            op()

    durations = {
        'multiplications': utils.timed(repeat)(lambda: a.mul(b, rnd)),
        'divisions': utils.timed(repeat)(lambda: a.div(b, rnd)),
        'square roots': utils.timed(repeat)(lambda: a.sqrt(rnd)),
    }
    for name, duration in durations.items():
        logger.info(f'Time for {iterations} {name}: {duration:.6f} seconds')
    return durations


if __name__ == '__main__':
    utils.logger_setup(logging.getLogger('mpnewton'), cfg.LOGS_DIR, 'demo')
    duration = utils.timed(run_scalar_demo)()
    logger.info(f'Scalar solve took {duration} s')
    run_system_demo(plot_path=cfg.LOGS_DIR / 'system_residuals.png')
    basic_operations_demo()
    mathematical_functions_demo()
    precision_comparison_demo()
    rounding_modes_demo()
    special_values_demo()
    performance_timing_demo()
