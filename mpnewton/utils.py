import logging

import mpnewton.config as cfg
from mpnewton.numeric import BigFloat

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence


def mkdir_if_nonexistent(path: Path) -> None:
    if not path.exists():
        path.mkdir(parents=True)


def timed(func: Callable) -> Callable:
    def wrapper(*args, **kwargs):
        start = datetime.now()
        func(*args, **kwargs)
        return (datetime.now() - start).total_seconds()
    return wrapper


def timed_result(func: Callable) -> Callable:
    """Like timed, but the wrapper returns (duration, result)."""
    def wrapper(*args, **kwargs):
        start = datetime.now()
        result = func(*args, **kwargs)
        return (datetime.now() - start).total_seconds(), result
    return wrapper


def format_iteration(record, digits: int = 10) -> str:
    """One row of the iteration table: iteration number, the iterate, the residual and its norm."""
    columns = [str(record.iteration)]
    columns += [xi.to_str(digits) for xi in record.x]
    columns += [fi.to_str(3) for fi in record.f]
    columns.append(record.norm.to_str(3))
    return '\t'.join(columns)


def format_vector(v: Sequence[BigFloat], digits: int = cfg.REPORT_DIGITS) -> str:
    return '(' + ', '.join(vi.to_str(digits) for vi in v) + ')'


def plot_residual_history(history: Sequence, path: Path) -> None:
    """Save a semilog plot of the residual norm per iteration. Exactly zero norms are left off the plot."""
    iterations = np.array([record.iteration for record in history])
    norms = np.array([record.norm.to_float() for record in history])
    nonzero = norms > 0
    fig, ax = plt.subplots()
    ax.semilogy(iterations[nonzero], norms[nonzero], marker='o')
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Residual norm')
    ax.grid(True, which='both', alpha=0.3)
    mkdir_if_nonexistent(path.parent)
    fig.savefig(path)
    plt.close(fig)


def logger_setup(logger: logging.Logger, logs_dir: Path, file_name_base: str) -> None:
    logger.setLevel(logging.DEBUG)
    logs_files = list(logs_dir.glob(f'{file_name_base}_*.log'))
    if logs_files:
        file_name = logs_files[0].name
    else:
        mkdir_if_nonexistent(logs_dir)
        datetimestr = datetime.now(timezone.utc).isoformat()\
            .replace(':', '-').replace('.', '-')
        file_name = f'{file_name_base}_{datetimestr}.log'
    # Handlers are only attached once per logger
    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return
    # create file handler which logs even debug messages
    fh = logging.FileHandler(str(logs_dir / file_name))
    fh.setLevel(logging.DEBUG)
    # create console handler with a higher log level
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    # create formatter and add it to the handlers
    formatter = logging.Formatter(u'[%(asctime)s] [%(threadName)s] [] [%(levelname)s] [%(lineno)d:%(filename)s(%(process)d)] - %(message)s')
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)
    # add the handlers to the logger
    logger.addHandler(fh)
    logger.addHandler(ch)
