import mpnewton.config as cfg
from mpnewton.expressions import system_from_expressions
from mpnewton.numeric import BigFloat, RoundingMode
from mpnewton.problems import NonlinearSystem

import math
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class SystemRequest(BaseModel):
    variables: List[str] = ['x', 'y']
    expressions: List[str]
    jacobian: List[List[str]]
    tolerance: str = cfg.DEFAULT_TOLERANCE
    precision: int = Field(default=cfg.DEFAULT_PRECISION, gt=0)
    rounding: RoundingMode = RoundingMode(cfg.DEFAULT_ROUNDING)
    max_iterations: int = Field(default=cfg.MAX_ITERS, ge=0)


class SolveRequest(SystemRequest):
    initial_guess: List[str]
    include_history: bool = False


class SearchRequest(SystemRequest):
    search_limits: List[float]
    n_points: int = Field(default=cfg.MAX_SEARCH_POINTS, gt=0)
    seed: Optional[int] = None


def parse_decimal(value: str, prec: int, rounding: RoundingMode) -> BigFloat:
    try:
        return BigFloat.from_str(value, prec, rounding)
    except (ValueError, TypeError) as err:
        raise ValueError(f'Invalid decimal number: {value!r}') from err


class SystemParameters(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    system: NonlinearSystem
    precision: int = Field(gt=0)
    tolerance: BigFloat
    rounding: RoundingMode
    max_iterations: int = Field(ge=0)

    @field_validator('tolerance')
    @classmethod
    def require_positive_tolerance(cls, v: BigFloat) -> BigFloat:
        if not v.is_finite() or v.sign() <= 0:
            raise ValueError('Tolerance must be a positive finite number')
        return v

    @staticmethod
    def common_fields(request: SystemRequest) -> dict:
        # The Jacobian entries are closed-form expressions from the caller, nothing is differentiated here.
        system = system_from_expressions(request.variables, request.expressions, request.jacobian)
        return dict(
            system=system,
            precision=request.precision,
            tolerance=parse_decimal(request.tolerance, request.precision, request.rounding),
            rounding=request.rounding,
            max_iterations=request.max_iterations)


class SolveParameters(SystemParameters):
    initial_guess: List[BigFloat]
    include_history: bool = False

    @field_validator('initial_guess')
    @classmethod
    def require_finite_initial_guess(cls, v: List[BigFloat]) -> List[BigFloat]:
        if not all(xi.is_finite() for xi in v):
            raise ValueError('Initial guess components must be finite')
        return v

    @staticmethod
    def from_request(request: SolveRequest) -> 'SolveParameters':
        if len(request.initial_guess) != len(request.variables):
            raise ValueError(f'Initial guess has {len(request.initial_guess)} components for '
                             f'{len(request.variables)} variables')
        return SolveParameters(
            **SystemParameters.common_fields(request),
            initial_guess=[parse_decimal(v, request.precision, request.rounding) for v in request.initial_guess],
            include_history=request.include_history)


class SearchParameters(SystemParameters):
    search_limits: List[float]
    n_points: int = Field(gt=0)
    seed: Optional[int] = None

    @field_validator('search_limits')
    @classmethod
    def require_limit_pairs(cls, v: List[float]) -> List[float]:
        if not v or len(v) % 2 != 0:
            raise ValueError('Search limits must come in (low, high) pairs')
        if not all(math.isfinite(limit) for limit in v):
            raise ValueError('Search limits must be finite')
        if not all(math.isfinite(high - low) for low, high in zip(v[::2], v[1::2])):
            raise ValueError('Search limit spans must be finite')
        if any(low >= high for low, high in zip(v[::2], v[1::2])):
            raise ValueError('Each search limit pair must have low < high')
        return v

    @staticmethod
    def from_request(request: SearchRequest) -> 'SearchParameters':
        if len(request.search_limits) != 2 * len(request.variables):
            raise ValueError(f'Expected {2 * len(request.variables)} search limits for {len(request.variables)} '
                             f'variables, got {len(request.search_limits)}')
        return SearchParameters(
            **SystemParameters.common_fields(request),
            search_limits=request.search_limits,
            n_points=request.n_points,
            seed=request.seed)
