"""Arbitrary-precision binary floats with explicit precision and rounding.

This is a thin value type over the raw-float layer of mpmath (``mpmath.libmp``), which works on
``(sign, mantissa, exponent, bitcount)`` tuples and takes the target precision and rounding direction as
arguments of every operation. Nothing in here reads the global ``mpmath.mp`` context.
"""
from enum import Enum
from typing import Union

from mpmath.libmp import (fzero, finf, fninf, fnan, round_nearest, round_down, round_ceiling, round_floor,
                          from_int, from_float, from_str, from_rational, to_float, to_str, prec_to_dps, repr_dps,
                          mpf_add, mpf_sub, mpf_mul, mpf_mul_int, mpf_div, mpf_sqrt, mpf_neg, mpf_abs, mpf_pos,
                          mpf_pow_int, mpf_exp, mpf_log, mpf_sin, mpf_cos, mpf_tan, mpf_pi,
                          mpf_cmp, mpf_sign, mpf_eq, mpf_lt, mpf_le, mpf_gt, mpf_ge)

from mpnewton.errors import PrecisionMismatchError


class RoundingMode(str, Enum):
    NEAREST = 'nearest'
    TOWARD_ZERO = 'toward_zero'
    TOWARD_POSITIVE = 'toward_positive'
    TOWARD_NEGATIVE = 'toward_negative'

    @property
    def rnd(self) -> str:
        """The mpmath rounding direction flag for this mode."""
        return _LIBMP_ROUNDING[self]


_LIBMP_ROUNDING = {
    RoundingMode.NEAREST: round_nearest,
    RoundingMode.TOWARD_ZERO: round_down,
    RoundingMode.TOWARD_POSITIVE: round_ceiling,
    RoundingMode.TOWARD_NEGATIVE: round_floor,
}


def _rnd(rounding: Union[RoundingMode, str]) -> str:
    return RoundingMode(rounding).rnd


def _check_prec(prec: int) -> int:
    if isinstance(prec, bool) or not isinstance(prec, int) or prec < 1:
        raise ValueError(f'Precision must be a positive number of bits, got {prec!r}')
    return prec


class BigFloat(object):
    """An immutable binary floating-point number carrying its own precision (in bits).

    Every arithmetic method rounds its result to the precision of ``self`` using the rounding mode it is given,
    so a chain of operations loses nothing beyond what each individual rounding introduces. Arithmetic between
    values of different precisions is refused. Comparisons are exact and work across precisions.
    """
    __slots__ = ('_mpf', '_prec')

    def __init__(self, prec: int, value: Union[int, float, str] = 0, rounding: RoundingMode = RoundingMode.NEAREST):
        self._prec = _check_prec(prec)
        if isinstance(value, str):
            self._mpf = from_str(value, prec, _rnd(rounding))
        elif isinstance(value, float):
            self._mpf = from_float(value, prec, _rnd(rounding))
        elif isinstance(value, int) and not isinstance(value, bool):
            self._mpf = from_int(value, prec, _rnd(rounding))
        else:
            raise TypeError(f'Cannot build a BigFloat from {type(value).__name__}')

    @classmethod
    def _make(cls, prec: int, mpf: tuple) -> 'BigFloat':
        obj = object.__new__(cls)
        obj._prec = prec
        obj._mpf = mpf
        return obj

    @classmethod
    def from_str(cls, value: str, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        """Parse a decimal literal, rounding it to ``prec`` bits in the given direction."""
        return cls(prec, str(value), rounding)

    @classmethod
    def from_float(cls, value: float, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        return cls(prec, float(value), rounding)

    @classmethod
    def from_int(cls, value: int, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        return cls(prec, int(value), rounding)

    @classmethod
    def from_rational(cls, p: int, q: int, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        """p/q correctly rounded, without rounding p or q first."""
        if q == 0:
            raise ZeroDivisionError('Rational with a zero denominator')
        return cls._make(_check_prec(prec), from_rational(int(p), int(q), prec, _rnd(rounding)))

    @classmethod
    def zero(cls, prec: int) -> 'BigFloat':
        return cls._make(_check_prec(prec), fzero)

    @classmethod
    def pi(cls, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        return cls._make(_check_prec(prec), mpf_pi(prec, _rnd(rounding)))

    @property
    def prec(self) -> int:
        return self._prec

    @property
    def dps(self) -> int:
        """Number of decimal digits this precision can faithfully hold."""
        return prec_to_dps(self._prec)

    def round_to(self, prec: int, rounding: RoundingMode = RoundingMode.NEAREST) -> 'BigFloat':
        """Copy of this value at another precision."""
        return BigFloat._make(_check_prec(prec), mpf_pos(self._mpf, prec, _rnd(rounding)))

    def _same_prec(self, other: 'BigFloat') -> None:
        if not isinstance(other, BigFloat):
            raise TypeError(f'Expected a BigFloat operand, got {type(other).__name__}')
        if other._prec != self._prec:
            raise PrecisionMismatchError(f'Operands have different precisions ({self._prec} and {other._prec} bits)')

    # Arithmetic. Results take the precision of self.

    def add(self, other: 'BigFloat', rounding: RoundingMode) -> 'BigFloat':
        self._same_prec(other)
        return BigFloat._make(self._prec, mpf_add(self._mpf, other._mpf, self._prec, _rnd(rounding)))

    def sub(self, other: 'BigFloat', rounding: RoundingMode) -> 'BigFloat':
        self._same_prec(other)
        return BigFloat._make(self._prec, mpf_sub(self._mpf, other._mpf, self._prec, _rnd(rounding)))

    def mul(self, other: 'BigFloat', rounding: RoundingMode) -> 'BigFloat':
        self._same_prec(other)
        return BigFloat._make(self._prec, mpf_mul(self._mpf, other._mpf, self._prec, _rnd(rounding)))

    def div(self, other: 'BigFloat', rounding: RoundingMode) -> 'BigFloat':
        """Raises ZeroDivisionError for an exactly zero divisor."""
        self._same_prec(other)
        return BigFloat._make(self._prec, mpf_div(self._mpf, other._mpf, self._prec, _rnd(rounding)))

    def sqrt(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_sqrt(self._mpf, self._prec, _rnd(rounding)))

    def neg(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_neg(self._mpf, self._prec, _rnd(rounding)))

    def abs(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_abs(self._mpf, self._prec, _rnd(rounding)))

    def add_int(self, n: int, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_add(self._mpf, from_int(n), self._prec, _rnd(rounding)))

    def sub_int(self, n: int, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_sub(self._mpf, from_int(n), self._prec, _rnd(rounding)))

    def mul_int(self, n: int, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_mul_int(self._mpf, n, self._prec, _rnd(rounding)))

    def pow_int(self, n: int, rounding: RoundingMode) -> 'BigFloat':
        """self**n by repeated squaring. Raises ZeroDivisionError for zero to a negative power."""
        return BigFloat._make(self._prec, mpf_pow_int(self._mpf, int(n), self._prec, _rnd(rounding)))

    # Elementary functions. log and sqrt raise ComplexResult (a ValueError) for negative arguments.

    def exp(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_exp(self._mpf, self._prec, _rnd(rounding)))

    def log(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_log(self._mpf, self._prec, _rnd(rounding)))

    def sin(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_sin(self._mpf, self._prec, _rnd(rounding)))

    def cos(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_cos(self._mpf, self._prec, _rnd(rounding)))

    def tan(self, rounding: RoundingMode) -> 'BigFloat':
        return BigFloat._make(self._prec, mpf_tan(self._mpf, self._prec, _rnd(rounding)))

    # Exact predicates and comparisons.

    def is_zero(self) -> bool:
        return self._mpf == fzero

    def is_finite(self) -> bool:
        return self._mpf not in (finf, fninf, fnan)

    def sign(self) -> int:
        return mpf_sign(self._mpf)

    def cmp(self, other: 'BigFloat') -> int:
        return mpf_cmp(self._mpf, other._mpf)

    def __eq__(self, other):
        if not isinstance(other, BigFloat):
            return NotImplemented
        return mpf_eq(self._mpf, other._mpf)

    def __hash__(self):
        return hash(self._mpf)

    def __lt__(self, other: 'BigFloat') -> bool:
        return mpf_lt(self._mpf, other._mpf)

    def __le__(self, other: 'BigFloat') -> bool:
        return mpf_le(self._mpf, other._mpf)

    def __gt__(self, other: 'BigFloat') -> bool:
        return mpf_gt(self._mpf, other._mpf)

    def __ge__(self, other: 'BigFloat') -> bool:
        return mpf_ge(self._mpf, other._mpf)

    # Conversions.

    def to_float(self, rounding: RoundingMode = RoundingMode.NEAREST) -> float:
        return to_float(self._mpf, rnd=_rnd(rounding))

    def to_str(self, digits: int = 0) -> str:
        """Decimal representation with at most ``digits`` significant digits (default: all the precision holds)."""
        return to_str(self._mpf, digits or self.dps)

    def __str__(self):
        return self.to_str()

    def __repr__(self):
        return f"BigFloat('{to_str(self._mpf, repr_dps(self._prec))}', prec={self._prec})"
