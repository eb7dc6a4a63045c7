"""Residuals and Jacobians written as closed-form expression strings.

Sympy parses the strings (decimal literals become exact rationals) and each expression tree is compiled once
into a chain of BigFloat operations, so the evaluators honour the precision of the point and the rounding
mode exactly like the hand-written ones in ``mpnewton.problems``. Only arithmetic the numeric type supports is
accepted: sums, products, integer powers, square roots (``**(1/2)`` or ``sqrt``), ``Abs``, ``exp``, ``log``,
``sin``, ``cos``, ``tan`` and the constants ``pi`` and ``E``. Derivatives are never computed here, the Jacobian
entries are supplied by the caller.
"""
from mpnewton.errors import DimensionMismatchError
from mpnewton.linalg import Vector, Matrix
from mpnewton.numeric import BigFloat, RoundingMode
from mpnewton.problems import NonlinearSystem

import sympy as sp
from sympy.parsing.sympy_parser import parse_expr, standard_transformations, rationalize
from tokenize import TokenError
from typing import Callable, Dict, List, Optional, Sequence, Tuple

TRANSFORMATIONS = standard_transformations + (rationalize,)

ExpressionFn = Callable[[Vector, RoundingMode], BigFloat]


def make_symbols(variables: Sequence[str]) -> Tuple[sp.Symbol, ...]:
    if not variables:
        raise ValueError('At least one variable is required')
    if len(set(variables)) != len(variables):
        raise ValueError(f'Variable names must be unique, got {list(variables)}')
    for name in variables:
        if not name.isidentifier():
            raise ValueError(f'Invalid variable name: {name!r}')
    return tuple(sp.Symbol(name) for name in variables)


def parse_expression(expression: str, symbols: Sequence[sp.Symbol]) -> sp.Expr:
    local_dict: Dict[str, sp.Symbol] = {sym.name: sym for sym in symbols}
    try:
        expr = parse_expr(expression, local_dict=local_dict, transformations=TRANSFORMATIONS)
    except (SyntaxError, TokenError, TypeError, NameError, sp.SympifyError) as err:
        raise ValueError(f'Could not parse expression {expression!r}') from err
    if not isinstance(expr, sp.Expr):
        raise ValueError(f'Not an arithmetic expression: {expression!r}')
    unknown = expr.free_symbols - set(symbols)
    if unknown:
        raise ValueError(f'Expression {expression!r} uses unknown symbols {sorted(s.name for s in unknown)}')
    return expr


_FUNCTIONS = {
    sp.Abs: BigFloat.abs,
    sp.exp: BigFloat.exp,
    sp.log: BigFloat.log,
    sp.sin: BigFloat.sin,
    sp.cos: BigFloat.cos,
    sp.tan: BigFloat.tan,
}


def _compile(node: sp.Expr, index: Dict[sp.Symbol, int]) -> ExpressionFn:
    if node.is_Symbol:
        i = index[node]
        return lambda x, rnd: x[i]

    if node.is_Integer:
        n = int(node)
        return lambda x, rnd: BigFloat.from_int(n, x[0].prec, rnd)

    if node.is_Rational:
        p, q = int(node.p), int(node.q)
        return lambda x, rnd: BigFloat.from_rational(p, q, x[0].prec, rnd)

    if node.is_Add or node.is_Mul:
        terms = [_compile(arg, index) for arg in node.args]
        op = BigFloat.add if node.is_Add else BigFloat.mul

        def fold(x: Vector, rnd: RoundingMode) -> BigFloat:
            acc = terms[0](x, rnd)
            for term in terms[1:]:
                acc = op(acc, term(x, rnd), rnd)
            return acc
        return fold

    if node.is_Pow:
        base_expr, exponent = node.args
        base = _compile(base_expr, index)
        if exponent.is_Integer:
            n = int(exponent)
            return lambda x, rnd: base(x, rnd).pow_int(n, rnd)
        if exponent == sp.Rational(1, 2):
            return lambda x, rnd: base(x, rnd).sqrt(rnd)
        if exponent == sp.Rational(-1, 2):
            return lambda x, rnd: BigFloat.from_int(1, x[0].prec, rnd).div(base(x, rnd).sqrt(rnd), rnd)
        raise ValueError(f'Unsupported exponent {exponent} in {node}: only integers and 1/2 are allowed')

    if node is sp.pi:
        return lambda x, rnd: BigFloat.pi(x[0].prec, rnd)
    if node is sp.E:
        return lambda x, rnd: BigFloat.from_int(1, x[0].prec, rnd).exp(rnd)

    for func, method in _FUNCTIONS.items():
        if isinstance(node, func):
            inner = _compile(node.args[0], index)
            return lambda x, rnd, method=method: method(inner(x, rnd), rnd)

    raise ValueError(f'Unsupported operation in closed-form expression: {node.func.__name__} ({node})')


def compile_expression(expression: str, symbols: Sequence[sp.Symbol]) -> ExpressionFn:
    index = {sym: i for i, sym in enumerate(symbols)}
    return _compile(parse_expression(expression, symbols), index)


def system_from_expressions(variables: Sequence[str], expressions: Sequence[str],
                            jacobian: Sequence[Sequence[str]], name: Optional[str] = None) -> NonlinearSystem:
    """Build a pluggable system from residual expressions and the matching closed-form Jacobian entries.

    ``jacobian[i][j]`` must be the partial derivative of ``expressions[i]`` with respect to ``variables[j]``;
    this is not checked.
    """
    symbols = make_symbols(variables)
    n = len(symbols)
    if len(expressions) != n:
        raise DimensionMismatchError(f'{len(expressions)} equations for {n} unknowns')
    if len(jacobian) != n or any(len(row) != n for row in jacobian):
        raise DimensionMismatchError(f'Jacobian must be {n}x{n}, got row lengths {[len(row) for row in jacobian]}')

    f_fns: List[ExpressionFn] = [compile_expression(ex, symbols) for ex in expressions]
    j_fns: List[List[ExpressionFn]] = [[compile_expression(ex, symbols) for ex in row] for row in jacobian]

    def residual(x: Vector, rnd: RoundingMode) -> Vector:
        return [fn(x, rnd) for fn in f_fns]

    def jacobian_fn(x: Vector, rnd: RoundingMode) -> Matrix:
        return [[fn(x, rnd) for fn in row] for row in j_fns]

    return NonlinearSystem(name or ', '.join(expressions), n, residual, jacobian_fn)
