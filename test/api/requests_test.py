import mpnewton.api.requests as requests
from mpnewton.numeric import BigFloat, RoundingMode

from pydantic import ValidationError
import pytest

EXPRESSIONS = ['x**2 + y**2 - 4', 'x**2 - y - 1']
JACOBIAN = [['2*x', '2*y'], ['2*x', '-1']]


def solve_request(**kwargs):
    fields = dict(expressions=EXPRESSIONS, jacobian=JACOBIAN, initial_guess=['1.5', '1.5'])
    fields.update(kwargs)
    return requests.SolveRequest(**fields)


def test_solve_parameters_from_request():
    params = requests.SolveParameters.from_request(solve_request(precision=200, tolerance='1e-40',
                                                                 rounding='toward_zero'))
    assert params.precision == 200
    assert params.rounding == RoundingMode.TOWARD_ZERO
    assert params.tolerance == BigFloat.from_str('1e-40', 200, RoundingMode.TOWARD_ZERO)
    assert params.tolerance.prec == 200
    assert params.initial_guess == [BigFloat(200, '1.5'), BigFloat(200, '1.5')]
    assert params.system.dimension == 2
    assert params.system.residual(params.initial_guess, params.rounding) == \
        [BigFloat(200, '0.5'), BigFloat(200, '-0.25')]


def test_request_defaults():
    request = solve_request()
    assert request.variables == ['x', 'y']
    assert request.precision == 128
    assert request.rounding == RoundingMode.NEAREST
    assert request.max_iterations == 100
    assert not request.include_history


@pytest.mark.parametrize('field, value', [('precision', 0), ('max_iterations', -1), ('rounding', 'sideways')])
def test_invalid_request_fields_raise(field, value):
    with pytest.raises(ValidationError):
        solve_request(**{field: value})


def test_wrong_initial_guess_length_raises_value_error():
    with pytest.raises(ValueError) as excinfo:
        requests.SolveParameters.from_request(solve_request(initial_guess=['1.5']))
    assert excinfo.value.args[0] == 'Initial guess has 1 components for 2 variables'


def test_invalid_decimal_raises_value_error():
    with pytest.raises(ValueError) as excinfo:
        requests.SolveParameters.from_request(solve_request(initial_guess=['1.5', 'one']))
    assert excinfo.value.args[0] == "Invalid decimal number: 'one'"


def test_non_positive_tolerance_raises_validation_error():
    with pytest.raises(ValidationError):
        requests.SolveParameters.from_request(solve_request(tolerance='0'))
    with pytest.raises(ValidationError):
        requests.SolveParameters.from_request(solve_request(tolerance='-1e-10'))


def test_unsupported_expression_raises_value_error():
    with pytest.raises(ValueError):
        requests.SolveParameters.from_request(solve_request(expressions=['gamma(x) + y', 'x - y']))


def test_search_parameters_from_request():
    request = requests.SearchRequest(expressions=EXPRESSIONS, jacobian=JACOBIAN, search_limits=[-2, 2, -2, 2],
                                     n_points=20, seed=3)
    params = requests.SearchParameters.from_request(request)
    assert params.search_limits == [-2.0, 2.0, -2.0, 2.0]
    assert params.n_points == 20
    assert params.seed == 3


def test_search_limits_must_match_variables():
    request = requests.SearchRequest(expressions=EXPRESSIONS, jacobian=JACOBIAN, search_limits=[-2, 2])
    with pytest.raises(ValueError) as excinfo:
        requests.SearchParameters.from_request(request)
    assert excinfo.value.args[0] == 'Expected 4 search limits for 2 variables, got 2'


def test_search_limits_must_be_ordered():
    request = requests.SearchRequest(expressions=EXPRESSIONS, jacobian=JACOBIAN, search_limits=[2, -2, -2, 2])
    with pytest.raises(ValidationError):
        requests.SearchParameters.from_request(request)


def test_non_finite_initial_guess_raises_validation_error():
    with pytest.raises(ValidationError):
        requests.SolveParameters.from_request(solve_request(initial_guess=['inf', '1']))


@pytest.mark.parametrize('search_limits', [[float('-inf'), float('inf'), -2, 2], [-1e308, 1e308, -2, 2]])
def test_non_finite_search_limits_raise_validation_error(search_limits):
    request = requests.SearchRequest(expressions=EXPRESSIONS, jacobian=JACOBIAN, search_limits=search_limits)
    with pytest.raises(ValidationError):
        requests.SearchParameters.from_request(request)
