import mpnewton.api.requests as types
import mpnewton.config as cfg
import mpnewton.utils as utils
from mpnewton.solving import solve
import mpnewton.solving.interface as solve_interface

import uuid

import uvicorn
from pydantic import ValidationError
from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware

import logging
logger = logging.getLogger(__name__)

app = FastAPI()

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


def input_errors(err: ValidationError) -> dict:
    return {'message': 'Input errors: ' + str({error['loc'][0] if error['loc'] else 'request': error['msg']
                                               for error in err.errors()})}


def evaluation_error(err: Exception) -> dict:
    return {'message': 'Evaluation error: ' + (str(err) or type(err).__name__)}


@app.post('/solve')
def solve_system(request: types.SolveRequest, response: Response):
    try:
        params = types.SolveParameters.from_request(request)
    except ValidationError as err:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return input_errors(err)
    except ValueError as err:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return {'message': 'Input errors: ' + str(err)}

    this_uuid = str(uuid.uuid4())
    logger.debug(f'{this_uuid}: {request.model_dump_json()}')
    history = []
    try:
        result = solve.newton_solve(params.initial_guess, params.tolerance, params.rounding, params.max_iterations,
                                    params.system.residual, params.system.jacobian,
                                    callback=history.append if params.include_history else None)
    except (ValueError, ArithmeticError) as err:
        logger.warning(f'{this_uuid}: evaluation failed: {err}')
        response.status_code = status.HTTP_400_BAD_REQUEST
        return evaluation_error(err)
    logger.info(f'{this_uuid}: {result.status.value} after {result.iterations} iterations')

    body = {
        'id': this_uuid,
        'status': result.status.value,
        'solution': [xi.to_str(cfg.REPORT_DIGITS) for xi in result.x],
        'iterations': result.iterations,
        'residual_norm': result.residual_norm.to_str(cfg.REPORT_DIGITS)}
    if params.include_history:
        body['history'] = [{
            'iteration': record.iteration,
            'x': [xi.to_str(cfg.REPORT_DIGITS) for xi in record.x],
            'residual_norm': record.norm.to_str(cfg.REPORT_DIGITS)} for record in history]
    return body


@app.post('/search')
def search_solutions(request: types.SearchRequest, response: Response):
    try:
        params = types.SearchParameters.from_request(request)
    except ValidationError as err:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return input_errors(err)
    except ValueError as err:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return {'message': 'Input errors: ' + str(err)}

    this_uuid = str(uuid.uuid4())
    logger.debug(f'{this_uuid}: {request.model_dump_json()}')
    try:
        duration, solutions = utils.timed_result(solve_interface.find_unique_solutions)(
            params.system, params.search_limits, params.precision, params.tolerance, params.rounding,
            params.max_iterations, params.n_points, params.seed)
    except (ValueError, ArithmeticError) as err:
        logger.warning(f'{this_uuid}: evaluation failed: {err}')
        response.status_code = status.HTTP_400_BAD_REQUEST
        return evaluation_error(err)
    logger.info(f'{this_uuid}: found {len(solutions)} unique solutions in {duration} s')
    return {
        'id': this_uuid,
        'solutions': [[xi.to_str(cfg.REPORT_DIGITS) for xi in soln] for soln in solutions]}


if __name__ == "__main__":
    utils.logger_setup(logger, cfg.LOGS_DIR, 'api')
    uvicorn.run(app, host="0.0.0.0", port=8003)
