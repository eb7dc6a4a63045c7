class SolverError(Exception):
    """Base class for everything the solver raises."""


class SingularJacobianError(SolverError):
    """The Jacobian (or the scalar derivative) is exactly zero at the current iterate."""

    def __init__(self, message: str = 'Singular Jacobian matrix', result=None):
        super().__init__(message)
        self.result = result


class NotConvergedError(SolverError):
    """The iteration budget ran out before the residual norm fell below the tolerance."""

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class MalformedInputError(SolverError, ValueError):
    """Caller error detected before (or outside of) the iteration."""


class PrecisionMismatchError(MalformedInputError):
    pass


class DimensionMismatchError(MalformedInputError):
    pass
