"""Exceptions raised by `boxcma`.

All exceptions derive from `CMAError`. Configuration problems and
infeasible or mismatching input are also `ValueError`, a failing
objective function is also a `RuntimeError`:

>>> from boxcma.exceptions import CMAError, ConfigError
>>> assert issubclass(ConfigError, CMAError) and issubclass(ConfigError, ValueError)

Numerical degeneracy of the search distribution is not an exception, it
terminates the run with the ``ConditionCov`` reason.
"""

class CMAError(Exception):
    """base class of all `boxcma` exceptions"""

class ConfigError(CMAError, ValueError):
    """invalid dimension, option name or option value"""

class InfeasibleInitialPoint(CMAError, ValueError):
    """the initial point is not finite, has the wrong length, or violates
    the parameter limits"""

class ObjectiveFailure(CMAError, RuntimeError):
    """the objective function returned a non-zero status or raised.

    In the latter case the original exception is the ``__cause__``.
    """
    def __init__(self, message, status=None, x=None):
        super(ObjectiveFailure, self).__init__(message)
        self.status = status
        self.x = x

class ResumeMismatch(CMAError, ValueError):
    """a resume snapshot does not fit the current problem or is malformed"""
