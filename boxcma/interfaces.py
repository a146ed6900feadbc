"""Very few interface defining base class definitions"""
import numpy as np
from .exceptions import ConfigError, ObjectiveFailure

class OptimizerSystem(object):
    """capability interface of an objective function with box limits.

    Either pass a callable `objective` mapping a vector to a `float`, or
    derive a class and override `objective_func`.

    Relevant methods are `objective_func`, `evaluate` and
    `evaluate_batch`, and `get_parameter_limits`. `evaluate_batch` is
    called once per iteration with all candidate solutions and can be
    overridden to evaluate them in parallel.

    Examples
    --------
    >>> import numpy as np
    >>> from boxcma.interfaces import OptimizerSystem
    >>> s = OptimizerSystem(2, lambda x: sum(np.asarray(x)**2), [-1, -1], [1, 1])
    >>> assert s.num_parameters == 2 and s.has_limits
    >>> assert s.evaluate([1, 1]) == (0, 2)
    >>> assert s.evaluate_batch([[0, 0], [1, 0]]) == [0, 1]
    >>> class Shifted(OptimizerSystem):
    ...     def objective_func(self, x, new_point):
    ...         return 0, sum((np.asarray(x) - 1)**2)
    >>> s = Shifted(3)
    >>> assert not s.has_limits and s.get_parameter_limits() == (None, None)
    >>> assert s.evaluate([1, 1, 1])[1] == 0

    """
    def __init__(self, n, objective=None, lower=None, upper=None):
        if int(n) != n or n < 1:
            raise ConfigError("number of parameters must be a positive integer,"
                              " was %s" % str(n))
        self._n = int(n)
        self.objective = objective
        self._lower = self._upper = None
        if lower is not None or upper is not None:
            self.set_parameter_limits(lower, upper)

    @property
    def num_parameters(self):
        """dimension of the search space"""
        return self._n

    @property
    def has_limits(self):
        return self._lower is not None

    def get_parameter_limits(self):
        """return ``(lower, upper)`` arrays or ``(None, None)``"""
        return self._lower, self._upper

    def set_parameter_limits(self, lower, upper):
        """set box limits, `None` for both removes the limits.

        A scalar limit applies to all coordinates. Raise `ConfigError` if
        only one of both is given, if the lengths do not match, or if
        ``lower[i] > upper[i]``.
        """
        if lower is None and upper is None:
            self._lower = self._upper = None
            return
        if lower is None or upper is None:
            raise ConfigError("both lower and upper limits must be given")
        lower, upper = np.array(lower, dtype=float), np.array(upper, dtype=float)
        if lower.shape not in ((), (self._n,)) or upper.shape not in ((), (self._n,)):
            raise ConfigError("limits must be scalars or have length %d" % self._n)
        lower = lower * np.ones(self._n)
        upper = upper * np.ones(self._n)
        if np.any(np.isnan(lower)) or np.any(np.isnan(upper)) or np.any(lower > upper):
            raise ConfigError("lower limits must not exceed upper limits,"
                              " lower=%s upper=%s" % (str(lower), str(upper)))
        self._lower, self._upper = lower, upper

    def is_feasible(self, x):
        """return whether `x` is within the limits"""
        if not self.has_limits:
            return True
        return bool(np.all(self._lower <= x) and np.all(x <= self._upper))

    def objective_func(self, x, new_point):
        """return ``(status, f)`` where ``status == 0`` means success.

        `new_point` is `True` when `x` was not evaluated before.
        Override this method in a derived class or pass `objective` to
        the constructor.
        """
        if self.objective is None:
            raise NotImplementedError('objective_func must be implemented in derived class'
                                      ' or an objective must be given')
        return 0, self.objective(x)

    def evaluate(self, x, new_point=True):
        """return ``(status, f)`` of `objective_func` as ``(int, float)``"""
        status, f = self.objective_func(x, new_point)
        return int(status), float(f)

    def evaluate_batch(self, X):
        """return the list of f-values of all `X`, evaluated with
        `evaluate`.

        Raise `boxcma.exceptions.ObjectiveFailure` on the first non-zero
        status.
        """
        fs = []
        for x in X:
            status, f = self.evaluate(x, True)
            if status != 0:
                raise ObjectiveFailure("objective function returned status %d"
                                       % status, status, x)
            fs.append(f)
        return fs
