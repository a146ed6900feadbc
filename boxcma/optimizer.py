# -*- coding: utf-8 -*-
"""The session controller `CMAESOptimizer` runs a `CMAEvolutionStrategy`
on an `OptimizerSystem` with box limits, and `fmin` is its functional
shortcut.

Infeasible candidate solutions are redrawn until they satisfy the
limits, hence the objective function is never called outside of the box.
"""
import collections
import numpy as np
from .utilities import utils
from .evolution_strategy import CMAEvolutionStrategy
from .interfaces import OptimizerSystem
from .logger import CMADataLogger
from .options_parameters import CMAOptions, resume_default_filename
from .exceptions import InfeasibleInitialPoint, ObjectiveFailure
from . import resume

class CMAResult(collections.namedtuple(
    'CMAResult', [
        'xbest',
        'fbest',
        'evals_best',
        'evaluations',
        'iterations',
        'xmean',
        'stds',
        'stop',
    ])):
    """A results tuple from `CMAESOptimizer` attribute ``result``.

    - 0 ``xbest`` best solution evaluated
    - 1 ``fbest`` objective function value of best solution
    - 2 ``evals_best`` evaluation count when ``xbest`` was evaluated
    - 3 ``evaluations`` evaluations overall done
    - 4 ``iterations``
    - 5 ``xmean`` final distribution mean
    - 6 ``stds`` final coordinate-wise standard deviations
    - 7 ``stop`` termination reasons in a dictionary, its ``flags``
      attribute is the `Termination` bit set
    """

class CMAESOptimizer(object):
    """box-constrained CMA-ES optimizer for an `OptimizerSystem`.

    Arguments
    ---------
    `system`
        an `OptimizerSystem`, it provides the dimension, the limits and
        the objective function.
    `options`
        `dict` of options, see `boxcma.CMAOptions`.
    `sigma0`
        initial step size, defaults to option ``sigma``.

    Example
    -------
    >>> import numpy as np
    >>> import boxcma
    >>> system = boxcma.OptimizerSystem(4, boxcma.ff.sphere, -1, 2)
    >>> opt = boxcma.CMAESOptimizer(system, {'seed': 3}, sigma0=0.5)
    >>> f = opt.optimize(4 * [1])
    >>> assert f == opt.result.fbest < 1e-10
    >>> assert opt.result.stop and opt.result.evaluations == opt.es.countevals
    >>> assert all(opt.result.xbest >= -1) and all(opt.result.xbest <= 2)

    An infeasible initial point is refused:

    >>> try:
    ...     opt.optimize([3, 0, 0, 0])
    ... except boxcma.exceptions.InfeasibleInitialPoint:
    ...     print('refused')
    refused

    The objective function may modify its argument:

    >>> def fshift(x):
    ...     x -= 1
    ...     return sum(x**2)
    >>> x, opt = boxcma.fmin(fshift, [0.5, 0.5], 0.3, {'seed': 1})
    >>> assert max(abs(x - 1)) < 1e-4 and opt.result.fbest < 1e-8

    :See also: `fmin`, `boxcma.CMAEvolutionStrategy`

    """
    def __init__(self, system, options=None, sigma0=None):
        if not isinstance(system, OptimizerSystem):
            raise TypeError("system must be an OptimizerSystem, was %s" % type(system))
        self.system = system
        self.options = CMAOptions(dict(options or {}))
        self.sigma0 = sigma0
        self.es = None
        self.logger = None
        self.result = None

    def check_initial_point(self, x0):
        """return `x0` as `numpy.ndarray` or raise `InfeasibleInitialPoint`"""
        n = self.system.num_parameters
        try:
            x = np.array(x0, dtype=float)
        except (TypeError, ValueError) as e:
            raise InfeasibleInitialPoint("initial point %s is not a vector of numbers"
                                         % str(x0)) from e
        if x.shape != (n,):
            raise InfeasibleInitialPoint("initial point must have length %d, shape was %s"
                                         % (n, str(x.shape)))
        if not np.all(np.isfinite(x)):
            raise InfeasibleInitialPoint("initial point %s is not finite" % str(x))
        if self.system.has_limits:
            lower, upper = self.system.get_parameter_limits()
            for i in range(n):
                if not lower[i] <= x[i] <= upper[i]:
                    raise InfeasibleInitialPoint(
                        "initial guess x0[%d] = %f is not within limits [%f, %f]"
                        % (i, x[i], lower[i], upper[i]))
        return x

    def _resume_filename(self):
        name = self.es.opts['resume']
        if name is True:
            return resume_default_filename
        return name or None

    def repair(self, X):
        """redraw infeasible solutions in `X` in place with
        `CMAEvolutionStrategy.resample_single` until they are within the
        limits, return `X`.
        """
        if not self.system.has_limits:
            return X
        for i in range(len(X)):
            while not self.system.is_feasible(X[i]):
                X[i] = self.es.resample_single(i)
        return X

    def evaluate(self, X):
        """return the f-values of `X` from ``system.evaluate_batch``.

        The objective function gets copies of `X`, which it may modify.
        Any exception of the objective function is raised as
        `ObjectiveFailure`.
        """
        try:
            fit = self.system.evaluate_batch([np.array(x, copy=True) for x in X])
        except ObjectiveFailure:
            raise
        except Exception as e:
            raise ObjectiveFailure("objective function raised %s: %s"
                                   % (type(e).__name__, str(e))) from e
        if len(fit) != len(X):
            raise ObjectiveFailure("evaluate_batch returned %d values for %d solutions"
                                   % (len(fit), len(X)))
        return fit

    def optimize(self, x0, cancel=None):
        """run the optimization from `x0` until a termination criterion
        is met and return the best f-value.

        `cancel` is `None` or an object with ``is_set`` method, like a
        `threading.Event`, which is polled once per iteration and
        terminates the run with ``UserAbort``. The result is available
        as `CMAResult` in attribute ``result``, it remains `None` if the
        objective function fails.
        """
        self.result = self.logger = None
        x0 = self.check_initial_point(x0)
        es = self.es = CMAEvolutionStrategy(x0, self.sigma0, self.options)
        level = es.opts['diagnosticsLevel']
        filename = self._resume_filename()
        if filename:
            resume.load_snapshot(es, filename)
        if level & 2:
            self.logger = CMADataLogger(es.opts['diagnosticsFilename']).register(es)

        while not es.stop(cancel):
            X = self.repair(es.ask())
            es.tell(X, self.evaluate(X))
            if self.logger is not None:
                self.logger.add()

        stop = es.stop(check=False).copy()
        x, f, evals = es.best.get()
        self.result = CMAResult(x, f, evals, es.countevals, es.countiter,
                                es.mean.copy(), es.stds, stop)
        if level & 1:
            if 'UserAbort' in stop:
                utils.print_message('optimization aborted by user',
                                    'optimize', 'CMAESOptimizer',
                                    iteration=es.countiter)
            print('Stop:')
            es.result_pretty()
        if level & 2:
            resume.write_snapshot(es, filename or resume_default_filename)
            self.logger.add_final(es, stop)
        return f

    def disp(self, modulo=1):
        """print a single line of the current state, see
        `CMAEvolutionStrategy.disp`"""
        if self.es is not None:
            self.es.disp(modulo)
        return self

def fmin(objective, x0, sigma0=None, options=None, lower=None, upper=None,
         cancel=None):
    """functional interface to `CMAESOptimizer`.

    Minimize `objective`, a function of a vector returning a `float`,
    starting from `x0` with step size `sigma0`, subject to
    ``lower <= x <= upper`` when limits are given.

    Return ``(xbest, optimizer)`` where ``optimizer.result`` is a
    `CMAResult`.

    >>> import boxcma
    >>> x, opt = boxcma.fmin(boxcma.ff.rosen, 3 * [0], 0.5, {'seed': 7})
    >>> assert max(abs(x - 1)) < 1e-4 and opt.result.fbest < 1e-8

    """
    system = OptimizerSystem(len(x0), objective, lower, upper)
    optimizer = CMAESOptimizer(system, options, sigma0)
    optimizer.optimize(x0, cancel)
    return optimizer.result.xbest, optimizer
