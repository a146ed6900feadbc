# -*- coding: utf-8 -*-
"""CMA-ES (evolution strategy), the main sub-module of `boxcma`
implementing `CMAEvolutionStrategy`, the ask-and-tell interface of the
algorithm.

Bounds are not handled here but by the caller, which may redraw single
candidate solutions with `CMAEvolutionStrategy.resample_single`, see
`boxcma.optimizer.CMAESOptimizer`.
"""
import collections
import sys
import time
import numpy as np
from .utilities import utils
from .utilities.utils import BlancClass
from .options_parameters import CMAOptions, CMAParameters
from .exceptions import ConfigError
from .random_source import RandomSource
from .sampler import GaussFullSampler
from .sigma_adaptation import CMAAdaptSigmaCSA
from .optimization_tools import BestSolution
from .termination import CMAStopDict

class CMAEvolutionStrategyResult(collections.namedtuple(
    'CMAEvolutionStrategyResult', [
        'xbest',
        'fbest',
        'evals_best',
        'evaluations',
        'iterations',
        'xfavorite',
        'stds',
        'stop',
    ])):
    """A results tuple from `CMAEvolutionStrategy` property ``result``.

    This tuple contains in the given position and as attribute

    - 0 ``xbest`` best solution evaluated
    - 1 ``fbest`` objective function value of best solution
    - 2 ``evals_best`` evaluation count when ``xbest`` was evaluated
    - 3 ``evaluations`` evaluations overall done
    - 4 ``iterations``
    - 5 ``xfavorite`` distribution mean, to be considered as current best
      estimate of the optimum
    - 6 ``stds`` effective standard deviations ``sigma * sqrt(diag(C))``
    - 7 ``stop`` termination conditions in a dictionary

    The best solution of the last completed iteration can be accessed via
    ``es.best.last.x`` and the sorted function values of the last
    iteration via ``es.fit.fit``.
    """

class CMAEvolutionStrategy(object):
    """CMA-ES stochastic optimizer class with ask-and-tell interface.

    Calling Sequences
    =================

    - ``es = CMAEvolutionStrategy(x0)``

    - ``es = CMAEvolutionStrategy(x0, sigma0)``

    - ``es = CMAEvolutionStrategy(x0, sigma0, opts)``

    where ``len(x0) >= 2``, `sigma0` defaults to option ``sigma`` and
    `opts` is a `dict` of options, see `boxcma.CMAOptions`.

    Example
    =======
    >>> import boxcma
    >>> es = boxcma.CMAEvolutionStrategy(8 * [1], 0.5, {'seed': 42})
    >>> while not es.stop():
    ...     X = es.ask()
    ...     es.tell(X, [boxcma.ff.sphere(x) for x in X])
    >>> assert es.result.fbest < 1e-10
    >>> assert es.result.evaluations == es.popsize * es.countiter

    Candidate solutions can be redrawn individually before `tell` is
    called, for example to satisfy bounds:

    >>> es = boxcma.CMAEvolutionStrategy(3 * [0.5], 1, {'seed': 1})
    >>> X = es.ask()
    >>> for i in range(len(X)):
    ...     while any(X[i] < 0) or any(X[i] > 1):
    ...         X[i] = es.resample_single(i)
    >>> es.tell(X, [sum(x) for x in X])
    >>> assert all((es.arx >= 0).flatten()) and all((es.arx <= 1).flatten())

    Details
    =======
    The state of the search distribution consists of ``mean``, ``sigma``,
    the covariance matrix ``sm.C`` with its eigendecomposition ``sm.B``
    and ``sm.D``, the evolution paths ``pc`` and ``adapt_sigma.ps``, the
    counters ``countiter`` and ``countevals`` and the best solution in
    ``best``. Each instance owns its random number generator ``random``.

    :See also: `boxcma.CMAESOptimizer`, `boxcma.fmin`, `CMAOptions`

    """
    @property  # read only attribute decorator for a method
    def popsize(self):
        """number of samples returned by `ask` ()
        """
        return self.sp.popsize

    def stop(self, cancel=None, check=True):
        """return the termination status as dictionary.

        With ``check == False``, the termination conditions are not checked
        and the status might not reflect the current situation. `cancel`
        is `None` or has an ``is_set`` method, like `threading.Event`.

        The returned `dict` has attribute ``flags``, a `Termination`
        bit set.
        """
        if not check:
            return self._stopdict
        return self._stopdict(self, cancel)

    def __init__(self, x0, sigma0=None, inopts=None):
        """see class `CMAEvolutionStrategy`"""
        if inopts is None:
            inopts = {}
        self.inopts = inopts
        x0 = np.array(x0, dtype=float, copy=True)
        if x0.ndim != 1:
            raise ConfigError("x0 must be a vector, shape was %s" % str(x0.shape))
        N = self.N = len(x0)
        if N < 2:
            raise ConfigError("dimension must be at least 2, was %d" % N)
        if sigma0 is not None and not (np.isfinite(sigma0) and sigma0 > 0):
            raise ConfigError("sigma0=%s must be positive and finite" % str(sigma0))
        opts = CMAOptions(inopts).complement()
        opts.evalall({'N': N, 'sigma0': sigma0})
        if sigma0 is None:
            sigma0 = opts['sigma']
        else:
            opts['sigma'] = sigma0
        self.opts = opts.check_values()

        self.random = RandomSource(opts['seed'])
        self.sp = CMAParameters(N, opts)
        self.sm = GaussFullSampler(N, lazy_update_gap=self.sp.eigen_gap)
        self.adapt_sigma = CMAAdaptSigmaCSA()
        self.adapt_sigma.initialize(self)

        self.x0 = x0
        self.mean = x0.copy()
        self.sigma0 = sigma0
        self.sigma = sigma0
        self.pc = np.zeros(N)
        self.countiter = 0
        self.countevals = 0
        self.best = BestSolution()
        self.arz = self.ary = self.arx = None
        self._isotropic_mean_shift = np.zeros(N)

        self.fit = BlancClass()
        self.fit.fit = None  # sorted function values of the last iteration
        self.fit.idx = None  # sort index
        self.fit.hist = collections.deque(maxlen=self.sp.hist_len)  # short history of best, latest first
        self.fit.flatfit_iterations = 0

        self._stopdict = CMAStopDict()
        self.timer = utils.ElapsedWCTime()

        # say hello
        if opts['diagnosticsLevel'] & 1:
            sweighted = '_w' if self.sp.weights.mu > 1 else ''
            print('(%d' % (self.sp.weights.mu) + sweighted + ',%d' % (self.sp.popsize) +
                  ')-CMA-ES' +
                  ' (mu_w=%2.1f,w_1=%d%%)' % (self.sp.weights.mueff, int(100 * self.sp.weights[0])) +
                  ' in dimension %d (seed=%d, %s)' % (N, self.random.seed, time.asctime()))

    def ask(self):
        """get/sample new candidate solutions.

        Return a `list` of ``popsize`` candidate solutions (`numpy.ndarray`),
        all of which must be evaluated and passed in the same order to
        `tell`. The samples ``arz``, their transformations ``ary`` and the
        solutions ``arx`` are kept as attributes.
        """
        self.arz, self.ary = self.sm.sample(self.popsize, self.random.randn)
        self.arx = self.mean + self.sigma * self.ary
        return [x.copy() for x in self.arx]

    def resample_single(self, i):
        """redraw the ``i``-th candidate solution of the last `ask` in place
        and return a copy of it.
        """
        if self.arx is None:
            raise ValueError("resample_single must be called after ask")
        z = self.random.randn(self.N)
        self.arz[i] = z
        self.ary[i] = self.sm.transform(z)
        self.arx[i] = self.mean + self.sigma * self.ary[i]
        return self.arx[i].copy()

    def tell(self, solutions, function_values):
        """pass objective function values to prepare for next
        iteration. This core procedure of the CMA-ES algorithm updates
        all state variables, in this order: mean, isotropic evolution path
        ``ps``, step-size ``sigma``, evolution path ``pc``, covariance
        matrix ``C``, counters and, if due, the eigendecomposition of
        ``C``.

        Arguments
        ---------
        `solutions`
            list or array of candidate solution points, as returned from
            `ask` and `resample_single`.
        `function_values`
            list or array of objective function values corresponding to
            the respective points. Beside for termination decisions, only
            the ranking of values in `function_values` is used.

        """
        if self.arx is None:
            raise ValueError("tell must be preceded by ask")
        if len(solutions) != self.popsize or not np.array_equal(
                np.asarray(solutions, dtype=float), self.arx):
            raise ValueError("solutions must be the %d candidate solutions"
                             " from the last ask/resample_single"
                             % self.popsize)
        fit = np.asarray(function_values, dtype=float)
        if len(fit) != self.popsize:
            raise ValueError("%d function values given for %d solutions"
                             % (len(fit), self.popsize))
        sp = self.sp
        N = self.N

        self.countevals += self.popsize
        self.best.update(self.arx, fit, self.countevals)
        self.fit.idx = np.argsort(fit, kind='stable')
        self.fit.fit = fit[self.fit.idx]
        self.fit.hist.appendleft(self.fit.fit[0])

        weights = sp.weights.asarray()
        sel = self.fit.idx[:sp.mu]
        y_w = np.dot(weights, self.ary[sel])
        z_w = np.dot(weights, self.arz[sel])

        self.mean = self.mean + self.sigma * y_w
        self._isotropic_mean_shift = sp.mueff**0.5 * np.dot(self.sm.B, z_w)

        hsig = self.adapt_sigma.hsig(self)  # updates ps first
        self.adapt_sigma.update(self)  # sigma
        self.pc = (1 - sp.cc) * self.pc + hsig * (
                    sp.cc * (2 - sp.cc) * sp.mueff)**0.5 * y_w

        # C <- (1 - c1 - cmu) C + c1 (pc pc^T + (1 - hsig) cc (2 - cc) C) + cmu sum w y y^T
        c1a = sp.c1 * (1 - hsig) * sp.cc * (2 - sp.cc)
        self.sm.update([self.pc] + list(self.ary[sel]),
                       [sp.c1] + list(sp.cmu * weights), c1a)

        self.countiter += 1
        self.sm.decompose_if_due(self.opts['maxTimeFractionForEigendecomposition'])

        # flat fitness, escape with an increased step-size
        if self.fit.fit[0] == self.fit.fit[self.popsize // 2]:
            self.fit.flatfit_iterations += 1
            self.sigma *= np.exp(0.2 + sp.cs / sp.damps)
            utils.print_warning(
                "flat fitness (f=%f, sigma=%.2e), consider reformulating"
                " the objective" % (self.fit.fit[0], self.sigma),
                'tell', 'CMAEvolutionStrategy',
                iteration=self.fit.flatfit_iterations, maxwarns=1)
        assert N == len(self.mean)

    @property
    def isotropic_mean_shift(self):
        """normalized last mean shift ``sqrt(mueff) B <z>_w``, under
        random selection N(0,I) distributed.
        """
        return self._isotropic_mean_shift

    @property
    def stds(self):
        """return array of coordinate-wise standard deviations
        ``sigma * sqrt(diag(C))``.
        """
        return self.sigma * np.sqrt(self.sm.variances)

    @property
    def result(self):
        """return a `CMAEvolutionStrategyResult` `namedtuple`.

        The termination dictionary is the one of the last call to `stop`.
        """
        x, f, evals = self.best.get()
        return CMAEvolutionStrategyResult(
            x,
            f,
            evals,
            self.countevals,
            self.countiter,
            self.mean.copy(),
            self.stds,
            dict(self.stop(check=False))
        )

    def result_pretty(self, fbestever=None):
        """pretty print result.

        Returns `result` of ``self``.

        """
        if fbestever is None:
            fbestever = self.best.f
        for k, v in self.stop(check=False).items():
            print('termination on %s=%s' % (k, str(v)))
        print('final/bestever f-value = %e %e after %d/%d evaluations' % (
            self.best.last.f, fbestever, self.countevals, self.best.evals or 0))
        if self.N < 9:
            print('incumbent solution: ' + str(list(self.mean)))
            print('std deviation: ' + str(list(self.stds)))
        else:
            print('incumbent solution: %s ...]' % (str(self.mean[:8])[:-1]))
            print('std deviations: %s ...]' % (str(self.stds[:8])[:-1]))
        return self.result

    def mahalanobis_norm(self, dx):
        """return Mahalanobis norm based on the current sample
        distribution.

        The norm is based on the covariance matrix ``C`` times ``sigma**2``.
        ``dx`` is a difference vector, typically ``x - self.mean``.
        """
        return self.sm.norm(np.asarray(dx)) / self.sigma

    @property
    def condition_number(self):
        """condition number of the covariance matrix as of its last
        eigendecomposition"""
        return self.sm.condition_number

    def disp_annotation(self):
        """print annotation line for `disp` ()"""
        print('Iterat #Fevals   function value  axis ratio  sigma  min&max std  t[m:s]')
        sys.stdout.flush()

    def disp(self, modulo=1):
        """print current state variables in a single-line.

        Prints only if ``iteration_counter % modulo == 0``, and always in
        the first three iterations and when a termination criterion
        is met.

        :See also: `disp_annotation`.
        """
        if modulo:
            if (self.countiter - 1) % (10 * modulo) < 1:
                self.disp_annotation()
            if self.countiter > 0 and (self.stop(check=False) or self.countiter < 4
                                       or self.countiter % modulo < 1):
                toc = self.timer.elapsed
                stime = str(int(toc // 60)) + ':' + ("%2.1f" % (toc % 60)).rjust(4, '0')
                print(' '.join((repr(self.countiter).rjust(5),
                                repr(self.countevals).rjust(6),
                                '%.15e' % (min(self.fit.fit)),
                                '%4.1e' % (self.sm.D.max() / self.sm.D.min()),
                                '%6.2e' % self.sigma,
                                '%6.0e' % min(self.stds),
                                '%6.0e' % max(self.stds),
                                stime)))
                sys.stdout.flush()
        return self

    def get_state(self):
        """return a `dict` with the complete state needed to continue the
        optimization bit-exactly, see `set_state` and `boxcma.resume`.
        """
        keys, pos, has_gauss, cached = self.random.get_state()
        return dict(
            n=self.N,
            popsize=self.popsize,
            countiter=self.countiter,
            countevals=self.countevals,
            sigma=self.sigma,
            sigma0=self.sigma0,
            mean=self.mean.copy(),
            C=self.sm.C.copy(),
            ps=self.adapt_sigma.ps.copy(),
            pc=self.pc.copy(),
            B=self.sm.B.copy(),
            D=self.sm.D.copy(),
            last_eigen_iteration=self.sm.last_update,
            eigen_status=self.sm.status,
            rng_keys=keys,
            rng_pos=pos,
            rng_has_gauss=has_gauss,
            rng_gauss=cached,
            fbest=self.best.f,
            xbest=None if self.best.x is None else np.array(self.best.x, copy=True),
            evals_best=self.best.evals,
            fit=None if self.fit.fit is None else self.fit.fit.copy(),
            fit_hist=list(self.fit.hist),
            flatfit_iterations=self.fit.flatfit_iterations,
        )

    def set_state(self, state):
        """set the state from a `dict` as returned by `get_state`.

        Raise `ValueError` if dimension or population size do not match.
        """
        if state['n'] != self.N or state['popsize'] != self.popsize:
            raise ValueError("state of dimension %d with popsize %d cannot"
                             " be set in dimension %d with popsize %d" % (
                                 state['n'], state['popsize'], self.N, self.popsize))
        self.countiter = int(state['countiter'])
        self.countevals = int(state['countevals'])
        self.sigma = float(state['sigma'])
        self.sigma0 = float(state['sigma0'])
        self.mean = np.array(state['mean'], dtype=float)
        self.sm.C = np.array(state['C'], dtype=float)
        self.sm.B = np.array(state['B'], dtype=float)
        self.sm.D = np.array(state['D'], dtype=float)
        self.sm.count_tell = self.countiter
        self.sm.last_update = int(state['last_eigen_iteration'])
        self.sm.status = state['eigen_status']
        self.adapt_sigma.ps = np.array(state['ps'], dtype=float)
        self.adapt_sigma._ps_updated_iteration = -1
        self.pc = np.array(state['pc'], dtype=float)
        self.random.set_state((state['rng_keys'], state['rng_pos'],
                               state['rng_has_gauss'], state['rng_gauss']))
        self.best = BestSolution(state['xbest'], state['fbest'], state['evals_best'])
        self.best.evalsall = self.countevals
        self.fit.fit = None if state['fit'] is None else np.array(state['fit'], dtype=float)
        self.fit.hist.clear()
        self.fit.hist.extend(state['fit_hist'])
        self.fit.flatfit_iterations = int(state['flatfit_iterations'])
        self.arz = self.ary = self.arx = None
        return self
