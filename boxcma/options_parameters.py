# -*- coding: utf-8 -*-
"""Parameters and Options for the box-constrained CMA-ES.
"""
import math
import numpy as np
from .utilities import utils
from .utilities.math import Mh
from .exceptions import ConfigError
from .recombination_weights import RecombinationWeights

def cma_default_options_(  # to get keyword completion back
    # the following string arguments are evaluated unless the key is in `_not_evaluated`
    diagnosticsFilename='allcmaes.dat  # file for per-generation records and the final "all" dump',
    diagnosticsLevel='0  # bit 0: print start banner and final summary, bit 1: write resume and diagnostics files',
    maxTimeFractionForEigendecomposition='1.0  # in (0, 1], below 1 the eigendecomposition may be'\
                                         ' done earlier if it is cheap relative to the elapsed time',
    resume='False  # True reads/writes resumecmaes.dat, or a filename to read the snapshot from',
    seed='0  # non-negative integer, 0 means time based',
    sigma='0.3  # initial step size, used when no sigma0 is given',
    stopFitness='None  # stop when the best f-value is smaller or equal than this value',
    stopMaxFunEvals='900 * (N + 3)**2  # maximal number of function evaluations',
    stopMaxIter='900 * (N + 3)**2 // popsize + 1  # maximal number of generations',
    stopTolFun='1e-12  # termination criterion: tolerance in function value range, 0 turns it off',
    stopTolUpXFactor='1e3  # terminate when sigma * sqrt(C_ii) > stopTolUpXFactor * sigma0',
    stopTolX='1e-11 * sigma0  # termination criterion: tolerance in x-changes',
    ):
    """use this function to get keyword completion for `CMAOptions`.

    returns default options as a `dict` (not a `boxcma.CMAOptions` `dict`).
    The option ``lambda`` is added here, as it is a Python keyword.
    """
    opts = dict(locals())
    opts['lambda'] = '4 + int(3 * log(N))  # population size, number of samples per generation'
    return opts

cma_default_options = cma_default_options_()  # will later be reassigned as CMAOptions(dict)
cma_allowed_options_keys = dict([s.lower(), s] for s in cma_default_options)
resume_default_filename = 'resumecmaes.dat'
_not_evaluated = ('diagnosticsFilename', 'resume')

def safe_str(s):
    """return a string safe to `eval` or raise an exception.

    Selected words and chars are considered safe such that all default
    string-type option values from `CMAOptions()` pass, and for example
    ``'3 * N'`` can be passed as well.
    """
    return utils.safe_str(s.split('#')[0],
                          dict([k, k] for k in
                               ['True', 'False', 'None', 'N', 'popsize',
                                'sigma0', 'int', 'inf', 'log'])
                          ).replace('N one', 'None')  # 'N' within 'None' was also replaced

options_environment = {'log': math.log, 'inf': np.inf, 'int': int}

class CMAOptions(dict):
    """a dictionary with the available options and their default values
    for class `CMAEvolutionStrategy`.

    ``CMAOptions()`` returns a `dict` with all available options and their
    default values with a comment string.

    ``CMAOptions('stop')`` returns a subset of recognized options that
    contain 'stop' in their keyword name or (default) value or
    description.

    ``CMAOptions(opts)`` returns the options in ``dict(opts)`` with
    corrected keys. Keys are matched case-insensitively and any unique
    starting sequence of a key is accepted.

    Option values can be "written" in a string and are evaluated using
    ``N``, ``popsize`` and ``sigma0`` as known values for dimension,
    population size and initial step size. All default option values are
    given as such a string.

    Example
    -------
    >>> from boxcma import CMAOptions
    >>> opts = CMAOptions({'stopmaxiter': 10, 'LAMBDA': 6})
    >>> assert opts == {'stopMaxIter': 10, 'lambda': 6}
    >>> opts = opts.complement().evalall({'N': 4, 'sigma0': 0.5})
    >>> assert opts['lambda'] == 6 and opts['stopMaxFunEvals'] == 900 * 49
    >>> assert opts['stopTolX'] == 1e-11 * 0.5 and opts['resume'] is False
    >>> assert CMAOptions().eval('lambda', loc={'N': 10}) == 10
    >>> try:
    ...     CMAOptions({'stopTol': 1})  # ambiguous
    ... except ValueError:
    ...     print('refused')
    refused

    :See also: `CMAEvolutionStrategy`, `CMAParameters`

    """
    def __init__(self, s=None, **kwargs):
        """return an `CMAOptions` instance.

        Return default options if ``s is None and not kwargs``,
        or all options whose name or description contains `s`, if
        `s` is a (search) string (case is disregarded in the match),
        or with entries from dictionary `s` as options,
        or with kwargs as options if ``s is None``,
        in any of the latter cases not complemented with default options
        or settings.
        """
        if s is None and not kwargs:
            super(CMAOptions, self).__init__(cma_default_options_())
            return
        if utils.is_str(s):
            super(CMAOptions, self).__init__(CMAOptions().match(s))
            return
        if isinstance(s, dict):
            if kwargs:
                raise ConfigError('Dictionary argument must be the only argument')
            items = s
        elif s is None:
            items = kwargs
        else:
            raise ConfigError('The first argument must be a string or a dict'
                              ' or a keyword argument or `None`')
        super(CMAOptions, self).__init__()
        self.check_keys(items)
        for key, val in items.items():
            self[self.corrected_key(key)] = val

    def corrected_key(self, key):
        """return the matching valid key, if ``key.lower()`` is a unique
        starting sequence to identify the valid key, ``else None``

        """
        matching_keys = []
        key = key.lower()
        if key in cma_allowed_options_keys:
            return cma_allowed_options_keys[key]
        for allowed_key in cma_allowed_options_keys:
            if allowed_key.startswith(key):
                if len(matching_keys) > 0:
                    return None
                matching_keys.append(allowed_key)
        return cma_allowed_options_keys[matching_keys[0]] if len(matching_keys) == 1 else None

    def check_keys(self, options=None):
        """raise `ConfigError` on unknown, ambiguous or repeated keys"""
        validated_keys = []
        if options is None:
            options = self
        for key in options:
            correct_key = self.corrected_key(key) if utils.is_str(key) else None
            if correct_key is None:
                raise ConfigError('%s is not a valid option (or is ambiguous).\n'
                                  'Valid options are %s' %
                                  (key, str(sorted(cma_default_options))))
            if correct_key in validated_keys:
                raise ConfigError("%s was not a unique key for %s option"
                                  % (key, correct_key))
            validated_keys.append(correct_key)
        return options

    def complement(self):
        """add all missing options with their default values"""
        for key, val in cma_default_options.items():
            if key not in self:
                self[key] = val
        return self

    def match(self, s=''):
        """return all options that match, in the name or the description,
        with string `s`, case is disregarded.

        Example: ``boxcma.CMAOptions().match('stop')`` returns the
        termination options.

        """
        match = s.lower()
        res = {}
        for k in sorted(self):
            s = str(k) + '=\'' + str(self[k]) + '\''
            if match in s.lower():
                res[k] = self[k]
        return CMAOptions(res)

    def __call__(self, key, default=None, loc=None):
        """evaluate and return the value of option `key` on the fly.

        Details
        -------
        Keys in `_not_evaluated` are only stripped of their comment.
        For ``loc==None``, `self` is used as environment.

        :See: `eval()`, `evalall()`

        """
        val = self.get(key)
        if loc is None:
            loc = self
        if val is None and default is not None:
            val = default
        if not utils.is_str(val):
            return val
        val = val.split('#')[0].strip()  # remove comments
        if key in _not_evaluated:
            if val in ('True', 'False'):
                return val == 'True'
            return val
        try:
            return eval(safe_str(val), dict(options_environment), dict(loc))
        except Exception as e:
            raise ConfigError('option %s=%s could not be evaluated (%s)'
                              % (key, repr(val), str(e))) from e

    def eval(self, key, default=None, loc=None, correct_key=True):
        """Evaluates and sets the specified option value in
        environment `loc`. Many options need ``N`` to be defined in
        `loc`, some need ``popsize`` and ``sigma0``.

        :See: `evalall()`, `__call__`

        """
        if correct_key:
            key = self.corrected_key(key)
        self[key] = self(key, default, loc)
        return self[key]

    def evalall(self, loc=None):
        """Evaluates all option values in environment `loc`, which must
        define ``N`` and ``sigma0``.

        ``lambda`` is evaluated first and becomes ``popsize`` of the
        environment of all other options.

        :See: `eval()`

        """
        loc = dict(loc or {})
        self.check_keys()
        popsize = self.eval('lambda', cma_default_options['lambda'], loc)
        loc['popsize'] = popsize
        if loc.get('sigma0') is None:
            loc['sigma0'] = self.eval('sigma', cma_default_options['sigma'], loc)
        for k in list(self.keys()):
            if k != 'lambda':
                self.eval(k, cma_default_options[k], loc)
        return self

    def check_values(self):
        """raise `ConfigError` if an evaluated option value is invalid"""
        def is_int(v):
            try:
                return int(v) == v
            except (TypeError, ValueError, OverflowError):
                return False
        lam = self.get('lambda')
        if lam is not None and (not is_int(lam) or lam < 2):
            raise ConfigError("lambda=%s must be an integer >= 2" % str(lam))
        sigma = self.get('sigma')
        if sigma is not None and not (np.isfinite(sigma) and sigma > 0):
            raise ConfigError("sigma=%s must be positive and finite" % str(sigma))
        seed = self.get('seed')
        if seed is not None and (not is_int(seed) or seed < 0):
            raise ConfigError("seed=%s must be a non-negative integer" % str(seed))
        for key in ('stopMaxIter', 'stopMaxFunEvals'):
            if self.get(key) is not None and self[key] < 0:
                raise ConfigError("%s=%s must not be negative" % (key, str(self[key])))
        tolfun = self.get('stopTolFun')
        if tolfun is not None and tolfun < 0:
            raise ConfigError("stopTolFun=%s must not be negative (0 turns"
                              " TolFun off)" % str(tolfun))
        for key in ('stopTolX', 'stopTolUpXFactor'):
            if self.get(key) is not None and not self[key] > 0:
                raise ConfigError("%s=%s must be positive" % (key, str(self[key])))
        frac = self.get('maxTimeFractionForEigendecomposition')
        if frac is not None and not 0 < frac <= 1:
            raise ConfigError("maxTimeFractionForEigendecomposition=%s must be"
                              " in (0, 1]" % str(frac))
        level = self.get('diagnosticsLevel')
        if level is not None and (not is_int(level) or not 0 <= level <= 3):
            raise ConfigError("diagnosticsLevel=%s must be in 0..3" % str(level))
        return self

cma_default_options = CMAOptions(cma_default_options_())

class CMAParameters(object):
    """strategy parameters like population size and learning rates.

    Example
    -------
    >>> from boxcma.options_parameters import CMAOptions, CMAParameters
    >>> opts = CMAOptions().complement().evalall({'N': 10, 'sigma0': 0.5})
    >>> sp = CMAParameters(10, opts)
    >>> assert sp.popsize == 10 and sp.mu == 5
    >>> assert abs(sum(sp.weights) - 1) < 1e-12
    >>> assert 0 < sp.cs < 1 and sp.damps > 1 and 0 < sp.cc < 1
    >>> assert 0 < sp.c1 and 0 < sp.cmu <= 1 - sp.c1
    >>> assert sp.eigen_gap >= 1 and sp.hist_len == 10 + 30
    >>> sp = CMAParameters(2, CMAOptions({'lambda': 2}).complement().evalall(
    ...                                  {'N': 2, 'sigma0': 1}))
    >>> assert sp.mu == 1 and sp.mueff == 1 and sp.cmu == 0

    :See: `CMAOptions`, `CMAEvolutionStrategy`

    """
    def __init__(self, N, opts):
        """Compute strategy parameters, mainly depending on
        dimension and population size, by calling `set`

        """
        self.N = N
        self.popsize = None  # type: int
        """number of candidate solutions per generation, AKA lambda"""
        self.set(opts)

    def set(self, opts):
        """Compute strategy parameters as a function
        of dimension and population size """
        sp = self  # mainly for historical reasons
        N = sp.N
        sp.popsize = popsize = int(opts['lambda'])
        sp.weights = RecombinationWeights(popsize)
        sp.mu = sp.weights.mu
        sp.mueff = mueff = sp.weights.mueff

        sp.cs = (mueff + 2) / (N + mueff + 5)
        sp.damps = 1 + 2 * max(0, ((mueff - 1) / (N + 1))**0.5 - 1) + sp.cs
        sp.cc = (4 + mueff / N) / (N + 4 + 2 * mueff / N)
        sp.c1 = 2 / ((N + 1.3)**2 + mueff)
        sp.cmu = min(1 - sp.c1,
                     2 * (mueff - 2 + 1 / mueff) / ((N + 2)**2 + mueff))
        sp.chiN = Mh.chiN(N)
        # generations between two eigendecompositions
        sp.eigen_gap = max(1, int(math.ceil(1 / (10 * N * (sp.c1 + sp.cmu)))))
        sp.hist_len = 10 + int(math.ceil(30 * N / popsize))
