"""Termination criteria of the CMA-ES.

The termination reasons are the bits of `Termination`. `CMAStopDict`
checks them and is "usually" empty, otherwise it contains the satisfied
reasons by name with their threshold value:

>>> from boxcma.termination import Termination
>>> reasons = Termination.TolFun | Termination.MaxIter
>>> assert Termination.TolFun in reasons and Termination.TolX not in reasons
>>> assert Termination.names(reasons) == ['MaxIter', 'TolFun']
>>> assert not Termination(0)

"""
import enum
import numpy as np

condition_limit = 1e14
"""``max(D)**2 / min(D)**2`` above which the covariance matrix is
considered ill-conditioned"""

class Termination(enum.IntFlag):
    """bit set of termination reasons"""
    MaxIter = 1
    MaxFunEvals = 2
    TolFun = 4
    TolX = 8
    TolUpX = 16
    ConditionCov = 32
    NoEffectAxis = 64
    NoEffectCoord = 128
    EqualFunValues = 256
    StopFitness = 512
    UserAbort = 1024

    @staticmethod
    def names(flags):
        """return the names of the set bits of `flags` in bit order"""
        return [t.name for t in Termination if t & flags]

_option_keys = {
    'MaxIter': 'stopMaxIter',
    'MaxFunEvals': 'stopMaxFunEvals',
    'TolFun': 'stopTolFun',
    'TolX': 'stopTolX',
    'TolUpX': 'stopTolUpXFactor',
    'StopFitness': 'stopFitness',
}

class CMAStopDict(dict):
    """keep and update a termination condition dictionary.

    The dictionary is "usually" empty and returned by
    `CMAEvolutionStrategy.stop`. Keys are `Termination` names, values are
    the thresholds of the respective options or other informative values.
    The class methods entirely depend on `CMAEvolutionStrategy` class
    attributes.

    Example
    -------
    >>> import boxcma
    >>> es = boxcma.CMAEvolutionStrategy(4 * [1], 1, {'seed': 4, 'stopMaxIter': 3})
    >>> assert es.stop() == {}
    >>> while not es.stop():
    ...     X = es.ask()
    ...     es.tell(X, [boxcma.ff.sphere(x) for x in X])
    >>> assert es.stop() == {'MaxIter': 3} and es.countiter == 3
    >>> assert es.stop().flags == boxcma.Termination.MaxIter

    :See: `CMAEvolutionStrategy.stop`

    """
    def __init__(self, d=None):
        super(CMAStopDict, self).__init__(d or {})
        self.stoplist = []  # to keep the order
        self.flags = Termination(0)
        self.opts = {}

    def __call__(self, es, cancel=None):
        """update and return the termination conditions dictionary.

        `cancel` is `None` or an object with ``is_set()`` method, like a
        `threading.Event`, signaling a user abort.
        """
        return self._update(es, cancel)

    def _update(self, es, cancel=None):
        """Test termination criteria and update dictionary

        """
        self.clear()
        self.opts = es.opts
        if cancel is not None and cancel.is_set():
            self._addstop('UserAbort', True, True)
        if es.countiter == 0:  # in this case termination tests fail
            return self

        N = es.N
        opts = es.opts

        self._addstop('StopFitness',
                      opts['stopFitness'] is not None and
                      es.best.f <= opts['stopFitness'])
        self._addstop('MaxFunEvals',
                      es.countevals >= opts['stopMaxFunEvals'])
        self._addstop('MaxIter',
                      es.countiter >= opts['stopMaxIter'])

        sigma_x_sqrtdC = es.sigma * np.sqrt(es.sm.variances)
        self._addstop('TolUpX',
                      any(sigma_x_sqrtdC > es.sigma0 * opts['stopTolUpXFactor']))
        self._addstop('TolX',
                      all(sigma_x_sqrtdC < opts['stopTolX']) and
                      all(es.sigma * np.abs(es.pc) < opts['stopTolX']))

        hist = es.fit.hist
        hist_full = len(hist) >= es.sp.hist_len
        historic_fitness_range = max(hist) - min(hist) if len(hist) else np.inf
        current_fitness_range = max(es.fit.fit) - min(es.fit.fit)
        self._addstop('TolFun',
                      opts['stopTolFun'] > 0 and hist_full and
                      historic_fitness_range < opts['stopTolFun'] and
                      current_fitness_range < opts['stopTolFun'])
        self._addstop('EqualFunValues',
                      hist_full and historic_fitness_range == 0,
                      len(hist))

        # method specific
        self._addstop('ConditionCov',
                      es.sm.status is not None or
                      not es.sm.condition_number <= condition_limit,
                      es.sm.status or condition_limit)
        i = es.countiter % N
        self._addstop('NoEffectAxis',
                      all(es.mean == es.mean + 0.1 * es.sigma *
                          es.sm.D[i] * es.sm.B[:, i]), i)
        idx = (es.mean == es.mean + 0.2 * sigma_x_sqrtdC).nonzero()[0]
        self._addstop('NoEffectCoord', len(idx) > 0, list(idx))
        return self

    def _addstop(self, key, cond=True, val=None):
        if cond:
            self.stoplist.append(key)
            self.flags |= Termination[key]
            self[key] = val if val is not None \
                            else self.opts.get(_option_keys.get(key), None)

    def clear(self):
        """empty the stopdict"""
        for k in list(self):
            self.pop(k)
        self.stoplist = []
        self.flags = Termination(0)

    def copy(self):
        """return a shallow copy, keeping ``flags`` and ``stoplist``"""
        d = CMAStopDict(self)
        d.stoplist = list(self.stoplist)
        d.flags = self.flags
        d.opts = self.opts
        return d
