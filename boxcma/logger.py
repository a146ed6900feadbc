# -*- coding: utf-8 -*-
"""logger class mainly to be used with `CMAEvolutionStrategy`, writing
one data line per iteration and a final dump of the state into a single
human-readable file.

"""
import os  # path
import time
import numpy as np

class CMADataLogger(object):
    """data logger for class `CMAEvolutionStrategy`.

    The logger is identified by its file name and (over-)writes or
    reads the according data file. Therefore, the logger must be
    considered as *global* variable with unpredictable side effects,
    if two loggers with the same name and on the same working folder
    are used at the same time.

    Examples
    ========
    ::

        import boxcma

        es = boxcma.CMAEvolutionStrategy(12 * [3], 4)
        logger = boxcma.CMADataLogger('allcmaes.dat').register(es)
        while not es.stop():
            X = es.ask()
            es.tell(X, [boxcma.ff.elli(x) for x in X])
            logger.add()
        logger.add_final()
        data = logger.load()  # numerical data lines as 2-D array

    Details
    =======
    Each data line has the columns ``iteration, evaluations, best f of
    the iteration, best f ever, sigma, axis ratio, condition of C``,
    followed by the first `max_entries` coordinates of the mean and the
    first `max_entries` diagonal elements of C. Comment lines start with
    ``%``. The final dump written by `add_final` is a comment block.

    :See: `boxcma.optimizer.CMAESOptimizer`
    """
    default_filename = 'allcmaes.dat'

    def __init__(self, filename=default_filename, modulo=1, max_entries=5):
        """initialize logging of data from a `CMAEvolutionStrategy` instance.

        Default ``modulo=1`` means logging with each call of `add`.
        """
        if filename is None:
            filename = CMADataLogger.default_filename
        self.filename = os.path.abspath(filename)
        self.modulo = modulo
        """how often to record data, allows calling `add` without args"""
        self.max_entries = max_entries
        """number of coordinates of mean and diag(C) written per line"""
        self.counter = 0
        """number of calls to `add`"""
        self.registered = False

    def register(self, es, modulo=None):
        """register a `CMAEvolutionStrategy` instance for logging,
        previous data are overwritten with the first call of `add`.

        """
        self.es = es
        if modulo is not None:
            self.modulo = modulo
        self.registered = True
        return self

    def initialize(self):
        """reset logger, overwrite the data file with a header"""
        try:
            es = self.es  # must have been registered
        except AttributeError:
            raise AttributeError('call register() before initialize()')
        self.counter = 0
        if os.path.dirname(self.filename):
            os.makedirs(os.path.dirname(self.filename), exist_ok=True)
        k = min((self.max_entries, es.N))
        with open(self.filename, 'w') as f:
            f.write('%% boxcma diagnostics, dimension %d, popsize %d, seed=%d, %s\n'
                    % (es.N, es.popsize, es.random.seed, time.asctime()))
            f.write('%% x0: %s\n' % ' '.join(repr(float(x)) for x in es.x0))
            f.write('%% # columns="iteration, evaluation, best f, bestever f, sigma, '
                    'axis ratio, condition, xmean[:%d], diag(C)[:%d]"\n' % (k, k))
        return self

    def add(self, es=None, modulo=None):
        """append a data line from `CMAEvolutionStrategy` class instance `es`,
        if ``number_of_times_called % modulo`` equals to zero, never if ``modulo==0``.

        """
        mod = modulo if modulo is not None else self.modulo
        if es is None:
            try:
                es = self.es  # must have been registered
            except AttributeError:
                raise AttributeError('call `add` with argument `es` or ``register(es)`` before ``add()``')
        elif not self.registered:
            self.register(es)
        if self.counter == 0:
            self.initialize()  # write file header
        self.counter += 1
        if mod == 0 or (self.counter - 1) % mod:
            return self
        k = min((self.max_entries, es.N))
        bestf = es.fit.fit[0] if es.fit.fit is not None else np.nan
        data = [es.countiter, es.countevals, bestf, es.best.f, es.sigma,
                es.sm.D.max() / es.sm.D.min(), es.sm.condition_number]
        data += list(es.mean[:k]) + list(es.sm.variances[:k])
        with open(self.filename, 'a') as f:
            f.write(' '.join(str(int(d)) if i < 2 else '%.10e' % d
                             for i, d in enumerate(data)) + '\n')
        return self

    def add_final(self, es=None, stop=None):
        """append the final state as comment block, termination reasons
        `stop` default to ``es.stop(check=False)``"""
        if es is None:
            es = self.es
        if self.counter == 0:
            self.register(es).initialize()
        if stop is None:
            stop = es.stop(check=False)
        lines = ['%% all: final state after %d iterations and %d evaluations'
                 % (es.countiter, es.countevals)]
        for key, val in stop.items():
            lines.append('%% termination: %s=%s' % (key, str(val)))
        lines.append('%% sigma: %r' % float(es.sigma))
        lines.append('%% xmean: %s' % ' '.join(repr(float(x)) for x in es.mean))
        lines.append('%% diag(C): %s' % ' '.join(repr(float(x)) for x in es.sm.variances))
        lines.append('%% fbest: %r' % float(es.best.f))
        if es.best.x is not None:
            lines.append('%% xbest: %s' % ' '.join(repr(float(x)) for x in es.best.x))
        with open(self.filename, 'a') as f:
            f.write('\n'.join(lines) + '\n')
        return self

    def load(self, filename=None):
        """return the data lines of `filename` as 2-D `numpy.ndarray`"""
        if filename is None:
            filename = self.filename
        rows = []
        with open(filename, 'r') as f:
            for line in f:
                if line.strip() and not line.startswith('%'):
                    rows.append([float(w) for w in line.split()])
        return np.array(rows)
