"""Random number source owned by an optimization session.

The global `numpy.random` state is never touched: each session gets its own
`numpy.random.RandomState` (Mersenne Twister with the legacy polar
Box-Muller normal generator), hence runs with equal seed are reproducible
and independent of other code that uses `numpy.random`.

>>> from boxcma.random_source import RandomSource
>>> r1, r2 = RandomSource(3), RandomSource(3)
>>> assert r1.seed == 3 and (r1.randn(4) == r2.randn(4)).all()
>>> assert 0 <= r1.uniform() < 1
>>> state = r1.get_state()
>>> x = r1.gauss()
>>> r1.set_state(state)
>>> assert r1.gauss() == x

"""
import time
import numpy as np

class RandomSource(object):
    """uniform and normal random numbers from a private `RandomState`.

    ``seed == 0`` (or `None`) means "time based", the actually used seed
    is then drawn from the clock and available in attribute `seed`.
    """
    def __init__(self, seed=0):
        if seed is None:
            seed = 0
        if int(seed) != seed or seed < 0:
            raise ValueError("seed must be a non-negative integer, was %s"
                             % str(seed))
        seed = int(seed)
        if seed == 0:
            # fractional seconds give different seeds for quick succession
            seed = int(1e6 * (time.time() % 1e3)) % (2**32 - 1) + 1
        self.seed = seed
        self._rs = np.random.RandomState(seed)
    def uniform(self):
        """return a uniform random number in ``[0, 1)``"""
        return self._rs.random_sample()
    def gauss(self):
        """return a standard normally distributed random number"""
        return self._rs.standard_normal()
    def randn(self, *shape):
        """return an array of standard normally distributed numbers"""
        return self._rs.standard_normal(shape)
    def get_state(self):
        """return ``(keys, pos, has_gauss, cached_gaussian)``"""
        _, keys, pos, has_gauss, cached = self._rs.get_state()
        return np.array(keys, dtype=np.uint32), int(pos), int(has_gauss), float(cached)
    def set_state(self, state):
        """restore a state as returned by `get_state`"""
        keys, pos, has_gauss, cached = state
        self._rs.set_state(('MT19937', np.asarray(keys, dtype=np.uint32),
                            int(pos), int(has_gauss), float(cached)))
