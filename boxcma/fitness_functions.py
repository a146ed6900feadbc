# -*- coding: utf-8 -*-
"""versatile container for test objective functions.

For the time being this is probably best used like::

    from boxcma.fitness_functions import ff

All functions take a single vector argument and return a `float`.
Functions with usual box limits have these as attribute ``limits``
of the function object, see `FitnessFunctions.limits`.

>>> import numpy as np
>>> from boxcma.fitness_functions import ff
>>> assert ff.sphere([1, 2]) == 5 and ff.rosen(np.ones(4)) == 0
>>> assert abs(ff.ackley(np.zeros(3))) < 1e-14
>>> assert ff.dropwave([0, 0]) == -1 and ff.easom([np.pi, np.pi]) == -1
>>> assert abs(ff.schwefel(2 * [420.9687])) < 1e-3
>>> assert ff.limits['ackley'] == 32.768

"""
import numpy as np
from numpy import array, isscalar, sum
from .utilities.math import Mh

class FitnessFunctions(object):
    """collection of objective functions.

    """
    limits = {
        'ackley': 32.768,
        'dropwave': 5.12,
        'easom': 100,
        'schwefel': 500,
    }
    """usual symmetric box limits ``[-l, l]`` of some of the functions"""

    def sphere(self, x):
        """Sphere (squared norm) test objective function"""
        return sum((np.asarray(x) + 0)**2)

    def elli(self, x, cond=1e6):
        """Ellipsoid test objective function"""
        x = np.asarray(x)
        if not isscalar(x[0]):  # parallel evaluation
            return [self.elli(xi, cond) for xi in x]
        N = len(x)
        return sum(cond**(np.arange(N) / (N - 1.)) * x**2) if N > 1 else x[0]**2

    def cigtab(self, y):
        """Cigtab test objective function, the first two coordinates
        are added with factors ``1e4`` and ``1e-4`` to the sphere"""
        X = [y] if isscalar(y[0]) else y
        f = [1e4 * x[0]**2 + 1e-4 * x[1]**2 + sum(array(x)**2) for x in X]
        return f if len(f) > 1 else f[0]

    def rosen(self, x, alpha=1e2):
        """Rosenbrock test objective function"""
        x = [x] if isscalar(x[0]) else x  # scalar into list
        x = np.asarray(x)
        f = [sum(alpha * (x[:-1]**2 - x[1:])**2 + (1. - x[:-1])**2) for x in x]
        return f if len(f) > 1 else f[0]  # 1-element-list into scalar
    rosenbrock = rosen

    def ackley(self, x, a=20, b=0.2, c=2 * np.pi):
        """Ackley function, multimodal with global minimum 0 in zero"""
        x = np.asarray(x)
        return (-a * np.exp(-b * Mh.normRMS(x)) - np.exp(np.mean(np.cos(c * x)))
                + a + np.e)

    def dropwave(self, x):
        """Drop-Wave function in 2-D, minimum -1 in zero"""
        r2 = x[0]**2 + x[1]**2
        return -(1 + np.cos(12 * np.sqrt(r2))) / (0.5 * r2 + 2)

    def easom(self, x):
        """Easom function in 2-D, minimum -1 in ``(pi, pi)`` and almost
        flat elsewhere"""
        return -np.cos(x[0]) * np.cos(x[1]) * np.exp(
            -(x[0] - np.pi)**2 - (x[1] - np.pi)**2)

    def schwefel(self, x):
        """Schwefel function, minimum close to 0 in ``420.9687 * ones``"""
        x = np.asarray(x)
        return 418.9829 * len(x) - sum(x * np.sin(np.sqrt(np.abs(x))))

ff = FitnessFunctions()
