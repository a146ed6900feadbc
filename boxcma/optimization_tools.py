"""Utility classes and functionalities loosely related to optimization
"""
import numpy as np
from .utilities.utils import BlancClass as _BlancClass

class BestSolution(object):
    """container to keep track of the best solution seen.

    >>> import numpy as np
    >>> from boxcma.optimization_tools import BestSolution
    >>> b = BestSolution()
    >>> b.update([[1, 1], [0, 2]], arf=[2, 4], evals=2)
    >>> b.update([[0, 0], [3, 3]], arf=[3, 0.5], evals=4)
    >>> x, f, evals = b.get()
    >>> assert list(x) == [3, 3] and f == 0.5 and evals == 4
    >>> b.update([[9, 9]], arf=[0.5], evals=5)  # not better
    >>> assert b.evals == 4 and b.evalsall == 5 and b.last.f == 0.5

    """
    def __init__(self, x=None, f=np.inf, evals=None):
        """initialize the best solution with ``x``, ``f``, and ``evals``.

        Better solutions have smaller ``f``-values.
        """
        self.x = x
        self.f = f if f is not None and not np.isnan(f) else np.inf
        self.evals = evals
        self.evalsall = evals
        self.last = _BlancClass()
        self.last.x = x
        self.last.f = f
    def update(self, arx, arf=None, evals=None):
        """checks for better solutions in list ``arx``.

        Based on the smallest corresponding value in ``arf``. `evals` is
        the number of evaluations after ``arf`` was computed, hence the
        evaluation count of ``arx[i]`` is ``evals - len(arf) + i + 1``.
        """
        assert arf is not None
        # find failsave minimum
        try:
            minidx = np.nanargmin(arf)
        except ValueError:
            return
        minarf = arf[minidx]
        if minarf < np.inf and (minarf < self.f or self.f is None):
            self.x, self.f = np.array(arx[minidx], copy=True), arf[minidx]
            self.evals = None if not evals else evals - len(arf) + minidx + 1
            self.evalsall = evals
        elif evals:
            self.evalsall = evals
        self.last.x = arx[minidx]
        self.last.f = minarf
    def get(self):
        """return ``(x, f, evals)`` """
        return self.x, self.f, self.evals
