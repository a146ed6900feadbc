"""step-size adaptation of the CMA-ES by cumulation of the isotropic
evolution path, AKA path length control"""
import numpy as np
from .utilities import utils
from .utilities.math import Mh

_norm = np.linalg.norm

class CMAAdaptSigmaCSA(object):
    """CSA cumulative step-size adaptation AKA path length control.

    Implements also `hsig`, the signal for stalling the rank-one update of
    the covariance matrix, based on the length of the isotropic evolution
    path ``ps``.

    Details: `hsig` and `update` depend on the isotropic evolution path
    which is updated, once per generation, by the first call of either
    method. Attributes of the `CMAEvolutionStrategy` input ``es`` used are
    ``isotropic_mean_shift``, ``countiter``, ``N`` and ``sp``.

    >>> import numpy as np
    >>> from boxcma.sigma_adaptation import CMAAdaptSigmaCSA
    >>> from boxcma.utilities.utils import BlancClass
    >>> es = BlancClass()
    >>> es.N, es.countiter, es.sigma = 4, 0, 1.0
    >>> es.sp = BlancClass()
    >>> es.sp.cs, es.sp.damps, es.sp.chiN = 0.4, 1.4, 1.88
    >>> es.isotropic_mean_shift = np.zeros(4)
    >>> csa = CMAAdaptSigmaCSA()
    >>> assert csa.hsig(es)  # a zero path is short
    >>> csa.update(es)
    >>> assert 0 < es.sigma < 1  # a zero path decreases sigma

    """
    def __init__(self):
        """postpone initialization to a method call where dimension and
        learning rates are known.

        """
        self.is_initialized = False
    def initialize(self, es):
        """set parameters and state variable based on dimension and
        the strategy parameters in ``es.sp``.

        """
        self.cs = es.sp.cs
        self.damps = es.sp.damps
        self.chiN = es.sp.chiN
        self.max_delta_log_sigma = 1  # in symmetric use (strict lower bound is -cs/damps anyway)
        self.ps = np.zeros(es.N)
        self._ps_updated_iteration = -1
        self.is_initialized = True
    def _update_ps(self, es):
        """update the isotropic evolution path with
        ``es.isotropic_mean_shift``, that is, ``sqrt(mueff) B <z>_w``.
        """
        if not self.is_initialized:
            self.initialize(es)
        if self._ps_updated_iteration == es.countiter:
            return
        z = es.isotropic_mean_shift
        self.ps = (1 - self.cs) * self.ps + (self.cs * (2 - self.cs))**0.5 * z
        self._ps_updated_iteration = es.countiter
    def hsig(self, es):
        """return "OK-signal" for rank-one update, `True` (OK) or `False`
        (stall rank-one update), based on the length of the evolution path

        """
        self._update_ps(es)
        length = _norm(self.ps) / (
            1 - (1 - self.cs)**(2 * (es.countiter + 1)))**0.5
        return length < (1.4 + 2 / (es.N + 1)) * self.chiN
    def update2(self, es):
        """call ``self._update_ps(es)`` and return the change factor of
        sigma.
        """
        self._update_ps(es)
        s = _norm(self.ps) / self.chiN - 1
        s *= self.cs / self.damps
        s_clipped = Mh.minmax(s, -self.max_delta_log_sigma, self.max_delta_log_sigma)
        factor = np.exp(s_clipped)
        # "error" handling
        if s_clipped != s:
            utils.print_warning('sigma change np.exp(' + str(s) + ') = ' + str(np.exp(s)) +
                          ' clipped to np.exp(+-' + str(self.max_delta_log_sigma) + ')',
                          'update', 'CMAAdaptSigmaCSA', es.countiter)
        return factor
    def update(self, es):
        """call ``self._update_ps(es)`` and update ``es.sigma``."""
        es.sigma *= self.update2(es)
