"""Sampling from and updating the zero-mean multivariate normal
distribution ``N(0, C)`` of the CMA-ES, with lazy eigendecomposition
of ``C = B D**2 B.T``.
"""
import numpy as np
from .utilities.utils import print_warning, ElapsedWCTime
from .utilities.math import eigendecompose, symmetrize, condition_number, mahalanobis_norm

class GaussFullSampler(object):
    """Multi-variate normal distribution with zero mean.

    Provides methods to `sample` from and `update` a multi-variate
    normal distribution with zero mean and full covariance matrix.

    :param dimension: (required) define the dimensionality (attribute
        ``dimension``) of the normal distribution.

    :param lazy_update_gap=1: is the number of updates to wait between
        the O(n^3) eigendecompositions of ``C``, see `decompose_if_due`.

    :param floor_ratio=1e-14: eigenvalues below ``floor_ratio`` times the
        largest eigenvalue are raised to this value, see
        `boxcma.utilities.math.eigendecompose`.

    The attribute ``status`` is `None` or the status of the last
    decomposition, ``'floored'`` or ``'failed'``, which are reported as
    ill-conditioned covariance matrix by the termination check.

    >>> import numpy as np
    >>> from boxcma.sampler import GaussFullSampler
    >>> from boxcma.utilities.math import Mh
    >>> g = GaussFullSampler(4)
    >>> arz, ary = g.sample(3, np.random.RandomState(1).randn)
    >>> assert arz.shape == ary.shape == (3, 4) and (arz == ary).all()
    >>> assert g.norm([1,0,0,0]) == 1
    >>> g.update([[1., 0., 0., 0]], [.9])
    >>> assert g.decompose_if_due()
    >>> assert g.norm([1,0,0,0]) == 1
    >>> g.update([[4., 0., 0.,0]], [.5])
    >>> assert g.decompose_if_due()
    >>> assert Mh.equals_approximately(g.variances[0], 8.5)
    >>> assert Mh.equals_approximately(g.D[-1]**2, 8.5)
    >>> assert g.count_eigen == 2 and g.status is None

    With a large gap, the decomposition is only due when a time fraction
    below one is given and the last decomposition was fast enough:

    >>> g = GaussFullSampler(3, lazy_update_gap=100)
    >>> g.update([[1., 0., 0.]], [.5])
    >>> assert not g.decompose_if_due() and g.count_eigen == 0
    >>> assert g.decompose_if_due(0.9) and g.count_eigen == 1
    >>> assert not g.decompose_if_due(0.9)  # no update since

    """
    def __init__(self, dimension, lazy_update_gap=1, floor_ratio=1e-14):
        self.dimension = dimension
        self.C = np.eye(dimension)
        "covariance matrix"
        self.B = np.eye(dimension)
        "columns, B.T[i] == B[:, i], are eigenvectors of C"
        self.D = np.ones(dimension)
        "axis lengths, roots of eigenvalues, sorted"
        self.lazy_update_gap = lazy_update_gap
        self.floor_ratio = floor_ratio
        self.last_update = 0
        self.count_tell = 0
        self.count_eigen = 0
        self.count_floored = 0
        self.status = None
        self.last_decomposition_duration = 0.0
        self.timer = ElapsedWCTime()
        """time since the last decomposition"""

    @property
    def variances(self):
        return np.diag(self.C)

    def sample(self, number, randn):
        """return ``arz, ary``, `number` standard normal vectors and their
        transformations ``B D z``, both as rows.

        `randn` is called with the shape ``(number, dimension)``.
        """
        arz = np.asarray(randn(number, self.dimension))
        ary = np.dot(self.B, (self.D * arz).T).T
        return arz, ary

    def transform(self, z):
        """return ``B D z``, which is distributed as ``N(0, C)`` if `z`
        is ``N(0, I)``"""
        return np.dot(self.B, self.D * z)

    def update(self, vectors, weights, c1_times_delta_hsigma=0):
        """update/learn ``C`` with weighted outer products.

        The update reads::

            C <- (1 + c1_times_delta_hsigma - sum(weights)) C
                 + sum(w_k * outer(v_k, v_k))

        hence the first entry of `vectors` may be the evolution path with
        weight ``c1`` and the others the selected steps with weights
        ``cmu * w_k``. ``C`` is made symmetric afterwards.
        """
        weights = np.asarray(weights, dtype=float)
        vectors = np.asarray(vectors, dtype=float)  # row vectors
        assert len(weights) == len(vectors)

        self.C *= 1 + c1_times_delta_hsigma - np.sum(weights)
        self.C += np.dot(weights * vectors.T, vectors)
        self.C = symmetrize(self.C)

        self.count_tell += 1

    def decompose_if_due(self, time_fraction=1.0):
        """decompose ``C`` if at least `lazy_update_gap` updates passed
        since the last decomposition, or, for ``time_fraction < 1``, if
        the last decomposition took at most `time_fraction` times the
        time spent since then.

        Return `True` if a decomposition was done.
        """
        since = self.count_tell - self.last_update
        if since <= 0:
            return False
        if not (since >= self.lazy_update_gap or (
                time_fraction < 1 and self.last_decomposition_duration
                <= time_fraction * self.timer.toc)):
            return False
        self.decompose()
        return True

    def decompose(self):
        """eigen-decompose ``self.C`` thereby updating ``self.B`` and
        ``self.D``.

        Floored eigenvalues are written back into ``C``. When the
        decomposition fails, ``B`` and ``D`` remain unchanged.
        """
        timer = ElapsedWCTime()
        self.B, self.D, self.status = eigendecompose(
            self.C, self.floor_ratio, (self.B, self.D))
        if self.status == 'floored':
            self.count_floored += 1
            self.C = symmetrize(np.dot(self.B * self.D**2, self.B.T))
            print_warning("eigenvalues of the covariance matrix were floored"
                          " at %e times the largest" % self.floor_ratio,
                          'decompose', 'GaussFullSampler',
                          iteration=self.count_floored, maxwarns=1)
        elif self.status == 'failed':
            print_warning("covariance matrix eigen decomposition failed,"
                          " previous eigen basis is kept",
                          'decompose', 'GaussFullSampler')
        else:
            self.count_eigen += 1
        self.last_update = self.count_tell
        self.last_decomposition_duration = timer.toc
        self.timer.reset()

    @property
    def condition_number(self):
        return condition_number(self.D)

    def norm(self, x):
        """compute the Mahalanobis norm that is induced by the
        statistical model / sample distribution, specifically by
        covariance matrix ``C``. The expected Mahalanobis norm is
        about ``sqrt(dimension)``.
        """
        return mahalanobis_norm(x, self.B, self.D)
