# -*- coding: utf-8 -*-
"""linear algebra helpers used by the CMA-ES update, notably
`eigendecompose` and a collection of simple functions in `Mh`
"""
import numpy as np

def symmetrize(C):
    """return ``(C + C.T) / 2`` as new array"""
    C = np.asarray(C, dtype=float)
    return (C + C.T) / 2

def is_symmetric(C, rtol=1e-12):
    """return whether ``C`` is symmetric within relative Frobenius norm `rtol`

    >>> import numpy as np
    >>> from boxcma.utilities.math import is_symmetric
    >>> assert is_symmetric(np.eye(3))
    >>> assert not is_symmetric([[1, 0.5], [0, 1]])

    """
    C = np.asarray(C, dtype=float)
    nC = np.linalg.norm(C)
    if nC == 0:
        return True
    return np.linalg.norm(C - C.T) <= rtol * nC

def eigendecompose(C, floor_ratio=1e-14, previous=None):
    """eigendecomposition of a symmetric positive definite matrix, return
    ``(B, D, status)``.

    ``C == B @ diag(D**2) @ B.T`` with the columns of ``B`` being an
    orthonormal eigenbasis and ``D`` the square roots of the eigenvalues,
    sorted ascending.

    Eigenvalues smaller than ``floor_ratio * max(eigenvalues)``, including
    non-positive ones, are set to this value and ``status == 'floored'``.
    When ``C`` is not finite or `numpy.linalg.eigh` fails, ``previous``,
    a ``(B, D)`` tuple, is returned unchanged with ``status == 'failed'``.
    Otherwise ``status`` is `None`. This function never raises on a square
    input matrix.

    >>> import numpy as np
    >>> from boxcma.utilities.math import eigendecompose
    >>> B, D, status = eigendecompose([[2., 0], [0, 1]])
    >>> assert status is None and np.allclose(D**2, [1, 2])
    >>> assert np.allclose(np.dot(B * D**2, B.T), [[2, 0], [0, 1]])
    >>> B, D, status = eigendecompose([[1., 0], [0, -1]])
    >>> assert status == 'floored' and all(D > 0)
    >>> prev = (np.eye(2), np.ones(2))
    >>> B, D, status = eigendecompose([[np.nan, 0], [0, 1]], previous=prev)
    >>> assert status == 'failed' and B is prev[0]

    """
    C = np.asarray(C, dtype=float)
    if previous is None:
        previous = (np.eye(C.shape[0]), np.ones(C.shape[0]))
    if not np.all(np.isfinite(C)):
        return previous[0], previous[1], 'failed'
    try:
        evals, B = np.linalg.eigh(symmetrize(C))
    except np.linalg.LinAlgError:
        return previous[0], previous[1], 'failed'
    if not (np.all(np.isfinite(evals)) and np.all(np.isfinite(B))):
        return previous[0], previous[1], 'failed'
    idx = np.argsort(evals, kind='stable')
    evals, B = evals[idx], B[:, idx]
    status = None
    floor = floor_ratio * max(evals[-1], 0)
    if floor <= 0:  # all eigenvalues non-positive
        return previous[0], previous[1], 'failed'
    if evals[0] < floor:
        evals = np.maximum(evals, floor)
        status = 'floored'
    return B, evals**0.5, status

def condition_number(D):
    """return ``max(D)**2 / min(D)**2``, the condition of ``B D**2 B.T``"""
    D = np.asarray(D)
    return (np.max(D) / np.min(D))**2

def mahalanobis_norm(dx, B, D):
    """return ``sqrt(dx.T @ inv(C) @ dx)`` with ``C = B D**2 B.T``"""
    return np.sqrt(np.sum((np.dot(B.T, dx) / D)**2))

class MathHelperFunctions(object):
    """static convenience math helper functions, if the function name
    is preceded with an "a", a numpy array is returned

    """
    @staticmethod
    def equals_approximately(a, b, eps=1e-12):
        if a < 0:
            a, b = -1 * a, -1 * b
        return (a - eps < b < a + eps) or ((1 - eps) * a < b < (1 + eps) * a)
    @staticmethod
    def minmax(val, min_val, max_val):
        assert min_val <= max_val
        return min((max_val, max((val, min_val))))
    @staticmethod
    def normRMS(vec):
        """root mean square, ``norm(vec) / sqrt(len(vec))``"""
        vec = np.asarray(vec, dtype=float)
        return np.sqrt(np.mean(vec**2))

    _chiN_dict = {}
    @staticmethod
    def chiN(dimension):
        """approximation of the expectation of ``norm(randn(dimension))``.

        Uses ``N**0.5 * (1 - 1 / (4 N) + 1 / (21 N**2))``.

        >>> from boxcma.utilities.math import Mh
        >>> assert 3.08 < Mh.chiN(10) < 3.09

        """
        try:
            return MathHelperFunctions._chiN_dict[dimension]
        except KeyError:
            N = dimension
            MathHelperFunctions._chiN_dict[dimension] = \
                N**0.5 * (1 - 1. / (4 * N) + 1. / (21 * N**2))
        return MathHelperFunctions._chiN_dict[dimension]

Mh = MathHelperFunctions
