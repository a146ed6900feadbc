# -*- coding: utf-8 -*-
"""`RecombinationWeights` is a list of positive recombination weights for
the CMA-ES.

The dependency chain is

lambda -> mu -> weights -> mueff -> learning rates

"""
import math

class RecombinationWeights(list):
    """a list of strictly decreasing positive (recombination) weight values.

    To be used in the mean update and in the rank-mu update of the
    covariance matrix C in CMA-ES as ``w_i``::

        m <- m + sigma sum w_i y_i:lambda
        C <- (1 - c1 - cmu * sum w_i) C + c1 ... + cmu sum w_i y_i y_i^T

    where ``w_i`` is proportional to ``log(mu + 1/2) - log(i)``, for
    ``i = 1..mu`` with ``mu = lambda // 2``, and ``sum(w) == 1``.

    Class attributes/properties:

    - ``lambda_``: population size the weights were computed for
    - ``mu``: number of weights, alias for ``len(self)``
    - ``mueff``: variance effective number of weights, i.e.
      ``1 / sum([w**2 for w in self])``

    Usage:

    >>> from boxcma.recombination_weights import RecombinationWeights
    >>> weights = RecombinationWeights(7)
    >>> print('weights = [%s]' % ', '.join("%.2f" % w for w in weights))
    weights = [0.64, 0.28, 0.08]
    >>> assert weights.mu == 3 and weights.lambda_ == 7
    >>> assert abs(sum(weights) - 1) < 1e-12
    >>> assert 2.02 < weights.mueff < 2.04
    >>> w = RecombinationWeights(2)  # a single parent
    >>> assert w == [1] and w.mueff == 1

    Reference: Hansen 2016, arXiv:1604.00772.
    """
    def __init__(self, len_):
        """return recombination weights `list` of length ``len_ // 2``,
        post condition is ``sum(self) == 1``.

        `len_` is the population size lambda and must be at least two.
        """
        if len_ < 2:
            raise ValueError("population size must be >= 2, was %s"
                             % str(len_))
        self.lambda_ = len_
        mu = len_ // 2
        weights = [math.log(mu + 0.5) - math.log(i + 1) for i in range(mu)]
        list.__init__(self, weights)
        self.set_attributes_from_weights()
        self.do_asserts()

    def set_attributes_from_weights(self):
        """normalize the weights to sum one and set ``mu`` and ``mueff``.

        Useful when weight values are "manually" changed.
        """
        s = sum(self)
        for i in range(len(self)):
            self[i] /= s
        self.mu = len(self)
        self.mueff = 1 / sum(w**2 for w in self)
        return self

    def do_asserts(self):
        """assert consistency.

        Assert:

        - attribute values of ``lambda_, mu, mueff``
        - weights are positive and strictly decreasing
        - ``sum(self) == 1``

        """
        weights = self
        assert 1 <= weights.mu <= weights.lambda_ // 2
        assert 1 - 1e-12 < weights.mueff <= weights.mu + 1e-12
        assert all(w > 0 for w in weights)
        assert all(weights[i] > weights[i + 1]
                   for i in range(len(weights) - 1))
        assert abs(sum(weights) - 1) < 1e-12

    def asarray(self):
        """return weights as `numpy.ndarray`"""
        import numpy as np
        return np.asarray(self)
