# -*- coding: utf-8 -*-
"""Package `boxcma` implements a box-constrained CMA-ES (Covariance
Matrix Adaptation Evolution Strategy).

CMA-ES is a stochastic optimizer for robust non-linear non-convex
derivative- and function-value-free numerical optimization. Only the
ranking of the candidate solutions in each iteration is used by the
adaptation, some termination criteria however depend on actual Delta
f-values.

Box limits ``lower <= x <= upper`` are handled by redrawing infeasible
candidate solutions, such that the objective function is only called
within the limits.

The `boxcma` package provides two interfaces:

- class `CMAESOptimizer` and function `fmin`:
    run a complete minimization of the objective function of an
    `OptimizerSystem`, with limits, resume and diagnostics files.

- class `CMAEvolutionStrategy`:
    allows for minimization such that the control of the iteration loop
    remains with the user (ask-and-tell interface).

Testing
=======
From the system shell::

    python -m boxcma.test
    python -m pytest

Example
=======
From a python shell::

    import boxcma
    help(boxcma.CMAESOptimizer)
    boxcma.CMAOptions('stop')  # display termination options
    x, opt = boxcma.fmin(boxcma.ff.rosen, 5 * [0.1], 0.5, lower=-2, upper=2)
    opt.result.fbest  # best evaluated f-value
    opt.result.stop  # termination reasons

    es = boxcma.CMAEvolutionStrategy(10 * [1], 0.5, {'seed': 42})
    while not es.stop():
        X = es.ask()
        es.tell(X, [boxcma.ff.elli(x) for x in X])
        es.disp(20)
    es.result_pretty()

:See also: `fmin`, `CMAOptions`, `CMAEvolutionStrategy`

"""
from . import (evolution_strategy, exceptions, fitness_functions,
               interfaces, optimization_tools, optimizer, resume, sampler,
               sigma_adaptation, termination, utilities,
               )
# from . import test  # gives a warning with python -m boxcma.test
test = 'type "import boxcma.test" to access the `test` module of `boxcma`'
from .fitness_functions import ff
from .evolution_strategy import CMAEvolutionStrategy
from .options_parameters import CMAOptions, cma_default_options_
from .interfaces import OptimizerSystem
from .optimizer import CMAESOptimizer, fmin
from .termination import Termination
from .logger import CMADataLogger

__version__ = "1.0.0"
