#!/usr/bin/env python
"""test module of `boxcma` package.

Usage::

    python -m boxcma.test -h    # print this docstring
    python -m boxcma.test       # doctest all (listed) files
    python -m boxcma.test list  # list files to be doctested
    python -m boxcma.test optimizer.py [file2 [file3 [...]]] # doctest only these

or equivalently by passing Python code::

    python -c "import boxcma.test; boxcma.test.main()"  # doctest all (listed) files
    python -c "import boxcma.test; boxcma.test.main('list')"  # show files in doctest list

File(name)s are interpreted within the package. Without a filename
argument, all files from attribute `files_for_doctest` are tested.
The same doctests are collected by ``pytest`` with ``--doctest-modules``,
see ``pytest.ini``.
"""
import os, sys
import doctest

files_for_doctest = ['evolution_strategy.py',
                     'exceptions.py',
                     'fitness_functions.py',
                     'interfaces.py',
                     'optimization_tools.py',
                     'optimizer.py',
                     'options_parameters.py',
                     'random_source.py',
                     'recombination_weights.py',
                     'resume.py',
                     'sampler.py',
                     'sigma_adaptation.py',
                     'termination.py',
                     'test.py',
                     os.path.join('utilities', 'math.py'),
                     os.path.join('utilities', 'utils.py'),
    ]
_files_written = ['allcmaes.dat',
                  'resumecmaes.dat',
    ]
"""files written by the doc tests and hence, in case, to be deleted"""

def _clean_up(folder, start_matches, protected):
    """(permanently) remove entries in ``folder`` which begin with any of
    ``start_matches``, where ``""`` matches any string, and which are not
    in ``protected``.

    CAVEAT: use with care, as with ``"", ""`` as second and third
    arguments this could delete all files in ``folder``.
    """
    if not os.path.isdir(folder):
        return
    if not protected and "" in start_matches:
        raise ValueError(
            '''_clean_up(folder, [..., "", ...], []) is not permitted as it
               resembles "rm *"''')
    protected = protected + ["/"]
    for file_ in os.listdir(folder):
        if any(file_.startswith(s) for s in start_matches) \
                and not any(file_.startswith(p) for p in protected):
            os.remove(os.path.join(folder, file_))

def various_doctests():
    """various doc tests.

    This function describes test cases of the whole package. The main
    testing feature is by doctest with ``boxcma.test.main()`` in a Python
    shell or by ``python -m boxcma.test`` in a system shell.

    State invariants in each iteration:

        >>> import numpy as np
        >>> import boxcma
        >>> from boxcma.utilities.math import is_symmetric
        >>> es = boxcma.CMAEvolutionStrategy(6 * [1], 0.5, {'seed': 1})
        >>> assert abs(sum(es.sp.weights) - 1) < 1e-12
        >>> while not es.stop() and es.countiter < 200:
        ...     X = es.ask()
        ...     es.tell(X, [boxcma.ff.elli(x) for x in X])
        ...     assert is_symmetric(es.sm.C, 1e-12)
        ...     assert (es.sm.D > 0).all() and es.sigma > 0
        >>> assert es.countiter == 200 or es.stop()

    Equal seeds give identical trajectories, different seeds do not:

        >>> def trajectory(seed, iterations=30):
        ...     es = boxcma.CMAEvolutionStrategy(5 * [1], 0.5, {'seed': seed})
        ...     res = []
        ...     for _ in range(iterations):
        ...         X = es.ask()
        ...         es.tell(X, [boxcma.ff.elli(x) for x in X])
        ...         res.append((es.mean.copy(), es.sigma, es.best.f))
        ...     return res
        >>> t1, t2 = trajectory(11), trajectory(11)
        >>> assert all((m1 == m2).all() and s1 == s2 and f1 == f2
        ...            for (m1, s1, f1), (m2, s2, f2) in zip(t1, t2))
        >>> assert (trajectory(12)[-1][0] != t1[-1][0]).any()

    Continuing from a snapshot is identical to an uninterrupted run:

        >>> from boxcma import resume
        >>> def run(es, iterations):
        ...     for _ in range(iterations):
        ...         X = es.ask()
        ...         es.tell(X, [boxcma.ff.rosen(x) for x in X])
        ...     return es
        >>> es = run(boxcma.CMAEvolutionStrategy(4 * [0], 0.5, {'seed': 8}), 15)
        >>> snapshot = resume.snapshot_to_string(es.get_state())
        >>> es = run(es, 25)
        >>> es2 = boxcma.CMAEvolutionStrategy(4 * [0], 0.5, {'seed': 9})
        >>> es2 = run(es2.set_state(resume.snapshot_from_string(snapshot)), 25)
        >>> assert es2.countiter == es.countiter == 40
        >>> assert (es2.mean == es.mean).all() and es2.sigma == es.sigma
        >>> assert (es2.sm.C == es.sm.C).all() and es2.best.f == es.best.f
        >>> assert (es2.adapt_sigma.ps == es.adapt_sigma.ps).all()
        >>> assert (es2.pc == es.pc).all()

    The same through the resume and diagnostics files of `CMAESOptimizer`:

        >>> import os, tempfile
        >>> cwd = os.getcwd()
        >>> os.chdir(tempfile.mkdtemp())
        >>> system = boxcma.OptimizerSystem(3, boxcma.ff.elli)
        >>> opt = boxcma.CMAESOptimizer(system, {'seed': 3, 'stopMaxIter': 10,
        ...                                      'diagnosticsLevel': 2}, 0.5)
        >>> f = opt.optimize(3 * [1])
        >>> assert os.path.exists('resumecmaes.dat') and os.path.exists('allcmaes.dat')
        >>> data = boxcma.CMADataLogger('allcmaes.dat').load()
        >>> assert data.shape[0] == 10 and list(data[:, 0]) == list(range(1, 11))
        >>> with open('allcmaes.dat') as file_:
        ...     assert '% termination: MaxIter=10' in file_.read()
        >>> opt2 = boxcma.CMAESOptimizer(system, {'resume': True, 'stopMaxIter': 20,
        ...                                       'diagnosticsLevel': 2}, 0.5)
        >>> f2 = opt2.optimize(3 * [1])
        >>> opt3 = boxcma.CMAESOptimizer(system, {'seed': 3, 'stopMaxIter': 20}, 0.5)
        >>> f3 = opt3.optimize(3 * [1])
        >>> assert opt2.result.iterations == opt3.result.iterations == 20
        >>> assert f2 == f3 and (opt2.result.xmean == opt3.result.xmean).all()
        >>> assert boxcma.resume.read_snapshot('resumecmaes.dat')['countiter'] == 20
        >>> opt4 = boxcma.CMAESOptimizer(boxcma.OptimizerSystem(4, boxcma.ff.elli),
        ...                              {'resume': 'resumecmaes.dat'})
        >>> try:
        ...     opt4.optimize(4 * [1])
        ... except boxcma.exceptions.ResumeMismatch:
        ...     print('dimension mismatch')
        dimension mismatch
        >>> os.chdir(cwd)

    All evaluated solutions are within the limits:

        >>> class Recorder(boxcma.OptimizerSystem):
        ...     def __init__(self):
        ...         super(Recorder, self).__init__(3, lower=[-1, 0, 0], upper=[1, 1, 2])
        ...         self.X = []
        ...     def objective_func(self, x, new_point):
        ...         self.X.append(np.array(x, copy=True))
        ...         return 0, boxcma.ff.sphere(np.asarray(x) - 3)
        >>> system = Recorder()
        >>> opt = boxcma.CMAESOptimizer(system, {'seed': 5, 'stopMaxIter': 100}, 0.5)
        >>> f = opt.optimize([0, 0.5, 1])
        >>> lower, upper = system.get_parameter_limits()
        >>> assert len(system.X) == opt.result.evaluations
        >>> assert all((lower <= x).all() and (x <= upper).all() for x in system.X)
        >>> assert f < boxcma.ff.sphere(np.array([0, 0.5, 1]) - 3)

    Small dimension and population size:

        >>> x, opt = boxcma.fmin(boxcma.ff.sphere, [1, 1], 0.5, {'seed': 2})
        >>> assert opt.result.fbest < 1e-10
        >>> es = boxcma.CMAEvolutionStrategy(3 * [1], 0.5, {'lambda': 2, 'seed': 1,
        ...                                                 'stopMaxIter': 200})
        >>> assert es.sp.mu == 1 and es.sp.cmu == 0
        >>> while not es.stop():
        ...     X = es.ask()
        ...     es.tell(X, [boxcma.ff.sphere(x) for x in X])
        >>> assert np.isfinite(es.mean).all() and 0 < es.sigma < np.inf
        >>> assert es.best.f < boxcma.ff.sphere(3 * [1])

    The zero evolution path of the first iteration does not collapse sigma:

        >>> es = boxcma.CMAEvolutionStrategy(4 * [1], 1, {'seed': 6})
        >>> X = es.ask()
        >>> es.tell(X, [boxcma.ff.sphere(x) for x in X])
        >>> assert 0.3 < es.sigma < 3

    A pathologically scaled function terminates with ``ConditionCov``
    before the state becomes invalid:

        >>> def fscaled(x):
        ...     return (1e20 * x[0])**2 + x[1]**2 + x[2]**2
        >>> es = boxcma.CMAEvolutionStrategy(3 * [1], 1, {'seed': 3})
        >>> while not es.stop():
        ...     X = es.ask()
        ...     es.tell(X, [fscaled(x) for x in X])
        >>> assert 'ConditionCov' in es.stop(), es.stop()
        >>> assert es.stop().flags & boxcma.Termination.ConditionCov
        >>> assert np.isfinite(es.mean).all() and np.isfinite(es.sm.C).all()

    Sphere and cigtab:

        >>> x, opt = boxcma.fmin(boxcma.ff.sphere, 10 * [1], 0.5,
        ...                      {'seed': 42, 'stopMaxIter': 300})
        >>> assert opt.result.fbest < 1e-10, opt.result
        >>> x, opt = boxcma.fmin(boxcma.ff.cigtab, 4 * [1], 0.5,
        ...                      {'seed': 42, 'stopMaxIter': 500})
        >>> assert opt.result.fbest < 1e-8, opt.result

    Rosenbrock and multimodal functions with fixed seeds:

        >>> limits = boxcma.ff.limits
        >>> x, opt = boxcma.fmin(boxcma.ff.rosen, [-1.2, 1, -1.2, 1, -1.2], 0.5,
        ...                      {'seed': 42, 'stopMaxIter': 2000})
        >>> assert max(abs(x - 1)) < 1e-3, opt.result
        >>> x, opt = boxcma.fmin(boxcma.ff.ackley, [10, 10], 5,
        ...                      {'seed': 42, 'stopMaxIter': 1000},
        ...                      lower=-limits['ackley'], upper=limits['ackley'])
        >>> assert opt.result.fbest < 1e-4, opt.result
        >>> for seed in (42, 7, 123):
        ...     x, opt = boxcma.fmin(boxcma.ff.dropwave, [2, 2], 1,
        ...                          {'seed': seed, 'stopMaxIter': 2000},
        ...                          lower=-limits['dropwave'], upper=limits['dropwave'])
        ...     assert opt.result.fbest < -0.9, (seed, opt.result)

    Easom is almost flat, the global optimum is found only sometimes:

        >>> x, opt = boxcma.fmin(boxcma.ff.easom, [0, 0], 20,
        ...                      {'seed': 42, 'stopMaxIter': 3000},
        ...                      lower=-100, upper=100)
        >>> assert opt.result.fbest >= -0.5 or max(abs(x - np.pi)) < 0.2
        >>> assert (abs(x) <= 100).all()

    Termination reasons, each with its flag:

        >>> T = boxcma.Termination
        >>> def terminate(objective, x0, sigma0, opts, maxiter=10000):
        ...     es = boxcma.CMAEvolutionStrategy(x0, sigma0, opts)
        ...     while not es.stop() and es.countiter < maxiter:
        ...         X = es.ask()
        ...         es.tell(X, [objective(x) for x in X])
        ...     return es
        >>> es = terminate(boxcma.ff.sphere, 4 * [1], 0.5,
        ...                {'seed': 1, 'stopMaxFunEvals': 50})
        >>> assert es.stop() == {'MaxFunEvals': 50} and es.countevals == 56
        >>> assert es.stop().flags == T.MaxFunEvals
        >>> es = terminate(boxcma.ff.sphere, 4 * [1], 0.5,
        ...                {'seed': 1, 'stopFitness': 1e-3})
        >>> assert es.stop()['StopFitness'] == 1e-3 and es.best.f <= 1e-3
        >>> assert es.stop().flags & T.StopFitness
        >>> es = terminate(boxcma.ff.sphere, 4 * [1], 0.5, {'seed': 1})
        >>> assert 'TolFun' in es.stop() and es.stop().flags & T.TolFun
        >>> es = terminate(boxcma.ff.sphere, 4 * [1], 0.5,
        ...                {'seed': 1, 'stopTolFun': 0})
        >>> assert es.stop()['TolX'] == 1e-11 * 0.5 and es.stop().flags & T.TolX
        >>> assert max(es.stds) < 1e-11 * 0.5
        >>> es = terminate(lambda x: -boxcma.ff.sphere(x), 3 * [1], 0.5, {'seed': 1})
        >>> assert 'TolUpX' in es.stop() and es.stop().flags & T.TolUpX
        >>> assert max(es.stds) > 1e3 * 0.5

    Coordinates and axes without effect on the mean:

        >>> es = terminate(boxcma.ff.sphere, [1e20, 1e20], 1, {'seed': 1}, 1)
        >>> assert es.stop()['NoEffectCoord'] == [0, 1]
        >>> assert 'NoEffectAxis' in es.stop()
        >>> assert es.stop().flags & (T.NoEffectAxis | T.NoEffectCoord) == (
        ...     T.NoEffectAxis | T.NoEffectCoord)
        >>> es = terminate(boxcma.ff.sphere, [1, 1e20], 1, {'seed': 1}, 1)
        >>> assert es.stop()['NoEffectCoord'] == [1]

    Flat fitness increases sigma and eventually terminates with
    ``EqualFunValues``:

        >>> es = terminate(lambda x: 1.0, [1, 1], 1, {'seed': 1}, 1)
        >>> assert es.fit.flatfit_iterations == 1 and es.sigma > np.exp(0.2)
        >>> es = terminate(lambda x: 1.0, [1, 1], 1,
        ...                {'seed': 1, 'stopTolUpXFactor': 1e100})
        >>> assert es.sp.hist_len == 20 and es.countiter == 20
        >>> assert es.stop()['EqualFunValues'] == 20
        >>> assert es.stop().flags & T.EqualFunValues
        >>> assert es.fit.flatfit_iterations == 20

    Bit 0 of ``diagnosticsLevel`` prints the start banner and a summary:

        >>> opt = boxcma.CMAESOptimizer(boxcma.OptimizerSystem(4, boxcma.ff.sphere),
        ...                             {'seed': 1, 'stopMaxIter': 3,
        ...                              'diagnosticsLevel': 1}, 0.5)
        >>> f = opt.optimize(4 * [1])  # doctest: +ELLIPSIS
        (4_w,8)-CMA-ES (mu_w=2.6,w_1=52%) in dimension 4 (seed=1, ...)
        Stop:
        termination on MaxIter=3
        final/bestever f-value = ... after 24/... evaluations
        incumbent solution: [...]
        std deviation: [...]

    A user abort with a `threading.Event`, also from within the
    objective function:

        >>> import threading
        >>> event = threading.Event()
        >>> event.set()
        >>> x, opt = boxcma.fmin(boxcma.ff.sphere, 3 * [1], 0.5, cancel=event)
        >>> assert opt.result.stop == {'UserAbort': True} and opt.result.iterations == 0
        >>> assert x is None and opt.result.fbest == np.inf
        >>> event = threading.Event()
        >>> def fabort(x):
        ...     if sum(x) < 1:
        ...         event.set()
        ...     return boxcma.ff.sphere(x)
        >>> x, opt = boxcma.fmin(fabort, 3 * [1], 0.5, {'seed': 4}, cancel=event)
        >>> assert 'UserAbort' in opt.result.stop and opt.result.iterations > 0
        >>> assert fabort(x) == opt.result.fbest

    Configuration errors:

        >>> from boxcma.exceptions import ConfigError
        >>> def refused(fun, *args):
        ...     try:
        ...         fun(*args)
        ...     except ConfigError:
        ...         return True
        ...     return False
        >>> system = boxcma.OptimizerSystem(3, boxcma.ff.sphere)
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1], 1)  # n < 2
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1, 1], 0)
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1, 1], 1, {'seed': -1})
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1, 1], 1, {'lambda': 1})
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1, 1], 1, {'unknown': 1})
        >>> assert refused(boxcma.CMAEvolutionStrategy, [1, 1], 1,
        ...                {'diagnosticsLevel': 4})
        >>> assert refused(system.set_parameter_limits, [0, 0, 1], [1, 1, 0])
        >>> assert refused(system.set_parameter_limits, [0, 0], [1, 1])
        >>> assert refused(system.set_parameter_limits, 0, None)
        >>> assert refused(boxcma.fmin, boxcma.ff.sphere, [1], 1)
        >>> assert issubclass(ConfigError, ValueError)

    A failing objective function raises `ObjectiveFailure` and leaves no
    result:

        >>> from boxcma.exceptions import ObjectiveFailure
        >>> system = boxcma.OptimizerSystem(2, lambda x: 1 / 0)
        >>> opt = boxcma.CMAESOptimizer(system)
        >>> try:
        ...     opt.optimize([1, 1])
        ... except ObjectiveFailure as e:
        ...     assert isinstance(e.__cause__, ZeroDivisionError)
        ...     print('failed')
        failed
        >>> assert opt.result is None
        >>> class Failing(boxcma.OptimizerSystem):
        ...     def objective_func(self, x, new_point):
        ...         return (3 if x[0] > 1 else 0), sum(x)
        >>> opt = boxcma.CMAESOptimizer(Failing(2), {'seed': 1}, 1)
        >>> try:
        ...     opt.optimize([1, 1])
        ... except ObjectiveFailure as e:
        ...     assert e.status == 3 and e.x[0] > 1
        ...     print('status %d' % e.status)
        status 3
        >>> assert opt.result is None and isinstance(ObjectiveFailure(''), RuntimeError)

    """

def doctest_files(file_list=files_for_doctest, **kwargs):
    """doctest all (listed) files of the `boxcma` package.

    Details: accepts ``verbose`` and all other keyword arguments that
    `doctest.testfile` would accept, while negative ``verbose`` values
    are passed as 0.
    """
    if isinstance(file_list, str):
        file_list = [file_list]
    verbosity_here = kwargs.get('verbose', 0)
    if verbosity_here < 0:
        kwargs['verbose'] = 0
    failures = 0
    for file_ in file_list:
        file_ = file_.strip().strip(os.path.sep)
        if file_.startswith('boxcma' + os.path.sep):
            file_ = file_[7:]
        if verbosity_here >= 0:
            print('doctesting %s ...' % file_,
                  ' ' * (max(len(_file) for _file in file_list) -
                         len(file_)),
                  end="")
            sys.stdout.flush()
        protected_files = os.listdir('.')
        report = doctest.testfile(file_, package=__package__, **kwargs)
        _clean_up('.', _files_written, protected_files)
        failures += report[0]
        if verbosity_here >= 0:
            print(report)
    return failures

def get_version():
    try:
        with open(os.path.join(os.path.dirname(__file__), '__init__.py'), 'r') as f:
            for line in f.readlines():
                if line.startswith('__version__'):
                    return line.split('=')[1].strip().strip('"\'')
    except IOError:
        return ""
    return ""

def main(*args, **kwargs):
    """test the `boxcma` package.

    The first argument can be '-h' or '--help' or 'list' to list all
    files to be tested. Otherwise, arguments can be file(name)s to be
    tested, where names are interpreted relative to the package root
    and a leading 'boxcma' + path separator is ignored.

    By default all files are tested.

    :See also: ``python -c "import boxcma.test; help(boxcma.test)"``
    """
    if len(args) > 0:
        if args[0].startswith(('-h', '--h')):
            print(__doc__)
            sys.exit(0)
        elif args[0].startswith('list'):
            for file_ in files_for_doctest:
                print(file_)
            sys.exit(0)
    else:
        v = get_version()
        print("doctesting `boxcma` package%s by calling `doctest_files`:"
              % ((" (v%s)" % v) if v else ""))
    return doctest_files(list(args) if args else files_for_doctest, **kwargs)

if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:]) > 0)  # 0 if failures == 0 else 1
