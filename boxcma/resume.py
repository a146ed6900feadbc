"""Write and read the complete state of a `CMAEvolutionStrategy` as
text snapshot, to continue an optimization bit-exactly later.

The file consists of a header and one ``key: values`` record per line.
Floating point values are IEEE-754 binary64 numbers written with
`float.hex`, which is exact and independent of the platform byte order,
integers are written in decimal and missing values as ``None``.

>>> import numpy as np
>>> import boxcma
>>> from boxcma import resume
>>> es = boxcma.CMAEvolutionStrategy(3 * [1], 0.5, {'seed': 5})
>>> for _ in range(4):
...     X = es.ask()
...     es.tell(X, [boxcma.ff.elli(x) for x in X])
>>> s = resume.snapshot_to_string(es.get_state())
>>> assert s.startswith(resume.header) and 'countiter: 4' in s
>>> state = resume.snapshot_from_string(s)
>>> assert state['sigma'] == es.sigma and (state['C'] == es.sm.C).all()
>>> es2 = boxcma.CMAEvolutionStrategy(3 * [1], 0.5, {'seed': 6}).set_state(state)
>>> assert (es2.ask()[0] == es.ask()[0]).all()

An unknown version is refused:

>>> try:
...     resume.snapshot_from_string(s.replace('version 1', 'version 2'))
... except boxcma.exceptions.ResumeMismatch:
...     print('version mismatch')
version mismatch

The status of the last eigendecomposition and the count of flat
fitness iterations are restored too, such that a floored covariance
matrix still terminates the continued run:

>>> es.sm.status, es.fit.flatfit_iterations = 'floored', 2
>>> state = resume.snapshot_from_string(resume.snapshot_to_string(es.get_state()))
>>> es2 = boxcma.CMAEvolutionStrategy(3 * [1], 0.5, {'seed': 6}).set_state(state)
>>> assert es2.sm.status == 'floored' and es2.fit.flatfit_iterations == 2
>>> assert 'ConditionCov' in es2.stop() and 'ConditionCov' in es.stop()

"""
import numpy as np
from .exceptions import ResumeMismatch

version = 1
header = '# boxcma resume snapshot'
format_line = ('format floats are IEEE-754 binary64 written with float.hex,'
               ' integers are decimal')
default_filename = 'resumecmaes.dat'

_int_keys = ('n', 'popsize', 'countiter', 'countevals',
             'last_eigen_iteration', 'rng_pos', 'rng_has_gauss', 'evals_best',
             'flatfit_iterations')
_float_keys = ('sigma', 'sigma0', 'rng_gauss', 'fbest')
_str_keys = ('eigen_status',)
_vector_keys = ('mean', 'ps', 'pc', 'D', 'xbest', 'fit', 'fit_hist')
_order = ('n', 'popsize', 'countiter', 'countevals', 'sigma', 'sigma0',
          'mean', 'C', 'ps', 'pc', 'B', 'D', 'last_eigen_iteration', 'eigen_status',
          'rng_keys', 'rng_pos', 'rng_has_gauss', 'rng_gauss',
          'fbest', 'xbest', 'evals_best', 'fit', 'fit_hist', 'flatfit_iterations')

def _hex(x):
    return float(x).hex()

def _format(key, val):
    if val is None:
        return 'None'
    if key in _int_keys:
        return str(int(val))
    if key in _float_keys:
        return _hex(val)
    if key in _str_keys:
        return str(val)
    if key == 'rng_keys':
        return ' '.join(str(int(k)) for k in val)
    if key == 'C':  # lower triangle, row-wise
        return ' '.join(_hex(val[i][j]) for i in range(len(val))
                        for j in range(i + 1))
    if key == 'B':
        return ' '.join(_hex(v) for row in val for v in row)
    return ' '.join(_hex(v) for v in val)

def snapshot_to_string(state):
    """return the snapshot text of `state`, a `dict` as returned by
    `CMAEvolutionStrategy.get_state`"""
    lines = [header, 'version %d' % version, format_line]
    for key in _order:
        lines.append('%s: %s' % (key, _format(key, state[key])).rstrip())
    return '\n'.join(lines) + '\n'

def _parse(key, s, n):
    if s == 'None':
        return None
    words = s.split()
    if key in _int_keys:
        return int(s)
    if key in _float_keys:
        return float.fromhex(s)
    if key in _str_keys:
        return s
    if key == 'rng_keys':
        return np.array([int(w) for w in words], dtype=np.uint32)
    values = np.array([float.fromhex(w) for w in words])
    if key == 'C':
        if len(values) != n * (n + 1) // 2:
            raise ResumeMismatch("C needs %d entries, found %d"
                                 % (n * (n + 1) // 2, len(values)))
        C = np.zeros((n, n))
        C[np.tril_indices(n)] = values
        return C + np.tril(C, -1).T
    if key == 'B':
        if len(values) != n * n:
            raise ResumeMismatch("B needs %d entries, found %d" % (n * n, len(values)))
        return values.reshape(n, n)
    if key in ('mean', 'ps', 'pc', 'D', 'xbest') and len(values) != n:
        raise ResumeMismatch("%s needs %d entries, found %d" % (key, n, len(values)))
    return values

def snapshot_from_string(s):
    """return the state `dict` read from snapshot text `s`.

    Raise `ResumeMismatch` if the version is unknown or the text is
    malformed.
    """
    lines = [line.strip() for line in s.splitlines()]
    records = {}
    file_version = None
    for line in lines:
        if not line or line.startswith('#') or line.startswith('format'):
            continue
        if line.startswith('version'):
            try:
                file_version = int(line.split()[1])
            except (IndexError, ValueError):
                raise ResumeMismatch("malformed version line '%s'" % line)
            continue
        key, sep, rest = line.partition(':')
        if not sep:
            raise ResumeMismatch("malformed snapshot line '%s'" % line)
        records[key.strip()] = rest.strip()
    if file_version != version:
        raise ResumeMismatch("snapshot version %s is not supported (expected %d)"
                             % (str(file_version), version))
    missing = [key for key in _order if key not in records]
    if missing:
        raise ResumeMismatch("snapshot misses the records %s" % str(missing))
    try:
        n = int(records['n'])
        state = dict((key, _parse(key, records[key], n)) for key in _order)
    except ValueError as e:
        raise ResumeMismatch("malformed snapshot: %s" % str(e)) from e
    if state['fit_hist'] is None:
        state['fit_hist'] = []
    return state

def write_snapshot(es, filename=default_filename):
    """write the state of `CMAEvolutionStrategy` `es` to `filename`"""
    with open(filename, 'w') as f:
        f.write(snapshot_to_string(es.get_state()))

def read_snapshot(filename=default_filename):
    """return the state `dict` read from `filename`"""
    with open(filename, 'r') as f:
        return snapshot_from_string(f.read())

def load_snapshot(es, filename=default_filename):
    """set the state of `CMAEvolutionStrategy` `es` from `filename`.

    Raise `ResumeMismatch` if dimension or population size differ.
    """
    state = read_snapshot(filename)
    if state['n'] != es.N or state['popsize'] != es.popsize:
        raise ResumeMismatch(
            "snapshot in %s has dimension %d and popsize %d, expected %d and %d"
            % (filename, state['n'], state['popsize'], es.N, es.popsize))
    return es.set_state(state)
