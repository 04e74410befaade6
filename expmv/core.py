'''
Krylov subspace approximation of w = exp(t*A) * v, with adaptive step size control

See R.B. Sidje, ACM Trans. Math. Softw., 24(1):130-156, 1998
and http://www.maths.uq.edu.au/expokit
'''

import numpy as np
from termcolor import cprint

from expmv.arnoldi import KrylovWorkspace, ArnoldiBreakdown, arnoldi_step
from expmv.error_est import StepExhausted, correct_step, initial_step_size, scaled_step_size
from expmv.result import ExpmvStats
from expmv.settings import ExpmvSettings
from expmv.timerutil import Timers
from expmv.util import Freezable, matrix_to_string

class ExpmvError(RuntimeError):
    'base class for errors raised while propagating a vector'

class DimensionMismatchError(ExpmvError, ValueError):
    'the operator, input vector and output vector shapes are inconsistent'

class KrylovConvergenceError(ExpmvError):
    'no acceptable step size was found within the allowed number of reductions'

    def __init__(self, msg, tk=None, tau=None, err_loc=None, maxiter=None):
        super().__init__(msg)

        self.tk = tk
        self.tau = tau
        self.err_loc = err_loc
        self.maxiter = maxiter

def result_dtype(t, a_mat, vec):
    'get the dtype of exp(t*A) * v, at least double precision'

    t_dtype = np.complex128 if np.iscomplexobj(t) else np.float64
    a_dtype = getattr(a_mat, 'dtype', None)

    if a_dtype is None:
        a_dtype = np.float64

    return np.result_type(a_dtype, np.asarray(vec).dtype, t_dtype)

class KrylovPropagator(Freezable):
    'computes exp(t*A) * v for a fixed operator A. initialize and call propagate()'

    def __init__(self, a_mat, settings=None):
        if settings is None:
            settings = ExpmvSettings()

        assert isinstance(settings, ExpmvSettings)

        shape = getattr(a_mat, 'shape', None)

        if shape is None or len(shape) != 2 or shape[0] != shape[1]:
            raise DimensionMismatchError("operator should be a square matrix, got shape {}".format(shape))

        if settings.tol <= 0:
            raise ValueError("tol should be positive: {}".format(settings.tol))

        if settings.m is not None and settings.m < 1:
            raise ValueError("krylov dimension m should be at least 1: {}".format(settings.m))

        self.a_mat = a_mat
        self.settings = settings
        self.dims = shape[0]

        self.anorm = None # assigned lazily by get_anorm()
        self.stats = None # ExpmvStats of the last propagate() call

        self.freeze_attrs()

    def print_normal(self, msg):
        'print function for STDOUT_NORMAL and above'

        if self.settings.stdout >= ExpmvSettings.STDOUT_NORMAL:
            cprint(msg, self.settings.stdout_colors[ExpmvSettings.STDOUT_NORMAL])

    def print_verbose(self, msg):
        'print function for STDOUT_VERBOSE and above'

        if self.settings.stdout >= ExpmvSettings.STDOUT_VERBOSE:
            cprint(msg, self.settings.stdout_colors[ExpmvSettings.STDOUT_VERBOSE])

    def print_debug(self, msg):
        'print function for STDOUT_DEBUG and above'

        if self.settings.stdout >= ExpmvSettings.STDOUT_DEBUG:
            cprint(msg, self.settings.stdout_colors[ExpmvSettings.STDOUT_DEBUG])

    def get_anorm(self):
        'get the operator norm estimate, falling back to 1.0 if it can\'t be computed'

        if self.anorm is None:
            anorm = self.settings.anorm

            if anorm is None:
                anorm = self.settings.anorm_func(self.a_mat)

            if anorm is None:
                self.print_normal(("Warning: operator norm is not defined for {}, falling back to anorm = 1.0. " + \
                                   "To suppress this warning, set anorm manually.").format(type(self.a_mat).__name__))
                anorm = 1.0

            self.anorm = float(anorm)

        return self.anorm

    def check_dims(self, w, vec):
        'raise a DimensionMismatchError if w or vec don\'t fit the operator'

        if vec.ndim != 1 or vec.shape[0] != self.a_mat.shape[1]:
            raise DimensionMismatchError("dimension mismatch: vector shape {} with operator shape {}".format(
                vec.shape, self.a_mat.shape))

        if w.shape != vec.shape:
            raise DimensionMismatchError("dimension mismatch: output shape {} with input shape {}".format(
                w.shape, vec.shape))

    def propagate(self, w, t, vec):
        '''compute exp(t*A) * vec, writing the result into w

        w and vec may be the same array. Shapes and dtypes are checked before w is modified.
        t can be real or complex; for complex t the propagation is along the ray t/|t|.

        returns the ExpmvStats of the propagation (also stored in self.stats)
        '''

        vec = np.asarray(vec)
        assert isinstance(w, np.ndarray), "output buffer should be a numpy array"

        self.check_dims(w, vec)

        out_dtype = result_dtype(t, self.a_mat, vec)

        if not np.can_cast(out_dtype, w.dtype, casting='same_kind'):
            raise TypeError("output dtype {} cannot hold the result dtype {}".format(w.dtype, out_dtype))

        settings = self.settings
        m = min(30, self.dims) if settings.m is None else settings.m
        norm = settings.norm

        tf = abs(t)
        tsgn = t / tf if tf > 0 else 1.0

        beta = float(norm(vec))

        if w is not vec:
            w[:] = vec

        self.stats = stats = ExpmvStats(tf)

        if tf == 0 or beta == 0:
            return stats

        with Timers.timed('expmv', settings.profile):
            self._run_steps(w, t, tf, tsgn, beta, m, stats)

        return stats

    def _run_steps(self, w, t, tf, tsgn, beta, m, stats):
        'the step loop of propagate(), w holds the initial vector and beta is its norm'

        settings = self.settings
        tol = settings.tol
        norm = settings.norm

        anorm = self.get_anorm()
        rndoff = anorm * np.finfo(w.dtype).eps

        tau = initial_step_size(tol, beta, anorm, m)
        order = 1.0 / m

        stats.anorm = anorm
        stats.initial_step = tau
        self.print_debug("Propagating {} dims to t={} with m={}, anorm={:.4g}, initial step {}".format(
            self.dims, t, m, anorm, tau))

        work = KrylovWorkspace(self.dims, m, w.dtype)
        tk = 0.0

        while tk < tf:
            remaining = tf - tk
            tau = min(remaining, tau)

            res = arnoldi_step(work, self.a_mat, w, beta, remaining, tsgn, settings)

            if isinstance(res, ArnoldiBreakdown):
                self.print_debug("Happy breakdown after {} arnoldi iterations (residual norm {:.3g}), H:\n{}".format(
                    res.size, res.residual_norm, matrix_to_string(work.h_mat[:res.size, :res.size])))

                tau = remaining
                err_loc = settings.btol
                rejections = 0
            else:
                outcome = correct_step(work, w, beta, res.avnorm, tau, tsgn, tol, settings)

                if isinstance(outcome, StepExhausted):
                    raise KrylovConvergenceError(("Number of step size reductions exceeded {} at t={} (step " + \
                        "size {:.3g}, local error {:.3g}). Requested tolerance {} might be too small for " + \
                        "m={}.").format(outcome.attempts, tk, outcome.tau, outcome.err_loc, tol, m),
                        tk=tk, tau=outcome.tau, err_loc=outcome.err_loc, maxiter=outcome.attempts)

                tau = outcome.tau
                err_loc = outcome.err_loc
                order = outcome.order
                rejections = outcome.rejections

                if rejections > 0:
                    self.print_debug("Reduced step size {} times to {}".format(rejections, tau))

            beta = float(norm(w))

            # a clamped step lands exactly on the final time
            next_tk = tf if tau >= remaining else min(tk + tau, tf)

            if next_tk <= tk:
                raise KrylovConvergenceError("Step size {} underflowed at t={}".format(tau, tk),
                                             tk=tk, tau=tau, err_loc=err_loc)

            tk = next_tk
            stats.add_step(tk, tau, max(err_loc, rndoff), res.size, isinstance(res, ArnoldiBreakdown), rejections)

            self.print_verbose("Step {}: t = {:.6g} / {:.6g}, tau = {:.3g}, err_loc = {:.3g}, krylov dims = {}".format(
                stats.num_steps, tk, tf, tau, err_loc, res.size))

            # the raw estimate picks the next step, the round-off floor only applies to the recorded error
            tau = scaled_step_size(tau, tol, err_loc, order, settings.gamma)

            work.clear()

def _make_settings(settings, tol, m, norm, anorm):
    'copy the settings (or defaults), applying the per-call keyword overrides'

    if settings is None:
        settings = ExpmvSettings()

    return settings.copy(tol=tol, m=m, norm=norm, anorm=anorm)

def expmv_inplace(w, t, a_mat, vec, tol=None, m=None, norm=None, anorm=None, settings=None):
    '''compute w = exp(t*A) * vec using the Krylov subspace approximation, writing into w

    pass the same array for w and vec to overwrite the input. Keyword arguments that are not
    None override the corresponding attribute of settings (an ExpmvSettings).

    returns the ExpmvStats of the propagation
    '''

    settings = _make_settings(settings, tol, m, norm, anorm)

    return KrylovPropagator(a_mat, settings).propagate(w, t, vec)

def expmv(t, a_mat, vec, tol=None, m=None, norm=None, anorm=None, settings=None, return_stats=False):
    '''compute exp(t*A) * vec using the Krylov subspace approximation

    t: real or complex scalar
    a_mat: square numpy array, scipy sparse matrix or scipy LinearOperator
    vec: vector with a_mat.shape[1] elements
    tol: requested accuracy (default 1e-7)
    m: krylov subspace dimension (default min(30, dims))
    norm: vector norm function (default numpy.linalg.norm)
    anorm: operator norm estimate (default is the infinity norm of a_mat, if defined)

    returns a new array, or a tuple (array, ExpmvStats) if return_stats is True
    '''

    settings = _make_settings(settings, tol, m, norm, anorm)
    prop = KrylovPropagator(a_mat, settings)

    vec = np.asarray(vec)
    prop.check_dims(vec, vec)

    rv = np.array(vec, dtype=result_dtype(t, a_mat, vec))
    stats = prop.propagate(rv, t, rv)

    if return_stats:
        return rv, stats

    return rv
