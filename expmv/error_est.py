'''
Local error estimation and step size control for the Krylov propagator.

The estimates follow Expokit (R.B. Sidje, ACM Trans. Math. Softw., 24(1):130-156, 1998):
the exponential of the padded (m+2) x (m+2) hessenberg matrix gives two error terms of
different order, which are blended to decide whether a trial step size is accepted.
'''

import math

import numpy as np

from expmv.timerutil import Timers
from expmv.util import Freezable

class StepAccepted(Freezable):
    'the trial step size was accepted and the state vector was updated'

    def __init__(self, tau, err_loc, order, rejections):
        self.tau = tau
        self.err_loc = err_loc
        self.order = order # exponent r in the step size formula
        self.rejections = rejections # number of smaller step sizes tried before this one

        self.freeze_attrs()

class StepExhausted(Freezable):
    'every allowed step size reduction was rejected'

    def __init__(self, tau, err_loc, attempts):
        self.tau = tau # step size that would have been tried next
        self.err_loc = err_loc
        self.attempts = attempts

        self.freeze_attrs()

def round_sig(x, digits=2):
    'round x to the given number of significant digits (zero and non-finite values are returned as-is)'

    if x == 0 or not math.isfinite(x):
        return x

    return round(x, digits - 1 - int(math.floor(math.log10(abs(x)))))

def initial_step_size(tol, beta, anorm, m):
    '''a-priori estimate of the first step size, from the Krylov error bound

    tau0 = (1/anorm) * ((fact*tol) / (4*beta*anorm))^(1/m), fact = ((m+1)/e)^(m+1) * sqrt(2*pi*(m+1))

    evaluated in log space since fact overflows for large m. Returns inf when anorm is zero.
    '''

    if anorm <= 0:
        return math.inf

    log_fact = (m + 1) * (math.log(m + 1) - 1) + 0.5 * math.log(2 * math.pi * (m + 1))
    log_tau = -math.log(anorm) + (log_fact + math.log(tol) - math.log(4 * beta * anorm)) / m

    return round_sig(math.exp(log_tau))

def scaled_step_size(tau, tol, err_loc, order, gamma):
    'next step size from the last one and its local error, rounded to 2 significant digits'

    if err_loc <= 0:
        return math.inf

    return round_sig(gamma * tau * (tau * tol / err_loc) ** order)

def local_error(f_mat, beta, avnorm, m):
    '''estimate the local error from the exponential of the padded hessenberg matrix

    returns a pair err_loc, order
    '''

    err1 = abs(beta * f_mat[m, 0])
    err2 = abs(beta * f_mat[m + 1, 0] * avnorm)

    if err1 > 10 * err2:
        # err1 >> err2, the second estimate is reliable
        rv = err2, 1.0 / m
    elif err1 > err2:
        rv = (err1 * err2) / (err1 - err2), 1.0 / m
    else:
        rv = err1, 1.0 / max(m - 1, 1)

    return rv

def correct_step(work, w, beta, avnorm, tau, tsgn, tol, settings):
    '''try step sizes starting at tau, shrinking after each rejection

    work holds the arnoldi basis and hessenberg matrix of the current step. On acceptance w is
    overwritten with the propagated state and a StepAccepted is returned. If settings.maxiter
    attempts are all rejected, w is untouched and a StepExhausted is returned.
    '''

    m = work.m
    err_loc = None

    for attempt in range(settings.maxiter):
        with Timers.timed('expm', settings.profile):
            f_mat = settings.expm_func(tsgn * tau * work.h_mat)

        err_loc, order = local_error(f_mat, beta, avnorm, m)

        if err_loc == 0 or err_loc <= settings.delta * tau * (tau * tol / err_loc) ** order:
            w[:] = beta * np.dot(f_mat[:m + 1, 0], work.v_mat)

            return StepAccepted(tau, err_loc, order, attempt)

        tau = scaled_step_size(tau, tol, err_loc, order, settings.gamma)

    return StepExhausted(tau, err_loc, settings.maxiter)
