'''
Arnoldi iteration for the Krylov approximation of exp(t*A) * v

Builds an orthonormal basis of the Krylov subspace span{v, Av, ..., A^(m-1)v} using modified
Gram-Schmidt, together with the upper-Hessenberg projection of A onto that basis.
'''

import math

import numpy as np

from expmv.timerutil import Timers
from expmv.util import Freezable

class KrylovWorkspace(Freezable):
    '''storage reused by every step of a single propagation

    v_mat rows are the basis vectors (m+1 of them), h_mat is (m+2) x (m+2) with the
    extra row / column used for the error estimate, p_vec is scratch space for A * v
    '''

    def __init__(self, dims, m, dtype):
        assert m >= 1, "krylov dimension should be at least 1: {}".format(m)

        self.dims = dims
        self.m = m

        self.v_mat = np.zeros((m + 1, dims), dtype=dtype)
        self.h_mat = np.zeros((m + 2, m + 2), dtype=dtype)
        self.p_vec = np.zeros((dims,), dtype=dtype)

        self.freeze_attrs()

    def clear(self):
        'zero the hessenberg matrix before the next step'

        self.h_mat.fill(0)

class ArnoldiCompleted(Freezable):
    'all m+1 basis vectors were built; work.v_mat and work.h_mat hold the projection'

    def __init__(self, size, avnorm):
        self.size = size
        self.avnorm = avnorm # norm of A * v_{m+1}, used in the second error estimate

        self.freeze_attrs()

class ArnoldiBreakdown(Freezable):
    '''the krylov subspace was invariant after size basis vectors

    the state vector was already propagated over the remaining time in place
    '''

    def __init__(self, size, residual_norm):
        self.size = size
        self.residual_norm = residual_norm

        self.freeze_attrs()

def mult(a_mat, vec, out, profile=False):
    'matrix-vector product a_mat * vec, written into out'

    with Timers.timed('arnoldi mult', profile):
        out[:] = np.asarray(a_mat @ vec).reshape(out.shape)

def arnoldi_step(work, a_mat, w, beta, remaining, tsgn, settings):
    '''run one arnoldi pass starting from the state vector w, where beta = norm(w)

    On a happy breakdown, w is overwritten with exp(tsgn * remaining * A) * w (the small
    projected problem is exact) and an ArnoldiBreakdown is returned. Otherwise an
    ArnoldiCompleted is returned and w is not modified.
    '''

    with Timers.timed('arnoldi', settings.profile):
        return _arnoldi(work, a_mat, w, beta, remaining, tsgn, settings)

def _arnoldi(work, a_mat, w, beta, remaining, tsgn, settings):
    'the arnoldi pass of arnoldi_step()'

    m = work.m
    v_mat = work.v_mat
    h_mat = work.h_mat
    p_vec = work.p_vec
    norm = settings.norm
    profile = settings.profile

    v_mat[0] = w
    v_mat[0] /= beta

    for j in range(m):
        mult(a_mat, v_mat[j], p_vec, profile)

        # modified gram-schmidt against every earlier basis vector
        for i in range(j + 1):
            h_mat[i, j] = np.vdot(v_mat[i], p_vec)
            p_vec -= h_mat[i, j] * v_mat[i]

        s = norm(p_vec)
        assert not math.isinf(s) and not math.isnan(s), "vector norm was not finite in arnoldi: {}".format(s)

        if s < settings.btol:
            size = j + 1

            with Timers.timed('expm', profile):
                f_mat = settings.expm_func(tsgn * remaining * h_mat[:size, :size])

            w[:] = beta * np.dot(f_mat[:, 0], v_mat[:size])

            return ArnoldiBreakdown(size, s)

        h_mat[j + 1, j] = s
        v_mat[j + 1] = p_vec
        v_mat[j + 1] /= s

    h_mat[m + 1, m] = 1

    mult(a_mat, v_mat[m], p_vec, profile)

    return ArnoldiCompleted(m, norm(p_vec))
