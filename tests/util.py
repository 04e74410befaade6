'''
Utilities for testing: operators with known exponentials
'''

import numpy as np
from scipy.sparse import diags

def laplacian_1d(dims, dtype=float):
    'get the csr_matrix of the 1-d finite-difference laplacian (-2 on the diagonal, 1 off-diagonal)'

    return diags([np.ones(dims - 1), -2 * np.ones(dims), np.ones(dims - 1)], [-1, 0, 1], format='csr', dtype=dtype)

def shift_matrix(dims):
    'nilpotent matrix with ones on the superdiagonal'

    return np.diag(np.ones(dims - 1), 1)

def shift_matrix_expm(dims, t):
    'closed-form exp(t*S) for the shift matrix, a finite sum since S^dims = 0'

    rv = np.zeros((dims, dims))
    term = np.identity(dims)
    s_mat = shift_matrix(dims)

    for k in range(dims):
        rv += term
        term = np.dot(term, s_mat) * t / (k + 1)

    return rv

def random_symmetric(dims, eigs, seed=0):
    '''make a random symmetric matrix with the given eigenvalues

    returns a_mat, q_mat, where the columns of q_mat are the eigenvectors
    '''

    rng = np.random.default_rng(seed)
    q_mat, _ = np.linalg.qr(rng.standard_normal((dims, dims)))

    return np.dot(q_mat * eigs, q_mat.T), q_mat
