'''
Operator norm estimates used to pick the initial Krylov step size
'''

import numpy as np
from scipy.sparse import issparse
from scipy.sparse.linalg import norm as sparse_norm

def default_anorm(a_mat):
    '''get the infinity norm (max absolute row sum) of a_mat

    returns None if the norm can't be computed for this operator type (for example a
    scipy LinearOperator), in which case the caller falls back to 1.0
    '''

    if issparse(a_mat):
        rv = float(sparse_norm(a_mat, np.inf))
    elif isinstance(a_mat, np.ndarray):
        rv = float(np.linalg.norm(a_mat, np.inf))
    else:
        rv = None

    return rv
