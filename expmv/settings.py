'''
Settings for the Krylov matrix-exponential propagator
'''

import numpy as np
from scipy.linalg import expm

from expmv.util import Freezable
from expmv.normest import default_anorm

class ExpmvSettings(Freezable): # pylint: disable=too-few-public-methods,too-many-instance-attributes
    'Settings for the computation'

    STDOUT_NONE, STDOUT_NORMAL, STDOUT_VERBOSE, STDOUT_DEBUG = range(4)

    def __init__(self, tol=1e-7, m=None):
        if not tol > 0:
            raise ValueError("tol should be positive: {}".format(tol))

        self.tol = tol # requested accuracy of the result
        self.m = m # krylov subspace dimension, None means min(30, dims)

        # injected capabilities
        self.norm = np.linalg.norm # vector norm
        self.anorm = None # operator norm estimate, None means use anorm_func
        self.anorm_func = default_anorm # operator -> float, or None if unavailable
        self.expm_func = expm # dense matrix exponential of the small hessenberg matrix

        self.btol = 1e-7 # absolute tolerance for happy breakdown in arnoldi
        self.gamma = 0.9 # safety factor when picking the next step size
        self.delta = 1.2 # safety factor in the step acceptance test
        self.maxiter = 10 # max number of step size reductions for a single step

        # measure time with the process-global Timers (use from a single thread only)
        self.profile = False

        self.stdout = ExpmvSettings.STDOUT_NORMAL
        self.stdout_colors = [None, "yellow", "blue", "white"] # colors for each level of printing

        self.freeze_attrs()

    def copy(self, **overrides):
        '''get a copy of these settings, with any non-None keyword overrides assigned

        unknown keywords raise a TypeError, same as assigning to a frozen object
        '''

        rv = ExpmvSettings(self.tol, self.m)

        for key, value in vars(self).items():
            if key != '_frozen':
                if isinstance(value, list):
                    value = list(value)

                setattr(rv, key, value)

        for key, value in overrides.items():
            if value is not None:
                setattr(rv, key, value)

        return rv
