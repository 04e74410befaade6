'''Krylov subspace approximation of the matrix exponential acting on a vector, w = exp(t*A) * v'''

from expmv.core import expmv, expmv_inplace, KrylovPropagator
from expmv.core import ExpmvError, DimensionMismatchError, KrylovConvergenceError
from expmv.settings import ExpmvSettings
from expmv.result import ExpmvStats

__all__ = ["expmv", "expmv_inplace", "KrylovPropagator", "ExpmvSettings", "ExpmvStats",
           "ExpmvError", "DimensionMismatchError", "KrylovConvergenceError"]

__version__ = "0.1.0"
__license__ = "GPLv3"
__status__ = "Prototype"
