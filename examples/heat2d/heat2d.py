'''
2D Heat Equation, propagated with the Krylov matrix exponential

The plate is discretized with finite differences, giving x' = Ax with a sparse A. The
temperature at time t is exp(t*A) * x0, computed without forming exp(t*A).
'''

import math
import time

import numpy as np
from scipy.sparse import lil_matrix
from scipy.sparse.linalg import expm_multiply

from expmv import expmv, ExpmvSettings
from expmv.timerutil import Timers

def make_heat_matrix(num_x, num_y, diffusity_const=0.01, len_x=1.0, len_y=1.0, heat_lost_const=0.5):
    '''obtain the sparse A matrix of the semi-discretized 2-d heat equation

    the left, top and bottom edges are insulated, heat is lost through the right edge
    '''

    assert isinstance(num_x, int) and isinstance(num_y, int), "number of mesh points should be an integer"

    if num_x <= 0 or num_y <= 0:
        raise ValueError('number of mesh points should be larger than zero')

    disc_step_x = len_x / (num_x + 1)
    disc_step_y = len_y / (num_y + 1)

    num_var = num_x * num_y

    # changing the sparsity structure of a csr_matrix is expensive. lil_matrix is more efficient
    a_mat = lil_matrix((num_var, num_var))
    a = 1 / disc_step_x**2
    b = 1 / disc_step_y**2
    k = heat_lost_const

    for i in range(num_var):
        a_mat[i, i] = -2 * (a + b)
        x_pos = i % num_x
        y_pos = i // num_x

        if x_pos - 1 >= 0:
            a_mat[i, i - 1] = a
        else:
            a_mat[i, i] += a

        if x_pos + 1 <= num_x - 1:
            a_mat[i, i + 1] = a
        else:
            a_mat[i, i] += a / (1 + k * disc_step_x)

        if y_pos - 1 >= 0:
            a_mat[i, i - num_x] = b
        else:
            a_mat[i, i] += b

        if y_pos + 1 <= num_y - 1:
            a_mat[i, i + num_x] = b
        else:
            a_mat[i, i] += b

    return diffusity_const * a_mat.tocsr()

def make_init_temperature(num_x, num_y):
    'a hot square in the middle of the plate'

    rv = np.zeros((num_y, num_x))
    rv[num_y // 3:2 * num_y // 3, num_x // 3:2 * num_x // 3] = 1.0

    return rv.reshape(-1)

def main():
    'main code'

    samples_per_side = 60
    max_time = 5.0

    print("Making {}x{} 2d Heat Plate ODEs...".format(samples_per_side, samples_per_side))
    a_mat = make_heat_matrix(samples_per_side, samples_per_side)
    init = make_init_temperature(samples_per_side, samples_per_side)

    settings = ExpmvSettings(tol=1e-8)
    settings.profile = True

    Timers.reset()
    start = time.time()
    final, stats = expmv(max_time, a_mat, init, settings=settings, return_stats=True)
    print("Krylov time: {:.3f}s, {}".format(time.time() - start, stats))

    Timers.print_stats()

    start = time.time()
    expected = expm_multiply(a_mat * max_time, init)
    print("expm_multiply time: {:.3f}s".format(time.time() - start))

    center = (samples_per_side // 2) * samples_per_side + samples_per_side // 2
    print("Center temperature at t={}: {:.8f} (expm_multiply: {:.8f})".format(max_time, final[center],
                                                                              expected[center]))
    print("Max difference: {:.3g}".format(np.max(np.abs(final - expected))))

    assert math.isclose(final[center], expected[center], abs_tol=1e-5)

if __name__ == '__main__':
    main()
