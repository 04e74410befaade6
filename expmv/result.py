'''
Statistics recorded while propagating a vector with the Krylov method
'''

from expmv.util import Freezable

class ExpmvStats(Freezable):
    'record of the accepted steps of a single propagation'

    def __init__(self, final_time=0.0):
        self.final_time = final_time # |t|
        self.anorm = None # operator norm estimate that was used
        self.initial_step = None # a-priori first step size

        # one entry per accepted step
        self.step_times = [] # propagated time after the step
        self.step_sizes = []
        self.err_locs = []
        self.krylov_dims = [] # basis size, less than m only on a happy breakdown
        self.breakdowns = []

        self.rejections = 0 # total number of rejected trial step sizes

        self.freeze_attrs()

    def add_step(self, tk, tau, err_loc, krylov_dim, breakdown, rejections):
        'record an accepted step'

        self.step_times.append(tk)
        self.step_sizes.append(tau)
        self.err_locs.append(err_loc)
        self.krylov_dims.append(krylov_dim)
        self.breakdowns.append(breakdown)
        self.rejections += rejections

    @property
    def num_steps(self):
        'number of accepted steps'

        return len(self.step_times)

    @property
    def total_error(self):
        'sum of the local error estimates over all steps, each floored at the round-off level anorm * eps'

        return sum(self.err_locs)

    def __str__(self):
        return "{} steps to t={:.6g} ({} rejected step sizes, {} breakdowns), summed local error {:.3g}".format(
            self.num_steps, self.final_time, self.rejections, sum(self.breakdowns), self.total_error)
