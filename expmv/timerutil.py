'''
Performance timers for the Krylov propagator. Timers are referred to statically
using Timers.tic(name) and Timers.toc(name), and nest according to call order.

The timers are process-global, so they should only be enabled from a single thread.
'''

import time
from contextlib import contextmanager

from termcolor import cprint

class TimerData():
    'Performance timer which can be started with tic() and paused with toc()'

    def __init__(self, name, parent):
        assert parent is None or isinstance(parent, TimerData)

        self.name = name
        self.total_secs = 0
        self.num_calls = 0
        self.last_start_time = None

        self.parent = parent # parent TimerData, None for the top-level timer
        self.children = [] # child TimerData objects, in creation order

    def get_child(self, name):
        'get the child timer with the given name, or None'

        for child in self.children:
            if child.name == name:
                return child

        return None

    def find(self, name):
        'get all decendants (including self) with the given name, as a list'

        rv = [self] if self.name == name else []

        for child in self.children:
            rv += child.find(name)

        return rv

    def full_name(self):
        'get the full name of the timer (including ancestors)'

        if self.parent is None:
            return self.name

        return "{}.{}".format(self.parent.full_name(), self.name)

    def tic(self):
        'start the timer'

        if self.last_start_time is not None:
            raise RuntimeError("Timer started twice: {}".format(self.full_name()))

        self.num_calls += 1
        self.last_start_time = time.perf_counter()

    def toc(self):
        'stop the timer'

        if self.last_start_time is None:
            raise RuntimeError("Timer stopped without being started: {}".format(self.full_name()))

        self.total_secs += time.perf_counter() - self.last_start_time
        self.last_start_time = None

class Timers():
    '''
    a static class for doing timer measurements. Use Timers.tic(name) and
    Timers.toc(name) to start and stop timers, and print_stats() to print the tree
    '''

    top_level_timer = None
    stack = [] # currently-running timers, parents first

    # percentage of the total time below which lines are dimmed, and above which they are bold
    low_threshold = 5.0
    high_threshold = 50.0

    def __init__(self):
        raise RuntimeError('Timers is a static class; should not be instantiated')

    @staticmethod
    def reset():
        'reset all timers'

        Timers.top_level_timer = None
        Timers.stack = []

    @staticmethod
    def tic(name):
        'start a timer'

        if Timers.stack:
            parent = Timers.stack[-1]
            td = parent.get_child(name)

            if td is None:
                td = TimerData(name, parent)
                parent.children.append(td)
        else:
            td = Timers.top_level_timer

            # a different top-level name replaces the old tree
            if td is None or td.name != name:
                td = Timers.top_level_timer = TimerData(name, None)

        td.tic()
        Timers.stack.append(td)

    @staticmethod
    def toc(name):
        'stop a timer'

        assert Timers.stack, "toc('{}') called with no running timers".format(name)
        assert Timers.stack[-1].name == name, "Out of order toc(). Expected to first stop timer {}".format(
            Timers.stack[-1].full_name())

        Timers.stack.pop().toc()

    @staticmethod
    @contextmanager
    def timed(name, enabled=True):
        '''context manager pairing tic(name) with toc(name), even if the body raises

        does nothing when enabled is False, so callers can leave the global timers untouched
        '''

        if not enabled:
            yield
            return

        Timers.tic(name)

        try:
            yield
        finally:
            Timers.toc(name)

    @staticmethod
    def total_secs(name):
        'get the total time over all timers with the given name'

        if Timers.top_level_timer is None:
            return 0

        return sum(td.total_secs for td in Timers.top_level_timer.find(name))

    @staticmethod
    def num_calls(name):
        'get the number of calls over all timers with the given name'

        if Timers.top_level_timer is None:
            return 0

        return sum(td.num_calls for td in Timers.top_level_timer.find(name))

    @staticmethod
    def _print_line(text, percent_total):
        'print a line of the stats tree, highlighted based on its share of the total time'

        if percent_total < Timers.low_threshold:
            cprint(text, 'grey')
        elif percent_total > Timers.high_threshold:
            cprint(text, None, attrs=['bold'])
        else:
            cprint(text, None)

    @staticmethod
    def print_stats():
        'print statistics about performance timers to stdout'

        if Timers.top_level_timer is None:
            print("No timers were recorded")
        else:
            Timers._print_stats_recursive(Timers.top_level_timer, 0, Timers.top_level_timer.total_secs)

    @staticmethod
    def _print_stats_recursive(td, level, total_time):
        'recursively print information about a timer'

        if td.last_start_time is not None:
            raise RuntimeError("Timer was never stopped: {}".format(td.full_name()))

        percent_total = 100 * td.total_secs / total_time if total_time > 0 else 100
        indent = " " * level * 2

        if td.parent is None or td.parent.total_secs == 0:
            percent_str = ""
        else:
            percent_str = " ({:.1f}%)".format(100 * td.total_secs / td.parent.total_secs)

        Timers._print_line("{}{} Time ({} calls): {:.4f} sec{}".format(indent, td.name.capitalize(),
                                                                     td.num_calls, td.total_secs, percent_str),
                           percent_total)

        for child in td.children:
            Timers._print_stats_recursive(child, level + 1, total_time)

        if td.children and td.total_secs > 0:
            other = td.total_secs - sum(child.total_secs for child in td.children)
            other_total = 100 * other / total_time if total_time > 0 else 0

            Timers._print_line("{}  Other: {:.4f} sec ({:.1f}%)".format(indent, other, 100 * other / td.total_secs),
                               other_total)
