#!/usr/bin/env python

# Margin constraints on binary matrices: either exact (fixed) row and
# column sums, or intervals of admissible row and column sums.

import numpy as np

from Utility import margins

class InvalidInstance(ValueError):
    pass

class Infeasible(Exception):
    pass

# Convert a caller-supplied margin vector into a read-only integer
# array. Floats are accepted as long as they are integral, since
# margins often arrive as generic numeric vectors.
def as_margin(x, name):
    try:
        a = np.array(x, dtype = float)
    except (TypeError, ValueError):
        raise InvalidInstance('%s must be numeric' % name)
    if a.ndim != 1:
        raise InvalidInstance('%s must be one-dimensional' % name)
    if not np.all(np.isfinite(a)):
        raise InvalidInstance('%s must be finite' % name)
    if not np.all(a == np.round(a)):
        raise InvalidInstance('%s must be integral' % name)
    if np.any(a < 0):
        raise InvalidInstance('%s must be non-negative' % name)

    a = a.astype(np.int64)
    a.setflags(write = False)
    return a

def check_limit(x, limit, name):
    if np.any(x > limit):
        raise InvalidInstance('%s cannot exceed %d' % (name, limit))

class Instance:
    """Base class for margin instances on an (M x N) binary matrix."""
    is_fixed = False

    def row_bounds(self):
        raise NotImplementedError

    def col_bounds(self):
        raise NotImplementedError

    def admits(self, A):
        """Check whether the margins of A satisfy this instance."""
        A = np.asarray(A)
        if A.shape != (self.M, self.N):
            return False
        if not np.all((A == 0) | (A == 1)):
            return False
        r, c = margins(A)
        r_lo, r_hi = self.row_bounds()
        c_lo, c_hi = self.col_bounds()
        return bool(np.all((r_lo <= r) & (r <= r_hi)) and
                    np.all((c_lo <= c) & (c <= c_hi)))

class FixedInstance(Instance):
    is_fixed = True

    def __init__(self, r, c):
        self.r = as_margin(r, 'row sums')
        self.c = as_margin(c, 'column sums')
        self.M = len(self.r)
        self.N = len(self.c)

        check_limit(self.r, self.N, 'row sums')
        check_limit(self.c, self.M, 'column sums')

    def __repr__(self):
        return ('FixedInstance(r = %s, c = %s)' %
                (self.r.tolist(), self.c.tolist()))

    def row_bounds(self):
        return self.r, self.r

    def col_bounds(self):
        return self.c, self.c

class IntervalInstance(Instance):
    def __init__(self, r_lo, r_hi, c_lo, c_hi):
        self.r_lo = as_margin(r_lo, 'row lower bounds')
        self.r_hi = as_margin(r_hi, 'row upper bounds')
        self.c_lo = as_margin(c_lo, 'column lower bounds')
        self.c_hi = as_margin(c_hi, 'column upper bounds')

        if len(self.r_lo) != len(self.r_hi):
            raise InvalidInstance('row bounds differ in length')
        if len(self.c_lo) != len(self.c_hi):
            raise InvalidInstance('column bounds differ in length')
        self.M = len(self.r_lo)
        self.N = len(self.c_lo)

        if np.any(self.r_lo > self.r_hi):
            raise InvalidInstance('row lower bound exceeds upper bound')
        if np.any(self.c_lo > self.c_hi):
            raise InvalidInstance('column lower bound exceeds upper bound')
        check_limit(self.r_hi, self.N, 'row upper bounds')
        check_limit(self.c_hi, self.M, 'column upper bounds')

    def __repr__(self):
        return ('IntervalInstance(r_lo = %s, r_hi = %s, c_lo = %s, c_hi = %s)' %
                (self.r_lo.tolist(), self.r_hi.tolist(),
                 self.c_lo.tolist(), self.c_hi.tolist()))

    def row_bounds(self):
        return self.r_lo, self.r_hi

    def col_bounds(self):
        return self.c_lo, self.c_hi
