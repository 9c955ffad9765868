#!/usr/bin/env python

# Markov chains on binary matrices with fixed or interval margins.
#
# Each chain owns one current matrix and a step() transition that
# proposes a local move and either applies it or rejects it, leaving
# the matrix unchanged. step() returns whether the move was applied.
# All proposals are symmetric (or corrected by Metropolis-Hastings),
# so the uniform distribution on the state space is stationary.

import logging
from math import ceil

import numpy as np

from BinaryMatrix import realize
from Generator import RandomGenerator, Method, UnknownGenerator, methods_for
from Utility import distinct_pair, margins

logger = logging.getLogger(__name__)

# Flip the 2x2 submatrix on rows (i, k) and columns (j, l) if it is
# diagonal or anti-diagonal; this preserves every row and column sum.
def switch(A, i, k, j, l):
    a = A[i,j]
    if a != A[k,l] or A[i,l] != A[k,j] or a == A[i,l]:
        return False
    A[i,j] = A[k,l] = 1 - a
    A[i,l] = A[k,j] = a
    return True

class Chain:
    def __init__(self, instance, A, rng):
        self.instance = instance
        self.A = A
        self.rng = rng

    def step(self):
        raise NotImplementedError

    def run(self, steps):
        accepted = 0
        for t in range(steps):
            if self.step():
                accepted += 1
        return accepted

##############################################################################
# Fixed margins
##############################################################################

# Kannan-Tetali-Vempala switch chain. Rows and columns are drawn
# independently, with replacement; a repeated index is a rejected
# move, which makes the chain lazy and hence aperiodic.
class SwitchChain(Chain):
    def step(self):
        M, N = self.A.shape
        if M < 2 or N < 2:
            return False
        i, k, j, l = (int(x) for x in self.rng.integers((M, M, N, N)))
        if i == k or j == l:
            return False
        return switch(self.A, i, k, j, l)

# Switches proposed on the edges of the bipartite graph: two ones
# (i, j) and (k, l) are rewired to (i, l) and (k, j) when they share
# no row or column and both of those cells are empty. The two edges
# are drawn with replacement, so the chain is lazy as above.
class EdgeSwitchChain(Chain):
    def __init__(self, instance, A, rng):
        Chain.__init__(self, instance, A, rng)
        self.edges = np.argwhere(A == 1)

    def step(self):
        E = len(self.edges)
        if E < 2:
            return False
        a, b = (int(x) for x in self.rng.integers(E, size = 2))
        i, j = self.edges[a]
        k, l = self.edges[b]
        if i == k or j == l or self.A[i,l] or self.A[k,j]:
            return False

        self.A[i,j] = self.A[k,l] = 0
        self.A[i,l] = self.A[k,j] = 1
        self.edges[a] = (i, l)
        self.edges[b] = (k, j)
        return True

# Curveball: two rows trade a random share of the columns in which
# exactly one of them has a one, each keeping its number of ones.
class CurveballChain(Chain):
    def step(self):
        M = self.A.shape[0]
        if M < 2:
            return False
        i, k = distinct_pair(self.rng, M)
        A_i, A_k = self.A[i], self.A[k]

        only_i = np.flatnonzero(A_i > A_k)
        only_k = np.flatnonzero(A_k > A_i)
        if len(only_i) == 0 or len(only_k) == 0:
            return False

        pool = np.concatenate([only_i, only_k])
        self.rng.shuffle(pool)
        n_i = len(only_i)
        A_i[pool] = 0
        A_k[pool] = 0
        A_i[pool[:n_i]] = 1
        A_k[pool[n_i:]] = 1
        return True

##############################################################################
# Interval margins
##############################################################################

# Moves: flip a single cell, shift a one along a row (changing two
# column sums), shift a one along a column (changing two row sums), or
# switch a 2x2 submatrix. The move type is picked uniformly and its
# parameters uniformly, so every move is proposed with the same
# probability as its reverse.
class SimpleChain(Chain):
    FLIP, ROW_SHIFT, COL_SHIFT, SWITCH = range(4)

    def __init__(self, instance, A, rng):
        Chain.__init__(self, instance, A, rng)
        self.r_lo, self.r_hi = instance.row_bounds()
        self.c_lo, self.c_hi = instance.col_bounds()
        self.r, self.c = margins(A)

    def step(self):
        move = self.rng.integers(4)
        if move == self.FLIP:
            return self.flip()
        elif move == self.ROW_SHIFT:
            return self.shift(False)
        elif move == self.COL_SHIFT:
            return self.shift(True)
        else:
            return self.switch()

    def apply_flip(self, i, j):
        d = 1 - 2 * int(self.A[i,j])
        self.A[i,j] += d
        self.r[i] += d
        self.c[j] += d

    # Shifts along a column are shifts along a row of the transpose,
    # with the roles of row and column sums exchanged.
    def lines(self, transpose):
        if transpose:
            return self.A.T, self.r, self.r_lo, self.r_hi
        else:
            return self.A, self.c, self.c_lo, self.c_hi

    def apply_shift(self, transpose, line, a, b):
        A, s, _, _ = self.lines(transpose)
        A[line,a] = 0
        A[line,b] = 1
        s[a] -= 1
        s[b] += 1

    def flip(self):
        M, N = self.A.shape
        if M == 0 or N == 0:
            return False
        i = int(self.rng.integers(M))
        j = int(self.rng.integers(N))
        d = 1 - 2 * int(self.A[i,j])
        if not (self.r_lo[i] <= self.r[i] + d <= self.r_hi[i] and
                self.c_lo[j] <= self.c[j] + d <= self.c_hi[j]):
            return False
        self.apply_flip(i, j)
        return True

    def shift(self, transpose):
        A, s, lo, hi = self.lines(transpose)
        n_lines, n_cells = A.shape
        if n_lines == 0 or n_cells < 2:
            return False
        line = int(self.rng.integers(n_lines))
        a, b = distinct_pair(self.rng, n_cells)
        if A[line,a] == A[line,b]:
            return False
        if A[line,b]:
            a, b = b, a
        if s[a] - 1 < lo[a] or s[b] + 1 > hi[b]:
            return False
        self.apply_shift(transpose, line, a, b)
        return True

    def switch(self):
        M, N = self.A.shape
        if M < 2 or N < 2:
            return False
        i, k = distinct_pair(self.rng, M)
        j, l = distinct_pair(self.rng, N)
        return switch(self.A, i, k, j, l)

# Flips and shifts are proposed only among the moves that the current
# row and column sums admit, which avoids most rejections when sums
# sit at their bounds. Because the number of admissible moves changes
# from state to state, a proposed move is accepted with probability
# min(1, n(x) / n(y)), where n counts the admissible moves of that
# type before (x) and after (y) the move.
class InformedChain(SimpleChain):
    def flip_mask(self):
        A = self.A
        up = ((A == 0) & (self.r < self.r_hi)[:,None] &
              (self.c < self.c_hi)[None,:])
        down = ((A == 1) & (self.r > self.r_lo)[:,None] &
                (self.c > self.c_lo)[None,:])
        return up | down

    def shift_masks(self, transpose):
        A, s, lo, hi = self.lines(transpose)
        src = (A == 1) & (s > lo)
        dst = (A == 0) & (s < hi)
        return src, dst, src.sum(1) * dst.sum(1)

    def n_flips(self):
        return int(self.flip_mask().sum())

    def n_shifts(self, transpose):
        return int(self.shift_masks(transpose)[2].sum())

    def metropolis(self, n_x, n_y):
        return n_y <= n_x or self.rng.random() * n_y < n_x

    def flip(self):
        mask = self.flip_mask()
        n_x = int(mask.sum())
        if n_x == 0:
            return False
        i, j = divmod(int(self.rng.choice(np.flatnonzero(mask))),
                      self.A.shape[1])
        self.apply_flip(i, j)
        if not self.metropolis(n_x, self.n_flips()):
            self.apply_flip(i, j)
            return False
        return True

    def shift(self, transpose):
        src, dst, weights = self.shift_masks(transpose)
        n_x = int(weights.sum())
        if n_x == 0:
            return False
        line = int(self.rng.choice(len(weights), p = weights / n_x))
        a = int(self.rng.choice(np.flatnonzero(src[line])))
        b = int(self.rng.choice(np.flatnonzero(dst[line])))
        self.apply_shift(transpose, line, a, b)
        if not self.metropolis(n_x, self.n_shifts(transpose)):
            self.apply_shift(transpose, line, b, a)
            return False
        return True

CHAINS = { Method.KTV_SWITCH: SwitchChain,
           Method.EDGE_SWITCH: EdgeSwitchChain,
           Method.CURVEBALL: CurveballChain,
           Method.SIMPLE: SimpleChain,
           Method.INFORMED: InformedChain }

# As a heuristic, the default number of steps between samples makes
# on average "coverage" many proposals concerning each cell.
def default_steps(instance, coverage = 2):
    return max(1, int(ceil(coverage * instance.M * instance.N / 4)))

class MCMCGenerator(RandomGenerator):
    """Draws successive states of one Markov chain.

    The chain starts from a realization of the instance and is never
    restarted; consecutive samples are separated by `steps` steps.
    """
    def __init__(self, instance, method, steps = None, rng = None,
                 coverage = 2):
        RandomGenerator.__init__(self, instance, rng)

        method = Method.resolve(method)
        if method not in CHAINS or method not in methods_for(instance):
            raise UnknownGenerator('Method %r is not a Markov chain for %s' %
                                   (method.value, instance))
        if steps is None:
            steps = default_steps(instance, coverage)
        if steps < 0:
            raise ValueError('steps must be non-negative')
        self.method = method
        self.steps = int(steps)

        A = realize(instance)
        self.chain = CHAINS[method](instance, A, self.rng)
        self.gen_info['steps'] = 0
        self.gen_info['accepted'] = 0

        logger.debug('Started %s chain on %s, %d steps per sample',
                     method.value, instance, self.steps)

    def draw(self):
        accepted = self.chain.run(self.steps)
        self.gen_info['steps'] += self.steps
        self.gen_info['accepted'] += accepted
        logger.debug('%s: accepted %d of %d proposals',
                     self.method.value, accepted, self.steps)
        return self.chain.A.copy()
