#!/usr/bin/env python

# Exact counting and exactly uniform sampling of binary matrices with
# fixed or interval margins.
#
# Columns are filled one at a time. Before column j, each row is
# described by (need, room): the ones it still requires to reach its
# lower bound and the ones it may still take under its upper bound,
# with room clipped to the number of remaining columns. Rows with the
# same pair are interchangeable, so the number of ways to complete the
# matrix depends only on j and the multiset of pairs. That multiset,
# stored as a sorted tuple of ((need, room), multiplicity), is the key
# of the lookup table. Fixed margins are the special case need == room.

import logging
from collections import Counter

import numpy as np

from BinaryMatrix import conjugate, is_realizable
from Generator import RandomGenerator, Method
from Margins import Infeasible
from Utility import binomial, randbelow

logger = logging.getLogger(__name__)

def canonical(groups):
    return tuple(sorted((key, size) for key, size in groups.items()
                        if size > 0))

# All ways of choosing a number of ones for each group, where group g
# takes between ranges[g][0] and ranges[g][1] ones and the column
# total lies in [lo, hi].
def splits(ranges, lo, hi):
    G = len(ranges)
    tail_min = [0] * (G + 1)
    tail_max = [0] * (G + 1)
    for g in range(G - 1, -1, -1):
        tail_min[g] = tail_min[g+1] + ranges[g][0]
        tail_max[g] = tail_max[g+1] + ranges[g][1]

    out = []
    stack = [(0, 0, ())]
    while stack:
        g, total, ks = stack.pop()
        if g == G:
            if lo <= total <= hi:
                out.append(ks)
            continue
        k_min = max(ranges[g][0], lo - total - tail_max[g+1])
        k_max = min(ranges[g][1], hi - total - tail_min[g+1])
        for k in range(k_max, k_min - 1, -1):
            stack.append((g + 1, total + k, ks + (k,)))
    return out

# Moves out of a state with n_rem columns left (including the current
# one), for a column whose sum must lie in [c_lo, c_hi]. Each move is
# (ones per group, number of ways to pick the rows, next state).
def transitions(state, n_rem, c_lo, c_hi):
    ranges = []
    for (need, room), size in state:
        if need == n_rem:
            # Every such row must take a one in each remaining column
            ranges.append((size, size))
        elif room == 0:
            ranges.append((0, 0))
        else:
            ranges.append((0, size))

    moves = []
    for ks in splits(ranges, c_lo, c_hi):
        weight = 1
        after = Counter()
        for ((need, room), size), k in zip(state, ks):
            weight *= binomial(size, k)
            if k > 0:
                after[(max(need - 1, 0), min(room - 1, n_rem - 1))] += k
            if k < size:
                after[(need, min(room, n_rem - 1))] += size - k
        moves.append((ks, weight, canonical(after)))
    return moves

# Remaining columns of the matrix, summarized for the test below:
# col_cap[k] is the most ones k rows can place in them, and
# col_demand[l] the least number of ones their l most demanding
# columns need.
def column_profile(c_lo, c_hi, M):
    col_cap = np.zeros(M + 1, dtype = np.int64)
    if M > 0:
        col_cap[1:] = np.cumsum(conjugate(c_hi, M))
    col_demand = np.zeros(len(c_lo) + 1, dtype = np.int64)
    col_demand[1:] = np.cumsum(np.sort(c_lo)[::-1])
    return col_cap, col_demand

# Whether the rows of a state can be completed on the columns described
# by the profile. With row sums in [need, room] and column sums in
# [c_lo, c_hi], this holds exactly when the k largest needs fit under
# col_cap[k] for every k, and the l largest column lower bounds fit
# under sum_i min(room_i, l) for every l (Mirsky's theorem; for fixed
# margins it is the Gale-Ryser condition).
def completable(state, col_cap, col_demand):
    needs, rooms = [], []
    for (need, room), size in state:
        needs += [need] * size
        rooms += [room] * size
    M, n = len(needs), len(col_demand) - 1

    if M > 0:
        top_needs = np.cumsum(sorted(needs, reverse = True))
        if np.any(top_needs > col_cap[1:M+1]):
            return False
    if n > 0:
        row_cap = np.cumsum(conjugate(rooms, n))
        if np.any(col_demand[1:] > row_cap):
            return False
    return True

class ExactTable:
    """Lookup table of completion counts, keyed by (column, state).

    Built by a forward pass over the states reachable from the initial
    one, followed by a backward pass filling in the counts.
    """
    def __init__(self, instance):
        self.M, self.N = instance.M, instance.N
        self.r_lo, r_hi = instance.row_bounds()
        self.c_lo, self.c_hi = instance.col_bounds()
        self.r_room = np.minimum(r_hi, self.N)

        self.root = canonical(Counter(zip(self.r_lo.tolist(),
                                          self.r_room.tolist())))

        profiles = [column_profile(self.c_lo[j:], self.c_hi[j:], self.M)
                    for j in range(self.N + 1)]

        # Forward pass: reachable states that can still be completed,
        # and the moves between them
        self.moves = [{} for j in range(self.N)]
        if completable(self.root, *profiles[0]):
            level = set([self.root])
        else:
            level = set()
        for j in range(self.N):
            n_rem = self.N - j
            alive = {}
            for state in level:
                moves = []
                for move in transitions(state, n_rem,
                                        int(self.c_lo[j]), int(self.c_hi[j])):
                    nxt = move[2]
                    if nxt not in alive:
                        alive[nxt] = completable(nxt, *profiles[j+1])
                    if alive[nxt]:
                        moves.append(move)
                self.moves[j][state] = moves
            level = set(state for state, ok in alive.items() if ok)
            logger.debug('Column %d: %d live of %d reached states',
                         j, len(level), len(alive))

        # Backward pass: number of completions of each state
        self.counts = [{} for j in range(self.N + 1)]
        for state in level:
            done = all(need == 0 for (need, _), _ in state)
            self.counts[self.N][state] = 1 if done else 0
        for j in range(self.N - 1, -1, -1):
            following = self.counts[j+1]
            for state, moves in self.moves[j].items():
                self.counts[j][state] = sum(w * following[nxt]
                                            for _, w, nxt in moves)

        self.total = self.counts[0].get(self.root, 0)
        self.size = sum(len(counts) for counts in self.counts)

    def sample(self, rng):
        if self.total == 0:
            raise Infeasible('no binary matrix satisfies the margins')

        A = np.zeros((self.M, self.N), dtype = np.int8)
        need = np.array(self.r_lo, dtype = np.int64)
        room = np.array(self.r_room, dtype = np.int64)

        state = self.root
        for j in range(self.N):
            # Pick the move for this column with probability
            # proportional to the number of matrices completing it
            u = randbelow(rng, self.counts[j][state])
            following = self.counts[j+1]
            for ks, w, nxt in self.moves[j][state]:
                mass = w * following[nxt]
                if u < mass:
                    break
                u -= mass
            else:
                raise RuntimeError('Internal error: This should be unreachable!')

            # Choose uniformly which rows of each group get the ones
            for ((g_need, g_room), size), k in zip(state, ks):
                if k == 0:
                    continue
                rows = np.flatnonzero((need == g_need) & (room == g_room))
                A[rng.choice(rows, size = k, replace = False), j] = 1

            took = A[:,j] == 1
            need[took] = np.maximum(need[took] - 1, 0)
            room[took] -= 1
            np.minimum(room, self.N - j - 1, out = room)
            state = nxt

        return A

def count(instance):
    """Number of binary matrices satisfying the instance."""
    return ExactTable(instance).total

class ExactGenerator(RandomGenerator):
    method = Method.EXACT

    def __init__(self, instance, rng = None):
        RandomGenerator.__init__(self, instance, rng)

        if not is_realizable(instance):
            raise Infeasible('%s is not realizable' % (instance,))
        self.table = ExactTable(instance)
        if self.table.total == 0:
            raise Infeasible('%s is not realizable' % (instance,))

        logger.debug('Exact table for %s: %d states, %d matrices',
                     instance, self.table.size, self.table.total)

    def draw(self):
        return self.table.sample(self.rng)


if __name__ == '__main__':
    from Margins import FixedInstance

    # Darwin's finches
    p = [14,13,14,10,12,2,10,1,10,11,6,2,17]
    q = [4,4,11,10,10,8,9,10,8,9,3,10,4,7,9,3,3]
    print('Counted =', count(FixedInstance(p, q)))
    print('True =   ', 67149106137567626)

    # A simple check of the uniformity of the sampler
    p = [3,1,2]
    q = [1,2,1,2]
    k = 10000
    gen = ExactGenerator(FixedInstance(p, q), rng = 137)
    print('Number of matrices =', gen.table.total)
    histogram = Counter(gen.next().tobytes() for _ in range(k))
    print('Histogram of sampled matrices:')
    print('(index)  (count)  (P_empirical/P_uniform)')
    for i, v in enumerate(histogram.values()):
        print(i, v, gen.table.total * v / float(k))
