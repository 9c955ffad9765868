#!/usr/bin/env python

# Existence and construction of binary matrices with margin constraints

import logging

import numpy as np
import scipy.sparse as sparse
from scipy.sparse.csgraph import maximum_flow

from Margins import Infeasible

logger = logging.getLogger(__name__)

# Suppose c is a sequence of nonnegative integers. Returns c_conj where:
#   c_conj(k) := sum(c > k),    k = 0, ..., (n-1)
def conjugate(c, n):
    cc = np.zeros(n, dtype = np.int64)

    for k in c:
        if k >= n:
            cc[n-1] += 1
        elif k >= 1:
            cc[k-1] += 1

    s = cc[n-1]
    for j in range(n-2,-1,-1):
        s += cc[j]
        cc[j] = s

    return cc

##############################################################################
# Fixed margins
##############################################################################

# Necessary and sufficient check for the existence of a binary matrix
# with the specified row and column margins (Gale-Ryser conditions).
#
# The k largest row sums can place at most sum_j min(c_j, k) ones,
# which is the k-th partial sum of the conjugate of c.
def is_realizable_fixed(r, c):
    r = np.asarray(r, dtype = np.int64)
    c = np.asarray(c, dtype = np.int64)

    if np.sum(r) != np.sum(c):
        return False
    m = len(r)
    if m == 0:
        return True

    rsort = np.sort(r)[::-1]
    cc = conjugate(c, m)
    return bool(np.all(np.cumsum(rsort) <= np.cumsum(cc)))

# Adapting the routine suggested in Manfred Krause's "A Simple Proof
# of the Gale-Ryser Theorem".
#
# Eliminating the column margin nonincreasing condition by sorting and
# then undoing the sorting after the target matrix is generated.
#
# Return an arbitrary binary matrix with specified margins.
# Inputs:
#   r: row margins, length m
#   c: column margins, length n
# Output:
#   (m x n) binary matrix
def arbitrary_from_margins(r, c):
    r = np.asarray(r, dtype = np.int64)
    c = np.asarray(c, dtype = np.int64)
    if not is_realizable_fixed(r, c):
        raise Infeasible('no binary matrix has row sums %s and column sums %s' %
                         (r.tolist(), c.tolist()))

    m = len(r)
    n = len(c)

    # Sort column margins and prepare for unsorting
    o = np.argsort(-c, kind = 'stable')
    oo = np.argsort(o)
    c = c[o]

    # Construct the maximal matrix; its column sums are the conjugate of r
    A = np.zeros((m,n), dtype = np.int8)
    for i in range(m):
        A[i,0:r[i]] = 1
    col = np.sum(A, axis = 0)

    # Convert the maximal matrix into one with column sums c. The
    # first column with excess always precedes the first column with
    # deficit, so some row has a one to move between them.
    while not np.all(col == c):
        j = np.flatnonzero(col > c)[0]
        k = np.flatnonzero(col < c)[0]
        i = np.flatnonzero(A[:,j] > A[:,k])[0]
        A[i,j] = 0
        A[i,k] = 1
        col[j] -= 1
        col[k] += 1

    # Undo the sort
    return A[:,oo]

##############################################################################
# Interval margins
##############################################################################

# Flow network for interval margins, with node layout
#
#   0: source, 1..m: rows, m+1..m+n: columns, m+n+1: sink,
#   m+n+2: super-source, m+n+3: super-sink
#
# Edge (u, v) with bounds [l, u] becomes capacity (u - l), plus edges
# super-source -> v and u -> super-sink of capacity l. The sink ->
# source edge closes the circulation.
def bounded_flow_network(r_lo, r_hi, c_lo, c_hi):
    m, n = len(r_lo), len(c_lo)
    s, t = 0, m + n + 1
    S, T = m + n + 2, m + n + 3
    rows = np.arange(1, m + 1)
    cols = np.arange(m + 1, m + n + 1)
    unbounded = int(np.sum(r_hi) + np.sum(c_hi) + 1)

    ii, jj = np.meshgrid(rows, cols, indexing = 'ij')
    tails = np.concatenate([np.repeat(s, m), ii.ravel(), cols, [t],
                            np.repeat(S, m), [s], [S], cols])
    heads = np.concatenate([rows, jj.ravel(), np.repeat(t, n), [s],
                            rows, [T], [t], np.repeat(T, n)])
    caps = np.concatenate([r_hi - r_lo, np.ones(m * n, dtype = np.int64),
                           c_hi - c_lo, [unbounded],
                           r_lo, [np.sum(r_lo)], [np.sum(c_lo)], c_lo])

    keep = caps > 0
    G = sparse.csr_matrix((caps[keep].astype(np.int32),
                           (tails[keep].astype(np.int32),
                            heads[keep].astype(np.int32))),
                          shape = (m + n + 4, m + n + 4))
    return G, S, T

# Find a feasible flow; returns None if the lower bounds can't all be
# saturated, otherwise the (m x n) matrix of row -> column flows.
def interval_flow(r_lo, r_hi, c_lo, c_hi):
    r_lo = np.asarray(r_lo, dtype = np.int64)
    r_hi = np.asarray(r_hi, dtype = np.int64)
    c_lo = np.asarray(c_lo, dtype = np.int64)
    c_hi = np.asarray(c_hi, dtype = np.int64)
    m, n = len(r_lo), len(c_lo)

    # No row holds more than n ones nor any column more than m, which
    # also keeps the network capacities small
    if np.any(r_lo > n) or np.any(c_lo > m):
        return None
    r_hi = np.minimum(r_hi, n)
    c_hi = np.minimum(c_hi, m)

    demand = int(np.sum(r_lo) + np.sum(c_lo))
    if demand == 0:
        return np.zeros((m,n), dtype = np.int8)

    G, S, T = bounded_flow_network(r_lo, r_hi, c_lo, c_hi)
    result = maximum_flow(G, S, T)
    logger.debug('Bounded flow: %d of %d units of demand routed',
                 result.flow_value, demand)
    if result.flow_value < demand:
        return None

    F = result.flow[1:(m + 1), (m + 1):(m + n + 1)].toarray()
    return (F > 0).astype(np.int8)

def is_realizable_interval(r_lo, r_hi, c_lo, c_hi):
    return interval_flow(r_lo, r_hi, c_lo, c_hi) is not None

def realize_interval(r_lo, r_hi, c_lo, c_hi):
    A = interval_flow(r_lo, r_hi, c_lo, c_hi)
    if A is None:
        raise Infeasible('no binary matrix has margins within the bounds')
    return A

##############################################################################
# Dispatch on instance type
##############################################################################

def is_realizable(instance):
    if instance.is_fixed:
        return is_realizable_fixed(instance.r, instance.c)
    else:
        return is_realizable_interval(instance.r_lo, instance.r_hi,
                                      instance.c_lo, instance.c_hi)

def realize(instance):
    if instance.is_fixed:
        A = arbitrary_from_margins(instance.r, instance.c)
    else:
        A = realize_interval(instance.r_lo, instance.r_hi,
                             instance.c_lo, instance.c_hi)
    logger.debug('Realized %s with %d ones', instance, A.sum())
    return A


if __name__ == '__main__':
    # Test of binary matrix generation code
    m = np.random.random(size=(12,10)) < 0.3
    r, c = np.sum(m, axis = 1), np.sum(m, axis = 0)
    print(r, c)
    A = arbitrary_from_margins(r, c)
    print(np.sum(A, axis = 1), np.sum(A, axis = 0))

    # Test of interval realization
    A = realize_interval(r - 1 * (r > 0), r + 1 * (r < 10), c, c)
    print(np.sum(A, axis = 1), np.sum(A, axis = 0))

    # Test of conjugate
    print(conjugate([1,1,1,1,2,8], 10))
