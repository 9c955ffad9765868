#!/usr/bin/env python

# Utility functions shared by the samplers.

from functools import lru_cache

import numpy as np
from scipy.special import comb

def rng_from_state(random_state = None):
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)

# Uniform integer in {0, ..., n-1}. Counts from the exact sampler
# routinely overflow 64 bits, so large n are drawn from raw random
# bytes by rejection.
def randbelow(rng, n):
    if n < 1:
        raise ValueError('empty range')
    if n < 2 ** 62:
        return int(rng.integers(n))

    k = n.bit_length()
    n_bytes = (k + 7) // 8
    while True:
        x = int.from_bytes(rng.bytes(n_bytes), 'little') >> (8 * n_bytes - k)
        if x < n:
            return x

# Two distinct indices from range(n), uniformly over ordered pairs
def distinct_pair(rng, n):
    a = int(rng.integers(n))
    b = int(rng.integers(n - 1))
    if b >= a:
        b += 1
    return a, b

@lru_cache(maxsize = None)
def binomial(n, k):
    return int(comb(n, k, exact = True))

def margins(A):
    A = np.asarray(A)
    return A.sum(1), A.sum(0)
