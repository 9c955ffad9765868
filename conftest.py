import itertools

import numpy as np
import pytest
from scipy.stats import chisquare


def enumerate_matrices(instance):
    """Every binary matrix satisfying the instance, by brute force."""
    M, N = instance.M, instance.N
    found = []
    for bits in itertools.product([0, 1], repeat=M * N):
        A = np.array(bits, dtype=np.int8).reshape((M, N))
        if instance.admits(A):
            found.append(A)
    return found


def uniformity_pvalue(samples, support):
    """Chi-square p-value of the samples against uniform on support.

    Raises KeyError if a sample is not in the support.
    """
    index = {A.tobytes(): n for n, A in enumerate(support)}
    observed = np.zeros(len(support))
    for A in samples:
        observed[index[np.ascontiguousarray(A, dtype=np.int8).tobytes()]] += 1
    return chisquare(observed).pvalue


@pytest.fixture
def brute_force():
    return enumerate_matrices


@pytest.fixture
def pvalue():
    return uniformity_pvalue


@pytest.fixture
def rng():
    return np.random.default_rng(137)
