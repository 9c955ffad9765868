#!/usr/bin/env python

# Construction of random generators by method name, repeated sampling,
# and the plain-data entry points for fixed and interval margins.

import logging

import numpy as np

from BinaryMatrix import is_realizable_fixed as _is_realizable_fixed
from BinaryMatrix import is_realizable_interval as _is_realizable_interval
from Chains import MCMCGenerator
from Exact import ExactGenerator
from Generator import Method, UnknownGenerator, methods_for
from Margins import FixedInstance, IntervalInstance, InvalidInstance
from Margins import as_margin

logger = logging.getLogger(__name__)

def construct_generator(instance, method, steps = None, rng = None,
                        coverage = 2):
    """Resolve method once and build the matching generator.

    Raises UnknownGenerator for unrecognized names and for methods of
    the other margin type; steps and coverage are ignored for 'exact'.
    """
    method = Method.resolve(method)
    if method not in methods_for(instance):
        kind = 'fixed' if instance.is_fixed else 'interval'
        raise UnknownGenerator('Method %r not available for %s margins' %
                               (method.value, kind))

    if method is Method.EXACT:
        return ExactGenerator(instance, rng = rng)
    return MCMCGenerator(instance, method, steps = steps, rng = rng,
                         coverage = coverage)

class SamplingEngine:
    def __init__(self, generator):
        self.generator = generator

    def sample(self, N):
        """Return a list of N matrices, in the order they were drawn."""
        if N < 0:
            raise ValueError('number of samples must be non-negative')
        samples = [self.generator.next() for n in range(N)]
        logger.debug('Drew %d samples from %s', N,
                     type(self.generator).__name__)
        return samples

def sample_fixed(rowsums, colsums, N, steps = None, method = 'curveball',
                 rng = None):
    instance = FixedInstance(rowsums, colsums)
    generator = construct_generator(instance, method, steps, rng)
    return SamplingEngine(generator).sample(N)

def sample_interval(rowsums_lo, rowsums_hi, colsums_lo, colsums_hi, N,
                    steps = None, method = 'informed', rng = None):
    instance = IntervalInstance(rowsums_lo, rowsums_hi,
                                colsums_lo, colsums_hi)
    generator = construct_generator(instance, method, steps, rng)
    return SamplingEngine(generator).sample(N)

# Realizability is decided on the margins themselves, so sums beyond
# the opposite dimension simply make the answer False rather than
# being rejected as a malformed instance.
def is_realizable_fixed(rowsums, colsums):
    r = as_margin(rowsums, 'row sums')
    c = as_margin(colsums, 'column sums')
    return _is_realizable_fixed(r, c)

def is_realizable_interval(rowsums_lo, rowsums_hi, colsums_lo, colsums_hi):
    r_lo = as_margin(rowsums_lo, 'row lower bounds')
    r_hi = as_margin(rowsums_hi, 'row upper bounds')
    c_lo = as_margin(colsums_lo, 'column lower bounds')
    c_hi = as_margin(colsums_hi, 'column upper bounds')
    if len(r_lo) != len(r_hi) or len(c_lo) != len(c_hi):
        raise InvalidInstance('bounds differ in length')
    if np.any(r_lo > r_hi) or np.any(c_lo > c_hi):
        raise InvalidInstance('lower bound exceeds upper bound')
    return _is_realizable_interval(r_lo, r_hi, c_lo, c_hi)
