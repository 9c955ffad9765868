#!/usr/bin/env python

# Empirical check of uniformity for every sampling method.
#
# Each method draws many matrices from a small instance whose matrices
# can be counted exactly; the histogram of observed matrices is then
# compared against the uniform distribution with a chi-square test.
# Matrices never observed enter the test with a count of zero.

from collections import Counter

import numpy as np
import matplotlib.pyplot as plt
from scipy.stats import chisquare

from Exact import count
from Generator import methods_for
from Margins import FixedInstance, IntervalInstance
from Sampling import construct_generator, SamplingEngine

# Parameters
params = { 'fixed': ([3, 1, 2], [1, 2, 1, 2]),
           'interval': ([0, 1, 1], [2, 3, 2], [1, 0, 0, 1], [2, 2, 1, 3]),
           'num_samples': 5000,
           'coverage': 4,
           'plot': True }

# Set random seed for reproducible output
rng = np.random.default_rng(137)

# Report parameters for the run
print('Parameters:')
for field in params:
    print('%s: %s' % (field, str(params[field])))

instances = [FixedInstance(*params['fixed']),
             IntervalInstance(*params['interval'])]

if params['plot']:
    fig, axes = plt.subplots(len(instances), 1)

for n, instance in enumerate(instances):
    total = count(instance)
    expected = params['num_samples'] / total
    print()
    print(instance)
    print('Number of matrices: %d' % total)

    for method in sorted(methods_for(instance), key = lambda m: m.value):
        gen = construct_generator(instance, method, rng = rng,
                                  coverage = params['coverage'])
        samples = SamplingEngine(gen).sample(params['num_samples'])

        histogram = Counter(A.tobytes() for A in samples)
        observed = np.zeros(total)
        observed[:len(histogram)] = sorted(histogram.values(), reverse = True)
        stat, p = chisquare(observed)

        print('%-12s seen %4d of %4d  chi-square = %8.2f  p = %.3f  (%.2fs)' %
              (method.value, len(histogram), total, stat, p,
               gen.gen_info['wall_time']))

        if params['plot']:
            axes[n].plot(np.arange(total), observed / expected,
                         label = method.value)

    if params['plot']:
        axes[n].axhline(1.0, color = 'k', linestyle = ':')
        axes[n].set_ylabel('observed / expected')
        axes[n].set_title(str(instance), fontsize = 'small')
        axes[n].legend(fontsize = 'small')

if params['plot']:
    axes[-1].set_xlabel('matrix (by decreasing frequency)')
    plt.tight_layout()
    plt.show()
