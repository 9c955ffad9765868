#!/usr/bin/env python

# Common interface for random generators of binary matrices, and the
# closed set of generation methods that can be requested by name.

from enum import Enum
from time import time

from Utility import rng_from_state

class UnknownGenerator(ValueError):
    pass

class Method(Enum):
    EXACT = 'exact'
    KTV_SWITCH = 'ktv-switch'
    EDGE_SWITCH = 'edge-switch'
    CURVEBALL = 'curveball'
    SIMPLE = 'simple'
    INFORMED = 'informed'

    @classmethod
    def resolve(cls, method):
        if isinstance(method, cls):
            return method
        try:
            return cls(method)
        except ValueError:
            raise UnknownGenerator('Unknown method: %r' % (method,)) from None

FIXED_METHODS = frozenset([Method.EXACT, Method.KTV_SWITCH,
                           Method.EDGE_SWITCH, Method.CURVEBALL])
INTERVAL_METHODS = frozenset([Method.EXACT, Method.SIMPLE, Method.INFORMED])

def methods_for(instance):
    return FIXED_METHODS if instance.is_fixed else INTERVAL_METHODS

class RandomGenerator:
    """Produces binary matrices satisfying a single margin instance.

    Subclasses implement draw(); next() wraps it with the bookkeeping
    recorded in gen_info.
    """
    method = None

    def __init__(self, instance, rng = None):
        self.instance = instance
        self.rng = rng_from_state(rng)
        self.gen_info = { 'wall_time': 0.0,
                          'samples': 0 }

    def draw(self):
        raise NotImplementedError

    def next(self):
        start_time = time()
        A = self.draw()
        self.gen_info['wall_time'] += time() - start_time
        self.gen_info['samples'] += 1
        return A
