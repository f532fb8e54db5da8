""" Instance builders and an exhaustive reference solver shared by the test modules. """
import itertools

import numpy as np

from cflp_branching.helper import evaluate
from cflp_branching.initialisation import Instance

def random_instance(seed,n_cust=4,n_facs=3):
    rng = np.random.default_rng(seed)
    return Instance(distances=rng.integers(0,20,size=(n_facs,n_cust)),
                    demands=rng.integers(0,8,size=n_cust),
                    max_bandwidth=rng.integers(1,10,size=n_facs),
                    base_cost=rng.integers(0,50,size=n_facs),
                    distance_factor=int(rng.integers(1,4)))

def brute_force(instance,fixed=None):
    """ Cheapest complete assignment by enumeration, optionally respecting fixed entries (-1 = free). """
    best = None
    for assignment in itertools.product(range(instance.n_facs),repeat=instance.n_cust):
        if fixed is not None and any(f != -1 and f != a for f,a in zip(fixed,assignment)): continue
        cost = evaluate(list(assignment),instance)
        if best is None or cost < best: best = cost
    return best
