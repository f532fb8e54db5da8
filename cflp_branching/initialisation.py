#############
### input ###
#############

import logging
import numpy as np

from cflp_branching.errors import InstanceError

logger = logging.getLogger(__name__)

UNASSIGNED = -1 # Marks a customer without facility in an assignment

class Instance:
    """ Read-only view on a tiered CFLP instance.
        distances : (n_facs, n_cust) matrix, distances[j][i] is the distance of facility j to customer i
        demands : bandwidth demand per customer
        max_bandwidth : bandwidth one level of a facility provides
        base_cost : base opening cost per facility
        distance_factor : cost per unit of distance """

    def __init__(self,distances,demands,max_bandwidth,base_cost,distance_factor=1):
        self.demands = _as_vector(demands,"demands")
        self.max_bandwidth = _as_vector(max_bandwidth,"max_bandwidth")
        self.base_cost = _as_vector(base_cost,"base_cost")
        self.n_cust = len(self.demands)
        self.n_facs = len(self.max_bandwidth)

        distances = np.array(distances)
        if distances.size == 0: distances = distances.reshape(self.n_facs,self.n_cust) # Allow [] for degenerate instances
        if distances.shape != (self.n_facs,self.n_cust):
            raise InstanceError("distances must have shape (%d, %d), got %s" % (self.n_facs,self.n_cust,distances.shape))
        if len(self.base_cost) != self.n_facs:
            raise InstanceError("base_cost has %d entries but there are %d facilities" % (len(self.base_cost),self.n_facs))
        if (distances < 0).any(): raise InstanceError("distances must be non-negative")
        if distance_factor < 0: raise InstanceError("distance_factor must be non-negative")

        self.distances = distances
        self.distances.setflags(write=False)
        self.distance_factor = np.asarray(distance_factor).item() # Plain python number, numpy scalars wrap on overflow

    def distance(self,facility:int,customer:int):
        return self.distances[facility][customer]

    def bandwidth_of(self,customer:int):
        return self.demands[customer]

    def max_bandwidth_of(self,facility:int):
        return self.max_bandwidth[facility]

    def base_cost_of(self,facility:int):
        return self.base_cost[facility]

    def __repr__(self):
        return "Instance(n_facs=%d, n_cust=%d)" % (self.n_facs,self.n_cust)

def _as_vector(values,name):
    vector = np.array(values)
    if vector.size == 0: vector = vector.reshape(0)
    if vector.ndim != 1: raise InstanceError(name + " must be one-dimensional")
    if (vector < 0).any(): raise InstanceError(name + " must be non-negative")
    vector.setflags(write=False)
    return vector

def build_preferences(instance):
    """ Sorts the facilities of each customer by ascending distance. Ties keep the facility index order,
        so the branching order is reproducible. """
    pref_ordering = [[int(j) for j in np.argsort(instance.distances[:,i],kind="stable")] for i in range(instance.n_cust)]

    # Only report ties, they are resolved by index
    containsTies = any(len(set(instance.distances[:,i])) < instance.n_facs for i in range(instance.n_cust))
    if containsTies: logger.debug("There are ties in the preferences, resolved by facility index.")
    return pref_ordering
