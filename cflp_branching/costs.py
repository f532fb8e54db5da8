""" Facility cost model: capacity is bought in levels whose cumulative price depends on the two preceding levels. """

from cflp_branching.errors import CostOverflowError

COST_LIMIT = 2**31 - 1 # Largest cost that is still considered valid, None disables the check

def _checked(cost,cost_limit):
    if cost_limit is not None and cost > cost_limit:
        raise CostOverflowError("cost %s exceeds limit %s" % (cost,cost_limit))
    return cost

class CostWindow:
    """ Sliding window over the cumulative level costs of one facility.
        Only the last two cumulative costs are kept, moving one level up is O(1). """

    def __init__(self,base,cost_limit=None):
        self.base = base
        self.cost_limit = cost_limit
        self.level = 0
        self.previous = 0 # cumulative cost of level-1
        self.current = 0 # cumulative cost of level

    def advance_to(self,level:int):
        """ Walks the recurrence up to level and returns its cumulative cost. """
        while self.level < level:
            next_level = self.level + 1
            if next_level == 1: cost = self.base
            elif next_level == 2: cost = -(-3*self.base // 2) # ceil(1.5*base) without float rounding for integer costs
            else: cost = self.current + self.previous + (4 - next_level)*self.base # (4-L) turns negative for L > 4
            self.previous, self.current = self.current, _checked(cost,self.cost_limit)
            self.level = next_level
        return self.current

def cumulative_cost(level:int,base,cost_limit=None):
    """ Total opening cost of a facility at the given level. """
    if level < 0: raise ValueError("level must be non-negative")
    return CostWindow(base,cost_limit).advance_to(level)

def incremental_cost(from_level:int,to_level:int,base,cost_limit=None):
    """ Additional cost of upgrading a facility from from_level to to_level. """
    window = CostWindow(base,cost_limit)
    before = window.advance_to(from_level)
    return window.advance_to(to_level) - before

def required_level(current_level:int,bandwidth_so_far,new_demand,max_bandwidth):
    """ Smallest level >= current_level that provides bandwidth_so_far + new_demand. """
    total = bandwidth_so_far + new_demand
    if total <= current_level * max_bandwidth: return current_level
    if max_bandwidth <= 0:
        raise CostOverflowError("no level of a facility with zero bandwidth per level holds %s" % total)
    return max(current_level,int(-(-total // max_bandwidth)))

class FacilityState:
    """ Runtime state of one facility during a single bound evaluation. """

    def __init__(self,base,max_bandwidth,cost_limit=None):
        self.max_bandwidth = max_bandwidth
        self.bandwidth = 0
        self.window = CostWindow(base,cost_limit)

    @property
    def level(self):
        return self.window.level

    def add(self,demand):
        """ Assigns demand to the facility, upgrades it if needed and returns the upgrade cost. """
        level = required_level(self.window.level,self.bandwidth,demand,self.max_bandwidth)
        before = self.window.current
        after = self.window.advance_to(level)
        self.bandwidth += demand
        return after - before
