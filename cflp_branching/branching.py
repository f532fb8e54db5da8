import logging
import os
from math import inf
from time import time

import psutil

from cflp_branching.costs import COST_LIMIT, FacilityState
from cflp_branching.errors import AssignmentError, CostOverflowError
from cflp_branching.initialisation import UNASSIGNED, build_preferences
from cflp_branching.warmstart import flow_start

logger = logging.getLogger(__name__)

TIME_LIMIT = 60*60 # seconds
MEMORY_LIMIT = 10000 # MB
REPORT_INTERVAL = 10000 # evaluated nodes between progress reports
MEMORY_CHECK_INTERVAL = 1000 # evaluated nodes between memory checks

class Incumbent:
    """ Best complete assignment found so far. """

    def __init__(self,on_improvement=None):
        self.UB = inf
        self.assignment = None
        self.on_improvement = on_improvement # Called with (cost, assignment) on every improvement
        self.start_time = time()
        self.upper_bounds = [] # (UB, time) for every improvement

    def offer(self,cost,assignment) -> bool:
        """ Replaces the incumbent if cost is strictly lower. Infinite (overflowing) costs are never accepted. """
        if cost == inf or cost >= self.UB: return False
        self.UB = cost
        self.assignment = list(assignment)
        self.upper_bounds.append((cost,round(time() - self.start_time,2)))
        logger.info("UPDATE: Found new incumbent: %s", cost)
        if self.on_improvement is not None: self.on_improvement(cost,list(self.assignment))
        return True

    def current_bound(self):
        return self.UB

    def exists(self):
        return self.assignment is not None

    def best_solution(self):
        if self.assignment is None: return None
        return self.UB, list(self.assignment)

class BoundCalculator:
    """ Lower and upper bounds on partial assignments.
        Facility levels are replayed in customer order 0..n_cust-1 on fresh facility states for every call,
        so both bounds see the same level history for the same assignment. """

    def __init__(self,instance,pref_ordering,incumbent,cost_limit=COST_LIMIT):
        self.n_cust, self.n_facs = instance.n_cust, instance.n_facs
        # Plain python numbers, numpy integers would wrap silently
        self.distances = instance.distances.tolist()
        self.demands = instance.demands.tolist()
        self.max_bandwidth = instance.max_bandwidth.tolist()
        self.base_cost = instance.base_cost.tolist()
        self.factor = instance.distance_factor
        self.nearest = instance.distances.min(axis=0).tolist() if self.n_facs > 0 else [0]*self.n_cust # distance to nearest facility per customer
        self.pref_ordering = pref_ordering
        self.incumbent = incumbent
        self.cost_limit = cost_limit
        self.overflows = 0

    def replay(self,assignment,complete=False):
        """ Cost of assignment. Unassigned customers pay their nearest connection only,
            or, if complete is set, are assigned to their most preferred facility in place. """
        facilities = {} # facility -> FacilityState, created on first use
        costs = 0
        for i in range(self.n_cust):
            j = assignment[i]
            if j == UNASSIGNED:
                if not complete:
                    costs += self.nearest[i] * self.factor
                    continue
                j = assignment[i] = self.pref_ordering[i][0]
            elif not 0 <= j < self.n_facs:
                raise AssignmentError("customer %d is assigned to unknown facility %s" % (i,j))

            state = facilities.get(j)
            if state is None: state = facilities[j] = FacilityState(self.base_cost[j],self.max_bandwidth[j],self.cost_limit)
            costs += self.distances[j][i] * self.factor + state.add(self.demands[i])
        if self.cost_limit is not None and costs > self.cost_limit:
            raise CostOverflowError("total cost %s exceeds limit %s" % (costs,self.cost_limit))
        return costs

    def lower_bound(self,assignment):
        try:
            return self.replay(assignment)
        except CostOverflowError:
            self.overflows += 1
            return inf

    def upper_bound(self,assignment):
        """ Completes assignment with the nearest facilities and offers the result to the incumbent. """
        solution = list(assignment)
        try:
            costs = self.replay(solution,complete=True)
        except CostOverflowError:
            self.overflows += 1
            return inf
        self.incumbent.offer(costs,solution)
        return costs

class BnB_search:
    """ Depth-first branch and bound over customer -> facility assignments.
        Customers are fixed in index order, facilities are tried nearest first. """

    def __init__(self,instance,time_limit=TIME_LIMIT,memory_limit=MEMORY_LIMIT,cost_limit=COST_LIMIT,warm_start=False,on_improvement=None):
        self.instance = instance
        self.pref_ordering = build_preferences(instance)
        self.incumbent = Incumbent(on_improvement)
        self.bounds = BoundCalculator(instance,self.pref_ordering,self.incumbent,cost_limit)
        self.time_limit = time_limit
        self.memory_limit = memory_limit
        self.warm_start = warm_start
        self.status = "Open" # 'Optimal' once the tree is exhausted, 'TimeLimit' or 'MemoryLimit' if stopped early
        self.LB = 0
        self.nodes = {"total": 0, "branched": 0, "pruned_by_bound": 0, "pruned_tight": 0, "leaves": 0, "overflow": 0}
        self.start_time = None
        self.warm_start_time = 0
        self.process = psutil.Process(os.getpid())

    @property
    def UB(self):
        return self.incumbent.current_bound()

    @property
    def upper_bounds(self):
        return self.incumbent.upper_bounds

    def best_solution(self):
        return self.incumbent.best_solution()

    def add_start(self,assignment):
        """ Prices a complete assignment and offers it to the incumbent. """
        return self.bounds.upper_bound(assignment)

    def run(self):
        self.start_time = time()
        self.incumbent.start_time = self.start_time # Improvement times count from the start of the search
        n_cust, n_facs = self.instance.n_cust, self.instance.n_facs

        if n_cust == 0 or n_facs == 0: # Nothing to decide
            self.incumbent.offer(0,[])
            self.status = "Optimal"
            return self.best_solution()

        if self.warm_start:
            timer = time()
            self.add_start(flow_start(self.instance,self.pref_ordering,cost_limit=self.bounds.cost_limit))
            self.warm_start_time = time() - timer

        # One buffer for the whole search: entries below the current depth are fixed, the rest are unassigned.
        # Each stack entry is [position of the next facility to try in the preference list, lower bound of the node].
        assignment = [UNASSIGNED]*n_cust
        stack = []
        lower = self._evaluate(0,assignment)
        if lower is not None: stack.append([0,lower])

        while stack and self.status == "Open":
            customer = len(stack) - 1
            position = stack[-1][0]
            if position == n_facs: # All children explored, backtrack
                stack.pop()
                assignment[customer] = UNASSIGNED
                continue
            stack[-1][0] += 1
            assignment[customer] = self.pref_ordering[customer][position]
            lower = self._evaluate(customer + 1,assignment)
            if lower is not None: stack.append([0,lower])

        self.nodes["overflow"] = self.bounds.overflows
        if self.status == "Open":
            self.status = "Optimal"
            self.LB = self.UB
        elif stack: # Every unexplored node lies below a node on the stack
            self.LB = min([self.UB] + [entry[1] for entry in stack])
        else: # Stopped before the root was evaluated, costs are non-negative
            self.LB = 0
        logger.info("Finished after %d nodes with status %s, LB/UB %s %s, time %.2f",
                    self.nodes["total"],self.status,self.LB,self.UB,time() - self.start_time)
        return self.best_solution()

    def _evaluate(self,customer,assignment):
        """ Computes both bounds of a node. Returns its lower bound if the node has to be branched on, None if it is pruned. """
        if self._limit_reached(): return None
        self.nodes["total"] += 1

        upper = self.bounds.upper_bound(assignment)
        lower = self.bounds.lower_bound(assignment)

        # Intermittently report progress
        if self.nodes["total"] % REPORT_INTERVAL == 0:
            logger.info("%d nodes  UB %s  Node LB/UB %s %s  Depth %d  Time: %.2f",
                        self.nodes["total"],self.UB,lower,upper,customer,time() - self.start_time)

        if customer >= self.instance.n_cust: self.nodes["leaves"] += 1
        if self.incumbent.exists() and lower >= self.incumbent.current_bound():
            self.nodes["pruned_by_bound"] += 1
            return None
        if lower == upper:
            self.nodes["pruned_tight"] += 1
            return None
        if customer >= self.instance.n_cust: return None
        self.nodes["branched"] += 1
        return lower

    def _limit_reached(self):
        if self.time_limit is not None and time() - self.start_time >= self.time_limit:
            self.status = "TimeLimit"
        elif (self.memory_limit is not None and self.nodes["total"] % MEMORY_CHECK_INTERVAL == 0
              and self.process.memory_info().rss / (1024 * 1024) > self.memory_limit):
            self.status = "MemoryLimit"
        else:
            return False
        logger.warning("UPDATE/WARNING: Search stopped early (%s) after %d nodes", self.status, self.nodes["total"])
        return True
