""" Start assignment from a min-cost flow relaxation of the level costs. """

import logging
from math import ceil, floor

import networkx as nx

from cflp_branching.costs import COST_LIMIT, CostWindow, required_level
from cflp_branching.errors import CostOverflowError

logger = logging.getLogger(__name__)

def flow_network(instance,pref_ordering,resolution=1000,cost_limit=COST_LIMIT):
    """ Flow network in which each level of a facility sells its bandwidth at (upgrade cost / bandwidth per level)
        per unit. Levels stop at the one that holds all demand or at the last one within cost_limit.
        Returns the graph and the bandwidth its levels provide in total. """
    demands = [int(ceil(d)) for d in instance.demands] # min-cost flow needs integer demands
    sinkdemand = sum(demands)
    G = nx.DiGraph()
    G.add_node("sink",demand=sinkdemand) # Cover all demand with a single sink

    supply, reachable = 0, set()
    for j in range(instance.n_facs):
        capacity = int(ceil(instance.max_bandwidth[j]))
        if capacity <= 0: continue
        base = instance.base_cost[j].item()
        if base == 0: # All levels are free, one arc holds everything
            G.add_edge("Facility"+str(j),"sink",weight=0,capacity=sinkdemand)
            supply += sinkdemand
            reachable.add(j)
            continue
        window = CostWindow(base,cost_limit)
        for level in range(1,required_level(0,0,sinkdemand,capacity)+1):
            before = window.current
            try:
                upgrade = window.advance_to(level) - before
            except CostOverflowError: # Higher levels are never affordable either
                break
            G.add_edge("Facility"+str(j),"Facility"+str(j)+"_L"+str(level),weight=int((resolution*upgrade)//capacity),capacity=capacity)
            G.add_edge("Facility"+str(j)+"_L"+str(level),"sink",weight=0,capacity=capacity)
            supply += capacity
            reachable.add(j)

    for i in range(instance.n_cust):
        if demands[i] == 0: continue # Customers without demand keep their nearest facility
        G.add_node("Customer"+str(i), demand=-demands[i])
        for j in pref_ordering[i]:
            if j in reachable:
                G.add_edge("Customer"+str(i),"Facility"+str(j),
                            weight=floor(resolution*instance.distance(j,i)*instance.distance_factor/demands[i]), # Divide by demand to get price per unit
                            capacity=demands[i])
    return G, supply

def flow_start(instance,pref_ordering,resolution=1000,cost_limit=COST_LIMIT):
    """ Each customer is assigned to the facility that receives most of its flow in flow_network.
        The level costs are not convex, so this is a heuristic only. """
    assignment = [pref_ordering[i][0] for i in range(instance.n_cust)] # Fallback: nearest facility
    G, supply = flow_network(instance,pref_ordering,resolution,cost_limit)
    sinkdemand = G.nodes["sink"]["demand"]
    if sinkdemand == 0: return assignment
    if supply < sinkdemand:
        logger.debug("Affordable levels provide %s of %s bandwidth, keeping nearest facilities", supply, sinkdemand)
        return assignment

    flowDict = nx.min_cost_flow(G)
    for i in range(instance.n_cust):
        if "Customer"+str(i) not in flowDict: continue
        flow = flowDict["Customer"+str(i)]
        best = max(flow.values())
        assignment[i] = [j for j in pref_ordering[i] if flow.get("Facility"+str(j),0) == best][0] # Ties by preference
    logger.debug("Flow start assignment: %s", assignment)
    return assignment
