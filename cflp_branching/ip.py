#!/usr/bin/env python3
# -*- coding: utf-8 -*-
""" MILP formulation of the tiered CFLP, used as a reference for the branch and bound search.
    Each facility picks at most one level L, paying its cumulative cost c(L) and providing L times its bandwidth per level. """

import logging
import os
import time

import gurobipy as gp
import psutil
from gurobipy import GRB, quicksum

from cflp_branching.costs import cumulative_cost, required_level
from cflp_branching.helper import evaluate, validate

logger = logging.getLogger(__name__)

def solve_ip(instance,time_limit=60*60,threads=1):
    start_time = time.time()
    lower_bounds, upper_bounds = [],[] # Used for logging progress
    facilities, customers = list(range(instance.n_facs)), list(range(instance.n_cust))
    demands = instance.demands.tolist()
    total_demand = sum(demands)

    # 1. Levels that can ever be needed: enough to hold all demand at one facility
    levels = {j: list(range(1,1+required_level(0,0,total_demand,instance.max_bandwidth[j].item()))) if instance.max_bandwidth[j] > 0 else []
              for j in facilities}
    level_cost = {(j,L): cumulative_cost(L,instance.base_cost[j].item()) for j in facilities for L in levels[j]}

    # 2. Set up model
    m = gp.Model("tiered_CFLP")
    m.setParam("Threads", threads) # For benchmarking purposes
    m.setParam("OutputFlag", 0)
    m._lastbound = float("-inf") # Used for logging dual bound improvements in callback

    # 3. Variables
    x = m.addVars(customers,facilities,vtype=GRB.BINARY,name="x") # Customer => facility allocation
    y = m.addVars(list(level_cost),vtype=GRB.BINARY,name="y") # y[j,L] = 1 iff facility j is built up to level L

    # 4. Constraints
    m.addConstrs(quicksum(x[i,j] for j in facilities) == 1 for i in customers) # Each customer i gets exactly one facility
    m.addConstrs(quicksum(y[j,L] for L in levels[j]) <= 1 for j in facilities) # At most one level per facility
    m.addConstrs(quicksum(demands[i]*x[i,j] for i in customers)
                 <= instance.max_bandwidth[j].item() * quicksum(L*y[j,L] for L in levels[j]) for j in facilities) # Capacity-Linking constraints

    # 5. Objective
    m.setObjective(quicksum(instance.distance(j,i).item()*instance.distance_factor*x[i,j] for i in customers for j in facilities)
                   + quicksum(level_cost[key]*y[key] for key in level_cost), GRB.MINIMIZE)
    model_building_time = time.time()-start_time
    m.update()

    # 6. Callback definition for logging
    def callback(model,where):
        if where == GRB.Callback.MIPSOL: upper_bounds.append([model.cbGet(GRB.Callback.MIPSOL_OBJ),model.cbGet(GRB.Callback.RUNTIME)])
        elif where == GRB.Callback.MIP:
            if model.cbGet(GRB.Callback.MIP_OBJBND) > model._lastbound + 1e-6: # Only note (non-trivally) improving dual bounds
                model._lastbound = model.cbGet(GRB.Callback.MIP_OBJBND)
                lower_bounds.append([model.cbGet(GRB.Callback.MIP_OBJBND),model.cbGet(GRB.Callback.RUNTIME)])

    # 7. Optimisation
    m.setParam("TimeLimit", max([time_limit - model_building_time,0]))
    m.optimize(callback)
    model_solving_time = time.time()-start_time-model_building_time
    logger.info("MILP finished after %s nodes in %.2f seconds", m.NodeCount, time.time() - start_time)

    # 8. Read solution
    assignment, facility_levels = [], []
    if m.SolCount > 0:
        assignment = [[j for j in facilities if x[i,j].X > 0.5][0] for i in customers]
        facility_levels = [sum(L for L in levels[j] if y[j,L].X > 0.5) for j in facilities]

    process = psutil.Process(os.getpid())
    results = {
        "instance": {
            "facilities": instance.n_facs,
            "customers": instance.n_cust,
        },
        "times": {
            "total_time in s": round(time.time() - start_time, 2),
            "model_building_time in s": round(model_building_time,2),
            "model_solving_time in s": round(model_solving_time,2),
        },
        "nodes": {
            "total": m.NodeCount
        },
        "solution": {
            "LB": m.ObjBound if m.SolCount > 0 else "infeasible",
            "UB": evaluate(assignment,instance) if m.SolCount > 0 else "infeasible",
            "gap in %": round(100*m.MIPGap,2) if m.SolCount > 0 else "infeasible",
            "assignment": assignment,
            "levels": facility_levels,
            "status": "Optimal" if m.Status == GRB.OPTIMAL else "TimeLimit" if m.Status == GRB.TIME_LIMIT else str(m.Status),
            "memory in MB": round(process.memory_info().rss / (1024 * 1024),2),
        },
        "bounds": {
            "lower_bounds": lower_bounds,
            "upper_bounds": upper_bounds
        },
    }

    # 9. Validate that solution is indeed correct
    if m.SolCount > 0: validate(results['solution'],instance)
    return results
