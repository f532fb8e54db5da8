############
### main ###
############

import logging
import os
import time

import psutil

from cflp_branching.branching import MEMORY_LIMIT, TIME_LIMIT, BnB_search
from cflp_branching.costs import COST_LIMIT
from cflp_branching.helper import facility_levels, validate

logger = logging.getLogger(__name__)

def solve(instance,time_limit=TIME_LIMIT,memory_limit=MEMORY_LIMIT,cost_limit=COST_LIMIT,warm_start=False,on_improvement=None):
    """ Runs the branch and bound search on instance and returns a results record. """
    start_time = time.time()
    search = BnB_search(instance,time_limit=time_limit,memory_limit=memory_limit,cost_limit=cost_limit,
                        warm_start=warm_start,on_improvement=on_improvement)
    time_for_initialisation = time.time() - start_time
    logger.info("Start search on %s", instance)

    best = search.run()
    search_time = time.time() - start_time - time_for_initialisation

    process = psutil.Process(os.getpid())
    memory_usage = round(process.memory_info().rss / (1024 * 1024),2)
    if best is None: # Only if every completion overflows
        logger.warning("UPDATE/WARNING: No solution within the cost limit")
        UB, assignment, levels = "infeasible", [], []
    else:
        UB, assignment = best
        levels = facility_levels(assignment,instance)

    results = {
        "instance": {
            "facilities": instance.n_facs,
            "customers": instance.n_cust,
        },
        "times": {
            "total_time in s": round(time.time() - start_time, 2),
            "initialisation_time in s": round(time_for_initialisation,2),
            "search_time in s": round(search_time,2),
            "warm_start_time in s": round(search.warm_start_time,2),
        },
        "nodes": dict(search.nodes),
        "solution": {
            "LB": search.LB,
            "UB": UB,
            "gap in %": round((search.UB - search.LB)/search.UB*100,2) if best is not None and search.UB > 0 else 0,
            "assignment": assignment,
            "levels": levels,
            "status": search.status,
            "memory in MB": memory_usage,
        },
        "bounds": {
            "upper_bounds": list(search.upper_bounds),
        },
    }

    # Ensure that results are indeed correct
    if best is not None and instance.n_facs > 0 and not validate(results['solution'],instance):
        logger.error("Reported solution does not match its evaluated cost")
    return results
