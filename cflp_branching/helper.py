import logging
from math import isclose

from cflp_branching.costs import cumulative_cost, required_level
from cflp_branching.errors import AssignmentError
from cflp_branching.initialisation import UNASSIGNED

logger = logging.getLogger(__name__)

def facility_levels(assignment,instance):
    """ Final level of every facility under a complete assignment. """
    bandwidths = [0]*instance.n_facs
    for i,j in enumerate(assignment):
        if j == UNASSIGNED or not 0 <= j < instance.n_facs:
            raise AssignmentError("customer %d has no valid facility: %s" % (i,j))
        bandwidths[j] += instance.demands[i].item()
    return [required_level(0,0,bandwidths[j],instance.max_bandwidth[j].item()) for j in range(instance.n_facs)]

def evaluate(assignment,instance,cost_limit=None):
    """ Cost of a complete assignment computed from the final facility levels.
        The upgrade costs charged during the search telescope to the cumulative cost of the final level. """
    levels = facility_levels(assignment,instance)
    connection = sum(instance.distance(j,i).item() * instance.distance_factor for i,j in enumerate(assignment))
    opening = sum(cumulative_cost(levels[j],instance.base_cost[j].item(),cost_limit) for j in range(instance.n_facs))
    return connection + opening

def validate(solution,instance) -> bool:
    """ Validates a solution by checking whether it is complete and whether its cost is correct. """
    assignment = solution['assignment']
    logger.info("Validating solution with UB %s", solution['UB'])

    if len(assignment) != instance.n_cust:
        logger.error("The solution assigns %d customers, the instance has %d", len(assignment), instance.n_cust)
        return False
    invalid = [j for j in assignment if not 0 <= j < instance.n_facs]
    if invalid != []:
        logger.error("The solution contains facilities that do not exist: %s", invalid)
        return False

    cost = evaluate(assignment,instance)
    if not isclose(cost,solution['UB'],rel_tol=1e-9,abs_tol=1e-9):
        logger.error("Cost of solution %s does not match reported UB of %s", cost, solution['UB'])
        return False
    logger.info("Cost of solution matches reported UB of %s", cost)
    return True

def check(solution,reference) -> bool:
    """ Checks whether a solution has the same objective value as a reference solution, e.g. from the MILP. """
    if isclose(reference['UB'],solution['UB'],rel_tol=1e-6,abs_tol=1e-6): # MILP objectives carry solver tolerances
        logger.info("Solution matches the reference solution.")
        if reference['assignment'] != solution['assignment']:
            logger.info("Different assignments with equal cost: reference %s vs. given %s", reference['assignment'], solution['assignment'])
        return True
    logger.warning("Different objective values found: reference UB %s vs. given UB %s", reference['UB'], solution['UB'])
    return False
