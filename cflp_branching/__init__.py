""" Branch and bound for the capacitated facility location problem with tiered facility capacities. """

from cflp_branching.branching import BnB_search, BoundCalculator, Incumbent
from cflp_branching.costs import cumulative_cost, incremental_cost, required_level
from cflp_branching.errors import AssignmentError, CFLPError, CostOverflowError, InstanceError
from cflp_branching.initialisation import UNASSIGNED, Instance, build_preferences
from cflp_branching.main import solve

__all__ = [
    "AssignmentError",
    "BnB_search",
    "BoundCalculator",
    "CFLPError",
    "CostOverflowError",
    "Incumbent",
    "Instance",
    "InstanceError",
    "UNASSIGNED",
    "build_preferences",
    "cumulative_cost",
    "incremental_cost",
    "required_level",
    "solve",
]
__version__ = "0.1.0"
