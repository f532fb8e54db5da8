import pytest

from cflp_branching.initialisation import Instance

@pytest.fixture
def mirrored():
    """ Two customers, each much closer to its own facility. """
    return Instance(distances=[[1,5],[5,1]],demands=[1,1],max_bandwidth=[10,10],base_cost=[1,1],distance_factor=10)

@pytest.fixture
def single():
    return Instance(distances=[[3]],demands=[5],max_bandwidth=[10],base_cost=[100],distance_factor=2)
