import numpy as np
import pytest

from cflp_branching.errors import InstanceError
from cflp_branching.initialisation import Instance, build_preferences

def test_preferences_sorted_by_distance_ties_by_index():
    instance = Instance(distances=[[3,1],[1,1],[3,0]],demands=[1,1],max_bandwidth=[1,1,1],base_cost=[0,0,0])
    assert build_preferences(instance) == [[1,0,2],[2,0,1]]

def test_preferences_are_permutations():
    rng = np.random.default_rng(3)
    instance = Instance(distances=rng.integers(0,4,size=(6,5)),demands=[1]*5,max_bandwidth=[1]*6,base_cost=[1]*6)
    for i,pref in enumerate(build_preferences(instance)):
        assert sorted(pref) == list(range(6))
        assert all(instance.distance(a,i) <= instance.distance(b,i) for a,b in zip(pref,pref[1:]))

def test_accessors():
    instance = Instance(distances=[[4,2]],demands=[3,7],max_bandwidth=[10],base_cost=[50],distance_factor=2)
    assert (instance.n_facs,instance.n_cust) == (1,2)
    assert instance.distance(0,1) == 2
    assert instance.bandwidth_of(1) == 7
    assert instance.max_bandwidth_of(0) == 10
    assert instance.base_cost_of(0) == 50
    assert instance.distance_factor == 2

def test_instance_is_read_only():
    instance = Instance(distances=[[4,2]],demands=[3,7],max_bandwidth=[10],base_cost=[50])
    with pytest.raises(ValueError):
        instance.demands[0] = 1

@pytest.mark.parametrize("kwargs", [
    dict(distances=[[1,2]],demands=[1],max_bandwidth=[1],base_cost=[1]),
    dict(distances=[[1]],demands=[-1],max_bandwidth=[1],base_cost=[1]),
    dict(distances=[[-1]],demands=[1],max_bandwidth=[1],base_cost=[1]),
    dict(distances=[[1]],demands=[1],max_bandwidth=[1],base_cost=[1,2]),
    dict(distances=[[1]],demands=[1],max_bandwidth=[1],base_cost=[1],distance_factor=-1),
])
def test_invalid_instances(kwargs):
    with pytest.raises(InstanceError):
        Instance(**kwargs)

def test_degenerate_instances():
    no_customers = Instance(distances=[[],[]],demands=[],max_bandwidth=[1,1],base_cost=[1,1])
    assert (no_customers.n_facs,no_customers.n_cust) == (2,0)
    assert build_preferences(no_customers) == []
    no_facilities = Instance(distances=[],demands=[1,2],max_bandwidth=[],base_cost=[])
    assert build_preferences(no_facilities) == [[],[]]

@pytest.mark.parametrize("factor", [np.int64(3),np.float64(2.5),3])
def test_distance_factor_is_a_python_number(factor):
    instance = Instance(distances=[[1]],demands=[1],max_bandwidth=[1],base_cost=[1],distance_factor=factor)
    assert type(instance.distance_factor) in (int,float)
    assert instance.distance_factor == factor
