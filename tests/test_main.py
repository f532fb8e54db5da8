import pytest

from instances import brute_force, random_instance
from cflp_branching.helper import check, evaluate, facility_levels, validate
from cflp_branching.errors import AssignmentError
from cflp_branching.main import solve

def test_results_record(mirrored):
    results = solve(mirrored)
    solution = results["solution"]
    assert solution["UB"] == 22
    assert solution["LB"] == 22
    assert solution["assignment"] == [0,1]
    assert solution["levels"] == [1,1]
    assert solution["status"] == "Optimal"
    assert solution["gap in %"] == 0
    assert results["instance"] == {"facilities": 2, "customers": 2}
    assert results["nodes"]["total"] == 5
    assert results["bounds"]["upper_bounds"][0][0] == 22

def test_solve_with_warm_start():
    instance = random_instance(11,n_cust=5,n_facs=3)
    results = solve(instance,warm_start=True)
    assert results["solution"]["UB"] == brute_force(instance)
    assert validate(results["solution"],instance)

def test_solve_reports_missing_solution():
    results = solve(random_instance(1),time_limit=0)
    assert results["solution"]["UB"] == "infeasible"
    assert results["solution"]["status"] == "TimeLimit"

def test_levels_and_evaluation(single):
    assert facility_levels([0],single) == [1]
    assert evaluate([0],single) == 106
    with pytest.raises(AssignmentError):
        facility_levels([-1],single)

def test_validate_rejects_wrong_solutions(single):
    assert validate({"UB": 106, "assignment": [0]},single)
    assert not validate({"UB": 105, "assignment": [0]},single)
    assert not validate({"UB": 106, "assignment": []},single)
    assert not validate({"UB": 106, "assignment": [1]},single)

def test_check():
    assert check({"UB": 10, "assignment": [0]},{"UB": 10.0000001, "assignment": [1]})
    assert not check({"UB": 10, "assignment": [0]},{"UB": 11, "assignment": [0]})

@pytest.mark.parametrize("seed", range(3))
def test_agrees_with_milp(seed):
    pytest.importorskip("gurobipy")
    from cflp_branching.ip import solve_ip
    instance = random_instance(seed)
    reference = solve_ip(instance,time_limit=60)
    assert check(solve(instance)["solution"],reference["solution"])
