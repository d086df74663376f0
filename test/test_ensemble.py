"""
Tests for ensembles of problems.
"""

import numpy as np
import pytest
from common import K, TSPAN, TSTEP, decay_v, oscillator_f, oscillator_hamiltonian, oscillator_v

from geometric_equations import (
    HODE,
    ODE,
    ArgumentMismatchError,
    CardinalityMismatchError,
    EnsembleProblem,
    EquationProblem,
    HODEEnsemble,
    NullParameters,
    ODEEnsemble,
    ShapeMismatchError,
)
from geometric_equations.fixtures import harmonic_oscillator


@pytest.fixture
def equation():
    return HODE(oscillator_v, oscillator_f, oscillator_hamiltonian, parameters={"k": K})


@pytest.fixture
def ics():
    return [{"q": np.array([q]), "p": np.array([p])} for q, p in [(0.5, 0.0), (0.25, 0.1), (0.0, 1.0)]]


def test_broadcast_parameters(equation, ics):
    """Test three initial conditions sharing one parameter record."""
    params = {"k": K}
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, params)
    assert ens.nsamples == 3
    assert len(ens) == 3

    problems = list(ens)
    assert len(problems) == 3
    for i, prob in enumerate(problems):
        assert isinstance(prob, EquationProblem)
        assert prob == EquationProblem(equation, TSPAN, TSTEP, ics[i], params)
    assert [dict(p) for p in ens.parameters] == [params] * 3


def test_broadcast_initial_conditions(equation, ics):
    """Test one initial condition shared by several parameter records."""
    params = [{"k": 0.5}, {"k": 1.0}]
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics[0], params)
    assert ens.nsamples == 2
    assert ens.initial_condition(0) == ens.initial_condition(1)
    assert [dict(p) for p in ens.params] == params


def test_single_entry(equation, ics):
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics[0], {"k": K})
    assert ens.nsamples == 1


def test_length_mismatch(equation, ics):
    """Test that three initial conditions and two parameter records are rejected."""
    with pytest.raises(CardinalityMismatchError):
        EnsembleProblem(equation, TSPAN, TSTEP, ics, [{"k": 0.5}, {"k": 1.0}])


def test_empty_ensemble(equation):
    with pytest.raises(CardinalityMismatchError):
        EnsembleProblem(equation, TSPAN, TSTEP, [], {"k": K})


def test_inconsistent_structure(equation, ics):
    """Test that all initial conditions must have the structure of the first."""
    ics[2] = {"q": np.array([1], dtype=np.int64), "p": np.array([0], dtype=np.int64)}
    with pytest.raises(CardinalityMismatchError) as excinfo:
        EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    assert excinfo.value.location == "ics[2]"


def test_every_entry_is_validated(equation, ics):
    """Test that a later entry with mismatched shapes is rejected at construction."""
    ics[1] = {"q": np.zeros(2), "p": np.zeros(3)}
    with pytest.raises(ShapeMismatchError) as excinfo:
        EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    assert excinfo.value.location == "key 'p'"


def test_first_entry_fully_validated(equation, ics):
    ics[0] = {"q": np.array([0.5])}
    with pytest.raises(ShapeMismatchError):
        EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})


def test_invalid_parameter_entry(equation, ics):
    with pytest.raises(ArgumentMismatchError):
        EnsembleProblem(equation, TSPAN, TSTEP, ics, [{"k": 0.5}, {"k": 1.0}, {"m": 1.0}])


def test_round_trip(equation, ics):
    """Test that materialized problems share the ensemble's data."""
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    for i in range(ens.nsamples):
        prob = ens.problem(i)
        assert prob.equation == ens.equation
        assert prob.initial_condition == ens.ics[i]
        assert prob.parameters == ens.params[i]
        assert prob.tspan == ens.tspan
        assert prob.tstep == ens.tstep


def test_iteration_is_restartable(equation, ics):
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    first = list(ens)
    second = list(ens)
    assert len(first) == len(second) == 3
    assert all(a == b for a, b in zip(first, second))


def test_index_out_of_range(equation, ics):
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    with pytest.raises(IndexError):
        ens.problem(3)
    with pytest.raises(IndexError):
        ens.parameter(-1)


def test_numpy_integer_index(equation, ics):
    """Test that numpy integers index entries like plain integers."""
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    for i in np.arange(ens.nsamples):
        assert ens.problem(i) == ens.problem(int(i))
        assert ens.initial_condition(i) is ens.ics[int(i)]
        assert ens.parameter(i) is ens.params[int(i)]
    with pytest.raises(IndexError):
        ens.problem(np.int64(3))


def test_accessors(equation, ics):
    ens = EnsembleProblem(equation, TSPAN, TSTEP, ics, {"k": K})
    assert ens.tbegin == 0.0
    assert ens.tend == 1.0
    assert ens.datatype == np.float64
    assert ens.arrtype is np.ndarray
    assert ens.equtype is HODE
    assert ens.functions == equation.roles()
    assert ens.solutions == {}
    assert ens.initial_conditions == ens.ics
    assert ens.ndims == 1
    assert ens.nconstraints == 0


def test_ensemble_without_parameters():
    ics = [{"q": np.array([1.0])}, {"q": np.array([2.0])}]
    for params in (None, NullParameters()):
        ens = EnsembleProblem(ODE(decay_v), TSPAN, TSTEP, ics, params)
        assert ens.params == (NullParameters(), NullParameters())
        assert ens.functions["v"] is decay_v


def test_variant_ensemble_from_states():
    """Test per-variant ensembles built from state collections."""
    ens = harmonic_oscillator.hodeensemble(
        [np.array([0.5]), np.array([0.25])],
        [np.array([0.0]), np.array([0.1])],
    )
    assert isinstance(ens, HODEEnsemble)
    assert ens.nsamples == 2
    assert ens.problem(1).ics["q"][0] == 0.25

    ens = ODEEnsemble(decay_v, TSPAN, TSTEP, [np.array([1.0]), np.array([2.0]), np.array([3.0])])
    assert ens.nsamples == 3


def test_variant_ensemble_with_parameter_list():
    ens = HODEEnsemble(
        oscillator_v,
        oscillator_f,
        oscillator_hamiltonian,
        TSPAN,
        TSTEP,
        np.array([0.5]),
        np.array([0.0]),
        parameters=[{"k": 0.5}, {"k": 2.0}],
    )
    assert ens.nsamples == 2
    out = np.zeros(1)
    ens.problem(1).functions["f"](out, 0.0, np.array([0.5]), np.array([0.0]))
    assert out[0] == pytest.approx(-1.0)
