"""
Tests for the example problems.
"""

import math

import numpy as np
import pytest

from geometric_equations import EQUATIONS, EquationProblem
from geometric_equations.fixtures import exponential_growth, harmonic_oscillator


@pytest.mark.parametrize("name", sorted(harmonic_oscillator.PROBLEMS))
def test_every_variant_builds(name):
    """Test that each example problem passes validation for its variant."""
    prob = harmonic_oscillator.PROBLEMS[name]()
    assert isinstance(prob, EquationProblem)
    assert type(prob.equation).__name__ == name
    assert prob.tspan == harmonic_oscillator.TSPAN
    assert dict(prob.parameters) == harmonic_oscillator.DEFAULT_PARAMETERS


def test_all_variants_covered():
    assert set(harmonic_oscillator.PROBLEMS) == {cls.__name__ for cls in EQUATIONS}


def test_dae_constraint_holds_initially():
    prob = harmonic_oscillator.daeproblem()
    phi = np.zeros(1)
    prob.functions["phi"](phi, 0.0, prob.ics["q"])
    assert phi[0] == 0.0


def test_oscillator_energy():
    """Test the Hamiltonian of the one-dimensional oscillator."""
    prob = harmonic_oscillator.hodeproblem()
    h = prob.functions["h"](0.0, prob.ics["q"], prob.ics["p"])
    assert h == pytest.approx(harmonic_oscillator.K * 0.5**2 / 2)


def test_reference_solution_conserves_energy():
    params = harmonic_oscillator.DEFAULT_PARAMETERS
    h0 = harmonic_oscillator.hamiltonian_state(0.0, harmonic_oscillator.Q0, params)
    h1 = harmonic_oscillator.hamiltonian_state(1.0, harmonic_oscillator.REFERENCE_SOLUTION, params)
    assert h1 == pytest.approx(h0)


def test_exponential_growth():
    """Test the vector field and exact solution of exponential growth."""
    prob = exponential_growth.odeproblem(parameters={"k": 2.0})
    v = np.zeros(1)
    prob.functions["v"](v, 0.0, prob.ics["q"])
    assert v[0] == 2.0

    sprob = exponential_growth.sodeproblem()
    x1 = np.zeros(1)
    sprob.functions["q"][0](x1, 1.0, exponential_growth.X0, 0.0)
    assert x1[0] == pytest.approx(math.e)


def test_ensemble_fixture():
    ens = harmonic_oscillator.hodeensemble([np.array([0.5]), np.array([1.0])], [np.array([0.0]), np.array([0.0])])
    assert ens.nsamples == 2
    assert [prob.ics["q"][0] for prob in ens] == [0.5, 1.0]
