"""
Tests for views of one equation variant as another.
"""

import math

import numpy as np
import pytest
from common import all_close

from geometric_equations import (
    DAE,
    IDAE,
    IODE,
    ODE,
    PODE,
    ArgumentMismatchError,
    NullPeriodicity,
    SODEProblem,
)
from geometric_equations.conversion import (
    CombinedVectorField,
    SplittingComposition,
    combined_equation,
    combined_initial_conditions,
    combined_problem,
    unconstrained,
    unconstrained_problem,
)
from geometric_equations.fixtures import exponential_growth, harmonic_oscillator


def euler_stage(v, q1, t1, q0, t0):
    v(q1, t0, q0)
    q1[:] = q0 + (t1 - t0) * q1


# ----------------------------------------------------------------------
# Unconstrained views
# ----------------------------------------------------------------------


def test_unconstrained_dae():
    """Test that the DAE view keeps the vector field and side channels."""
    prob = harmonic_oscillator.daeproblem()
    equ = unconstrained(prob.equation)
    assert type(equ) is ODE
    assert equ.v is prob.equation.v
    assert equ.invariants == prob.equation.invariants
    assert equ.parameters == prob.equation.parameters


def test_unconstrained_problem_drops_multipliers():
    prob = unconstrained_problem(harmonic_oscillator.daeproblem())
    assert set(prob.ics) == {"q"}
    assert np.array_equal(prob.ics["q"], harmonic_oscillator.Z0)


def test_unconstrained_implicit_problem():
    """Test that the implicit view starts from a zero multiplier."""
    source = harmonic_oscillator.idaeproblem()
    assert isinstance(source.equation, IDAE)
    prob = unconstrained_problem(source)
    assert isinstance(prob.equation, IODE)
    assert prob.equation.v_bar is source.equation.v_bar
    assert np.array_equal(prob.ics["lambda"], np.zeros(2))
    assert np.array_equal(prob.ics["p"], source.ics["p"])


@pytest.mark.parametrize("name", ["PDAE", "HDAE", "LDAE", "SPDAE"])
def test_unconstrained_problems_validate(name):
    source = harmonic_oscillator.PROBLEMS[name]()
    prob = unconstrained_problem(source)
    assert not prob.equation.has_secondary()
    assert prob.tspan == source.tspan


def test_unconstrained_split_dae_uses_first_phase():
    equ = unconstrained(harmonic_oscillator.spdaeproblem().equation)
    assert type(equ) is PODE
    assert equ.v is harmonic_oscillator.pdae_v
    assert equ.f is harmonic_oscillator.pdae_f


def test_unconstrained_rejects_other_variants():
    with pytest.raises(TypeError):
        unconstrained(harmonic_oscillator.odeproblem().equation)


# ----------------------------------------------------------------------
# Combined-state views
# ----------------------------------------------------------------------


def test_combined_vector_field_matches_original():
    """Test that the combined view writes exactly what v and f write."""
    prob = harmonic_oscillator.hodeproblem(q0=np.array([0.3]), p0=np.array([0.7]))
    view = combined_problem(prob)
    assert isinstance(view.equation, ODE)
    assert isinstance(view.equation.v, CombinedVectorField)

    q, p = prob.ics["q"], prob.ics["p"]
    out_v = np.zeros(1)
    out_f = np.zeros(1)
    prob.functions["v"](out_v, 0.0, q, p)
    prob.functions["f"](out_f, 0.0, q, p)

    out = np.zeros(2)
    view.functions["v"](out, 0.0, view.ics["q"])
    assert out[0] == out_v[0]
    assert out[1] == out_f[0]


def test_combined_hamiltonian_becomes_invariant():
    prob = harmonic_oscillator.hodeproblem(q0=np.array([0.3]), p0=np.array([0.7]))
    view = combined_problem(prob)
    h = view.solutions["h"](0.0, view.ics["q"])
    assert h == prob.functions["h"](0.0, prob.ics["q"], prob.ics["p"])


def test_combined_periodicity():
    """Test that p is never periodic in the combined state."""
    prob = harmonic_oscillator.podeproblem()
    assert combined_equation(prob.equation).periodicity == NullPeriodicity()

    equ = PODE(harmonic_oscillator.pode_v, harmonic_oscillator.pode_f, periodicity=[2 * math.pi])
    combined = combined_equation(equ)
    assert np.array_equal(combined.periodicity, [2 * math.pi, 0.0])


def test_combined_initial_conditions():
    ics = combined_initial_conditions({"q": np.array([1.0, 2.0]), "p": np.array([3.0, 4.0])})
    assert np.array_equal(ics["q"], [1.0, 2.0, 3.0, 4.0])


def test_combined_rejects_unpartitioned():
    with pytest.raises(TypeError):
        combined_equation(harmonic_oscillator.odeproblem().equation)


def test_combined_view_of_dae_fails():
    with pytest.raises(TypeError):
        combined_equation(DAE(harmonic_oscillator.dae_v, harmonic_oscillator.dae_u, harmonic_oscillator.dae_phi))


# ----------------------------------------------------------------------
# Splitting composition
# ----------------------------------------------------------------------


def test_single_phase_uses_exact_solution():
    """Test one exact phase against the closed-form growth."""
    step = SplittingComposition(exponential_growth.sodeproblem())
    q1 = np.zeros(1)
    step(q1, 0.1, exponential_growth.X0, 0.0)
    assert q1[0] == pytest.approx(math.exp(0.1), rel=1e-14)


def test_repeated_phase_with_fractional_coefficients():
    step = SplittingComposition(exponential_growth.sodeproblem(), sequence=(0, 0), coefficients=(0.5, 0.5))
    q1 = np.zeros(1)
    step(q1, 0.1, exponential_growth.X0, 0.0)
    assert q1[0] == pytest.approx(math.exp(0.1), rel=1e-12)


def test_strang_splitting_of_oscillator():
    """Test a symmetric composition of the two oscillator phases."""
    prob = harmonic_oscillator.sodeproblem()
    step = SplittingComposition(prob, sequence=(0, 1, 0), coefficients=(0.5, 1.0, 0.5))
    q0 = prob.ics["q"]
    q1 = np.zeros(2)
    step(q1, 0.1, q0, 0.0)
    assert all_close(q1, [0.49875, -0.025])
    assert np.array_equal(q0, harmonic_oscillator.Q0)


def test_vector_field_phase_needs_stage():
    """Test that a phase without a solution is advanced by the given stage."""
    prob = SODEProblem(
        (exponential_growth.vectorfield,),
        None,
        exponential_growth.TSPAN,
        exponential_growth.TSTEP,
        exponential_growth.X0,
        parameters={"k": 1.0},
    )
    with pytest.raises(ArgumentMismatchError) as excinfo:
        SplittingComposition(prob)
    assert excinfo.value.location == "phase 0"

    step = SplittingComposition(prob, stage=euler_stage)
    q1 = np.zeros(1)
    step(q1, 0.1, exponential_growth.X0, 0.0)
    assert q1[0] == pytest.approx(1.1)


@pytest.mark.parametrize(
    "sequence, coefficients",
    [
        ((0, 1), (0.5, 1.0)),
        ((0, 1, 0), (0.5, 1.0)),
        ((0, 2), (1.0, 1.0)),
    ],
)
def test_invalid_composition(sequence, coefficients):
    with pytest.raises(ArgumentMismatchError):
        SplittingComposition(harmonic_oscillator.sodeproblem(), sequence=sequence, coefficients=coefficients)


def test_composition_needs_split_problem():
    with pytest.raises(TypeError):
        SplittingComposition(harmonic_oscillator.odeproblem())
