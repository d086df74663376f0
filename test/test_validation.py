"""
Tests for the validation protocol.
"""

import logging

import numpy as np
import pytest
from common import K, P0, Q0, TSPAN, decay_v, oscillator_f, oscillator_hamiltonian, oscillator_v

from geometric_equations import (
    HODE,
    ODE,
    PDAE,
    NullParameters,
    ShapeMismatchError,
    SignatureMismatchError,
    check_initial_conditions,
    check_methods,
    check_parameters,
    validate_problem,
)
from geometric_equations.validation import (
    ValidationCategory,
    ValidationResult,
    ValidationSeverity,
    is_applicable,
    validate_initial_conditions,
    validate_methods,
    validate_parameters,
)


@pytest.fixture
def hode():
    return HODE(oscillator_v, oscillator_f, oscillator_hamiltonian, parameters={"k": K})


@pytest.fixture
def ics():
    return {"q": Q0.copy(), "p": P0.copy()}


def test_valid_initial_conditions(hode, ics):
    """Test that a matching record passes validation."""
    result = validate_initial_conditions(hode, ics)
    assert result.is_valid
    assert not result.has_warnings
    assert check_initial_conditions(hode, ics)


def test_missing_key(hode):
    """Test that a missing key is reported with its name."""
    result = validate_initial_conditions(hode, {"q": Q0})
    assert not result.is_valid
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.category == ValidationCategory.SHAPE
    assert error.location == "key 'p'"
    assert "'p'" in str(error)


def test_element_type_mismatch(hode):
    """Test that state vectors must share the element type of q."""
    result = validate_initial_conditions(hode, {"q": Q0, "p": np.array([0], dtype=np.int64)})
    assert result.has_errors
    assert any("element type" in e.message for e in result.errors)


def test_shape_mismatch(hode):
    """Test that p must have the shape of q."""
    result = validate_initial_conditions(hode, {"q": Q0, "p": np.zeros(2)})
    assert result.has_errors
    assert result.errors[0].location == "key 'p'"


def test_array_type_mismatch(hode):
    """Test that plain lists are not accepted as state vectors."""
    result = validate_initial_conditions(hode, {"q": Q0, "p": [0.0]})
    assert result.has_errors


def test_scalars_are_not_state_vectors(hode):
    """Test that numpy scalars and zero-dimensional arrays are rejected."""
    result = validate_initial_conditions(hode, {"q": np.float64(0.5), "p": np.float64(0.0)})
    assert [e.location for e in result.errors] == ["key 'q'", "key 'p'"]
    assert not check_initial_conditions(ODE(decay_v), {"q": np.array(0.5)})


def test_severities():
    assert [s.name for s in ValidationSeverity] == ["ERROR", "WARNING"]


def test_non_mapping_initial_conditions(hode):
    assert not check_initial_conditions(hode, (Q0, P0))


def test_unknown_key_is_warning(hode, ics, caplog):
    """Test that extra keys warn but do not invalidate the record."""
    ics["x"] = np.zeros(1)
    result = validate_initial_conditions(hode, ics)
    assert result.is_valid
    assert result.has_warnings
    assert result.warnings[0].severity == ValidationSeverity.WARNING

    with caplog.at_level(logging.WARNING, logger="geometric_equations.validation"):
        result.raise_for_errors()
    assert "'x'" in caplog.text


def test_multipliers_may_differ_in_length():
    """Test that multiplier vectors only need the dimension of q."""

    def v(out, t, q, p):
        out[:] = p

    def f(out, t, q, p):
        out[:] = -q

    def u(out, t, q, p, lam):
        out[:] = 0

    def phi(out, t, q, p):
        out[0] = p[0] - q[1]

    equ = PDAE(v, f, u, u, phi)
    q = np.zeros(2)
    assert check_initial_conditions(equ, {"q": q, "p": q.copy(), "lambda": np.zeros(1)})
    assert not check_initial_conditions(equ, {"q": q, "p": q.copy(), "lambda": np.zeros((1, 1))})


def test_raise_for_errors_uses_first_category(hode):
    """Test that the exception type follows the first error."""
    result = validate_initial_conditions(hode, {})
    with pytest.raises(ShapeMismatchError) as excinfo:
        result.raise_for_errors()
    assert excinfo.value.location == "key 'q'"
    assert "'p'" in str(excinfo.value)


def test_summary(hode):
    result = validate_initial_conditions(hode, {"q": Q0})
    summary = result.summary()
    assert "INVALID" in summary
    assert "Errors: 1" in summary


def test_empty_result_is_valid():
    result = ValidationResult()
    assert result.is_valid
    result.raise_for_errors()


def test_check_methods_accepts_matching_roles(hode, ics):
    """Test that correctly shaped roles pass the signature check."""
    assert check_methods(hode, TSPAN, ics, {"k": K})


def test_check_methods_reports_wrong_arity(ics):
    """Test that a role taking too few arguments is named in the error."""

    def f_short(out, t, q, params):
        out[0] = -params["k"] * q[0]

    equ = HODE(oscillator_v, f_short, oscillator_hamiltonian, parameters={"k": K})
    result = validate_methods(equ, TSPAN, ics, {"k": K})
    assert not result.is_valid
    assert [e.location for e in result.errors] == ["role 'f'"]
    assert "f(out, t, q, p, params)" in result.errors[0].message
    with pytest.raises(SignatureMismatchError):
        result.raise_for_errors()


def test_check_methods_without_parameters():
    """Test that params is not appended when the equation declares none."""
    equ = ODE(decay_v)
    assert check_methods(equ, TSPAN, {"q": Q0}, NullParameters())

    equ = ODE(oscillator_v)
    assert not check_methods(equ, TSPAN, {"q": Q0}, NullParameters())


def test_check_methods_probes_invariants(ics):
    """Test that invariants are checked like roles."""
    equ = HODE(
        oscillator_v,
        oscillator_f,
        oscillator_hamiltonian,
        invariants={"bad": lambda t, q: 0.0},
        parameters={"k": K},
    )
    result = validate_methods(equ, TSPAN, ics, {"k": K})
    assert [e.location for e in result.errors] == ["role 'invariant bad'"]


def test_validation_is_idempotent(hode, ics):
    """Test that repeated checks give the same answer and leave inputs untouched."""
    params = {"k": K}
    for _ in range(3):
        assert check_initial_conditions(hode, ics)
        assert check_methods(hode, TSPAN, ics, params)
        assert check_parameters(hode, params)
    assert np.array_equal(ics["q"], Q0)
    assert params == {"k": K}


def test_validation_does_not_call_roles(ics):
    """Test that role callables are never invoked during validation."""
    calls = []

    def v(out, t, q, p):
        calls.append("v")

    def f(out, t, q, p):
        calls.append("f")

    def h(t, q, p):
        calls.append("h")
        return 0.0

    assert check_methods(HODE(v, f, h), TSPAN, ics, NullParameters())
    assert calls == []


def test_is_applicable():
    class Field:
        def __call__(self, out, t, q):
            pass

    assert is_applicable(Field(), 1, 2, 3)
    assert not is_applicable(Field(), 1, 2)
    assert is_applicable(lambda *args: None, 1, 2, 3, 4)
    assert not is_applicable(42, 1)


def test_parameter_validation(hode):
    """Test names and types against the schema."""
    assert validate_parameters(hode, {"k": 1}).is_valid
    assert not validate_parameters(hode, {}).is_valid
    assert not validate_parameters(hode, {"k": "0.5"}).is_valid
    assert not validate_parameters(hode, {"k": 0.5, "m": 1.0}).is_valid
    assert not validate_parameters(hode, NullParameters()).is_valid


def test_parameters_for_equation_without_parameters():
    equ = ODE(decay_v)
    assert check_parameters(equ, NullParameters())
    assert not check_parameters(equ, {"k": 0.5})


def test_periodicity_shape():
    """Test that periodicity must match the shape of q."""
    equ = ODE(decay_v, periodicity=np.array([2 * np.pi, 0.0]))
    result = validate_problem(equ, TSPAN, {"q": Q0}, NullParameters())
    assert [e.location for e in result.errors] == ["periodicity"]

    equ = ODE(decay_v, periodicity=[2 * np.pi])
    assert validate_problem(equ, TSPAN, {"q": Q0}, NullParameters()).is_valid
