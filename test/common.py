"""Shared helpers for the test suite."""

import numpy as np
from beartype import beartype
from beartype.typing import Any, Mapping

EPS = 1e-12

Q0 = np.array([0.5])
P0 = np.array([0.0])
TSPAN = (0.0, 1.0)
TSTEP = 0.1
K = 0.5


@beartype
def all_close(a: np.ndarray, b: Any) -> bool:
    """Check if two arrays agree within EPS tolerance."""
    return bool(np.allclose(a, b, rtol=0.0, atol=EPS))


@beartype
def copy_ics(ics: Mapping) -> dict:
    """Deep copy of an initial-condition record."""
    return {key: np.array(value, copy=True) for key, value in ics.items()}


# Harmonic oscillator q̈ = -k q in partitioned form


def oscillator_v(out, t, q, p, params):
    out[0] = p[0]


def oscillator_f(out, t, q, p, params):
    out[0] = -params["k"] * q[0]


def oscillator_hamiltonian(t, q, p, params):
    return p[0] ** 2 / 2 + params["k"] * q[0] ** 2 / 2


# Exponential decay without parameters


def decay_v(out, t, q):
    out[:] = -q
