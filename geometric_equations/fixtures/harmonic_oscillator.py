"""
Harmonic oscillator ``q̈ = -k q`` written as every equation variant.

The partitioned variants (PODE, HODE, PSDE, SPSDE) use the one-dimensional
form with ``q0 = [0.5]`` and ``p0 = [0.0]``. The implicit and constrained
variants use the two-dimensional degenerate Lagrangian form with
``q0 = [0.5, 0.0]`` and ``p = ϑ(q) = (q[1], 0)``; the DAE carries a third
coordinate ``z[2] = z[0] + z[1]`` enforced by its constraint.
"""

import math

import numpy as np

from ..problems import (
    DAEProblem,
    HDAEProblem,
    HODEEnsemble,
    HODEProblem,
    IDAEProblem,
    IODEProblem,
    LDAEProblem,
    LODEProblem,
    ODEProblem,
    PDAEProblem,
    PODEProblem,
    PSDEProblem,
    SDEProblem,
    SODEProblem,
    SPDAEProblem,
    SPSDEProblem,
)

TSPAN = (0.0, 1.0)
TSTEP = 0.1

K = 0.5
OMEGA = math.sqrt(K)
NOISE_INTENSITY = 0.1

DEFAULT_PARAMETERS = {"k": K, "omega": OMEGA}

Q0 = np.array([0.5, 0.0])
Z0 = np.array([0.5, 0.0, 0.5])
PARTITIONED_Q0 = np.array([0.5])
PARTITIONED_P0 = np.array([0.0])


def theta(q):
    """Canonical momentum ``ϑ(q) = (q[1], 0)`` of the degenerate form."""
    p = np.zeros_like(q)
    p[0] = q[1]
    p[1] = 0
    return p


P0 = theta(Q0)

_A = math.sqrt(Q0[1] ** 2 / K + Q0[0] ** 2)
_PHASE = math.asin(Q0[0] / _A)

REFERENCE_SOLUTION = np.array(
    [_A * math.sin(OMEGA * TSPAN[1] + _PHASE), OMEGA * _A * math.cos(OMEGA * TSPAN[1] + _PHASE)]
)


def hamiltonian(t, q, p, params):
    return p[0] ** 2 / 2 + params["k"] * q[0] ** 2 / 2


def hamiltonian_state(t, x, params):
    """Hamiltonian on the state ``x = (q, q̇)``."""
    return x[1] ** 2 / 2 + params["k"] * x[0] ** 2 / 2


def hamiltonian_implicit(t, q, v, params):
    return hamiltonian_state(t, q, params)


def lagrangian(t, q, v, params):
    return q[1] * v[0] - hamiltonian_state(t, q, params)


# ---------------------------------------------------------------------------
# Explicit forms
# ---------------------------------------------------------------------------


def ode_v(v, t, x, params):
    v[0] = x[1]
    v[1] = -params["k"] * x[0]


def pode_v(v, t, q, p, params):
    v[0] = p[0]


def pode_f(f, t, q, p, params):
    f[0] = -params["k"] * q[0]


def sode_v_1(v, t, q, params):
    v[0] = q[1]
    v[1] = 0


def sode_v_2(v, t, q, params):
    v[0] = 0
    v[1] = -params["k"] * q[0]


def sode_q_1(q1, t1, q0, t0, params):
    q1[0] = q0[0] + (t1 - t0) * q0[1]
    q1[1] = q0[1]


def sode_q_2(q1, t1, q0, t0, params):
    q1[0] = q0[0]
    q1[1] = q0[1] - (t1 - t0) * params["k"] * q0[0]


def odeproblem(x0=Q0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return ODEProblem(ode_v, tspan, tstep, x0, invariants={"h": hamiltonian_state}, parameters=parameters)


def podeproblem(q0=PARTITIONED_Q0, p0=PARTITIONED_P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return PODEProblem(pode_v, pode_f, tspan, tstep, q0, p0, invariants={"h": hamiltonian}, parameters=parameters)


def hodeproblem(q0=PARTITIONED_Q0, p0=PARTITIONED_P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return HODEProblem(pode_v, pode_f, hamiltonian, tspan, tstep, q0, p0, parameters=parameters)


def hodeensemble(q0s, p0s, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return HODEEnsemble(pode_v, pode_f, hamiltonian, tspan, tstep, q0s, p0s, parameters=parameters)


def sodeproblem(q0=Q0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return SODEProblem((sode_v_1, sode_v_2), (sode_q_1, sode_q_2), tspan, tstep, q0, parameters=parameters)


# ---------------------------------------------------------------------------
# Implicit forms
# ---------------------------------------------------------------------------


def iode_theta(p, t, q, v, params):
    p[0] = q[1]
    p[1] = 0


def iode_f(f, t, q, v, params):
    f[0] = -params["k"] * q[0]
    f[1] = v[0] - q[1]


def iode_g(g, t, q, v, lam, params):
    g[0] = 0
    g[1] = lam[0]


def iode_v(v, t, q, p, params):
    v[0] = q[1]
    v[1] = -params["k"] * q[0]


def iodeproblem(q0=Q0, p0=P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return IODEProblem(
        iode_theta, iode_f, iode_g, tspan, tstep, q0, p0,
        invariants={"h": hamiltonian_implicit}, parameters=parameters, v_bar=iode_v,
    )


def lodeproblem(q0=Q0, p0=P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return LODEProblem(
        iode_theta, iode_f, iode_g, lagrangian, tspan, tstep, q0, p0,
        invariants={"h": hamiltonian_implicit}, parameters=parameters, v_bar=iode_v,
    )


# ---------------------------------------------------------------------------
# Constrained forms
# ---------------------------------------------------------------------------


def dae_v(v, t, z, params):
    v[0] = z[1]
    v[1] = -params["k"] * z[0]
    v[2] = z[1] - params["k"] * z[0]


def dae_u(u, t, z, lam, params):
    u[0] = -lam[0]
    u[1] = -lam[0]
    u[2] = +lam[0]


def dae_phi(phi, t, z, params):
    phi[0] = z[2] - z[0] - z[1]


def daeproblem(z0=Z0, lambda0=np.zeros(1), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return DAEProblem(
        dae_v, dae_u, dae_phi, tspan, tstep, z0, lambda0,
        invariants={"h": hamiltonian_state}, parameters=parameters,
    )


def pdae_v(v, t, q, p, params):
    v[0] = q[1]
    v[1] = -params["k"] * q[0]


def pdae_f(f, t, q, p, params):
    f[0] = -params["k"] * q[0]
    f[1] = p[0] - q[1]


def pdae_u(u, t, q, p, lam, params):
    u[0] = lam[0]
    u[1] = lam[1]


def pdae_g(g, t, q, p, lam, params):
    g[0] = 0
    g[1] = lam[0]


def pdae_phi(phi, t, q, p, params):
    phi[0] = p[0] - q[1]
    phi[1] = p[1]


def pdae_psi(psi, t, q, p, qdot, pdot, params):
    psi[0] = pdot[0] - qdot[1]
    psi[1] = pdot[1]


def pdaeproblem(q0=Q0, p0=P0, lambda0=np.zeros(2), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return PDAEProblem(
        pdae_v, pdae_f, pdae_u, pdae_g, pdae_phi, tspan, tstep, q0, p0, lambda0,
        invariants={"h": hamiltonian}, parameters=parameters,
    )


def hdaeproblem(q0=Q0, p0=P0, lambda0=np.zeros(2), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return HDAEProblem(
        pdae_v, pdae_f, pdae_u, pdae_g, pdae_phi, pdae_u, pdae_g, pdae_psi, hamiltonian,
        tspan, tstep, q0, p0, lambda0, parameters=parameters,
    )


def idae_u(u, t, q, v, p, lam, params):
    pdae_u(u, t, q, p, lam, params)


def idae_g(g, t, q, v, p, lam, params):
    pdae_g(g, t, q, p, lam, params)


def idae_phi(phi, t, q, v, p, params):
    pdae_phi(phi, t, q, p, params)


def idaeproblem(q0=Q0, p0=P0, lambda0=np.zeros(2), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return IDAEProblem(
        iode_theta, iode_f, idae_u, idae_g, idae_phi, tspan, tstep, q0, p0, lambda0,
        invariants={"h": hamiltonian_implicit}, parameters=parameters, v_bar=iode_v,
    )


def ldaeproblem(q0=Q0, p0=P0, lambda0=np.zeros(2), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return LDAEProblem(
        iode_theta, iode_f, idae_u, idae_g, idae_phi, lagrangian, tspan, tstep, q0, p0, lambda0,
        invariants={"h": hamiltonian_implicit}, parameters=parameters, v_bar=iode_v,
    )


def spdaeproblem(q0=Q0, p0=P0, lambda0=np.zeros(2), parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return SPDAEProblem(
        (pdae_v, pdae_u), (pdae_f, pdae_g), pdae_phi, tspan, tstep, q0, p0, lambda0,
        invariants={"h": hamiltonian}, parameters=parameters,
    )


# ---------------------------------------------------------------------------
# Stochastic forms with additive noise
# ---------------------------------------------------------------------------


def sde_B(B, t, x, params):
    B[:, 0] = 0
    B[1, 0] = NOISE_INTENSITY


def psde_B(B, t, q, p, params):
    B[:, 0] = 0


def psde_G(G, t, q, p, params):
    G[:, 0] = NOISE_INTENSITY


def spsde_f_zero(f, t, q, p, params):
    f[:] = 0


def sdeproblem(x0=Q0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return SDEProblem(ode_v, sde_B, tspan, tstep, x0, invariants={"h": hamiltonian_state}, parameters=parameters)


def psdeproblem(q0=PARTITIONED_Q0, p0=PARTITIONED_P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return PSDEProblem(
        pode_v, pode_f, psde_B, psde_G, tspan, tstep, q0, p0,
        invariants={"h": hamiltonian}, parameters=parameters,
    )


def spsdeproblem(q0=PARTITIONED_Q0, p0=PARTITIONED_P0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return SPSDEProblem(
        pode_v, pode_f, spsde_f_zero, psde_B, psde_G, psde_B, tspan, tstep, q0, p0,
        invariants={"h": hamiltonian}, parameters=parameters,
    )


PROBLEMS = {
    "ODE": odeproblem,
    "PODE": podeproblem,
    "HODE": hodeproblem,
    "IODE": iodeproblem,
    "LODE": lodeproblem,
    "SODE": sodeproblem,
    "DAE": daeproblem,
    "PDAE": pdaeproblem,
    "HDAE": hdaeproblem,
    "IDAE": idaeproblem,
    "LDAE": ldaeproblem,
    "SPDAE": spdaeproblem,
    "SDE": sdeproblem,
    "PSDE": psdeproblem,
    "SPSDE": spsdeproblem,
}
