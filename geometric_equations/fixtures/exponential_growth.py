"""Exponential growth ``ẋ = k x``."""

import math

import numpy as np

from ..problems import ODEProblem, SODEProblem

__all__ = ["X0", "TSPAN", "TSTEP", "DEFAULT_PARAMETERS", "vectorfield", "solution", "odeproblem", "sodeproblem"]

X0 = np.array([1.0])
TSPAN = (0.0, 10.0)
TSTEP = 0.1

DEFAULT_PARAMETERS = {"k": 1.0}


def vectorfield(v, t, x, params):
    v[0] = params["k"] * x[0]


def solution(x1, t1, x0, t0, params):
    x1[0] = x0[0] * math.exp(params["k"] * (t1 - t0))


def odeproblem(x0=X0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return ODEProblem(vectorfield, tspan, tstep, x0, parameters=parameters)


def sodeproblem(x0=X0, parameters=DEFAULT_PARAMETERS, tspan=TSPAN, tstep=TSTEP):
    return SODEProblem((vectorfield,), (solution,), tspan, tstep, x0, parameters=parameters)
