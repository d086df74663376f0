"""Equation variants and their family markers."""

from .base import (
    AbstractDAE,
    AbstractODE,
    AbstractPDAE,
    AbstractPODE,
    AbstractPSDE,
    AbstractSDE,
    GeometricEquation,
)
from .dae import DAE, HDAE, IDAE, LDAE, PDAE, SPDAE
from .ode import HODE, IODE, LODE, ODE, PODE, SODE
from .sde import PSDE, SDE, SPSDE

EQUATIONS = (ODE, PODE, HODE, IODE, LODE, SODE, DAE, PDAE, HDAE, IDAE, LDAE, SPDAE, SDE, PSDE, SPSDE)

__all__ = [
    "GeometricEquation",
    "AbstractODE",
    "AbstractPODE",
    "AbstractDAE",
    "AbstractPDAE",
    "AbstractSDE",
    "AbstractPSDE",
    "EQUATIONS",
    *(equ.__name__ for equ in EQUATIONS),
]
