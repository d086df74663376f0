"""
Per-variant problem and ensemble constructors.

Each ``XProblem`` builds the equation ``X`` from its role callables and
wraps it in an ``EquationProblem``; each ``XEnsemble`` does the same for an
``EnsembleProblem``. Arguments are the positional roles of ``X`` in order,
then ``tspan``, ``tstep`` and the initial state. The initial state is either
a full initial-condition dict or the state vectors in key order::

    HODEProblem(v, f, hamiltonian, (0.0, 1.0), 0.1, q0, p0, parameters={"k": 0.5})
    IODEProblem(theta, f, g, (0.0, 1.0), 0.1, q0, p0)   # lambda defaults to zeros

The parameter schema of the equation is derived from ``parameters`` (the
first record for ensembles). Further keyword arguments (``v_bar``, ``psi``,
``noise_dimension``, ...) are passed on to the equation.
"""

from dataclasses import fields
from typing import Any, ClassVar

from ..equations import DAE, HDAE, HODE, IDAE, IODE, LDAE, LODE, ODE, PDAE, PODE, PSDE, SDE, SODE, SPDAE, SPSDE
from ..sentinels import parameter_types
from .ensemble import EnsembleProblem
from .problem import EquationProblem

__all__ = [
    "ODEProblem", "ODEEnsemble",
    "PODEProblem", "PODEEnsemble",
    "HODEProblem", "HODEEnsemble",
    "IODEProblem", "IODEEnsemble",
    "LODEProblem", "LODEEnsemble",
    "SODEProblem", "SODEEnsemble",
    "DAEProblem", "DAEEnsemble",
    "PDAEProblem", "PDAEEnsemble",
    "HDAEProblem", "HDAEEnsemble",
    "IDAEProblem", "IDAEEnsemble",
    "LDAEProblem", "LDAEEnsemble",
    "SPDAEProblem", "SPDAEEnsemble",
    "SDEProblem", "SDEEnsemble",
    "PSDEProblem", "PSDEEnsemble",
    "SPSDEProblem", "SPSDEEnsemble",
]


def positional_roles(equation_class: type) -> tuple:
    """Names of the roles an equation class takes positionally."""
    return tuple(f.name for f in fields(equation_class) if f.init and not f.kw_only)


def _split_arguments(name: str, equation_class: type, args: tuple) -> tuple:
    roles = positional_roles(equation_class)
    if len(args) < len(roles) + 2:
        raise TypeError(
            f"{name}() takes the roles {list(roles)} followed by tspan and tstep, "
            f"got {len(args)} positional arguments"
        )
    n = len(roles)
    return args[:n], args[n], args[n + 1], args[n + 2:]


class VariantProblem(EquationProblem):
    """Problem whose equation is built from role callables."""

    equation_class: ClassVar[type]

    def __init__(
        self,
        *args: Any,
        invariants: Any = None,
        parameters: Any = None,
        periodicity: Any = None,
        **options: Any,
    ):
        roles, tspan, tstep, states = _split_arguments(type(self).__name__, self.equation_class, args)
        equation = self.equation_class(
            *roles,
            invariants=invariants,
            parameters=parameter_types(parameters),
            periodicity=periodicity,
            **options,
        )
        ics = self.equation_class.initial_conditions(*states)
        super().__init__(equation, tspan, tstep, ics, parameters)


class VariantEnsemble(EnsembleProblem):
    """Ensemble whose equation is built from role callables."""

    equation_class: ClassVar[type]

    def __init__(
        self,
        *args: Any,
        invariants: Any = None,
        parameters: Any = None,
        periodicity: Any = None,
        **options: Any,
    ):
        roles, tspan, tstep, states = _split_arguments(type(self).__name__, self.equation_class, args)
        if isinstance(parameters, (list, tuple)) and parameters:
            schema = parameter_types(parameters[0])
        else:
            schema = parameter_types(parameters)
        equation = self.equation_class(
            *roles,
            invariants=invariants,
            parameters=schema,
            periodicity=periodicity,
            **options,
        )
        ics = self.equation_class.ensemble_initial_conditions(*states)
        super().__init__(equation, tspan, tstep, ics, parameters)


class ODEProblem(VariantProblem):
    """``ODEProblem(v, tspan, tstep, q0)``"""

    equation_class = ODE


class ODEEnsemble(VariantEnsemble):
    equation_class = ODE


class PODEProblem(VariantProblem):
    """``PODEProblem(v, f, tspan, tstep, q0, p0)``"""

    equation_class = PODE


class PODEEnsemble(VariantEnsemble):
    equation_class = PODE


class HODEProblem(VariantProblem):
    """``HODEProblem(v, f, hamiltonian, tspan, tstep, q0, p0)``"""

    equation_class = HODE


class HODEEnsemble(VariantEnsemble):
    equation_class = HODE


class IODEProblem(VariantProblem):
    """``IODEProblem(theta, f, g, tspan, tstep, q0, p0[, lambda0])``"""

    equation_class = IODE


class IODEEnsemble(VariantEnsemble):
    equation_class = IODE


class LODEProblem(VariantProblem):
    """``LODEProblem(theta, f, g, lagrangian, tspan, tstep, q0, p0[, lambda0])``"""

    equation_class = LODE


class LODEEnsemble(VariantEnsemble):
    equation_class = LODE


class SODEProblem(VariantProblem):
    """``SODEProblem(v, q, tspan, tstep, q0)`` with tuples ``v`` and ``q``"""

    equation_class = SODE


class SODEEnsemble(VariantEnsemble):
    equation_class = SODE


class DAEProblem(VariantProblem):
    """``DAEProblem(v, u, phi, tspan, tstep, q0[, lambda0[, mu0]])``"""

    equation_class = DAE


class DAEEnsemble(VariantEnsemble):
    equation_class = DAE


class PDAEProblem(VariantProblem):
    """``PDAEProblem(v, f, u, g, phi, tspan, tstep, q0, p0[, lambda0[, mu0]])``"""

    equation_class = PDAE


class PDAEEnsemble(VariantEnsemble):
    equation_class = PDAE


class HDAEProblem(VariantProblem):
    """``HDAEProblem(v, f, u, g, phi, u_bar, g_bar, psi, hamiltonian, tspan, tstep, q0, p0[, ...])``"""

    equation_class = HDAE


class HDAEEnsemble(VariantEnsemble):
    equation_class = HDAE


class IDAEProblem(VariantProblem):
    """``IDAEProblem(theta, f, u, g, phi, tspan, tstep, q0, p0[, lambda0[, mu0]])``"""

    equation_class = IDAE


class IDAEEnsemble(VariantEnsemble):
    equation_class = IDAE


class LDAEProblem(VariantProblem):
    """``LDAEProblem(theta, f, u, g, phi, lagrangian, tspan, tstep, q0, p0[, ...])``"""

    equation_class = LDAE


class LDAEEnsemble(VariantEnsemble):
    equation_class = LDAE


class SPDAEProblem(VariantProblem):
    """``SPDAEProblem(v, f, phi, tspan, tstep, q0, p0[, lambda0])`` with tuples ``v`` and ``f``"""

    equation_class = SPDAE


class SPDAEEnsemble(VariantEnsemble):
    equation_class = SPDAE


class SDEProblem(VariantProblem):
    """``SDEProblem(v, B, tspan, tstep, q0; noise_dimension=1)``"""

    equation_class = SDE


class SDEEnsemble(VariantEnsemble):
    equation_class = SDE


class PSDEProblem(VariantProblem):
    """``PSDEProblem(v, f, B, G, tspan, tstep, q0, p0; noise_dimension=1)``"""

    equation_class = PSDE


class PSDEEnsemble(VariantEnsemble):
    equation_class = PSDE


class SPSDEProblem(VariantProblem):
    """``SPSDEProblem(v, f1, f2, B, G1, G2, tspan, tstep, q0, p0; noise_dimension=1)``"""

    equation_class = SPSDE


class SPSDEEnsemble(VariantEnsemble):
    equation_class = SPSDE
