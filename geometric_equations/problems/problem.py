"""
Single initial-value problem.

An ``EquationProblem`` pairs an equation with a time span, a time step, one
initial-condition record and one parameter record. Construction validates
the combination and fails with one of the errors from
``geometric_equations.errors``; a constructed problem is immutable.

Example:
    >>> equ = HODE(v, f, hamiltonian, parameters={"k": 0.5})
    >>> prob = EquationProblem(equ, (0.0, 1.0), 0.1, {"q": q0, "p": p0}, {"k": 0.5})
    >>> prob.functions["h"](0.0, q0, p0)
    0.0625
"""

import logging
import math
import numbers
from types import MappingProxyType
from typing import Any, Mapping

from ..binding import freeze_parameters
from ..equations.base import GeometricEquation
from ..errors import ArgumentMismatchError
from ..sentinels import NullParameters, NullPeriodicity
from ..util import values_equal
from ..validation import validate_problem

__all__ = ["EquationProblem", "promote_tspan_and_tstep"]

logger = logging.getLogger(__name__)


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def promote_tspan_and_tstep(tspan: Any, tstep: Any) -> tuple:
    """
    Bring the time span endpoints and the time step to a common number type.

    Integers stay integers when all three values are integral; otherwise all
    three become floats.

    Args:
        tspan: Pair ``(t0, t1)`` with ``t0 <= t1``
        tstep: Positive time step

    Returns:
        ``((t0, t1), tstep)`` in the common type

    Raises:
        ArgumentMismatchError: If the values are not real numbers, are NaN,
            the step is not positive or the span is reversed
    """
    try:
        t0, t1 = tspan
    except (TypeError, ValueError):
        raise ArgumentMismatchError(
            f"Time span must be a pair (t0, t1), got {tspan!r}", location="tspan"
        ) from None

    for label, value in (("tspan", t0), ("tspan", t1), ("tstep", tstep)):
        if not _is_real(value):
            raise ArgumentMismatchError(
                f"Time values must be real numbers, got {value!r} of type {type(value).__name__}",
                location=label,
            )

    if all(isinstance(x, numbers.Integral) for x in (t0, t1, tstep)):
        t0, t1, tstep = int(t0), int(t1), int(tstep)
    else:
        t0, t1, tstep = float(t0), float(t1), float(tstep)
        if math.isnan(t0) or math.isnan(t1) or math.isnan(tstep):
            raise ArgumentMismatchError("Time values must not be NaN", location="tspan")

    if tstep <= 0:
        raise ArgumentMismatchError(f"Time step must be positive, got {tstep!r}", location="tstep")
    if t1 < t0:
        raise ArgumentMismatchError(f"Time span ({t0!r}, {t1!r}) is reversed", location="tspan")

    return (t0, t1), tstep


class EquationProblem:
    """
    An equation together with everything needed to start integrating it.

    Attributes (read-only properties):
        equation: The equation variant
        tspan: ``(t0, t1)`` in the promoted time type
        tstep: Time step
        ics: Initial-condition record (read-only mapping)
        parameters: Parameter record (read-only mapping) or ``NullParameters``
        functions: Role bundle with parameters bound
        solutions: Invariant bundle with parameters bound
        datatype: Element type of the state vectors
        arrtype: Array type of the state vectors
    """

    def __init__(self, equation: GeometricEquation, tspan: Any, tstep: Any, ics: Any, parameters: Any = None):
        params = NullParameters() if parameters is None else parameters
        tspan, tstep = promote_tspan_and_tstep(tspan, tstep)

        validate_problem(equation, tspan, ics, params).raise_for_errors()

        self._equation = equation
        self._tspan = tspan
        self._tstep = tstep
        self._ics = MappingProxyType(dict(ics))
        self._params = freeze_parameters(params)
        self._datatype = ics["q"].dtype
        self._arrtype = type(ics["q"])
        self._functions = equation.functions(self._params)
        self._solutions = equation.solutions(self._params)

        logger.debug(
            "Created %s for %s on %s with step %s",
            type(self).__name__,
            type(equation).__name__,
            tspan,
            tstep,
        )

    @property
    def equation(self) -> GeometricEquation:
        return self._equation

    @property
    def equtype(self) -> type:
        return type(self._equation)

    @property
    def tspan(self) -> tuple:
        return self._tspan

    @property
    def tstep(self) -> Any:
        return self._tstep

    @property
    def timestep(self) -> Any:
        return self._tstep

    @property
    def tbegin(self) -> Any:
        return self._tspan[0]

    @property
    def tend(self) -> Any:
        return self._tspan[1]

    @property
    def timetype(self) -> type:
        return type(self._tspan[0])

    @property
    def datatype(self) -> Any:
        return self._datatype

    @property
    def arrtype(self) -> type:
        return self._arrtype

    @property
    def ics(self) -> Mapping:
        return self._ics

    @property
    def initial_condition(self) -> Mapping:
        return self._ics

    @property
    def initial_conditions(self) -> Mapping:
        return self._ics

    @property
    def parameters(self) -> Any:
        return self._params

    @property
    def params(self) -> Any:
        return self._params

    @property
    def functions(self) -> Mapping:
        return self._functions

    @property
    def solutions(self) -> Mapping:
        return self._solutions

    @property
    def invariants(self) -> Any:
        return self._equation.invariants

    @property
    def periodicity(self) -> Mapping:
        """Periodicity per initial-condition key; only ``q`` can be periodic."""
        return MappingProxyType(
            {key: self._equation.periodicity if key == "q" else NullPeriodicity() for key in self._ics}
        )

    @property
    def nconstraints(self) -> int:
        return self._equation.nconstraints(self._ics)

    @property
    def ndims(self) -> int:
        return int(self._ics["q"].size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EquationProblem):
            return NotImplemented
        return bool(
            self._equation == other._equation
            and self._tspan == other._tspan
            and self._tstep == other._tstep
            and values_equal(self._ics, other._ics)
            and values_equal(self._params, other._params)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(equation={type(self._equation).__name__}, tspan={self._tspan}, "
            f"tstep={self._tstep}, ics={dict(self._ics)!r}, parameters={self._params!r})"
        )

    def __str__(self) -> str:
        lines = [
            f"Geometric Equation Problem for {self._equation.title}",
            "",
            f" Timespan: {self._tspan}",
            f" Timestep: {self._tstep}",
            "",
            " Initial conditions:",
        ]
        for key, value in self._ics.items():
            lines.append(f"   {key} = {value}")
        lines.append("")
        lines.append(" Parameters:")
        if isinstance(self._params, NullParameters):
            lines.append(f"   {self._params!r}")
        else:
            for key, value in self._params.items():
                lines.append(f"   {key} = {value!r}")
        return "\n".join(lines)
