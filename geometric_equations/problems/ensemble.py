"""
Ensembles of initial-value problems sharing one equation.

An ``EnsembleProblem`` holds ``N`` initial-condition records and ``N``
parameter records. A single record on either side is broadcast to the length
of the other. Construction runs the full validation on the first entry. Every
other entry must have the structure of the first and pass the
initial-condition and parameter checks; role signatures are only probed
once. ``problem(i)`` builds a fully validated ``EquationProblem`` for entry
``i`` on demand.

Example:
    >>> ens = EnsembleProblem(equ, (0.0, 1.0), 0.1, [ics_a, ics_b, ics_c], {"k": 0.5})
    >>> ens.nsamples
    3
    >>> [prob.tspan for prob in ens]
    [(0.0, 1.0), (0.0, 1.0), (0.0, 1.0)]
"""

import logging
import numbers
import operator
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from ..binding import freeze_parameters
from ..equations.base import GeometricEquation
from ..errors import CardinalityMismatchError
from ..sentinels import NullParameters
from ..validation import validate_initial_conditions, validate_parameters, validate_problem
from .problem import EquationProblem, promote_tspan_and_tstep

__all__ = ["EnsembleProblem"]

logger = logging.getLogger(__name__)


def _is_single_parameters(params: Any) -> bool:
    return params is None or isinstance(params, (Mapping, NullParameters))


def _structure(ics: Mapping) -> dict:
    """Keys with array type, element type and dimension of each entry."""
    return {key: (type(value), getattr(value, "dtype", None), getattr(value, "ndim", None)) for key, value in ics.items()}


class EnsembleProblem:
    """
    One equation with a collection of initial conditions and parameters.

    Attributes (read-only properties):
        equation: The shared equation variant
        tspan, tstep: Promoted time span and step, shared by all entries
        ics: Tuple of ``N`` initial-condition records
        params: Tuple of ``N`` parameter records
        functions: Raw role bundle of the equation (parameters not bound)
        solutions: Raw invariant bundle of the equation
        nsamples: Number of entries ``N``
    """

    def __init__(self, equation: GeometricEquation, tspan: Any, tstep: Any, ics: Any, parameters: Any = None):
        tspan, tstep = promote_tspan_and_tstep(tspan, tstep)

        ics_list = [ics] if isinstance(ics, Mapping) else list(ics)
        if _is_single_parameters(parameters):
            params_list = [NullParameters() if parameters is None else parameters]
        else:
            params_list = list(parameters)

        if not ics_list or not params_list:
            raise CardinalityMismatchError(
                "Ensemble needs at least one initial condition and one parameter record",
                location="ics" if not ics_list else "parameters",
            )

        if len(ics_list) == 1 and len(params_list) > 1:
            ics_list = ics_list * len(params_list)
        elif len(params_list) == 1 and len(ics_list) > 1:
            params_list = params_list * len(ics_list)
        elif len(ics_list) != len(params_list):
            raise CardinalityMismatchError(
                f"Ensemble has {len(ics_list)} initial conditions but {len(params_list)} parameter records",
                location="parameters",
            )

        validate_problem(equation, tspan, ics_list[0], params_list[0]).raise_for_errors()

        reference = _structure(ics_list[0])
        for i, entry in enumerate(ics_list[1:], start=1):
            if not isinstance(entry, Mapping) or _structure(entry) != reference:
                raise CardinalityMismatchError(
                    f"Initial condition {i} does not have the structure of initial condition 0",
                    location=f"ics[{i}]",
                )
            validate_initial_conditions(equation, entry).raise_for_errors()
        for entry in params_list[1:]:
            validate_parameters(equation, entry).raise_for_errors()

        self._equation = equation
        self._tspan = tspan
        self._tstep = tstep
        self._ics = tuple(MappingProxyType(dict(entry)) for entry in ics_list)
        self._params = tuple(freeze_parameters(entry) for entry in params_list)

        logger.debug(
            "Created %s for %s with %d samples",
            type(self).__name__,
            type(equation).__name__,
            len(self._ics),
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
        return self._ics[0]["q"].dtype

    @property
    def arrtype(self) -> type:
        return type(self._ics[0]["q"])

    @property
    def functions(self) -> Mapping:
        return self._equation.roles()

    @property
    def solutions(self) -> Mapping:
        if not self._equation.has_invariants():
            return MappingProxyType({})
        return self._equation.invariants

    @property
    def invariants(self) -> Any:
        return self._equation.invariants

    @property
    def periodicity(self) -> Any:
        return self._equation.periodicity

    @property
    def ics(self) -> tuple:
        return self._ics

    @property
    def initial_conditions(self) -> tuple:
        return self._ics

    @property
    def params(self) -> tuple:
        return self._params

    @property
    def parameters(self) -> tuple:
        return self._params

    @property
    def nsamples(self) -> int:
        return len(self._ics)

    @property
    def nconstraints(self) -> int:
        return self._equation.nconstraints(self._ics[0])

    @property
    def ndims(self) -> int:
        return int(self._ics[0]["q"].size)

    def _index(self, i: numbers.Integral) -> int:
        i = operator.index(i)
        if not 0 <= i < len(self._ics):
            raise IndexError(f"Ensemble index {i} out of range for {len(self._ics)} samples")
        return i

    def initial_condition(self, i: numbers.Integral) -> Mapping:
        i = self._index(i)
        return self._ics[i]

    def parameter(self, i: numbers.Integral) -> Any:
        i = self._index(i)
        return self._params[i]

    def problem(self, i: numbers.Integral) -> EquationProblem:
        """Build the fully validated problem for entry ``i``."""
        i = self._index(i)
        logger.debug("Materializing sample %d of %s", i, type(self).__name__)
        return EquationProblem(self._equation, self._tspan, self._tstep, self._ics[i], self._params[i])

    def __len__(self) -> int:
        return len(self._ics)

    def __iter__(self) -> Iterator[EquationProblem]:
        for i in range(len(self._ics)):
            yield self.problem(i)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(equation={type(self._equation).__name__}, tspan={self._tspan}, "
            f"tstep={self._tstep}, nsamples={len(self._ics)})"
        )
