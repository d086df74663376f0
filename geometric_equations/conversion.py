"""
Views of one equation variant as another.

- ``unconstrained``: drops multipliers and constraints from the
  differential-algebraic variants (DAE -> ODE, PDAE -> PODE, HDAE -> HODE,
  IDAE -> IODE, LDAE -> LODE, SPDAE -> PODE of the first phase)
- ``combined_equation``: concatenates ``q`` and ``p`` of a PODE or HODE into
  one state vector and exposes an ODE on it
- ``SplittingComposition``: evaluates the phases of a SODE problem in
  sequence as one step

The views wrap the original role callables and never re-derive them, so
evaluating a view gives exactly the numbers the original roles write.
"""

import logging
import math
from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

from .equations import DAE, HDAE, HODE, IDAE, IODE, LDAE, LODE, ODE, PDAE, PODE, SODE, SPDAE, GeometricEquation
from .errors import ArgumentMismatchError
from .problems import EquationProblem

__all__ = [
    "COEFFICIENT_TOLERANCE",
    "unconstrained",
    "unconstrained_problem",
    "CombinedVectorField",
    "CombinedInvariant",
    "combined_equation",
    "combined_initial_conditions",
    "combined_problem",
    "SplittingComposition",
]

logger = logging.getLogger(__name__)

# Relative tolerance for the per-phase sum of splitting coefficients
COEFFICIENT_TOLERANCE = 1e-12


def _channels(equation: GeometricEquation) -> dict:
    return {
        "invariants": equation.invariants,
        "parameters": equation.parameters,
        "periodicity": equation.periodicity,
    }


_UNCONSTRAINED = {
    DAE: lambda equ: ODE(equ.v, **_channels(equ)),
    PDAE: lambda equ: PODE(equ.v, equ.f, **_channels(equ)),
    HDAE: lambda equ: HODE(equ.v, equ.f, equ.hamiltonian, **_channels(equ)),
    IDAE: lambda equ: IODE(equ.theta, equ.f, v_bar=equ.v_bar, f_bar=equ.f_bar, **_channels(equ)),
    LDAE: lambda equ: LODE(equ.theta, equ.f, None, equ.lagrangian, v_bar=equ.v_bar, f_bar=equ.f_bar, **_channels(equ)),
    SPDAE: lambda equ: PODE(equ.v[0], equ.f[0], **_channels(equ)),
}


def unconstrained(equation: GeometricEquation) -> GeometricEquation:
    """
    Underlying unconstrained equation of a differential-algebraic variant.

    The result shares the role callables, invariants, parameter schema and
    periodicity of ``equation``.

    Raises:
        TypeError: If ``equation`` is not a differential-algebraic variant
    """
    try:
        convert = _UNCONSTRAINED[type(equation)]
    except KeyError:
        raise TypeError(f"{type(equation).__name__} has no unconstrained view") from None
    return convert(equation)


def unconstrained_problem(problem: EquationProblem) -> EquationProblem:
    """Problem for the unconstrained view, used to compute initial guesses.

    Multipliers are dropped from the initial conditions; an IODE or LODE view
    starts with ``lambda`` set to zero.
    """
    equation = unconstrained(problem.equation)
    ics = {key: problem.ics[key] for key in equation.ics_keys if key in problem.ics and key not in ("lambda", "mu")}
    if "lambda" in equation.ics_keys:
        ics["lambda"] = np.zeros_like(ics["q"])
    return EquationProblem(equation, problem.tspan, problem.tstep, ics, problem.parameters)


class CombinedVectorField:
    """Vector field ``(v, f)`` on the concatenated state ``x = (q, p)``.

    Writes ``v`` into the first half and ``f`` into the second half of
    ``out``; both receive views of ``x``, so no data is copied.
    """

    __slots__ = ("v", "f")

    def __init__(self, v: Callable, f: Callable):
        self.v = v
        self.f = f

    def __call__(self, out, t, x, *params):
        d = x.shape[0] // 2
        self.v(out[:d], t, x[:d], x[d:], *params)
        self.f(out[d:], t, x[:d], x[d:], *params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CombinedVectorField):
            return NotImplemented
        return self.v is other.v and self.f is other.f

    def __hash__(self) -> int:
        return hash((id(self.v), id(self.f)))

    def __repr__(self) -> str:
        return f"CombinedVectorField({getattr(self.v, '__name__', self.v)}, {getattr(self.f, '__name__', self.f)})"


class CombinedInvariant:
    """Invariant ``I(t, q, p)`` evaluated on the concatenated state."""

    __slots__ = ("func",)

    def __init__(self, func: Callable):
        self.func = func

    def __call__(self, t, x, *params):
        d = x.shape[0] // 2
        return self.func(t, x[:d], x[d:], *params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CombinedInvariant):
            return NotImplemented
        return self.func is other.func

    def __hash__(self) -> int:
        return hash(id(self.func))


def combined_equation(equation: GeometricEquation) -> ODE:
    """ODE on ``x = (q, p)`` equivalent to a PODE or HODE.

    A Hamiltonian becomes the invariant ``"h"`` unless an invariant of that
    name exists. The periodicity of ``q`` is kept, ``p`` is not periodic.
    """
    if not isinstance(equation, PODE):
        raise TypeError(f"{type(equation).__name__} has no combined-state view")

    invariants = {}
    if equation.has_invariants():
        invariants.update({label: CombinedInvariant(inv) for label, inv in equation.invariants.items()})
    if equation.has_hamiltonian():
        invariants.setdefault("h", CombinedInvariant(equation.hamiltonian))

    periodicity = None
    if equation.has_periodicity():
        periodicity = np.concatenate([equation.periodicity, np.zeros_like(equation.periodicity)])

    return ODE(
        CombinedVectorField(equation.v, equation.f),
        invariants=invariants or None,
        parameters=equation.parameters,
        periodicity=periodicity,
    )


def combined_initial_conditions(ics: Mapping) -> dict:
    """Initial conditions ``{"q": concatenate(q, p)}`` of the combined state."""
    return {"q": np.concatenate([ics["q"], ics["p"]])}


def combined_problem(problem: EquationProblem) -> EquationProblem:
    """Problem for the combined-state view of a PODE or HODE problem."""
    return EquationProblem(
        combined_equation(problem.equation),
        problem.tspan,
        problem.tstep,
        combined_initial_conditions(problem.ics),
        problem.parameters,
    )


class SplittingComposition:
    """
    One step of a split ODE built from its phases.

    Phase ``sequence[j]`` is advanced from ``t0`` to ``t0 + coefficients[j] * h``
    with ``h = t1 - t0``, starting from the state left by the previous phase.
    A phase with a solution ``q[i]`` uses it; a phase with only a vector
    field ``v[i]`` is advanced by ``stage(v, q1, t1, q0, t0)``, which the
    caller provides (typically one step of an explicit integrator).

    For every phase the coefficients with which it appears must sum to one.

    Example:
        >>> step = SplittingComposition(problem, sequence=(0, 1, 0), coefficients=(0.5, 1.0, 0.5))
        >>> q1 = np.empty_like(q0)
        >>> step(q1, 0.1, q0, 0.0)
    """

    def __init__(
        self,
        problem: EquationProblem,
        sequence: Optional[Sequence[int]] = None,
        coefficients: Optional[Sequence[Any]] = None,
        stage: Optional[Callable] = None,
    ):
        equation = problem.equation
        if not isinstance(equation, SODE):
            raise TypeError(f"Splitting composition needs a SODE problem, got {type(equation).__name__}")

        nphases = equation.nphases
        sequence = tuple(range(nphases)) if sequence is None else tuple(sequence)
        coefficients = (1,) * len(sequence) if coefficients is None else tuple(coefficients)

        if len(sequence) != len(coefficients):
            raise ArgumentMismatchError(
                f"Splitting sequence has {len(sequence)} entries but {len(coefficients)} coefficients",
                location="coefficients",
            )
        for i in sequence:
            if not 0 <= i < nphases:
                raise ArgumentMismatchError(
                    f"Splitting sequence refers to phase {i}, equation has {nphases} phases",
                    location="sequence",
                )
        for i in range(nphases):
            total = sum(c for j, c in zip(sequence, coefficients) if j == i)
            if not math.isclose(total, 1.0, rel_tol=COEFFICIENT_TOLERANCE):
                raise ArgumentMismatchError(
                    f"Coefficients of phase {i} sum to {total}, expected 1",
                    location="coefficients",
                )

        vectors = problem.functions["v"]
        solutions = problem.functions["q"]
        for i in set(sequence):
            if solutions[i] is None and stage is None:
                raise ArgumentMismatchError(
                    f"Phase {i} has no solution and no integrator stage was given",
                    location=f"phase {i}",
                )

        self._problem = problem
        self._vectors = vectors
        self._solutions = solutions
        self._stage = stage
        self.sequence = sequence
        self.coefficients = coefficients

        logger.debug("Splitting composition of %d phases with sequence %s", nphases, sequence)

    @property
    def problem(self) -> EquationProblem:
        return self._problem

    def __call__(self, q1, t1, q0, t0):
        h = t1 - t0
        q = np.array(q0, copy=True)
        for i, c in zip(self.sequence, self.coefficients):
            q_next = np.empty_like(q)
            if self._solutions[i] is not None:
                self._solutions[i](q_next, t0 + c * h, q, t0)
            else:
                self._stage(self._vectors[i], q_next, t0 + c * h, q, t0)
            q = q_next
        q1[...] = q
