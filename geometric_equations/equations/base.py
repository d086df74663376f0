"""Base class and family markers for all equation variants.

An equation is an immutable value bundling the role callables of one kind of
dynamical system with three optional side channels:

- ``invariants``: label -> scalar-producing callable, or ``NullInvariants``
- ``parameters``: parameter schema (name -> type), or ``NullParameters``
- ``periodicity``: wrap bounds for ``q``, or ``NullPeriodicity``

Variants declare which roles they carry and which initial-condition keys they
need through class attributes; the probe arguments used by the validation
protocol are built from those declarations in ``_role_probes``.

Example:
    >>> def v(out, t, q, p, params):
    ...     out[0] = p[0]
    >>> def f(out, t, q, p, params):
    ...     out[0] = -params["k"] * q[0]
    >>> equ = PODE(v, f, parameters={"k": 0.5})
    >>> equ.has_parameters()
    True
    >>> sorted(equ.roles())
    ['f', 'v']
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Mapping, Optional, Sequence, Union

import numpy as np

from ..binding import bind_parameters, bind_roles, freeze_parameters
from ..errors import ArgumentMismatchError, CardinalityMismatchError, ShapeMismatchError, SignatureMismatchError
from ..sentinels import (
    NullInvariants,
    NullParameters,
    NullPeriodicity,
    OptionalInvariants,
    OptionalPeriodicity,
    parameter_types,
)
from ..util import describe_callable, values_equal
from ..validation import RoleProbe, validate_initial_conditions

__all__ = [
    "GeometricEquation",
    "AbstractODE",
    "AbstractPODE",
    "AbstractDAE",
    "AbstractPDAE",
    "AbstractSDE",
    "AbstractPSDE",
]


def _freeze_invariants(invariants: Any) -> OptionalInvariants:
    if invariants is None or isinstance(invariants, NullInvariants):
        return NullInvariants()
    if not isinstance(invariants, Mapping):
        raise ArgumentMismatchError(
            f"Invariants must be a mapping of label to callable, got {type(invariants).__name__}",
            location="invariants",
        )
    for label, func in invariants.items():
        if not callable(func):
            raise SignatureMismatchError(
                f"Invariant '{label}' must be callable, got {type(func).__name__}",
                location=f"invariant '{label}'",
            )
    return MappingProxyType(dict(invariants))


def _freeze_periodicity(periodicity: Any) -> OptionalPeriodicity:
    if periodicity is None or isinstance(periodicity, NullPeriodicity):
        return NullPeriodicity()
    array = np.array(periodicity)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False, repr=False)
class GeometricEquation:
    """Common base of all equation variants.

    Subclasses are frozen dataclasses whose positional fields are the role
    callables. The side channels are keyword-only and accept ``None`` for
    absence; after construction they always hold a mapping, an array or one
    of the null sentinels.
    """

    invariants: Union[Mapping, NullInvariants, None] = field(default=None, kw_only=True)
    parameters: Union[Mapping, NullParameters, None] = field(default=None, kw_only=True)
    periodicity: Union[np.ndarray, Sequence, NullPeriodicity, None] = field(default=None, kw_only=True)

    title: ClassVar[str] = "Geometric Equation"

    # Roles that must be callable after construction, in display order
    required_roles: ClassVar[tuple] = ()
    # Roles that may be None
    optional_roles: ClassVar[tuple] = ()
    # Initial-condition keys, in positional order for initial_conditions()
    ics_keys: ClassVar[tuple] = ("q",)
    # Keys whose vectors must have the shape of q
    state_keys: ClassVar[tuple] = ("q",)
    # Keys whose vectors may differ in length from q (Lagrange multipliers)
    multiplier_keys: ClassVar[tuple] = ()
    # State components passed to invariants after t
    invariant_arguments: ClassVar[tuple] = ("q",)

    bundle_names: ClassVar[Mapping[str, str]] = MappingProxyType({"hamiltonian": "h", "lagrangian": "l"})

    def __post_init__(self):
        self._set("invariants", _freeze_invariants(self.invariants))
        self._set("parameters", parameter_types(self.parameters))
        self._set("periodicity", _freeze_periodicity(self.periodicity))
        self._check_roles()

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    def _check_roles(self) -> None:
        for role in self.required_roles:
            func = getattr(self, role)
            if not callable(func):
                raise SignatureMismatchError(
                    f"{type(self).__name__} role '{role}' must be callable, got {type(func).__name__}",
                    location=f"role '{role}'",
                )
        for role in self.optional_roles:
            func = getattr(self, role)
            if func is not None and not callable(func):
                raise SignatureMismatchError(
                    f"{type(self).__name__} role '{role}' must be callable or None, got {type(func).__name__}",
                    location=f"role '{role}'",
                )

    # ------------------------------------------------------------------
    # Capability traits
    # ------------------------------------------------------------------

    def has_vector_field(self) -> bool:
        """True if the equation provides a vector field for explicit evaluation."""
        return False

    def has_hamiltonian(self) -> bool:
        """True if the equation carries a Hamiltonian."""
        return False

    def has_lagrangian(self) -> bool:
        """True if the equation carries a Lagrangian."""
        return False

    def has_invariants(self) -> bool:
        return not isinstance(self.invariants, NullInvariants)

    def has_parameters(self) -> bool:
        return not isinstance(self.parameters, NullParameters)

    def has_periodicity(self) -> bool:
        return not isinstance(self.periodicity, NullPeriodicity)

    def has_secondary(self) -> bool:
        """True if secondary constraint roles (ū, ḡ, ψ) are present."""
        return False

    def has_solution(self) -> bool:
        """True if the equation supplies closed-form solution updates."""
        return False

    def capabilities(self) -> dict[str, bool]:
        """All capability traits by name."""
        return {
            "vector_field": self.has_vector_field(),
            "hamiltonian": self.has_hamiltonian(),
            "lagrangian": self.has_lagrangian(),
            "invariants": self.has_invariants(),
            "parameters": self.has_parameters(),
            "periodicity": self.has_periodicity(),
            "secondary": self.has_secondary(),
            "solution": self.has_solution(),
        }

    # ------------------------------------------------------------------
    # Initial conditions
    # ------------------------------------------------------------------

    def required_keys(self) -> tuple:
        """Initial-condition keys this equation needs."""
        return self.ics_keys

    @classmethod
    def initial_conditions(cls, *states: Any) -> Mapping:
        """Build an initial-condition record from positional state vectors.

        A single mapping is returned as a plain dict. Otherwise the vectors
        are assigned to ``ics_keys`` in order; a missing ``lambda`` defaults
        to zeros like ``q`` and a missing ``mu`` to zeros like ``lambda``.

        Example:
            >>> PODE.initial_conditions(np.array([0.5]), np.array([0.0]))
            {'q': array([0.5]), 'p': array([0.])}
        """
        if len(states) == 1 and isinstance(states[0], Mapping):
            return dict(states[0])
        if len(states) > len(cls.ics_keys):
            raise ShapeMismatchError(
                f"{cls.__name__} takes at most {len(cls.ics_keys)} initial state vectors "
                f"{cls.ics_keys}, got {len(states)}",
                location="initial conditions",
            )
        ics = dict(zip(cls.ics_keys, states))
        if "lambda" in cls.ics_keys and "lambda" not in ics and "q" in ics:
            ics["lambda"] = np.zeros_like(ics["q"])
        if "mu" in cls.ics_keys and "mu" not in ics and "lambda" in ics:
            ics["mu"] = np.zeros_like(ics["lambda"])
        return ics

    @classmethod
    def ensemble_initial_conditions(cls, *states: Any) -> Any:
        """Build the initial conditions of an ensemble.

        Accepts a single record (broadcast later), a sequence of records, or
        one sequence of state vectors per key which are zipped entry-wise.
        """
        if len(states) == 1 and isinstance(states[0], Mapping):
            return dict(states[0])
        if states and all(isinstance(s, np.ndarray) for s in states):
            return cls.initial_conditions(*states)
        if len(states) == 1 and all(isinstance(ic, Mapping) for ic in states[0]):
            return [dict(ic) for ic in states[0]]
        lengths = {len(s) for s in states}
        if len(lengths) != 1:
            raise CardinalityMismatchError(
                f"Initial state collections have different lengths {[len(s) for s in states]}",
                location="initial conditions",
            )
        return [cls.initial_conditions(*entry) for entry in zip(*states)]

    def datatype(self, ics: Mapping) -> Any:
        """Element type of the state vectors (the dtype of ``q``)."""
        validate_initial_conditions(self, ics).raise_for_errors()
        return ics["q"].dtype

    def arrtype(self, ics: Mapping) -> type:
        """Array type of the state vectors (the type of ``q``)."""
        validate_initial_conditions(self, ics).raise_for_errors()
        return type(ics["q"])

    def nconstraints(self, ics: Mapping) -> int:
        """Number of algebraic constraints for the given initial conditions."""
        return 0

    # ------------------------------------------------------------------
    # Role bundles
    # ------------------------------------------------------------------

    def roles(self) -> Mapping[str, Any]:
        """Raw role bundle, bundle name -> callable, without absent roles."""
        bundle = {}
        for role in self.required_roles + self.optional_roles:
            func = getattr(self, role)
            if func is not None:
                bundle[self.bundle_names.get(role, role)] = func
        return MappingProxyType(bundle)

    def functions(self, params: Any = None) -> Mapping[str, Any]:
        """Role bundle with ``params`` bound, callable as ``(out, t, state...)``."""
        params = NullParameters() if params is None else params
        return bind_roles(self.roles(), params, self.has_parameters())

    def solutions(self, params: Any = None) -> Mapping[str, Any]:
        """Invariant bundle with ``params`` bound, callable as ``(t, state...)``."""
        if not self.has_invariants():
            return MappingProxyType({})
        params = NullParameters() if params is None else params
        if not self.has_parameters():
            return MappingProxyType(dict(self.invariants))
        frozen = freeze_parameters(params)
        return MappingProxyType({label: bind_parameters(inv, frozen) for label, inv in self.invariants.items()})

    # ------------------------------------------------------------------
    # Probes for the validation protocol
    # ------------------------------------------------------------------

    def role_probes(self, t: Any, ics: Mapping) -> list:
        """Probe argument lists for every role and invariant (without params)."""
        probes = list(self._role_probes(t, ics))
        if self.has_invariants():
            for label, inv in self.invariants.items():
                probes.append(self._probe(f"invariant {label}", inv, t, ics, self.invariant_arguments))
        return probes

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        raise NotImplementedError(f"{type(self).__name__} must define its role probes")

    def _buffer(self, kind: str, ics: Mapping) -> Any:
        return np.zeros_like(ics[kind])

    def _argument(self, key: str, ics: Mapping) -> Any:
        if key in ("v", "qdot"):
            return np.zeros_like(ics["q"])
        if key == "pdot":
            return np.zeros_like(ics["p"])
        return ics[key]

    def _probe(
        self,
        role: str,
        func: Callable,
        t: Any,
        ics: Mapping,
        arguments: tuple,
        output: Optional[str] = None,
    ) -> RoleProbe:
        labels = []
        values = []
        if output is not None:
            labels.append("out")
            values.append(self._buffer(output, ics))
        labels.append("t")
        values.append(t)
        for key in arguments:
            labels.append(key)
            values.append(self._argument(key, ics))
        return RoleProbe(role, func, tuple(labels), tuple(values))

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(values_equal(getattr(self, f.name), getattr(other, f.name)) for f in fields(self))

    __hash__ = None

    def __repr__(self) -> str:
        channels = ("invariants", "parameters", "periodicity")
        parts = []
        for f in sorted(fields(self), key=lambda f: f.name in channels):
            value = getattr(self, f.name)
            if f.name in channels:
                parts.append(f"{f.name}={value!r}")
            elif callable(value) or isinstance(value, tuple) or value is None:
                parts.append(f"{f.name}={describe_callable(value)}")
            else:
                parts.append(f"{f.name}={value!r}")
        return f"{type(self).__name__}({', '.join(parts)})"

    def __str__(self) -> str:
        lines = [self.title, "", " with vector fields"]
        for name, func in self.roles().items():
            lines.append(f"   {name} = {describe_callable(func)}")
        lines.append("")
        lines.append(" Invariants:")
        if self.has_invariants():
            for label, inv in self.invariants.items():
                lines.append(f"   {label} = {describe_callable(inv)}")
        else:
            lines.append(f"   {self.invariants!r}")
        return "\n".join(lines)


class AbstractODE:
    """Marker for equations on a single state ``q``."""


class AbstractPODE:
    """Marker for partitioned equations on ``(q, p)``."""


class AbstractDAE:
    """Marker for differential-algebraic equations on ``(q, λ)``."""


class AbstractPDAE:
    """Marker for partitioned differential-algebraic equations on ``(q, p, λ)``."""


class AbstractSDE:
    """Marker for stochastic equations on ``q``."""


class AbstractPSDE:
    """Marker for partitioned stochastic equations on ``(q, p)``."""
