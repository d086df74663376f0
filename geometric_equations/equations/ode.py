"""
Ordinary differential equation variants.

- ``ODE``: explicit first-order system on ``q``
- ``PODE``: partitioned system on ``(q, p)``
- ``HODE``: partitioned system with a Hamiltonian
- ``IODE``: implicit system in ``(q, p)`` with ``p = ϑ(t, q, v)``
- ``LODE``: implicit system with a Lagrangian
- ``SODE``: splitting into phases with optional exact phase solutions
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping

import numpy as np

from ..errors import SignatureMismatchError
from ..validation import RoleProbe
from .base import AbstractODE, AbstractPODE, GeometricEquation

__all__ = ["ODE", "PODE", "HODE", "IODE", "LODE", "SODE"]


def zero_projection(out, t, *args):
    """Default projection: writes zeros into ``out``."""
    out[...] = 0


def keep_guess(out, t, *args):
    """Default initial guess: leaves ``out`` as it is."""
    return None


@dataclass(frozen=True, eq=False, repr=False)
class ODE(GeometricEquation, AbstractODE):
    """Explicit ordinary differential equation ``q̇ = v(t, q)``.

    Attributes:
        v: Vector field, ``v(out, t, q[, params])``
    """

    v: Any

    title: ClassVar[str] = "Ordinary Differential Equation (ODE)"
    required_roles: ClassVar[tuple] = ("v",)

    def has_vector_field(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        return [self._probe("v", self.v, t, ics, ("q",), output="q")]


@dataclass(frozen=True, eq=False, repr=False)
class PODE(GeometricEquation, AbstractPODE):
    """Partitioned ordinary differential equation.

        q̇ = v(t, q, p)
        ṗ = f(t, q, p)

    Attributes:
        v: Velocity field, ``v(out, t, q, p[, params])``
        f: Force field, ``f(out, t, q, p[, params])``
    """

    v: Any
    f: Any

    title: ClassVar[str] = "Partitioned Ordinary Differential Equation (PODE)"
    required_roles: ClassVar[tuple] = ("v", "f")
    ics_keys: ClassVar[tuple] = ("q", "p")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "p")

    def has_vector_field(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        return [
            self._probe("v", self.v, t, ics, ("q", "p"), output="q"),
            self._probe("f", self.f, t, ics, ("q", "p"), output="p"),
        ]


@dataclass(frozen=True, eq=False, repr=False)
class HODE(PODE):
    """Hamiltonian ordinary differential equation.

    Same roles as ``PODE`` plus ``hamiltonian(t, q, p[, params])`` returning
    the energy as a scalar.
    """

    hamiltonian: Any

    title: ClassVar[str] = "Hamiltonian Ordinary Differential Equation (HODE)"
    required_roles: ClassVar[tuple] = ("v", "f", "hamiltonian")

    def has_hamiltonian(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = super()._role_probes(t, ics)
        probes.append(self._probe("hamiltonian", self.hamiltonian, t, ics, ("q", "p")))
        return probes


@dataclass(frozen=True, eq=False, repr=False)
class IODE(GeometricEquation, AbstractPODE):
    """Implicit ordinary differential equation.

        p = ϑ(t, q, v)
        ṗ = f(t, q, v) + g(t, q, v, λ)

    ``v_bar`` and ``f_bar`` compute initial guesses for ``v`` and ``f`` from
    ``(q, p)``. ``g`` defaults to a zero projection, ``v_bar`` to leaving the
    guess untouched and ``f_bar`` to ``f``.
    """

    theta: Any
    f: Any
    g: Any = None
    v_bar: Any = field(default=None, kw_only=True)
    f_bar: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Implicit Ordinary Differential Equation (IODE)"
    required_roles: ClassVar[tuple] = ("theta", "f", "g", "v_bar", "f_bar")
    ics_keys: ClassVar[tuple] = ("q", "p", "lambda")
    state_keys: ClassVar[tuple] = ("q", "p", "lambda")
    invariant_arguments: ClassVar[tuple] = ("q", "v")

    def __post_init__(self):
        if self.g is None:
            self._set("g", zero_projection)
        if self.v_bar is None:
            self._set("v_bar", keep_guess)
        if self.f_bar is None:
            self._set("f_bar", self.f)
        super().__post_init__()

    def has_vector_field(self) -> bool:
        return True

    def nconstraints(self, ics: Mapping) -> int:
        return int(ics["q"].size)

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        return [
            self._probe("theta", self.theta, t, ics, ("q", "v"), output="p"),
            self._probe("f", self.f, t, ics, ("q", "v"), output="p"),
            self._probe("g", self.g, t, ics, ("q", "v", "lambda"), output="p"),
            self._probe("v_bar", self.v_bar, t, ics, ("q", "p"), output="q"),
            self._probe("f_bar", self.f_bar, t, ics, ("q", "v"), output="p"),
        ]


@dataclass(frozen=True, eq=False, repr=False)
class LODE(IODE):
    """Lagrangian ordinary differential equation.

    Same roles as ``IODE`` plus ``lagrangian(t, q, v[, params])``. The
    projection ``g`` is passed positionally and may be ``None``.
    """

    lagrangian: Any = None

    title: ClassVar[str] = "Lagrangian Ordinary Differential Equation (LODE)"
    required_roles: ClassVar[tuple] = ("theta", "f", "g", "lagrangian", "v_bar", "f_bar")

    def has_lagrangian(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = super()._role_probes(t, ics)
        probes.append(self._probe("lagrangian", self.lagrangian, t, ics, ("q", "v")))
        return probes


def _as_phases(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    if value is not None and not isinstance(value, tuple):
        return (value,)
    return value


@dataclass(frozen=True, eq=False, repr=False)
class SODE(GeometricEquation, AbstractODE):
    """Split ordinary differential equation.

    The right-hand side is a sum of phases. Phase ``i`` provides a vector
    field ``v[i](out, t, q)``, an exact update ``q[i](q1, t1, q0, t0)`` that
    advances ``q0`` at ``t0`` to ``q1`` at ``t1``, or both. Missing entries
    are ``None``; a missing ``v`` or ``q`` tuple is treated as all ``None``.
    """

    v: Any = None
    q: Any = None

    title: ClassVar[str] = "Split Ordinary Differential Equation (SODE)"

    def __post_init__(self):
        v = _as_phases(self.v)
        q = _as_phases(self.q)
        if v is None and q is None:
            raise SignatureMismatchError("SODE needs vector fields or solutions", location="role 'v'")
        if v is None:
            v = (None,) * len(q)
        if q is None:
            q = (None,) * len(v)
        if not v:
            raise SignatureMismatchError("SODE needs at least one phase", location="role 'v'")
        if len(v) != len(q):
            raise SignatureMismatchError(
                f"SODE has {len(v)} vector fields but {len(q)} solutions",
                location="role 'q'",
            )
        self._set("v", v)
        self._set("q", q)
        super().__post_init__()

    def _check_roles(self) -> None:
        for i, (v, q) in enumerate(zip(self.v, self.q)):
            if v is None and q is None:
                raise SignatureMismatchError(
                    f"SODE phase {i} has neither a vector field nor a solution",
                    location=f"phase {i}",
                )
            for role, func in ((f"v[{i}]", v), (f"q[{i}]", q)):
                if func is not None and not callable(func):
                    raise SignatureMismatchError(
                        f"SODE role '{role}' must be callable or None, got {type(func).__name__}",
                        location=f"role '{role}'",
                    )

    @property
    def nphases(self) -> int:
        return len(self.v)

    def has_vector_field(self) -> bool:
        return any(v is not None for v in self.v)

    def has_solution(self) -> bool:
        return any(q is not None for q in self.q)

    def roles(self) -> Mapping[str, Any]:
        return MappingProxyType({"v": self.v, "q": self.q})

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = []
        for i, v in enumerate(self.v):
            if v is not None:
                probes.append(self._probe(f"v[{i}]", v, t, ics, ("q",), output="q"))
        for i, q in enumerate(self.q):
            if q is not None:
                probes.append(
                    RoleProbe(f"q[{i}]", q, ("q1", "t1", "q0", "t0"), (np.zeros_like(ics["q"]), t, ics["q"], t))
                )
        return probes
