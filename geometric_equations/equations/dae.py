"""
Differential-algebraic equation variants.

All variants carry Lagrange multipliers ``λ`` (key ``"lambda"``) enforcing
the algebraic constraint ``0 = ϕ(...)``. Variants with secondary constraint
roles additionally carry ``μ`` (key ``"mu"``) enforcing ``0 = ψ(...)``.
The multiplier vectors may be shorter or longer than ``q``; their length is
the number of constraints.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from ..errors import SignatureMismatchError
from .base import AbstractDAE, AbstractPDAE, GeometricEquation
from .ode import keep_guess

__all__ = ["DAE", "PDAE", "HDAE", "IDAE", "LDAE", "SPDAE"]


class ConstrainedEquation(GeometricEquation):
    """Shared behaviour of the differential-algebraic variants."""

    ics_keys: ClassVar[tuple] = ("q", "lambda", "mu")
    multiplier_keys: ClassVar[tuple] = ("lambda", "mu")

    # Roles that must be given all together or not at all
    secondary_roles: ClassVar[tuple] = ()

    def _check_secondary(self) -> None:
        given = [role for role in self.secondary_roles if getattr(self, role) is not None]
        if given and len(given) != len(self.secondary_roles):
            missing = [role for role in self.secondary_roles if role not in given]
            raise SignatureMismatchError(
                f"{type(self).__name__} secondary roles {list(self.secondary_roles)} must be given "
                f"together, missing {missing}",
                location=f"role '{missing[0]}'",
            )

    def has_vector_field(self) -> bool:
        return True

    def has_secondary(self) -> bool:
        return all(getattr(self, role) is not None for role in self.secondary_roles)

    def required_keys(self) -> tuple:
        if self.has_secondary():
            return self.ics_keys
        return tuple(key for key in self.ics_keys if key != "mu")

    def nconstraints(self, ics: Mapping) -> int:
        return int(ics["lambda"].size)


@dataclass(frozen=True, eq=False, repr=False)
class DAE(ConstrainedEquation, AbstractDAE):
    """Differential-algebraic equation.

        q̇ = v(t, q) + u(t, q, λ)
        0 = ϕ(t, q)

    With secondary constraints ``ū(t, q, μ)`` is added to ``q̇`` and
    ``0 = ψ(t, q, q̇)`` is enforced. ``v_bar`` computes an initial guess for
    ``q̇`` and defaults to ``v``.
    """

    v: Any
    u: Any
    phi: Any
    u_bar: Any = field(default=None, kw_only=True)
    psi: Any = field(default=None, kw_only=True)
    v_bar: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Differential Algebraic Equation (DAE)"
    required_roles: ClassVar[tuple] = ("v", "u", "phi", "v_bar")
    optional_roles: ClassVar[tuple] = ("u_bar", "psi")
    secondary_roles: ClassVar[tuple] = ("u_bar", "psi")

    def __post_init__(self):
        if self.v_bar is None:
            self._set("v_bar", self.v)
        self._check_secondary()
        super().__post_init__()

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = [
            self._probe("v", self.v, t, ics, ("q",), output="q"),
            self._probe("u", self.u, t, ics, ("q", "lambda"), output="q"),
            self._probe("phi", self.phi, t, ics, ("q",), output="lambda"),
            self._probe("v_bar", self.v_bar, t, ics, ("q",), output="q"),
        ]
        if self.has_secondary():
            probes.append(self._probe("u_bar", self.u_bar, t, ics, ("q", "mu"), output="q"))
            probes.append(self._probe("psi", self.psi, t, ics, ("q", "qdot"), output="lambda"))
        return probes


class PartitionedConstrainedEquation(ConstrainedEquation):
    """Role probes shared by ``PDAE`` and ``HDAE``."""

    ics_keys: ClassVar[tuple] = ("q", "p", "lambda", "mu")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "p")

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = [
            self._probe("v", self.v, t, ics, ("q", "p"), output="q"),
            self._probe("f", self.f, t, ics, ("q", "p"), output="p"),
            self._probe("u", self.u, t, ics, ("q", "p", "lambda"), output="q"),
            self._probe("g", self.g, t, ics, ("q", "p", "lambda"), output="p"),
            self._probe("phi", self.phi, t, ics, ("q", "p"), output="lambda"),
            self._probe("v_bar", self.v_bar, t, ics, ("q", "p"), output="q"),
            self._probe("f_bar", self.f_bar, t, ics, ("q", "p"), output="p"),
        ]
        if self.has_secondary():
            probes.extend(
                [
                    self._probe("u_bar", self.u_bar, t, ics, ("q", "p", "mu"), output="q"),
                    self._probe("g_bar", self.g_bar, t, ics, ("q", "p", "mu"), output="p"),
                    self._probe("psi", self.psi, t, ics, ("q", "p", "qdot", "pdot"), output="lambda"),
                ]
            )
        return probes


@dataclass(frozen=True, eq=False, repr=False)
class PDAE(PartitionedConstrainedEquation, AbstractPDAE):
    """Partitioned differential-algebraic equation.

        q̇ = v(t, q, p) + u(t, q, p, λ)
        ṗ = f(t, q, p) + g(t, q, p, λ)
        0 = ϕ(t, q, p)

    The secondary roles ``u_bar``, ``g_bar`` and ``psi`` are optional and
    must be given together. ``v_bar`` and ``f_bar`` default to ``v`` and ``f``.
    """

    v: Any
    f: Any
    u: Any
    g: Any
    phi: Any
    u_bar: Any = field(default=None, kw_only=True)
    g_bar: Any = field(default=None, kw_only=True)
    psi: Any = field(default=None, kw_only=True)
    v_bar: Any = field(default=None, kw_only=True)
    f_bar: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Partitioned Differential Algebraic Equation (PDAE)"
    required_roles: ClassVar[tuple] = ("v", "f", "u", "g", "phi", "v_bar", "f_bar")
    optional_roles: ClassVar[tuple] = ("u_bar", "g_bar", "psi")
    secondary_roles: ClassVar[tuple] = ("u_bar", "g_bar", "psi")

    def __post_init__(self):
        if self.v_bar is None:
            self._set("v_bar", self.v)
        if self.f_bar is None:
            self._set("f_bar", self.f)
        self._check_secondary()
        super().__post_init__()


@dataclass(frozen=True, eq=False, repr=False)
class HDAE(PartitionedConstrainedEquation, AbstractPDAE):
    """Hamiltonian differential-algebraic equation.

    Roles of ``PDAE`` with the secondary roles required, followed by
    ``hamiltonian(t, q, p[, params])``. The multiplier ``μ`` is always needed.
    """

    v: Any
    f: Any
    u: Any
    g: Any
    phi: Any
    u_bar: Any
    g_bar: Any
    psi: Any
    hamiltonian: Any
    v_bar: Any = field(default=None, kw_only=True)
    f_bar: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Hamiltonian Differential Algebraic Equation (HDAE)"
    required_roles: ClassVar[tuple] = (
        "v", "f", "u", "g", "phi", "u_bar", "g_bar", "psi", "hamiltonian", "v_bar", "f_bar",
    )
    secondary_roles: ClassVar[tuple] = ("u_bar", "g_bar", "psi")

    def __post_init__(self):
        if self.v_bar is None:
            self._set("v_bar", self.v)
        if self.f_bar is None:
            self._set("f_bar", self.f)
        super().__post_init__()

    def has_hamiltonian(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = super()._role_probes(t, ics)
        probes.append(self._probe("hamiltonian", self.hamiltonian, t, ics, ("q", "p")))
        return probes


@dataclass(frozen=True, eq=False, repr=False)
class IDAE(ConstrainedEquation, AbstractPDAE):
    """Implicit differential-algebraic equation.

        p = ϑ(t, q, v)
        ṗ = f(t, q, v) + g(t, q, v, p, λ)
        q̇ = v + u(t, q, v, p, λ)
        0 = ϕ(t, q, v, p)

    The secondary roles ``u_bar``, ``g_bar`` and ``psi`` are optional and
    must be given together. ``v_bar`` defaults to leaving the guess untouched
    and ``f_bar`` to ``f``.
    """

    theta: Any
    f: Any
    u: Any
    g: Any
    phi: Any
    u_bar: Any = field(default=None, kw_only=True)
    g_bar: Any = field(default=None, kw_only=True)
    psi: Any = field(default=None, kw_only=True)
    v_bar: Any = field(default=None, kw_only=True)
    f_bar: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Implicit Differential Algebraic Equation (IDAE)"
    required_roles: ClassVar[tuple] = ("theta", "f", "u", "g", "phi", "v_bar", "f_bar")
    optional_roles: ClassVar[tuple] = ("u_bar", "g_bar", "psi")
    secondary_roles: ClassVar[tuple] = ("u_bar", "g_bar", "psi")
    ics_keys: ClassVar[tuple] = ("q", "p", "lambda", "mu")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "v")

    def __post_init__(self):
        if self.v_bar is None:
            self._set("v_bar", keep_guess)
        if self.f_bar is None:
            self._set("f_bar", self.f)
        self._check_secondary()
        super().__post_init__()

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = [
            self._probe("theta", self.theta, t, ics, ("q", "v"), output="p"),
            self._probe("f", self.f, t, ics, ("q", "v"), output="p"),
            self._probe("u", self.u, t, ics, ("q", "v", "p", "lambda"), output="q"),
            self._probe("g", self.g, t, ics, ("q", "v", "p", "lambda"), output="p"),
            self._probe("phi", self.phi, t, ics, ("q", "v", "p"), output="lambda"),
            self._probe("v_bar", self.v_bar, t, ics, ("q", "p"), output="q"),
            self._probe("f_bar", self.f_bar, t, ics, ("q", "v"), output="p"),
        ]
        if self.has_secondary():
            probes.extend(
                [
                    self._probe("u_bar", self.u_bar, t, ics, ("q", "v", "p", "mu"), output="q"),
                    self._probe("g_bar", self.g_bar, t, ics, ("q", "v", "p", "mu"), output="p"),
                    self._probe("psi", self.psi, t, ics, ("q", "v", "p", "qdot", "pdot"), output="lambda"),
                ]
            )
        return probes


@dataclass(frozen=True, eq=False, repr=False)
class LDAE(IDAE):
    """Lagrangian differential-algebraic equation.

    Roles of ``IDAE`` followed by ``lagrangian(t, q, v[, params])``.
    """

    lagrangian: Any

    title: ClassVar[str] = "Lagrangian Differential Algebraic Equation (LDAE)"
    required_roles: ClassVar[tuple] = ("theta", "f", "u", "g", "phi", "lagrangian", "v_bar", "f_bar")

    def has_lagrangian(self) -> bool:
        return True

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = super()._role_probes(t, ics)
        probes.append(self._probe("lagrangian", self.lagrangian, t, ics, ("q", "v")))
        return probes


@dataclass(frozen=True, eq=False, repr=False)
class SPDAE(ConstrainedEquation, AbstractPDAE):
    """Split partitioned differential-algebraic equation.

    ``v`` and ``f`` are tuples of equal length. The first entries take
    ``(out, t, q, p)``, the following ones ``(out, t, q, p, λ)``. The
    constraint is ``0 = ϕ(t, q, p)``, optionally with ``0 = ψ(t, q, p, q̇, ṗ)``.
    """

    v: Any
    f: Any
    phi: Any
    psi: Any = field(default=None, kw_only=True)

    title: ClassVar[str] = "Split Partitioned Differential Algebraic Equation (SPDAE)"
    required_roles: ClassVar[tuple] = ("v", "f", "phi")
    optional_roles: ClassVar[tuple] = ("psi",)
    secondary_roles: ClassVar[tuple] = ("psi",)
    ics_keys: ClassVar[tuple] = ("q", "p", "lambda")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "p")

    def __post_init__(self):
        for role in ("v", "f"):
            value = getattr(self, role)
            if isinstance(value, list):
                self._set(role, tuple(value))
            elif not isinstance(value, tuple):
                self._set(role, (value,))
        super().__post_init__()

    def _check_roles(self) -> None:
        if not self.v:
            raise SignatureMismatchError("SPDAE needs at least one vector field", location="role 'v'")
        if len(self.v) != len(self.f):
            raise SignatureMismatchError(
                f"SPDAE has {len(self.v)} vector fields 'v' but {len(self.f)} vector fields 'f'",
                location="role 'f'",
            )
        for role in ("v", "f"):
            for i, func in enumerate(getattr(self, role)):
                if not callable(func):
                    raise SignatureMismatchError(
                        f"SPDAE role '{role}[{i}]' must be callable, got {type(func).__name__}",
                        location=f"role '{role}[{i}]'",
                    )
        for role in ("phi", "psi"):
            func = getattr(self, role)
            if (role == "phi" or func is not None) and not callable(func):
                raise SignatureMismatchError(
                    f"SPDAE role '{role}' must be callable, got {type(func).__name__}",
                    location=f"role '{role}'",
                )

    @property
    def nphases(self) -> int:
        return len(self.v)

    def required_keys(self) -> tuple:
        return self.ics_keys

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = []
        for i, (v, f) in enumerate(zip(self.v, self.f)):
            arguments = ("q", "p") if i == 0 else ("q", "p", "lambda")
            probes.append(self._probe(f"v[{i}]", v, t, ics, arguments, output="q"))
            probes.append(self._probe(f"f[{i}]", f, t, ics, arguments, output="p"))
        probes.append(self._probe("phi", self.phi, t, ics, ("q", "p"), output="lambda"))
        if self.psi is not None:
            probes.append(self._probe("psi", self.psi, t, ics, ("q", "p", "qdot", "pdot"), output="lambda"))
        return probes
