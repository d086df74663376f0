"""
Stochastic differential equation variants.

Drift fields write into a state-shaped buffer like their deterministic
counterparts. Diffusion producers (``B``, ``G``) write into a ``d × m``
matrix, where ``d`` is the length of ``q`` and ``m`` is the equation's
``noise_dimension``.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

import numpy as np

from ..errors import ArgumentMismatchError
from .base import AbstractPSDE, AbstractSDE, GeometricEquation

__all__ = ["SDE", "PSDE", "SPSDE"]


@dataclass(frozen=True, eq=False, repr=False)
class StochasticEquation(GeometricEquation):
    """Shared behaviour of the stochastic variants."""

    noise_dimension: int = field(default=1, kw_only=True)

    def __post_init__(self):
        if isinstance(self.noise_dimension, bool) or self.noise_dimension < 1:
            raise ArgumentMismatchError(
                f"Noise dimension must be a positive integer, got {self.noise_dimension!r}",
                location="noise_dimension",
            )
        super().__post_init__()

    def has_vector_field(self) -> bool:
        return True

    def _buffer(self, kind: str, ics: Mapping) -> Any:
        if kind == "diffusion":
            q = ics["q"]
            return np.zeros((q.shape[0], self.noise_dimension), dtype=q.dtype)
        return super()._buffer(kind, ics)


@dataclass(frozen=True, eq=False, repr=False)
class SDE(StochasticEquation, AbstractSDE):
    """Stochastic differential equation ``dq = v(t, q) dt + B(t, q) dW``."""

    v: Any
    B: Any

    title: ClassVar[str] = "Stochastic Differential Equation (SDE)"
    required_roles: ClassVar[tuple] = ("v", "B")

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        return [
            self._probe("v", self.v, t, ics, ("q",), output="q"),
            self._probe("B", self.B, t, ics, ("q",), output="diffusion"),
        ]


@dataclass(frozen=True, eq=False, repr=False)
class PSDE(StochasticEquation, AbstractPSDE):
    """Partitioned stochastic differential equation.

        dq = v(t, q, p) dt + B(t, q, p) dW
        dp = f(t, q, p) dt + G(t, q, p) dW
    """

    v: Any
    f: Any
    B: Any
    G: Any

    title: ClassVar[str] = "Partitioned Stochastic Differential Equation (PSDE)"
    required_roles: ClassVar[tuple] = ("v", "f", "B", "G")
    ics_keys: ClassVar[tuple] = ("q", "p")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "p")

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        return [
            self._probe("v", self.v, t, ics, ("q", "p"), output="q"),
            self._probe("f", self.f, t, ics, ("q", "p"), output="p"),
            self._probe("B", self.B, t, ics, ("q", "p"), output="diffusion"),
            self._probe("G", self.G, t, ics, ("q", "p"), output="diffusion"),
        ]


@dataclass(frozen=True, eq=False, repr=False)
class SPSDE(StochasticEquation, AbstractPSDE):
    """Split partitioned stochastic differential equation.

        dq = v(t, q, p) dt + B(t, q, p) dW
        dp = f1(t, q, p) dt + f2(t, q, p) dt + G1(t, q, p) dW + G2(t, q, p) dW
    """

    v: Any
    f1: Any
    f2: Any
    B: Any
    G1: Any
    G2: Any

    title: ClassVar[str] = "Split Partitioned Stochastic Differential Equation (SPSDE)"
    required_roles: ClassVar[tuple] = ("v", "f1", "f2", "B", "G1", "G2")
    ics_keys: ClassVar[tuple] = ("q", "p")
    state_keys: ClassVar[tuple] = ("q", "p")
    invariant_arguments: ClassVar[tuple] = ("q", "p")

    def _role_probes(self, t: Any, ics: Mapping) -> list:
        probes = [self._probe("v", self.v, t, ics, ("q", "p"), output="q")]
        for role in ("f1", "f2"):
            probes.append(self._probe(role, getattr(self, role), t, ics, ("q", "p"), output="p"))
        for role in ("B", "G1", "G2"):
            probes.append(self._probe(role, getattr(self, role), t, ics, ("q", "p"), output="diffusion"))
        return probes
