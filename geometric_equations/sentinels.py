"""
Absence markers for the optional side channels of an equation.

An equation always holds *something* in its ``invariants``, ``parameters`` and
``periodicity`` slots. When the user supplies nothing, the slot holds one of
the null types below, so capability traits can be answered from the type of
the value alone:

    >>> equ = ODE(v)
    >>> isinstance(equ.parameters, NullParameters)
    True
    >>> equ.has_parameters()
    False

The three markers are distinct types and never compare equal to each other
or to ``None``.
"""

import numbers
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

import numpy as np

from .errors import ArgumentMismatchError

__all__ = [
    "NullInvariants",
    "NullParameters",
    "NullPeriodicity",
    "OptionalInvariants",
    "OptionalParameters",
    "OptionalPeriodicity",
    "parameter_types",
    "is_compatible_parameter",
]


class _Null:
    """Shared behaviour of the absence markers: stateless and equal by type."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self).__name__)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NullInvariants(_Null):
    """The equation declares no invariants."""

    __slots__ = ()


class NullParameters(_Null):
    """The equation declares no parameters; role callables take no ``params``."""

    __slots__ = ()


class NullPeriodicity(_Null):
    """The position coordinate is not periodic in any dimension."""

    __slots__ = ()


OptionalInvariants = Union[Mapping[str, Callable], NullInvariants]
OptionalParameters = Union[Mapping[str, Any], NullParameters]
OptionalPeriodicity = Union[np.ndarray, NullPeriodicity]


def parameter_types(parameters: Any) -> OptionalParameters:
    """Derive a read-only parameter schema (name -> type) from a record.

    Values that are already types are kept, so passing a schema returns an
    equal schema. ``None`` and ``NullParameters`` map to ``NullParameters``.

    Example:
        >>> parameter_types({"k": 0.5, "n": 2})
        mappingproxy({'k': <class 'float'>, 'n': <class 'int'>})
    """
    if parameters is None or isinstance(parameters, NullParameters):
        return NullParameters()
    if not isinstance(parameters, Mapping):
        raise ArgumentMismatchError(
            f"Parameters must be a mapping of name to value, got {type(parameters).__name__}",
            location="parameters",
        )
    return MappingProxyType(
        {name: value if isinstance(value, type) else type(value) for name, value in parameters.items()}
    )


def is_compatible_parameter(value: Any, declared: type) -> bool:
    """True if ``value`` may be passed where the schema declares ``declared``.

    Any real number is accepted for a real-number schema entry, so an
    ensemble may mix ``1`` and ``2.5`` for the same parameter.
    """
    if isinstance(value, declared):
        return True
    if issubclass(declared, numbers.Real) and not issubclass(declared, bool):
        return isinstance(value, numbers.Real) and not isinstance(value, bool)
    return False
