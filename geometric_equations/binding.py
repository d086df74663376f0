"""
Parameter binding for role callables.

User physics functions take the parameter record as trailing argument,
``v(out, t, q, p, params)``. Solvers call them as ``v(out, t, q, p)``. This
module produces the reduced-arity callables: a ``BoundRole`` holds the raw
callable and a read-only copy of the parameter record, nothing else.

For an equation without parameters the binding is the identity, so the raw
callables are returned unchanged.
"""

from types import MappingProxyType
from typing import Any, Callable, Mapping

from .sentinels import NullParameters

__all__ = [
    "BoundRole",
    "freeze_parameters",
    "bind_parameters",
    "bind_roles",
]


def freeze_parameters(params: Any) -> Any:
    """Return a read-only copy of a parameter record (sentinels pass through)."""
    if isinstance(params, Mapping):
        return MappingProxyType(dict(params))
    return params


class BoundRole:
    """Role callable with the parameter record bound as last argument.

    Calling ``BoundRole(v, params)(out, t, q, p)`` evaluates
    ``v(out, t, q, p, params)`` and returns whatever ``v`` returns.
    """

    __slots__ = ("func", "params")

    def __init__(self, func: Callable, params: Any):
        self.func = func
        self.params = params

    def __call__(self, *args):
        return self.func(*args, self.params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundRole):
            return NotImplemented
        return self.func is other.func and self.params == other.params

    def __hash__(self) -> int:
        return hash((id(self.func), tuple(sorted(self.params))))

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"BoundRole({name}, {dict(self.params)!r})"


def bind_parameters(func: Any, params: Any) -> Any:
    """Bind ``params`` to a role callable, a tuple of them, or ``None``.

    Tuples (the phases of split equations) are bound element-wise, ``None``
    entries stay ``None``. With ``NullParameters`` the input is returned.
    """
    if isinstance(params, NullParameters) or func is None:
        return func
    if isinstance(func, tuple):
        return tuple(bind_parameters(f, params) for f in func)
    return BoundRole(func, params)


def bind_roles(roles: Mapping[str, Any], params: Any, parameterized: bool) -> Mapping[str, Any]:
    """Bind ``params`` to every callable of a role bundle.

    Args:
        roles: Raw bundle, name -> callable (or tuple of callables)
        params: Parameter record
        parameterized: Whether the owning equation declares parameters

    Returns:
        Read-only bundle with the same keys
    """
    if not parameterized:
        return MappingProxyType(dict(roles))
    frozen = freeze_parameters(params)
    return MappingProxyType({name: bind_parameters(func, frozen) for name, func in roles.items()})
