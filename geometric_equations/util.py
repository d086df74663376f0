"""Small helpers shared by equations and problems."""

from typing import Any, Mapping

import numpy as np

__all__ = ["values_equal", "describe_callable"]


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality that handles arrays, tuples and mappings.

    Arrays compare equal when their types, shapes, element types and values
    agree. Callables compare by identity through ``==``.
    """
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return (
            type(a) is type(b)
            and a.shape == b.shape
            and a.dtype == b.dtype
            and bool(np.array_equal(a, b))
        )
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (tuple, list)) and isinstance(b, (tuple, list)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    return bool(a == b)


def describe_callable(func: Any) -> str:
    """Short display name of a role callable (or of a tuple of them)."""
    if func is None:
        return "None"
    if isinstance(func, tuple):
        return "(" + ", ".join(describe_callable(f) for f in func) + ")"
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)
