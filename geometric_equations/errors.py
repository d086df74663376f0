"""
Exception hierarchy for equation and problem construction.

All errors are raised while an equation, problem or ensemble is being built,
never while its role callables are evaluated.
"""

from typing import Optional

__all__ = [
    "GeometricEquationError",
    "ShapeMismatchError",
    "SignatureMismatchError",
    "CardinalityMismatchError",
    "ArgumentMismatchError",
]


class GeometricEquationError(ValueError):
    """Base class for construction errors.

    Args:
        message: Human-readable description of the failure
        location: Role or initial-condition key that failed (e.g. "role 'v'")
    """

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location


class ShapeMismatchError(GeometricEquationError):
    """Initial conditions miss a required key or their state vectors disagree
    in element type, array type or shape."""


class SignatureMismatchError(GeometricEquationError):
    """A role callable cannot be invoked with the arguments its equation demands."""


class CardinalityMismatchError(GeometricEquationError):
    """Ensemble collections have unequal lengths or inconsistent structure."""


class ArgumentMismatchError(GeometricEquationError):
    """Time span, time step or parameter record is unusable."""
