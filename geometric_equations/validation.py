"""
Structural validation of equations against initial conditions and parameters.

Provides the checks that run before a problem is allowed to exist:
- Initial-condition records: required keys, element type, array type, shape
- Role callables: can each be called with the arguments its equation demands
- Parameter records: names and value types against the equation's schema
- Periodicity: shape against the position coordinate

The ``check_*`` functions are side-effect free predicates. The ``validate_*``
functions return a ``ValidationResult`` naming every failing role or key, and
``ValidationResult.raise_for_errors`` turns the first error into the matching
exception from ``geometric_equations.errors``.

Role callables are never invoked here. Compatibility is decided by binding
the probe arguments to the callable's signature.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import numpy as np

from .errors import (
    ArgumentMismatchError,
    CardinalityMismatchError,
    GeometricEquationError,
    ShapeMismatchError,
    SignatureMismatchError,
)
from .sentinels import NullParameters, is_compatible_parameter

__all__ = [
    "ValidationSeverity",
    "ValidationCategory",
    "ValidationIssue",
    "ValidationResult",
    "RoleProbe",
    "is_applicable",
    "validate_initial_conditions",
    "validate_methods",
    "validate_parameters",
    "validate_periodicity",
    "validate_problem",
    "check_initial_conditions",
    "check_methods",
    "check_parameters",
]

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity level of a validation issue."""

    ERROR = "error"  # Aborts construction
    WARNING = "warning"  # Reported, construction proceeds


class ValidationCategory(Enum):
    """Category of validation issue, one per construction error type."""

    SHAPE = "shape_mismatch"
    SIGNATURE = "signature_mismatch"
    CARDINALITY = "cardinality_mismatch"
    ARGUMENT = "argument_mismatch"


_EXCEPTIONS = {
    ValidationCategory.SHAPE: ShapeMismatchError,
    ValidationCategory.SIGNATURE: SignatureMismatchError,
    ValidationCategory.CARDINALITY: CardinalityMismatchError,
    ValidationCategory.ARGUMENT: ArgumentMismatchError,
}


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    category: ValidationCategory
    message: str
    location: Optional[str] = None  # e.g., "role 'v'", "key 'p'"
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.severity.value.upper()}] {self.category.value}: {self.message}{loc}"


@dataclass
class ValidationResult:
    """Result of validating an (equation, tspan, ics, params) combination."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """True if there are any errors."""
        return any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        """True if there are any warnings."""
        return any(i.severity == ValidationSeverity.WARNING for i in self.issues)

    @property
    def is_valid(self) -> bool:
        """True if there are no errors (warnings are OK)."""
        return not self.has_errors

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get all errors."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get all warnings."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def add(self, issue: ValidationIssue) -> None:
        """Add an issue."""
        self.issues.append(issue)

    def add_error(
        self,
        category: ValidationCategory,
        message: str,
        location: Optional[str] = None,
        **details,
    ) -> None:
        """Add an error."""
        self.add(ValidationIssue(ValidationSeverity.ERROR, category, message, location, details))

    def add_warning(
        self,
        category: ValidationCategory,
        message: str,
        location: Optional[str] = None,
        **details,
    ) -> None:
        """Add a warning."""
        self.add(ValidationIssue(ValidationSeverity.WARNING, category, message, location, details))

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        """Append the issues of another result and return self."""
        self.issues.extend(other.issues)
        return self

    def summary(self) -> str:
        """Get a summary of validation results."""
        status = "VALID" if self.is_valid else "INVALID"
        lines = [
            f"Validation Result: {status}",
            f"  Errors: {len(self.errors)}",
            f"  Warnings: {len(self.warnings)}",
        ]
        if self.issues:
            lines.append("\nIssues:")
            for issue in self.issues:
                lines.append(f"  - {issue}")
        return "\n".join(lines)

    def raise_for_errors(self) -> None:
        """Raise the error type of the first error issue, listing all errors.

        Warnings are logged and never raise.

        Raises:
            GeometricEquationError: one of its four subclasses, chosen by the
                category of the first error
        """
        for warning in self.warnings:
            logger.warning(str(warning))

        errors = self.errors
        if not errors:
            return

        first = errors[0]
        exc_type = _EXCEPTIONS.get(first.category, GeometricEquationError)
        message = "; ".join(f"{e.message} ({e.location})" if e.location else e.message for e in errors)
        raise exc_type(message, location=first.location)

    def __str__(self) -> str:
        return self.summary()


@dataclass(frozen=True)
class RoleProbe:
    """Argument list a role callable must accept, without ``params``.

    ``labels`` name the arguments for error messages, ``arguments`` are the
    values bound against the callable's signature.
    """

    role: str
    func: Callable
    labels: tuple
    arguments: tuple

    def describe(self, with_params: bool) -> str:
        labels = self.labels + ("params",) if with_params else self.labels
        return f"{self.role}({', '.join(labels)})"


def is_applicable(func: Any, *args) -> bool:
    """True if ``func`` can be called with ``args`` (positional arity check).

    The callable is not invoked. Callables that do not expose a signature
    (some builtins and extension functions) are accepted when callable.
    """
    if not callable(func):
        return False
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    try:
        signature.bind(*args)
    except TypeError:
        return False
    return True


def _is_state_vector(value: Any) -> bool:
    return hasattr(value, "dtype") and hasattr(value, "shape") and getattr(value, "ndim", 0) >= 1


def validate_initial_conditions(equation: Any, ics: Any) -> ValidationResult:
    """
    Check an initial-condition record against what an equation variant needs.

    Args:
        equation: Equation variant
        ics: Mapping from key ("q", "p", "lambda", "mu") to state vector

    Returns:
        ValidationResult with SHAPE errors for missing keys and mismatched
        element type, array type or shape, and warnings for unknown keys
    """
    result = ValidationResult()
    name = type(equation).__name__

    if not isinstance(ics, Mapping):
        result.add_error(
            ValidationCategory.SHAPE,
            f"Initial conditions for {name} must be a mapping, got {type(ics).__name__}",
            location="initial conditions",
        )
        return result

    required = equation.required_keys()
    for key in required:
        if key not in ics:
            result.add_error(
                ValidationCategory.SHAPE,
                f"{name} requires initial condition '{key}'",
                location=f"key '{key}'",
                key=key,
            )
    for key in ics:
        if key not in equation.ics_keys:
            result.add_warning(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' is not used by {name}",
                location=f"key '{key}'",
                key=key,
            )
    if result.has_errors:
        return result

    for key in required:
        if not _is_state_vector(ics[key]):
            result.add_error(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' must be an array, got {type(ics[key]).__name__}",
                location=f"key '{key}'",
            )
    if result.has_errors:
        return result

    q = ics["q"]
    for key in required:
        if key == "q":
            continue
        x = ics[key]
        if type(x) is not type(q):
            result.add_error(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' has array type {type(x).__name__}, "
                f"expected {type(q).__name__} like 'q'",
                location=f"key '{key}'",
            )
        if x.dtype != q.dtype:
            result.add_error(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' has element type {x.dtype}, expected {q.dtype} like 'q'",
                location=f"key '{key}'",
            )
        if key in equation.state_keys and x.shape != q.shape:
            result.add_error(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' has shape {x.shape}, expected {q.shape} like 'q'",
                location=f"key '{key}'",
            )
        elif key in equation.multiplier_keys and x.ndim != q.ndim:
            result.add_error(
                ValidationCategory.SHAPE,
                f"Initial condition '{key}' has {x.ndim} dimensions, expected {q.ndim} like 'q'",
                location=f"key '{key}'",
            )

    if "mu" in required and "lambda" in required and ics["mu"].shape != ics["lambda"].shape:
        result.add_error(
            ValidationCategory.SHAPE,
            f"Initial condition 'mu' has shape {ics['mu'].shape}, "
            f"expected {ics['lambda'].shape} like 'lambda'",
            location="key 'mu'",
        )

    return result


def validate_methods(equation: Any, tspan: Any, ics: Any, params: Any) -> ValidationResult:
    """
    Check that every role callable accepts the arguments its variant demands.

    Each role is probed with an output buffer, the initial time ``tspan[0]``,
    the state components from ``ics`` and, when the equation declares
    parameters, ``params`` as trailing argument. Invariants are probed with
    ``(t, state...)`` in the same way.

    Args:
        equation: Equation variant
        tspan: (t0, t1) time interval
        ics: Initial-condition record (validated first)
        params: Parameter record or NullParameters

    Returns:
        ValidationResult with SIGNATURE errors naming each failing role
    """
    result = validate_initial_conditions(equation, ics)
    if result.has_errors:
        return result

    with_params = equation.has_parameters()
    trailing = (params,) if with_params else ()

    for probe in equation.role_probes(tspan[0], ics):
        if not is_applicable(probe.func, *probe.arguments, *trailing):
            result.add_error(
                ValidationCategory.SIGNATURE,
                f"{type(equation).__name__} role '{probe.role}' cannot be called as "
                f"{probe.describe(with_params)}",
                location=f"role '{probe.role}'",
                role=probe.role,
            )
    return result


def validate_parameters(equation: Any, params: Any) -> ValidationResult:
    """Check a parameter record against the equation's parameter schema."""
    result = ValidationResult()
    name = type(equation).__name__

    if not equation.has_parameters():
        if not isinstance(params, NullParameters):
            result.add_error(
                ValidationCategory.ARGUMENT,
                f"{name} declares no parameters but a parameter record was given",
                location="parameters",
            )
        return result

    if not isinstance(params, Mapping):
        result.add_error(
            ValidationCategory.ARGUMENT,
            f"{name} declares parameters {sorted(equation.parameters)} but got {params!r}",
            location="parameters",
        )
        return result

    schema = equation.parameters
    for key in schema:
        if key not in params:
            result.add_error(
                ValidationCategory.ARGUMENT,
                f"Parameter '{key}' is missing",
                location=f"parameter '{key}'",
            )
        elif not is_compatible_parameter(params[key], schema[key]):
            result.add_error(
                ValidationCategory.ARGUMENT,
                f"Parameter '{key}' has type {type(params[key]).__name__}, "
                f"expected {schema[key].__name__}",
                location=f"parameter '{key}'",
            )
    for key in params:
        if key not in schema:
            result.add_error(
                ValidationCategory.ARGUMENT,
                f"Parameter '{key}' is not declared by {name}",
                location=f"parameter '{key}'",
            )
    return result


def validate_periodicity(equation: Any, ics: Mapping) -> ValidationResult:
    """Check that a periodicity array matches the shape of ``q``."""
    result = ValidationResult()
    if equation.has_periodicity() and equation.periodicity.shape != ics["q"].shape:
        result.add_error(
            ValidationCategory.SHAPE,
            f"Periodicity has shape {equation.periodicity.shape}, expected {ics['q'].shape} like 'q'",
            location="periodicity",
        )
    return result


def validate_problem(equation: Any, tspan: Any, ics: Any, params: Any) -> ValidationResult:
    """Run every construction check for one problem and collect all issues."""
    result = validate_methods(equation, tspan, ics, params)
    if not result.has_errors:
        result.extend(validate_periodicity(equation, ics))
    return result.extend(validate_parameters(equation, params))


def check_initial_conditions(equation: Any, ics: Any) -> bool:
    """True if ``ics`` has the keys, element types and shapes ``equation`` needs."""
    return validate_initial_conditions(equation, ics).is_valid


def check_methods(equation: Any, tspan: Any, ics: Any, params: Any) -> bool:
    """True if every role callable of ``equation`` accepts its probe arguments."""
    return validate_methods(equation, tspan, ics, params).is_valid


def check_parameters(equation: Any, params: Any) -> bool:
    """True if ``params`` matches the parameter schema of ``equation``."""
    return validate_parameters(equation, params).is_valid
