"""
Geometric Equations - typed descriptions of initial-value problems

Equation variants (ODE, PODE, HODE, IODE, LODE, SODE, DAE, PDAE, HDAE, IDAE,
LDAE, SPDAE, SDE, PSDE, SPSDE) bundle user-supplied role callables with
optional invariants, parameters and periodicity. Problems and ensembles
validate them against initial conditions and bind parameters, so that a
numerical integrator can evaluate every variant through the same bundles.
"""

from beartype.claw import beartype_package

beartype_package(__name__)

__version__ = "0.1.0"

from . import conversion, fixtures
from .binding import BoundRole, bind_parameters
from .equations import *  # noqa: F401,F403
from .equations import __all__ as _equations
from .errors import (
    ArgumentMismatchError,
    CardinalityMismatchError,
    GeometricEquationError,
    ShapeMismatchError,
    SignatureMismatchError,
)
from .problems import *  # noqa: F401,F403
from .problems import __all__ as _problems
from .sentinels import (
    NullInvariants,
    NullParameters,
    NullPeriodicity,
    OptionalInvariants,
    OptionalParameters,
    OptionalPeriodicity,
    parameter_types,
)
from .validation import (
    ValidationResult,
    check_initial_conditions,
    check_methods,
    check_parameters,
    validate_problem,
)

__all__ = [
    "__version__",
    "conversion",
    "fixtures",
    "BoundRole",
    "bind_parameters",
    "GeometricEquationError",
    "ShapeMismatchError",
    "SignatureMismatchError",
    "CardinalityMismatchError",
    "ArgumentMismatchError",
    "NullInvariants",
    "NullParameters",
    "NullPeriodicity",
    "OptionalInvariants",
    "OptionalParameters",
    "OptionalPeriodicity",
    "parameter_types",
    "ValidationResult",
    "check_initial_conditions",
    "check_methods",
    "check_parameters",
    "validate_problem",
    *_equations,
    *_problems,
]
