"""Problem and ensemble containers."""

from .constructors import *  # noqa: F401,F403
from .constructors import __all__ as _constructors
from .ensemble import EnsembleProblem
from .problem import EquationProblem, promote_tspan_and_tstep

__all__ = ["EquationProblem", "EnsembleProblem", "promote_tspan_and_tstep", *_constructors]
