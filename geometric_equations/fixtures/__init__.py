"""Example problems used in tests and documentation."""

from . import exponential_growth, harmonic_oscillator

__all__ = ["exponential_growth", "harmonic_oscillator"]
