"""Layer 3: Formula engine."""

from .formula import compute_formula

__all__ = ["compute_formula"]
