"""Layer 2: Requirement resolution."""

from .resolver import RequirementResolver
from .seeding import seed_requirements, recompute_formula_values, detach_requirements, requirement_id
from .coercion import coerce_value, coerce_number, coerce_boolean, coerce_select

__all__ = [
    "RequirementResolver",
    "seed_requirements",
    "recompute_formula_values",
    "detach_requirements",
    "requirement_id",
    "coerce_value",
    "coerce_number",
    "coerce_boolean",
    "coerce_select",
]
