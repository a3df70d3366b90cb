"""Layer 4: Product resolution."""

from .product_resolver import ProductResolver, ProductOutcome

__all__ = ["ProductResolver", "ProductOutcome"]
