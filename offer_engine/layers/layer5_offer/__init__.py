"""Layer 5: Offer draft generation."""

from .generator import OfferDraftGenerator

__all__ = ["OfferDraftGenerator"]
