"""Processing layers for offer draft generation."""

# Note: Import layers individually to avoid circular imports
# Use: from offer_engine.layers.layer1_expression import evaluate
# Use: from offer_engine.layers.layer2_requirements import RequirementResolver
# Use: from offer_engine.layers.layer3_formula import compute_formula
# Use: from offer_engine.layers.layer4_products import ProductResolver
# Use: from offer_engine.layers.layer5_offer import OfferDraftGenerator

__all__ = [
    "layer1_expression",
    "layer2_requirements",
    "layer3_formula",
    "layer4_products",
    "layer5_offer",
]
