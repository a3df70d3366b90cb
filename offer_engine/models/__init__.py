"""Data models for the offer draft engine."""

from .template import (
    FieldType,
    RequirementFormulaConfig,
    RequirementTemplateRow,
    RequirementTemplateGroup,
    RequirementTemplateVariant,
)
from .project import ProjectRequirement, Project
from .rules import ProductSelectionMode, OfferGenerationRule
from .offer import (
    EnvironmentValue,
    CatalogProduct,
    ResolvedProduct,
    ManualSelectionRequired,
    DiagnosticKind,
    DiagnosticSeverity,
    Diagnostic,
    ResolvedEnvironment,
    DraftLineItem,
    OfferDraft,
)

__all__ = [
    # Template models
    "FieldType",
    "RequirementFormulaConfig",
    "RequirementTemplateRow",
    "RequirementTemplateGroup",
    "RequirementTemplateVariant",
    # Project models
    "ProjectRequirement",
    "Project",
    # Rule models
    "ProductSelectionMode",
    "OfferGenerationRule",
    # Offer models
    "EnvironmentValue",
    "CatalogProduct",
    "ResolvedProduct",
    "ManualSelectionRequired",
    "DiagnosticKind",
    "DiagnosticSeverity",
    "Diagnostic",
    "ResolvedEnvironment",
    "DraftLineItem",
    "OfferDraft",
]
