"""Main requirement resolver for Layer 2."""

import logging
from typing import Optional

from offer_engine.exceptions import EvaluationError, InvalidFormula, TypeMismatch
from offer_engine.layers.layer2_requirements.coercion import coerce_value
from offer_engine.layers.layer3_formula import compute_formula
from offer_engine.models import (
    Diagnostic,
    DiagnosticSeverity,
    EnvironmentValue,
    FieldType,
    Project,
    ProjectRequirement,
    RequirementFormulaConfig,
    RequirementTemplateGroup,
    RequirementTemplateRow,
    ResolvedEnvironment,
)
from offer_engine.services.interfaces import TemplateCatalog

logger = logging.getLogger(__name__)


class RequirementResolver:
    """
    Layer 2: binds a project's captured answers to template rows.

    Produces a flat environment keyed by row id. Rows without an answer fall
    back to their default value; rows with neither are left out, so any
    expression that references them fails with UnboundVariable later.

    Issues are per field: they carry field_id, never rule_id. One broken
    answer can therefore show up twice in a draft, once as the field issue
    and once as an unbound_variable diagnostic on each rule that reads it.
    """

    def __init__(self, template_catalog: TemplateCatalog):
        self.template_catalog = template_catalog

    def resolve(
        self,
        project: Project,
        category_slug: str,
        variant_slug: str,
    ) -> ResolvedEnvironment:
        """
        Resolve the environment for one (category, variant) pair.

        Args:
            project: Project snapshot owning the requirements
            category_slug: Active category
            variant_slug: Active variant of that category

        Returns:
            ResolvedEnvironment with typed values and any per-field issues

        Raises:
            NotFound: no template group exists for the pair
        """
        group = self.template_catalog.get_template_group(category_slug, variant_slug)
        issues: list[Diagnostic] = []
        values: dict[str, EnvironmentValue] = {}

        formula_rows: list[tuple[int, RequirementTemplateRow, RequirementFormulaConfig]] = []

        # 1차: 일반 입력 행
        for index, row in enumerate(group.rows):
            requirement = project.find_requirement(category_slug, row.id)
            config = self._formula_for(row, requirement)
            if config is not None:
                formula_rows.append((index, row, config))
                continue

            raw = self._raw_value(row, requirement)
            if raw is None:
                continue
            try:
                values[row.id] = coerce_value(row, raw)
            except TypeMismatch as e:
                issues.append(self._issue(e, group, row))

        # 2차: 수식 행 (그룹 선언 순서 = 의존 순서)
        positions = {row.id: index for index, row in enumerate(group.rows)}
        for index, row, config in formula_rows:
            base_position = positions.get(config.base_field_id)
            if row.field_type != FieldType.NUMBER or base_position is None or base_position >= index:
                error = InvalidFormula(
                    f"Formula of row '{row.id}' must reference a numeric row declared before it",
                    details={"row_id": row.id, "base_field_id": config.base_field_id},
                )
                logger.error(f"[Resolver] {group.id}: {error.message}")
                issues.append(
                    self._issue(error, group, row, severity=DiagnosticSeverity.ERROR)
                )
                continue
            try:
                values[row.id] = compute_formula(config, values)
            except EvaluationError as e:
                issues.append(self._issue(e, group, row))

        environment = ResolvedEnvironment(
            category_slug=category_slug,
            variant_slug=variant_slug,
            values=values,
            issues=issues,
        )
        logger.debug(
            f"[Resolver] {project.id} {category_slug}/{variant_slug}: "
            f"{len(values)}개 값, {len(issues)}개 문제"
        )
        return environment

    def _formula_for(
        self,
        row: RequirementTemplateRow,
        requirement: Optional[ProjectRequirement],
    ) -> Optional[RequirementFormulaConfig]:
        """프로젝트 답변의 수식이 템플릿 수식보다 우선합니다."""
        if requirement is not None and requirement.formula_config is not None:
            return requirement.formula_config
        return row.formula_config

    def _raw_value(
        self,
        row: RequirementTemplateRow,
        requirement: Optional[ProjectRequirement],
    ) -> Optional[str]:
        if requirement is not None and requirement.value.strip():
            return requirement.value
        if row.default_value is not None and row.default_value.strip():
            return row.default_value
        return None

    def _issue(
        self,
        error: Exception,
        group: RequirementTemplateGroup,
        row: RequirementTemplateRow,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
    ) -> Diagnostic:
        return Diagnostic.from_error(
            error,
            severity=severity,
            category_slug=group.category_slug,
            variant_slug=group.variant_slug,
            field_id=row.id,
        )
