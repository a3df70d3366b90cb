"""
Project requirement lifecycle helpers.

- seed: 카테고리/변형 템플릿을 채택할 때 요구사항 생성
- recompute: 수식 행의 저장 값을 현재 답변 기준으로 다시 계산
- detach: 카테고리를 프로젝트에서 뺄 때 해당 요구사항 제거

모든 함수는 새 목록을 반환하고 입력 프로젝트는 변경하지 않습니다.
"""

import logging
from typing import Iterable, Optional

from offer_engine.layers.layer2_requirements.resolver import RequirementResolver
from offer_engine.models import Project, ProjectRequirement
from offer_engine.services.catalog_store import CatalogStore
from offer_engine.utils.slugs import normalize_slug

logger = logging.getLogger(__name__)


def requirement_id(group_id: str, row_id: str) -> str:
    return f"{group_id}-{row_id}"


def seed_requirements(
    catalog: CatalogStore,
    categories: Iterable[str],
    variant_slug: Optional[str] = None,
) -> list[ProjectRequirement]:
    """
    프로젝트가 카테고리/변형 템플릿을 채택할 때 요구사항 목록을 만듭니다.

    각 템플릿 행마다 답변 하나를 만들고, 값은 행의 기본값(없으면 빈 문자열)으로
    채웁니다. 카테고리가 없으면 빈 목록을 반환합니다.
    """
    requirements: list[ProjectRequirement] = []
    for group in catalog.list_template_groups(categories, variant_slug):
        for row in group.rows:
            requirements.append(
                ProjectRequirement(
                    id=requirement_id(group.id, row.id),
                    label=row.label,
                    category_slug=group.category_slug,
                    template_row_id=row.id,
                    value=row.default_value or "",
                    field_type=row.field_type,
                    notes=row.help_text or "",
                    product_category_slug=row.product_category_slug,
                    formula_config=row.formula_config,
                )
            )
    return requirements


def recompute_formula_values(
    catalog: CatalogStore,
    project: Project,
    category_slug: str,
    variant_slug: str,
) -> list[ProjectRequirement]:
    """
    수식 행 답변의 value를 해석된 환경 값으로 갱신한 요구사항 목록.

    계산에 실패한 수식 행은 기존 값을 유지합니다.

    Raises:
        NotFound: 템플릿 그룹이 없음
    """
    group = catalog.get_template_group(category_slug, variant_slug)
    environment = RequirementResolver(catalog).resolve(project, category_slug, variant_slug)
    template_formulas = {row.id for row in group.rows if row.is_formula}

    updated: list[ProjectRequirement] = []
    for requirement in project.requirements:
        row_id = requirement.template_row_id
        is_formula = requirement.formula_config is not None or row_id in template_formulas
        if (
            requirement.category_slug == category_slug
            and is_formula
            and row_id in environment.values
        ):
            value = format(environment.values[row_id], ".12g")
            if value != requirement.value:
                logger.debug(f"[Requirements] {project.id} {row_id}: '{requirement.value}' → '{value}'")
                requirement = requirement.model_copy(update={"value": value})
        updated.append(requirement)
    return updated


def detach_requirements(project: Project, category_slug: str) -> list[ProjectRequirement]:
    """카테고리를 프로젝트에서 뺄 때 남는 요구사항 목록."""
    slug = normalize_slug(category_slug)
    return [r for r in project.requirements if r.category_slug != slug]
