"""
외부 협력자(collaborator) 인터페이스입니다.

템플릿, 규칙, 가격표, 활성 카테고리/변형 선택은 모두 이 엔진 밖에서 관리되는
읽기 전용 설정이며, 엔진은 아래의 좁은 인터페이스로만 접근합니다.
"""

from typing import Protocol, runtime_checkable

from offer_engine.models import (
    CatalogProduct,
    OfferGenerationRule,
    Project,
    RequirementTemplateGroup,
)

SelectionKey = tuple[str, str]  # (category_slug, variant_slug)


@runtime_checkable
class TemplateCatalog(Protocol):
    def get_template_group(self, category_slug: str, variant_slug: str) -> RequirementTemplateGroup:
        """그룹을 반환합니다. 없으면 NotFound."""
        ...


@runtime_checkable
class RuleSource(Protocol):
    def get_generation_rules(self, category_slug: str, variant_slug: str) -> list[OfferGenerationRule]:
        """선언 순서대로 규칙을 반환합니다. 규칙 세트가 없으면 NotFound."""
        ...


@runtime_checkable
class PriceListCatalog(Protocol):
    async def find_products_by_category(self, slug: str) -> list[CatalogProduct]:
        """카테고리에 속한 제품을 안정적인(stable) 카탈로그 순서로 반환합니다."""
        ...


@runtime_checkable
class SelectionSource(Protocol):
    def get_active_selections(self, project: Project) -> set[SelectionKey]:
        ...
