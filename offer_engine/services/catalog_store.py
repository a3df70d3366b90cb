"""
JSON 스냅샷 기반의 읽기 전용 카탈로그 저장소입니다.
데이터베이스 대신 파일 하나(catalog.json)에서 아래 데이터를 읽어 메모리에 보관합니다.

관리하는 데이터:
1. 요구사항 템플릿 그룹과 변형 (Template Catalog)
2. 오퍼 생성 규칙 (Rule Source)
3. 가격표 제품 (Price-list Catalog)
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
from pydantic import BaseModel, Field, ValidationError, model_validator

from offer_engine.exceptions import CatalogLoadError, MalformedExpression, NotFound
from offer_engine.layers.layer1_expression import parse_expression
from offer_engine.models import (
    CatalogProduct,
    OfferGenerationRule,
    RequirementTemplateGroup,
    RequirementTemplateVariant,
)

logger = logging.getLogger(__name__)


class CatalogSnapshot(BaseModel):
    """catalog.json 파일의 전체 구조."""

    version: str = "0"
    variants: list[RequirementTemplateVariant] = Field(default_factory=list)
    template_groups: list[RequirementTemplateGroup] = Field(default_factory=list)
    rules: list[OfferGenerationRule] = Field(default_factory=list)
    products: list[CatalogProduct] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_keys(self) -> "CatalogSnapshot":
        group_keys = set()
        for group in self.template_groups:
            if group.key in group_keys:
                raise ValueError(f"duplicate template group for {group.key}")
            group_keys.add(group.key)

        rule_ids = set()
        for rule in self.rules:
            if rule.id in rule_ids:
                raise ValueError(f"duplicate rule id '{rule.id}'")
            rule_ids.add(rule.id)
        return self


class CatalogStore:
    """템플릿, 규칙, 가격표를 한곳에서 제공하는 메모리 저장소."""

    def __init__(self, snapshot: Optional[CatalogSnapshot] = None):
        self.snapshot = snapshot or CatalogSnapshot()

        self._groups = {group.key: group for group in self.snapshot.template_groups}
        self._rules: dict[tuple[str, str], list[OfferGenerationRule]] = {}
        for rule in self.snapshot.rules:
            self._rules.setdefault(rule.key, []).append(rule)

    @property
    def version(self) -> str:
        return self.snapshot.version

    # ==================== Template Catalog ====================

    def get_template_group(self, category_slug: str, variant_slug: str) -> RequirementTemplateGroup:
        group = self._groups.get((category_slug, variant_slug))
        if group is None:
            raise NotFound(
                f"No requirement template for {category_slug}/{variant_slug}",
                details={"category_slug": category_slug, "variant_slug": variant_slug},
            )
        return group

    def list_template_groups(
        self, categories: Iterable[str], variant_slug: Optional[str] = None
    ) -> list[RequirementTemplateGroup]:
        """카테고리 순서대로, 같은 카테고리 안에서는 스냅샷 순서대로 반환합니다."""
        wanted = list(categories)
        groups = []
        for category in wanted:
            for group in self.snapshot.template_groups:
                if group.category_slug != category:
                    continue
                if variant_slug and group.variant_slug != variant_slug:
                    continue
                groups.append(group)
        return groups

    def list_variants(self, category_slug: str) -> list[RequirementTemplateVariant]:
        return [v for v in self.snapshot.variants if v.category_slug == category_slug]

    # ==================== Rule Source ====================

    def get_generation_rules(self, category_slug: str, variant_slug: str) -> list[OfferGenerationRule]:
        key = (category_slug, variant_slug)
        if key in self._rules:
            return list(self._rules[key])
        # 템플릿은 있는데 규칙이 없는 쌍은 빈 규칙 세트
        if key in self._groups:
            return []
        raise NotFound(
            f"No offer generation rules for {category_slug}/{variant_slug}",
            details={"category_slug": category_slug, "variant_slug": variant_slug},
        )

    def malformed_rules(self) -> list[tuple[OfferGenerationRule, MalformedExpression]]:
        """파싱되지 않는 표현식을 가진 규칙 목록 (로딩 시 점검용)."""
        problems = []
        for rule in self.snapshot.rules:
            for expression in (rule.condition_expression, rule.quantity_expression):
                if expression is None:
                    continue
                try:
                    parse_expression(expression)
                except MalformedExpression as e:
                    problems.append((rule, e))
                    break
        return problems

    # ==================== Price-list Catalog ====================

    async def find_products_by_category(self, slug: str) -> list[CatalogProduct]:
        return [
            product
            for product in self.snapshot.products
            if product.is_active and slug in product.category_slugs
        ]


async def load_catalog_store(path: str | Path) -> CatalogStore:
    """
    JSON 파일에서 카탈로그를 읽어 CatalogStore를 만듭니다.

    Raises:
        CatalogLoadError: 파일이 없거나 내용이 올바르지 않은 경우
    """
    file_path = Path(path)
    if not file_path.exists():
        raise CatalogLoadError(
            f"카탈로그 파일을 찾을 수 없습니다: {file_path}",
            details={"path": str(file_path)},
        )

    try:
        async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
            content = await f.read()
        snapshot = CatalogSnapshot.model_validate(json.loads(content))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"[CatalogStore] 로딩 에러 {file_path}: {e}", exc_info=True)
        raise CatalogLoadError(
            f"카탈로그 로딩에 실패했습니다: {file_path.name}",
            details={"path": str(file_path), "error": str(e)},
        ) from e

    store = CatalogStore(snapshot)
    for rule, error in store.malformed_rules():
        logger.error(f"[CatalogStore] 규칙 '{rule.id}' 표현식 오류: {error.message}")

    logger.info(
        f"[CatalogStore] 로딩 완료: version={store.version}, "
        f"groups={len(snapshot.template_groups)}, rules={len(snapshot.rules)}, "
        f"products={len(snapshot.products)}"
    )
    return store


# 싱글톤 인스턴스 (프로그램 전체에서 공유)
_catalog_store: Optional[CatalogStore] = None


def get_catalog_store() -> CatalogStore:
    """CatalogStore 인스턴스를 반환합니다. 아직 로딩 전이면 빈 저장소."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = CatalogStore()
    return _catalog_store


def set_catalog_store(store: Optional[CatalogStore]) -> None:
    global _catalog_store
    _catalog_store = store
