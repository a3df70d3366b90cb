"""
프로젝트와 프로젝트 요구사항(답변) 데이터 모델입니다.
프로젝트는 자신의 요구사항 목록을 단독으로 소유합니다.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from offer_engine.models.template import FieldType, RequirementFormulaConfig
from offer_engine.utils.slugs import normalize_slug, sanitize_category_slugs


class ProjectRequirement(BaseModel):
    """
    템플릿 행 하나에 대한 프로젝트의 답변입니다.
    값은 field_type에 맞춰 문자열로 저장됩니다.
    """

    id: str = Field(..., description="요구사항 ID (예: group-1-area)")
    label: str = ""
    category_slug: str
    template_row_id: Optional[str] = Field(
        default=None, description="이 답변이 생성된 템플릿 행 ID"
    )
    value: str = Field(default="", description="문자열 형태의 답변 값")
    field_type: Optional[FieldType] = None
    notes: str = ""
    formula_config: Optional[RequirementFormulaConfig] = Field(
        default=None, description="템플릿 수식을 덮어쓰는 프로젝트별 수식"
    )
    product_category_slug: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, value):
        # 클라이언트가 숫자/불리언을 그대로 보내는 경우가 있음
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


class Project(BaseModel):
    """오퍼 초안 생성의 입력이 되는 프로젝트 스냅샷입니다."""

    id: str
    name: str = ""
    categories: list[str] = Field(default_factory=list, description="활성 카테고리 슬러그")
    variant_slug: Optional[str] = Field(
        default=None, description="모든 카테고리에 적용되는 기본 변형"
    )
    variant_selections: dict[str, list[str]] = Field(
        default_factory=dict, description="카테고리별로 선택한 변형 목록"
    )
    requirements: list[ProjectRequirement] = Field(default_factory=list)

    @field_validator("categories", mode="before")
    @classmethod
    def clean_categories(cls, value):
        if value is None:
            return []
        return sanitize_category_slugs(value)

    @field_validator("variant_selections", mode="before")
    @classmethod
    def clean_variant_selections(cls, value):
        if not value:
            return {}
        return {normalize_slug(category): list(variants) for category, variants in value.items()}

    def find_requirement(
        self, category_slug: str, template_row_id: str
    ) -> Optional[ProjectRequirement]:
        """카테고리와 템플릿 행 ID로 답변을 찾습니다. 없으면 None."""
        for requirement in self.requirements:
            if (
                requirement.category_slug == category_slug
                and requirement.template_row_id == template_row_id
            ):
                return requirement
        return None
