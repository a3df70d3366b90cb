"""
요구사항 템플릿(Requirement Template) 데이터 모델입니다.
카테고리/변형(variant)별로 묶인 입력 필드 정의를 표현합니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class FieldType(str, Enum):
    """템플릿 행의 입력 타입입니다."""

    NUMBER = "number"    # 숫자 (float으로 변환)
    TEXT = "text"        # 자유 텍스트
    SELECT = "select"    # 선택지 중 하나
    BOOLEAN = "boolean"  # 예/아니오


class RequirementFormulaConfig(BaseModel):
    """
    행의 값을 다른 숫자 행에서 파생시키는 수식 설정입니다.
    값 = environment[base_field_id] * (multiply_by 또는 1)
    """

    base_field_id: str = Field(..., min_length=1, description="기준 필드(행) ID")
    multiply_by: Optional[float] = Field(default=None, description="곱할 계수 (없으면 1)")
    notes: Optional[str] = Field(default=None, description="설명 메모")


class RequirementTemplateRow(BaseModel):
    """템플릿의 입력 필드 하나."""

    id: str = Field(..., min_length=1, description="행 ID (그룹 내에서 유일)")
    label: str = Field(..., description="표시 이름")
    field_type: FieldType
    options: list[str] = Field(default_factory=list, description="select 타입의 선택지")
    default_value: Optional[str] = Field(default=None, description="기본값 (문자열 형태)")
    help_text: Optional[str] = Field(default=None, description="도움말")
    product_category_slug: Optional[str] = Field(
        default=None, description="이 행의 답변이 가리키는 가격표 카테고리"
    )
    formula_config: Optional[RequirementFormulaConfig] = Field(
        default=None, description="값을 직접 입력받지 않고 계산하는 경우의 수식"
    )

    @model_validator(mode="after")
    def check_field_shape(self) -> "RequirementTemplateRow":
        if self.field_type == FieldType.SELECT:
            if not self.options:
                raise ValueError(f"select row '{self.id}' must define options")
            if self.default_value is not None and self.default_value not in self.options:
                raise ValueError(
                    f"default value '{self.default_value}' of row '{self.id}' is not one of its options"
                )
        if self.formula_config is not None and self.field_type != FieldType.NUMBER:
            raise ValueError(f"formula row '{self.id}' must be a number row")
        return self

    @property
    def is_formula(self) -> bool:
        return self.formula_config is not None


class RequirementTemplateGroup(BaseModel):
    """
    하나의 (category_slug, variant_slug) 쌍에 속한 순서 있는 행 묶음입니다.

    그룹에 선언된 행 순서가 곧 수식의 의존 순서입니다.
    수식은 자기보다 앞에 선언된 숫자 행만 참조할 수 있습니다.
    """

    id: str = Field(..., description="그룹 ID")
    category_slug: str
    variant_slug: str
    label: str = ""
    rows: list[RequirementTemplateRow] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_rows(self) -> "RequirementTemplateGroup":
        declared: dict[str, RequirementTemplateRow] = {}
        for row in self.rows:
            if row.id in declared:
                raise ValueError(f"duplicate row id '{row.id}' in group '{self.id}'")
            if row.formula_config is not None:
                base_id = row.formula_config.base_field_id
                base = declared.get(base_id)
                if base is None:
                    raise ValueError(
                        f"formula of row '{row.id}' references '{base_id}', "
                        "which is not declared earlier in the group"
                    )
                if base.field_type != FieldType.NUMBER:
                    raise ValueError(
                        f"formula of row '{row.id}' references non-numeric row '{base_id}'"
                    )
            declared[row.id] = row
        return self

    @property
    def key(self) -> tuple[str, str]:
        return (self.category_slug, self.variant_slug)

    def row_ids(self) -> list[str]:
        return [row.id for row in self.rows]


class RequirementTemplateVariant(BaseModel):
    """카테고리 템플릿의 변형 (예: standard / custom 설치)."""

    category_slug: str
    variant_slug: str
    label: str
