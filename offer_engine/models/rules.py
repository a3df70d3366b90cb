"""오퍼 생성 규칙(Offer Generation Rule) 모델."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ProductSelectionMode(str, Enum):
    """제품 선택 방식입니다."""

    AUTO_FIRST = "auto-first"  # 가격표 순서상 첫 번째 제품 자동 선택
    MANUAL = "manual"          # 사람이 나중에 직접 선택


class OfferGenerationRule(BaseModel):
    """
    요구사항 컨텍스트를 오퍼 항목 후보로 매핑하는 규칙입니다.
    condition_expression이 없으면 항상 활성입니다.
    """

    id: str
    category_slug: str
    variant_slug: str
    label: str
    target_product_category_slug: str
    condition_expression: Optional[str] = Field(
        default=None, description="규칙 활성 조건 (없으면 항상 활성)"
    )
    quantity_expression: str = Field(..., description="수량 계산식 (0 이상의 숫자)")
    product_selection_mode: ProductSelectionMode = ProductSelectionMode.AUTO_FIRST

    @field_validator("condition_expression", mode="before")
    @classmethod
    def blank_condition_is_absent(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("quantity_expression")
    @classmethod
    def quantity_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("quantity_expression must not be blank")
        return value

    @property
    def key(self) -> tuple[str, str]:
        return (self.category_slug, self.variant_slug)
