"""
오퍼 초안(Offer Draft) 관련 데이터 모델입니다.
가격표 제품, 제품 선택 결과, 초안 항목, 진단(diagnostic) 정보를 정의합니다.
"""

from enum import Enum
from typing import Optional, Any, Union
from pydantic import BaseModel, Field, model_validator

from offer_engine.exceptions import OfferEngineError

EnvironmentValue = Union[float, str, bool]


class CatalogProduct(BaseModel):
    """가격표(cenik)의 제품 하나."""

    id: str
    name: str
    unit_price: float = Field(default=0.0, ge=0.0, description="판매 단가")
    category_slugs: list[str] = Field(default_factory=list)
    is_active: bool = True


class ResolvedProduct(BaseModel):
    """auto-first 모드로 선택된 제품."""

    product_id: str
    name: str
    unit_price: float
    candidate_count: int = Field(..., ge=1, description="조회된 후보 제품 수")


class ManualSelectionRequired(BaseModel):
    """사람이 나중에 제품을 지정해야 함 (에러 아님)."""

    product_category_slug: str
    reason: str = "manual"


class DiagnosticKind(str, Enum):
    """진단 종류입니다."""

    SKIPPED = "skipped"
    UNBOUND_VARIABLE = "unbound_variable"
    TYPE_MISMATCH = "type_mismatch"
    NOT_A_NUMBER = "not_a_number"
    EVALUATION_ERROR = "evaluation_error"
    MALFORMED_EXPRESSION = "malformed_expression"
    INVALID_FORMULA = "invalid_formula"
    CONFIGURATION_ERROR = "configuration_error"
    INVALID_QUANTITY = "invalid_quantity"
    NO_CANDIDATE_PRODUCT = "no_candidate_product"
    NOT_FOUND = "not_found"
    CATALOG_ERROR = "catalog_error"
    ERROR = "error"


class DiagnosticSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """
    초안 생성 중 기록된 진단 하나.
    규칙 하나의 실패는 진단으로만 남고 전체 생성을 멈추지 않습니다.
    """

    kind: DiagnosticKind
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    category_slug: Optional[str] = None
    variant_slug: Optional[str] = None
    rule_id: Optional[str] = None
    field_id: Optional[str] = None
    message: str
    details: Optional[Any] = None

    @classmethod
    def from_error(
        cls,
        error: OfferEngineError,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
        **context: Any,
    ) -> "Diagnostic":
        """예외를 진단으로 변환합니다. context에는 slug/rule_id 등을 넘깁니다."""
        return cls(
            kind=DiagnosticKind(error.diagnostic_kind),
            severity=severity,
            message=error.message,
            details=error.details,
            **context,
        )


class ResolvedEnvironment(BaseModel):
    """템플릿 행 ID → 타입이 정해진 값. 해석 중 발견된 문제도 함께 담습니다."""

    category_slug: str
    variant_slug: str
    values: dict[str, EnvironmentValue] = Field(default_factory=dict)
    issues: list[Diagnostic] = Field(default_factory=list)


class DraftLineItem(BaseModel):
    """
    계산된, 아직 저장되지 않은 오퍼 항목 하나.
    resolved_product_id와 needs_manual_selection 중 정확히 하나만 성립합니다.
    """

    rule_id: str
    rule_label: str
    category_slug: str
    variant_slug: str
    product_category_slug: str
    quantity: float = Field(..., ge=0.0)
    resolved_product_id: Optional[str] = None
    product_name: str = Field(..., description="제품명 (없으면 규칙 이름)")
    unit_price: Optional[float] = None
    needs_manual_selection: bool = False
    explanation: str = ""

    @model_validator(mode="after")
    def check_product_state(self) -> "DraftLineItem":
        if self.needs_manual_selection == (self.resolved_product_id is not None):
            raise ValueError(
                "exactly one of resolved_product_id or needs_manual_selection must be set"
            )
        return self

    @property
    def total_price(self) -> Optional[float]:
        if self.unit_price is None:
            return None
        return round(self.quantity * self.unit_price, 2)


class OfferDraft(BaseModel):
    """오퍼 초안 생성 결과 (line_items + diagnostics)."""

    project_id: str
    line_items: list[DraftLineItem] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def has_configuration_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    def diagnostics_for_rule(self, rule_id: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.rule_id == rule_id]
