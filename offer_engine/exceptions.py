"""
오퍼 엔진 커스텀 예외 계층입니다.
각 레이어별 구조화된 에러 코드와 진단(diagnostic) 종류를 제공합니다.
"""

from typing import Optional, Any


class OfferEngineError(Exception):
    """오퍼 엔진 기본 예외 클래스."""

    diagnostic_kind: str = "error"

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


# ==================== Layer 1: 표현식 평가 ====================


class EvaluationError(OfferEngineError):
    """Runtime failure while evaluating an expression against an environment."""

    diagnostic_kind = "evaluation_error"

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_EVAL_000",
        details: Optional[Any] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class UnboundVariable(EvaluationError):
    """식별자가 환경(environment)에 없음."""

    diagnostic_kind = "unbound_variable"

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unbound variable '{name}'",
            error_code="ERR_EVAL_001",
            details={"name": name},
        )


class TypeMismatch(EvaluationError):
    """연산자와 피연산자 타입이 맞지 않음."""

    diagnostic_kind = "type_mismatch"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EVAL_002", details=details)


class NotANumber(EvaluationError):
    """0으로 나누기 등 유한하지 않은 산술 결과."""

    diagnostic_kind = "not_a_number"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EVAL_003", details=details)


# ==================== 설정(Configuration) 에러 ====================


class ConfigurationError(OfferEngineError):
    """Corrupt template or rule configuration (not a runtime data gap)."""

    diagnostic_kind = "configuration_error"

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_CONF_000",
        details: Optional[Any] = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class MalformedExpression(ConfigurationError):
    """표현식 문법 오류."""

    diagnostic_kind = "malformed_expression"

    def __init__(self, expression: str, position: int, reason: str):
        self.expression = expression
        self.position = position
        self.reason = reason
        super().__init__(
            f"Malformed expression at position {position}: {reason}",
            error_code="ERR_CONF_001",
            details={"expression": expression, "position": position, "reason": reason},
        )


class InvalidFormula(ConfigurationError):
    """formula_config가 자기 자신이나 뒤에 선언된 행을 참조함."""

    diagnostic_kind = "invalid_formula"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_CONF_002", details=details)


# ==================== Layer 5: 오퍼 생성 ====================


class InvalidQuantity(OfferEngineError):
    """수량 표현식 결과가 숫자가 아니거나 음수임."""

    diagnostic_kind = "invalid_quantity"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_GEN_001", details=details)


class NoCandidateProduct(OfferEngineError):
    """가격표(cenik)에 해당 카테고리 제품이 없음."""

    diagnostic_kind = "no_candidate_product"

    def __init__(self, product_category_slug: str):
        self.product_category_slug = product_category_slug
        super().__init__(
            f"No product found in category '{product_category_slug}'",
            error_code="ERR_GEN_002",
            details={"product_category_slug": product_category_slug},
        )


# ==================== 외부 조회 ====================


class NotFound(OfferEngineError):
    """템플릿 그룹 또는 규칙 세트 조회 실패."""

    diagnostic_kind = "not_found"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_NOT_FOUND", details=details)


class CatalogLoadError(OfferEngineError):
    """카탈로그 스냅샷 파일 로딩 에러."""

    diagnostic_kind = "catalog_error"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_STORE_001", details=details)


class PriceListUnavailable(OfferEngineError):
    """가격표 조회 자체가 실패함 (제품이 없는 것과 구분)."""

    diagnostic_kind = "catalog_error"

    def __init__(self, product_category_slug: str, reason: str):
        self.product_category_slug = product_category_slug
        super().__init__(
            f"Price list lookup for '{product_category_slug}' failed: {reason}",
            error_code="ERR_STORE_002",
            details={"product_category_slug": product_category_slug, "reason": reason},
        )
