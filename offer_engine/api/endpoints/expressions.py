"""
표현식 미리보기 API입니다.
규칙 작성 화면에서 조건/수량 표현식을 저장하기 전에 확인하는 용도입니다.
"""

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from offer_engine.exceptions import EvaluationError, MalformedExpression
from offer_engine.layers.layer1_expression import evaluate_node, parse_expression, referenced_identifiers
from offer_engine.models import EnvironmentValue

router = APIRouter()


class ExpressionCheckRequest(BaseModel):
    expression: str
    environment: Optional[dict[str, EnvironmentValue]] = Field(
        default=None, description="주어지면 이 환경으로 평가까지 수행"
    )


class ExpressionCheckResponse(BaseModel):
    valid: bool
    identifiers: list[str] = Field(default_factory=list)
    result: Optional[EnvironmentValue] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Any] = None


@router.post("/check", response_model=ExpressionCheckResponse)
async def check_expression(request: ExpressionCheckRequest) -> ExpressionCheckResponse:
    """
    표현식 문법 검사 및 (선택) 평가.

    - 문법 오류: valid=False
    - 평가 오류 (미정의 변수, 타입 불일치 등): valid=True, error_code 포함
    """
    try:
        node = parse_expression(request.expression)
    except MalformedExpression as e:
        return ExpressionCheckResponse(
            valid=False, error_code=e.error_code, message=e.message, details=e.details
        )

    response = ExpressionCheckResponse(valid=True, identifiers=referenced_identifiers(node))
    if request.environment is None:
        return response

    try:
        response.result = evaluate_node(node, request.environment)
    except EvaluationError as e:
        response.error_code = e.error_code
        response.message = e.message
        response.details = e.details
    return response
