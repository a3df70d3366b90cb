"""Layer 3: derived field values from formula configs."""

import math
from typing import Mapping

from offer_engine.exceptions import UnboundVariable, TypeMismatch, NotANumber
from offer_engine.layers.layer1_expression import is_number, type_name
from offer_engine.models import RequirementFormulaConfig, EnvironmentValue


def compute_formula(
    config: RequirementFormulaConfig,
    environment: Mapping[str, EnvironmentValue],
) -> float:
    """
    수식 행의 값을 계산합니다.

    value = environment[base_field_id] * (multiply_by 또는 1)

    음수 결과도 그대로 반환합니다 (클램핑 없음). 0 이상의 수량이 필요한
    경우는 규칙 평가 단계에서 검사합니다.

    Raises:
        UnboundVariable: 기준 필드가 환경에 없음
        TypeMismatch: 기준 값이 숫자가 아님
        NotANumber: 결과가 유한하지 않음
    """
    if config.base_field_id not in environment:
        raise UnboundVariable(config.base_field_id)

    base = environment[config.base_field_id]
    if not is_number(base):
        raise TypeMismatch(
            f"Formula base '{config.base_field_id}' is {type_name(base)}, expected number",
            details={"base_field_id": config.base_field_id, "type": type_name(base)},
        )

    multiplier = config.multiply_by if config.multiply_by is not None else 1.0
    result = float(base) * float(multiplier)
    if not math.isfinite(result):
        raise NotANumber(
            f"Formula on '{config.base_field_id}' produced a non-finite value",
            details={"base_field_id": config.base_field_id, "multiply_by": multiplier},
        )
    return result
