"""
필드 타입별 값 변환 함수입니다.

프로젝트 답변은 문자열로 저장되므로, 환경에 넣기 전에 field_type에 맞게
명시적으로 변환합니다. 변환할 수 없으면 TypeMismatch를 발생시킵니다.
"""

import math

from offer_engine.exceptions import TypeMismatch
from offer_engine.models import FieldType, RequirementTemplateRow, EnvironmentValue

# 'da'/'ne'는 슬로베니아어 예/아니오
TRUE_WORDS = {"true", "yes", "da", "1"}
FALSE_WORDS = {"false", "no", "ne", "0"}


def coerce_number(raw: str, field_id: str = "") -> float:
    text = raw.strip().replace(" ", "")
    # 소수점 쉼표 허용 (예: "2,5")
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    try:
        value = float(text)
    except ValueError:
        raise TypeMismatch(
            f"Value '{raw}' of field '{field_id}' is not a number",
            details={"field_id": field_id, "value": raw},
        )
    if not math.isfinite(value):
        raise TypeMismatch(
            f"Value '{raw}' of field '{field_id}' is not a finite number",
            details={"field_id": field_id, "value": raw},
        )
    return value


def coerce_boolean(raw: str, field_id: str = "") -> bool:
    normalized = raw.strip().lower()
    if normalized in TRUE_WORDS:
        return True
    if normalized in FALSE_WORDS:
        return False
    raise TypeMismatch(
        f"Value '{raw}' of field '{field_id}' is not a boolean",
        details={"field_id": field_id, "value": raw},
    )


def coerce_select(raw: str, options: list[str], field_id: str = "") -> str:
    value = raw.strip()
    if value not in options:
        raise TypeMismatch(
            f"Value '{raw}' of field '{field_id}' is not one of {options}",
            details={"field_id": field_id, "value": raw, "options": options},
        )
    return value


def coerce_value(row: RequirementTemplateRow, raw: str) -> EnvironmentValue:
    """템플릿 행의 field_type에 따라 문자열 값을 변환합니다."""
    if row.field_type == FieldType.NUMBER:
        return coerce_number(raw, row.id)
    if row.field_type == FieldType.BOOLEAN:
        return coerce_boolean(raw, row.id)
    if row.field_type == FieldType.SELECT:
        return coerce_select(raw, row.options, row.id)
    return raw
