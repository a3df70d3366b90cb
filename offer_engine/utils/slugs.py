"""카테고리/변형(variant) 슬러그 정규화 유틸리티."""

import re
from typing import Iterable

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def normalize_slug(value: str) -> str:
    """
    슬러그 정규화.

    소문자로 바꾸고 영숫자가 아닌 문자 묶음은 '-' 하나로 치환한 뒤
    앞뒤의 '-'를 제거합니다.

    Example:
        >>> normalize_slug("  Alarmni Sistemi ")
        'alarmni-sistemi'
    """
    return _NON_SLUG_CHARS.sub("-", value.strip().lower()).strip("-")


def sanitize_category_slugs(values: Iterable[object]) -> list[str]:
    """Normalize, drop empties and de-duplicate, keeping first-seen order."""
    seen: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        slug = normalize_slug(value)
        if slug and slug not in seen:
            seen.append(slug)
    return seen
