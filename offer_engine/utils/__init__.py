"""유틸리티 모듈."""

from .slugs import normalize_slug, sanitize_category_slugs

__all__ = [
    "normalize_slug",
    "sanitize_category_slugs",
]
