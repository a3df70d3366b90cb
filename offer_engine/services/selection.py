"""Active (category, variant) selection derived from the project snapshot."""

import logging

from offer_engine.models import Project
from offer_engine.services.interfaces import SelectionKey

logger = logging.getLogger(__name__)


class ProjectSelectionSource:
    """
    프로젝트의 카테고리 × 카테고리별 선택 변형.

    카테고리별 선택(variant_selections)이 없으면 프로젝트 기본 변형
    (variant_slug)을 사용합니다. 둘 다 없는 카테고리는 활성 쌍을 만들지 않습니다.
    """

    def get_active_selections(self, project: Project) -> set[SelectionKey]:
        selections: set[SelectionKey] = set()
        for category in project.categories:
            variants = project.variant_selections.get(category)
            if not variants:
                variants = [project.variant_slug] if project.variant_slug else []
            if not variants:
                logger.debug(f"[Selection] {project.id}: 카테고리 '{category}'에 선택된 변형 없음")
            for variant in variants:
                if variant:
                    selections.add((category, variant))
        return selections
