"""
요구사항 API입니다.
템플릿으로 프로젝트 요구사항 초기 목록을 만들거나, 해석된 환경을 확인합니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from offer_engine.layers.layer2_requirements import RequirementResolver, seed_requirements
from offer_engine.models import Project, ProjectRequirement, ResolvedEnvironment
from offer_engine.services import CatalogStore, get_catalog_store
from offer_engine.utils.slugs import sanitize_category_slugs

router = APIRouter()


class SeedRequest(BaseModel):
    categories: list[str] = Field(default_factory=list)
    variant_slug: Optional[str] = None


class ResolveRequest(BaseModel):
    project: Project
    category_slug: str
    variant_slug: str


@router.post("/seed", response_model=list[ProjectRequirement])
async def seed_project_requirements(
    request: SeedRequest,
    store: CatalogStore = Depends(get_catalog_store),
) -> list[ProjectRequirement]:
    """카테고리/변형 템플릿으로 요구사항 목록 생성 (기본값 채움)"""
    categories = sanitize_category_slugs(request.categories)
    return seed_requirements(store, categories, request.variant_slug)


@router.post("/resolve", response_model=ResolvedEnvironment)
async def resolve_environment(
    request: ResolveRequest,
    store: CatalogStore = Depends(get_catalog_store),
) -> ResolvedEnvironment:
    """
    한 (카테고리, 변형) 쌍의 환경을 계산합니다.
    템플릿이 없으면 NotFound → 404 응답.
    """
    resolver = RequirementResolver(store)
    return resolver.resolve(request.project, request.category_slug, request.variant_slug)
