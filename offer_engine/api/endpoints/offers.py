"""
오퍼 초안 API입니다.
프로젝트 스냅샷을 받아 오퍼 항목 초안과 진단 목록을 돌려줍니다.
저장은 하지 않으며, 결과를 오퍼로 확정하는 것은 호출자의 책임입니다.
"""

from fastapi import APIRouter, Depends

from offer_engine.layers.layer5_offer import OfferDraftGenerator
from offer_engine.models import OfferDraft, Project
from offer_engine.services import CatalogStore, get_catalog_store

router = APIRouter()


def get_offer_generator(store: CatalogStore = Depends(get_catalog_store)) -> OfferDraftGenerator:
    return OfferDraftGenerator.from_store(store)


@router.post("/draft", response_model=OfferDraft)
async def create_offer_draft(
    project: Project,
    generator: OfferDraftGenerator = Depends(get_offer_generator),
) -> OfferDraft:
    """프로젝트 요구사항으로 오퍼 초안 계산"""
    return await generator.generate(project)
