"""
헬스 체크(Health Check) 엔드포인트입니다.
서버가 살아서 정상적으로 응답하는지 확인하는 용도입니다.
"""

from fastapi import APIRouter, Depends

from offer_engine.config import get_settings
from offer_engine.services import CatalogStore, get_catalog_store

router = APIRouter()


@router.get("")
async def health_check():
    """서버가 켜져 있으면 {"status": "healthy"}를 반환합니다."""
    return {"status": "healthy"}


@router.get("/detail")
async def health_check_detail(store: CatalogStore = Depends(get_catalog_store)):
    """
    상세 상태 확인 함수.
    현재 설정과 불러온 카탈로그 규모도 같이 보여줍니다.
    """
    settings = get_settings()
    snapshot = store.snapshot
    return {
        "status": "healthy",
        "config": {
            "catalog_path": settings.catalog_path,
            "quantity_decimals": settings.quantity_decimals,
            "include_zero_quantity": settings.include_zero_quantity,
            "product_lookup_concurrency": settings.product_lookup_concurrency,
        },
        "catalog": {
            "version": store.version,
            "template_groups": len(snapshot.template_groups),
            "rules": len(snapshot.rules),
            "products": len(snapshot.products),
        },
    }
