"""
/api/v1 라우터 조립.

- /health        서버와 카탈로그 상태
- /offers        요구사항 → 오퍼 항목 초안
- /requirements  템플릿 기반 요구사항 생성, 환경 확인
- /expressions   규칙 표현식 미리보기
"""

from fastapi import APIRouter

from offer_engine.api.endpoints import expressions, health, offers, requirements

api_router = APIRouter()

for module, prefix in (
    (health, "/health"),
    (offers, "/offers"),
    (requirements, "/requirements"),
    (expressions, "/expressions"),
):
    api_router.include_router(module.router, prefix=prefix, tags=[prefix.strip("/")])
