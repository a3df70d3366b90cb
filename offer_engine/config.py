from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(OFFER_ENGINE_ 접두어) 또는 .env 파일에서 설정값을 읽어옵니다.
    """

    model_config = SettingsConfigDict(
        env_prefix="OFFER_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 카탈로그 설정: 템플릿, 규칙, 가격표가 담긴 JSON 스냅샷 경로
    catalog_path: str = "data/catalog.json"

    # 오퍼 초안 생성 설정
    quantity_decimals: int = 2  # 수량 반올림 자릿수
    include_zero_quantity: bool = False  # 수량 0인 항목도 초안에 포함할지 결정
    product_lookup_concurrency: int = 4  # 동시에 진행할 가격표 조회 수
    fail_on_malformed_expression: bool = False  # 문법 오류 표현식이면 생성 전체를 중단할지 결정

    # 로깅
    log_level: str = "INFO"

    # 서버 설정: 서버가 실행될 주소와 포트 번호
    host: str = "0.0.0.0"  # 모든 외부 접속 허용
    port: int = 8000
    allowed_origins: list[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
