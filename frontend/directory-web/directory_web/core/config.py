from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Employee Service 주소
    API_BASE_URL: str = "http://localhost:3001"
    API_TIMEOUT: float = 5.0

    # 검색어 변경 후 목록을 다시 불러오기까지 기다리는 시간 (초). 0이면 바로 요청
    SEARCH_DEBOUNCE: float = 0.0

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
