from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",  # .env 파일이 있으면 읽고, 프로세스 환경변수가 우선
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # DB URL (SQLAlchemy async 드라이버 URL이면 무엇이든 가능)
    DATABASE_URL: str = "sqlite+aiosqlite:///./employees.db"
    SQL_ECHO: bool = False

    # 테이블이 비어 있으면 샘플 직원 3명을 넣는다
    SEED_SAMPLE_DATA: bool = True

    # 콤마로 구분, "*" 이면 전체 허용
    CORS_ORIGINS: str = "*"

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    def cors_origins_list(self) -> list[str]:
        if not self.CORS_ORIGINS or self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
