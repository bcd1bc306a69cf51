import os
from datetime import tzinfo
from functools import lru_cache
from typing import List

from studx.utils.formatting import display_zone


class Settings:

    def __init__(self) -> None:
        self.mongo_url: str = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        self.mongo_db_name: str = os.getenv("MONGO_DB_NAME", "studx")
        self.jwt_secret: str = os.getenv("JWT_SECRET", "your-secret-key-change-this")
        self.jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))
        self.api_prefix: str = os.getenv("STUDX_API_PREFIX", "/api")
        self.log_level: str = os.getenv("STUDX_LOG_LEVEL", "INFO")
        # timezone used when rendering message times and dates
        self.display_timezone: str = os.getenv("STUDX_DISPLAY_TZ", "UTC")
        self.display_zone: tzinfo = display_zone(self.display_timezone)
        self.cors_origins: List[str] = [
            o.strip() for o in os.getenv("STUDX_CORS_ORIGINS", "*").split(",") if o.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()
