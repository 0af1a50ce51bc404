from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "SatsMap"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # HTTP server (consumed by the uvicorn entry point only)
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Canonical location store
    DATABASE_URL: str = "sqlite:///bitcoin_locations.db"

    # CORS
    CORS_ORIGINS: str = "*"

    # Upstream sources
    BTCMAP_API_URL: str = "https://static.btcmap.org/api/v2/elements.json"
    BTCMAP_TIMEOUT: float = 60.0  # seconds
    OVERPASS_API_URL: str = "https://overpass-api.de/api/interpreter"

    # Full-planet budget used by the scheduled sync
    SYNC_OVERPASS_TIMEOUT: int = 300  # 5 minutes
    SYNC_OVERPASS_MAXSIZE: int = 1073741824 * 2  # 2GB

    # Sync scheduling
    SYNC_RETRY_DELAY_SECONDS: int = 5 * 60
    SYNC_ON_STARTUP: bool = True
    SCHEDULER_ENABLED: bool = True

    # Read API response cache, 0 disables it
    RESPONSE_CACHE_SECONDS: int = 5 * 60

    class Config:
        env_file = ".env"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS_ORIGINS to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


settings = Settings()
