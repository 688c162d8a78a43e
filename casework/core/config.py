"""Application settings, read from the environment (and .env when present)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Runtime
    ENV: str = "dev"  # dev | test | production
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Only honour X-Forwarded-For for audit IPs behind a trusted proxy
    TRUST_PROXY_HEADERS: bool = False

    DATABASE_URL: str

    # Session cookie JWT; JWT_SECRET_PREVIOUS is accepted during rotation
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""
    JWT_EXPIRES_HOURS: int = 4

    CORS_ORIGINS: str = "http://localhost:3000"  # comma separated

    # Fernet key for full SSNs
    DATA_ENCRYPTION_KEY: str = ""

    # Client listing
    CLIENT_LIST_CACHE_TTL_SECONDS: int = 60  # <= 0 disables the cache
    DEFAULT_CLIENT_PAGE_SIZE: int = 50
    MAX_CLIENT_PAGE_SIZE: int = 200

    # Due date of the staff review task created by self-service registration
    PROFILE_TASK_DUE_DAYS: int = 7

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Secrets to verify with, current first."""
        return [s for s in (self.JWT_SECRET, self.JWT_SECRET_PREVIOUS) if s]

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


settings = Settings()
