from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Credentials (Basic Auth: email + API token)
    FAVRO_TOKEN: str | None = None
    FAVRO_USER_EMAIL: str | None = None
    FAVRO_ORGANIZATION_ID: str | None = None

    FAVRO_API_BASE_URL: str = "https://favro.com/api/v1"

    # Transport
    BRAVO_HTTP_TIMEOUT: float = 30.0
    BRAVO_TRANSPORT_RETRIES: int = 0  # 0 = 不重试

    # Cache / logging
    BRAVO_CACHE_TTL: int = 3600
    BRAVO_LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
