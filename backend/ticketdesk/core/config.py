"""Application configuration"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "TicketDesk API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    # Durations use the "<number><s|m|h|d>" notation, e.g. "15m" or "7d"
    ACCESS_TOKEN_EXPIRES_IN: str = "15m"
    REFRESH_TOKEN_EXPIRES_IN: str = "7d"
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: str

    # Tickets
    TICKET_NUMBER_MAX_RETRIES: int = 5

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def uploads_url_prefix(self) -> str:
        """Public URL prefix under which uploaded files are served."""
        return f"{self.API_V1_PREFIX}/uploads"


settings = Settings()
