"""
Configuration settings for CareShare API
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from functools import lru_cache


DEFAULT_ALLOWED_ORIGINS = (
    "https://careshare-hackru-1.onrender.com,"
    "http://localhost:5173,"
    "http://localhost:3000"
)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="CareShare API", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3001, validation_alias="PORT")
    workers: int = Field(default=1, validation_alias="WORKERS")

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://localhost:5432/careshare",
        validation_alias="DATABASE_URL"
    )
    database_pool_size: int = Field(default=10, validation_alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=20, validation_alias="DATABASE_MAX_OVERFLOW")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # CORS
    allowed_origins: Optional[str] = Field(default=DEFAULT_ALLOWED_ORIGINS, validation_alias="ALLOWED_ORIGINS")

    # ElevenLabs ConvAI
    elevenlabs_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("XI_API_KEY", "XI-API-KEY", "ELEVENLABS_API_KEY")
    )
    elevenlabs_agent_id: Optional[str] = Field(default=None, validation_alias="ELEVENLABS_AGENT_ID")
    agent_phone_number_id: Optional[str] = Field(default=None, validation_alias="AGENT_PHONE_NUMBER_ID")
    elevenlabs_webhook_secret: Optional[str] = Field(default=None, validation_alias="ELEVENLABS_WEBHOOK_SECRET")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io/v1", validation_alias="ELEVENLABS_BASE_URL")
    elevenlabs_timeout: float = Field(default=30.0, validation_alias="ELEVENLABS_TIMEOUT")
    outbound_test_number: str = Field(default="+15164770955", validation_alias="OUTBOUND_TEST_NUMBER")

    # Matching
    default_phone_region: str = Field(default="US", validation_alias="DEFAULT_PHONE_REGION")
    default_search_radius: int = Field(default=10, validation_alias="DEFAULT_SEARCH_RADIUS")
    radius_expansion_steps: List[int] = Field(default=[5, 10, 15], validation_alias="RADIUS_EXPANSION_STEPS")

    # Voice agent
    agent_timezone: str = Field(default="America/New_York", validation_alias="AGENT_TIMEZONE")

    # Appointments
    strict_appointment_transitions: bool = Field(default=False, validation_alias="STRICT_APPOINTMENT_TRANSITIONS")

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Get allowed origins for CORS, with fallback to default"""
        if self.allowed_origins is None:
            return ["*"]
        # Parse comma-separated string into list
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def missing_elevenlabs_settings(self) -> List[str]:
        """Names of the env vars required for outbound calls that are not set"""
        missing = []
        if not self.elevenlabs_api_key:
            missing.append("XI-API-KEY or XI_API_KEY or ELEVENLABS_API_KEY")
        if not self.elevenlabs_agent_id:
            missing.append("ELEVENLABS_AGENT_ID")
        if not self.agent_phone_number_id:
            missing.append("AGENT_PHONE_NUMBER_ID")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
