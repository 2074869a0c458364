"""
Application Settings and Configuration Management

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tarifa import __version__
from tarifa.optimization.appliance_models import (
    BlockRounding,
    OptimizationConfig,
    ReservationStrategy,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Tarifa API"
    app_version: str = __version__
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False)

    # API Configuration
    api_prefix: str = "/api/v1"
    port: int = Field(default=8000, validation_alias="PORT")

    # CORS
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        validation_alias="CORS_ORIGINS"
    )

    # REE market data API
    ree_api_base_url: str = Field(default="https://apidatos.ree.es", validation_alias="REE_API_BASE_URL")
    ree_api_endpoint: str = Field(
        default="es/datos/mercados/precios-mercados-tiempo-real",
        validation_alias="REE_API_ENDPOINT",
    )
    ree_api_timeout: float = Field(default=15.0, gt=0, validation_alias="REE_API_TIMEOUT")
    price_cache_ttl_seconds: int = Field(default=12 * 60 * 60, ge=0, validation_alias="PRICE_CACHE_TTL_SECONDS")
    price_timezone: str = Field(default="Europe/Madrid", validation_alias="PRICE_TIMEZONE")

    # Storage
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    storage_key_prefix: str = Field(default="tarifa", validation_alias="STORAGE_KEY_PREFIX")

    # Optimizer
    reservation_strategy: ReservationStrategy = Field(
        default=ReservationStrategy.START_HOUR,
        validation_alias="RESERVATION_STRATEGY",
    )
    block_rounding: BlockRounding = Field(default=BlockRounding.CEIL, validation_alias="BLOCK_ROUNDING")

    # Access gating (disabled when unset)
    pin_code: Optional[str] = Field(default=None, validation_alias="PIN_CODE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid"""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("pin_code")
    @classmethod
    def validate_pin_code(cls, v: Optional[str]) -> Optional[str]:
        """Treat an unreplaced deployment placeholder as no PIN"""
        if v in ("", "__PIN_CODE__"):
            return None
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    @property
    def optimization_config(self) -> OptimizationConfig:
        """Optimizer configuration derived from these settings"""
        return OptimizationConfig(
            reservation_strategy=self.reservation_strategy,
            block_rounding=self.block_rounding,
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance (FastAPI dependency-injection compatible)."""
    return settings
