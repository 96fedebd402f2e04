"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/affiliate.log"

    # HTTP surface
    web_host: str = "0.0.0.0"
    web_port: int = Field(
        default=8080, ge=1, le=65535, description="HTTP server port"
    )

    # Identity tokens
    auth_jwt_secret: str = Field(
        default="",
        description="Secret used to verify participant bearer tokens",
    )
    auth_jwt_algorithm: str = "HS256"

    # Admin
    admin_emails: str = ""  # Comma-separated list

    # Sales intake
    sales_api_key: str = Field(
        default="",
        description="Shared secret expected in the X-Sales-Key header",
    )

    # Commission economics
    fx_pen_to_usd: Decimal = Field(
        default=Decimal("0.27"),
        gt=0,
        description="Static PEN -> USD conversion rate for sale amounts",
    )
    refund_hold_days: int = Field(
        default=14,
        ge=0,
        description="Days a commission stays pending before release",
    )
    payout_min_usd: Decimal = Field(
        default=Decimal("100"),
        ge=0,
        description="Available balance required before a payout",
    )

    # Store access
    store_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single store operation",
    )
    store_in_query_limit: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Maximum ids per membership (IN) query",
    )

    # Referral codes
    referral_code_max_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts to draw an unused referral code",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if self.sales_api_key and len(self.sales_api_key) < 16:
                raise ValueError(
                    'SALES_API_KEY must be at least 16 characters in '
                    'production. Generate one with: openssl rand -hex 32'
                )

            if not self.auth_jwt_secret:
                logger.warning(
                    'AUTH_JWT_SECRET is not set. '
                    'Every authenticated endpoint will reject its requests.'
                )

            if not self.sales_api_key:
                logger.warning(
                    'SALES_API_KEY is not set. '
                    'The sales intake endpoint will reject every request.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith((
            'postgresql://',
            'postgresql+asyncpg://',
            'sqlite+aiosqlite://',
        )):
            raise ValueError(
                'DATABASE_URL must start with postgresql+asyncpg:// '
                '(or sqlite+aiosqlite:// for local testing)'
            )
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Unknown log level: {v}')
        return level

    def get_admin_emails(self) -> list[str]:
        """Parse admin emails from comma-separated string."""
        if not self.admin_emails:
            return []

        return [
            email.strip().lower()
            for email in self.admin_emails.split(",")
            if email.strip()
        ]


# Global settings instance
settings = Settings()
