"""Configuration management for the Donation Webhooks service."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StripeWebhookSettings(BaseSettings):
    """Stripe webhook settings."""

    webhook_secret: str = Field(default="", description="Stripe webhook signing secret (whsec_...)")
    webhook_tolerance_seconds: int = Field(
        default=300, description="Maximum age of a signed Stripe payload"
    )
    dashboard_base_url: str = Field(
        default="https://dashboard.stripe.com", description="Stripe dashboard base URL"
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Service Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Environment name")
    service_name: str = Field(default="donation-webhooks", description="Service name")

    # Response for sources with no registered receiver
    unknown_source_status: int = Field(default=404, description="HTTP status for unknown sources")
    unknown_source_message: str = Field(
        default="Unknown webhook source.", description="Response body for unknown sources"
    )

    # Stripe
    stripe: StripeWebhookSettings = Field(default_factory=StripeWebhookSettings)


# Global settings instance
settings = Settings()
