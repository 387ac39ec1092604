"""Configuration management for Fabric capacity automation."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.types import CapacitySku


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Temporal Connection Settings
    temporal_address: str = Field(
        ...,
        description="Temporal address (e.g., namespace.account.tmprl.cloud:7233)",
    )
    temporal_namespace: str = Field(
        ...,
        description="Temporal namespace to run the workflows in",
    )

    # Authentication - Use either API key OR mTLS certificates
    temporal_api_key: Optional[str] = Field(
        default=None,
        description="Temporal namespace API key (alternative to mTLS)",
    )
    temporal_cert_path: Optional[Path] = Field(
        default=None,
        description="Path to mTLS certificate file (alternative to API key)",
    )
    temporal_key_path: Optional[Path] = Field(
        default=None,
        description="Path to mTLS private key file (alternative to API key)",
    )

    # Azure Management API Settings
    azure_management_url: str = Field(
        default="https://management.azure.com",
        description="Base URL for the Azure Resource Manager endpoint",
    )
    fabric_api_version: str = Field(
        default="2023-11-01",
        description="api-version sent with every Fabric capacity request",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single management API request",
    )
    azure_bearer_token: Optional[str] = Field(
        default=None,
        description="Static bearer token for the management API (skips azure-identity)",
    )
    azure_managed_identity_client_id: Optional[str] = Field(
        default=None,
        description="Client ID of a user-assigned managed identity",
    )

    # Orchestration Defaults
    default_timeout_minutes: int = Field(
        default=10,
        gt=0,
        description="Minutes to wait for a transition to converge",
    )
    poll_interval_seconds: int = Field(
        default=30,
        gt=0,
        description="Seconds between status polls",
    )
    paused_poll_interval_seconds: int = Field(
        default=60,
        gt=0,
        description="Seconds between status polls while a capacity is paused",
    )
    resume_settle_seconds: int = Field(
        default=30,
        ge=0,
        description="Seconds to wait after a resume before polling",
    )

    # Schedule Settings
    schedule_id: str = Field(
        default="fabric-capacity-scale-schedule",
        description="ID of the Temporal Schedule that runs the scale workflow",
    )
    schedule_resource_id: Optional[str] = Field(
        default=None,
        description="Capacity resource ID the schedule scales",
    )
    schedule_target_sku: Optional[str] = Field(
        default=None,
        description="SKU the schedule scales the capacity to",
    )
    schedule_cron: str = Field(
        default="0 7 * * 1-5",
        description="Cron expression for the schedule (UTC)",
    )
    schedule_wait_for_completion: bool = Field(
        default=True,
        description="Whether scheduled runs wait for the scale to complete",
    )

    # Notification Settings
    slack_webhook_url: Optional[str] = Field(
        default=None,
        description="Slack webhook URL for operation notifications",
    )

    # Worker Settings
    task_queue: str = Field(
        default="fabric-capacity-task-queue",
        description="Task queue name for the worker",
    )

    @field_validator("temporal_cert_path", "temporal_key_path")
    @classmethod
    def validate_path_exists(cls, v):
        """Validate that certificate/key paths exist if provided."""
        if v is not None and not v.exists():
            raise ValueError(f"File not found: {v}")
        return v

    @field_validator("schedule_target_sku")
    @classmethod
    def validate_schedule_sku(cls, v):
        """Validate that the scheduled SKU is a known Fabric SKU."""
        if v is None:
            return v
        return CapacitySku.parse(v).value

    def validate_auth_config(self) -> None:
        """Validate that at least one authentication method is configured."""
        has_api_key = self.temporal_api_key is not None
        has_mtls = (
            self.temporal_cert_path is not None
            and self.temporal_key_path is not None
        )

        if not has_api_key and not has_mtls:
            raise ValueError(
                "Must provide either TEMPORAL_API_KEY or both "
                "TEMPORAL_CERT_PATH and TEMPORAL_KEY_PATH"
            )

    def validate_schedule_config(self) -> None:
        """Validate that the schedule has a target capacity and SKU."""
        if not self.schedule_resource_id or not self.schedule_target_sku:
            raise ValueError(
                "Must provide SCHEDULE_RESOURCE_ID and SCHEDULE_TARGET_SKU "
                "to create a schedule"
            )

    def use_api_key_auth(self) -> bool:
        """Check if using API key authentication."""
        return self.temporal_api_key is not None

    @property
    def management_scope(self) -> str:
        """Token scope for the management endpoint."""
        return f"{self.azure_management_url.rstrip('/')}/.default"


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings
