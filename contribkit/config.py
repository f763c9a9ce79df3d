"""Runtime configuration - env-driven via pydantic-settings.

Reads from a ``.env`` file and ``CONTRIBKIT_*`` environment variables.
Component code never reads this module directly; the CLI (or any host)
derives the frozen inputs each component takes at construction.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from contribkit.models.cloudevents import (
    CLOUD_EVENTS_SPEC_VERSION,
    DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE,
    DEFAULT_CLOUD_EVENT_SOURCE,
    DEFAULT_CLOUD_EVENT_TYPE,
    EnvelopeDefaults,
)


class KitConfig(BaseSettings):
    """contribkit settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CONTRIBKIT_LOG_LEVEL=DEBUG
        export CONTRIBKIT_CLOUD_EVENT_SOURCE=orders-service
        export CONTRIBKIT_ADT_INSTANCE_URL=https://my-adt.api.weu.digitaltwins.azure.net

    Or via .env file::

        CONTRIBKIT_ADT_CLIENT_ID=...
        CONTRIBKIT_ADT_CLIENT_SECRET=...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CONTRIBKIT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # CloudEvents defaults for envelopes built by this process
    cloud_event_source: str = DEFAULT_CLOUD_EVENT_SOURCE
    cloud_event_type: str = DEFAULT_CLOUD_EVENT_TYPE
    cloud_event_data_content_type: str = DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE

    # Azure Digital Twins credentials for the CLI
    adt_client_id: str = ""
    adt_client_secret: str = Field(default="", repr=False)
    adt_tenant_id: str = ""
    adt_instance_url: str = ""

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    def envelope_defaults(self) -> EnvelopeDefaults:
        """Return the envelope defaults configured for this process."""
        return EnvelopeDefaults(
            source=self.cloud_event_source,
            event_type=self.cloud_event_type,
            data_content_type=self.cloud_event_data_content_type,
            spec_version=CLOUD_EVENTS_SPEC_VERSION,
        )

    def adt_properties(self) -> dict[str, str]:
        """Return the Digital Twins binding properties that are set.

        Unset values are left out so the binding reports them as missing.
        """
        candidates = {
            "clientId": self.adt_client_id,
            "clientSecret": self.adt_client_secret,
            "tenantId": self.adt_tenant_id,
            "adtInstanceUrl": self.adt_instance_url,
        }
        return {key: value for key, value in candidates.items() if value}


# Module-level singleton - import as `from contribkit.config import config`
config = KitConfig()
