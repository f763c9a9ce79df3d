"""Azure output bindings."""

from contribkit.bindings.azure.digitaltwins import (
    AzureDigitalTwinsBinding,
    AzureDigitalTwinsMetadata,
)

__all__ = ["AzureDigitalTwinsBinding", "AzureDigitalTwinsMetadata"]
