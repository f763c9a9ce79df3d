"""contribkit: Dapr-compatible components for Python hosts.

  - Azure Digital Twins output binding with per-twin patch demultiplexing
  - CloudEvents envelope builder with TTL emulation for brokers without it
  - Component registry and a Typer CLI for operators
"""

__version__ = "0.1.0"
__description__ = "Azure Digital Twins output binding and CloudEvents pub/sub helpers"

from contribkit.bindings.azure.digitaltwins import AzureDigitalTwinsBinding
from contribkit.components import ComponentRegistry, default_registry
from contribkit.pubsub.envelope import EnvelopeBuilder
from contribkit.pubsub.features import Feature

__all__ = [
    "AzureDigitalTwinsBinding",
    "ComponentRegistry",
    "EnvelopeBuilder",
    "Feature",
    "default_registry",
    "__version__",
]
