"""Shared test fixtures for contribkit."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from contribkit.bindings.azure.digitaltwins import AzureDigitalTwinsBinding
from contribkit.models.bindings import BindingMetadata
from contribkit.pubsub.envelope import EnvelopeBuilder

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def adt_properties() -> dict[str, str]:
    """Provide a complete set of Azure Digital Twins component properties."""
    return {
        "clientId": "00000000-0000-0000-0000-000000000001",
        "clientSecret": "s3cret",
        "tenantId": "00000000-0000-0000-0000-0000000000aa",
        "adtInstanceUrl": "https://example.api.weu.digitaltwins.azure.net",
    }


@pytest.fixture
def fake_client() -> MagicMock:
    """Provide a stand-in for ``DigitalTwinsClient`` that records calls."""
    return MagicMock(name="DigitalTwinsClient")


@pytest.fixture
def make_binding(
    fake_client: MagicMock, adt_properties: dict[str, str]
) -> Callable[..., AzureDigitalTwinsBinding]:
    """Factory fixture: build an initialized binding over ``fake_client``."""

    def _make(**extra: str) -> AzureDigitalTwinsBinding:
        binding = AzureDigitalTwinsBinding(client_factory=lambda meta: fake_client)
        binding.init(BindingMetadata(name="twins", properties={**adt_properties, **extra}))
        return binding

    return _make


@pytest.fixture
def binding(make_binding: Callable[..., AzureDigitalTwinsBinding]) -> AzureDigitalTwinsBinding:
    """Provide an initialized binding in per-operation mode."""
    return make_binding()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Provide a clock frozen at ``FIXED_NOW``."""
    return lambda: FIXED_NOW


@pytest.fixture
def builder(clock: Callable[[], datetime]) -> EnvelopeBuilder:
    """Provide an EnvelopeBuilder with default values and a frozen clock."""
    return EnvelopeBuilder(clock=clock)

