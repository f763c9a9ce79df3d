"""Azure Digital Twins output binding.

Forwards JSON Patch documents to an Azure Digital Twins instance.

Request modes
-------------
* **Single twin** - ``metadata["twinId"]`` names the target twin and the
  request data is a plain JSON Patch document for that twin.
* **Multi twin** - no twin id in the metadata; every operation path embeds
  the twin id as its first segment (``/<twinId>/<property>``).  The batch is
  validated as a whole, then submitted one update call per operation, or one
  per twin when the component sets ``groupByTwin: "true"``.

Updates are unconditional (``If-Match: *``) and are submitted sequentially
in input order.  The first failed update stops the invocation and raises
``TwinUpdateError``; earlier updates are not rolled back.

Component properties
--------------------
``clientId``, ``clientSecret``, ``tenantId``, ``adtInstanceUrl`` - all
required.  Authentication uses the client-credentials flow through
``azure.identity.ClientSecretCredential``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from azure.core import MatchConditions
from azure.core.exceptions import AzureError
from azure.digitaltwins.core import DigitalTwinsClient
from azure.identity import ClientSecretCredential
from pydantic import BaseModel, ConfigDict, Field

from contribkit.bindings.demux import group_by_twin, parse_patch_batch, split_patch_batch
from contribkit.bindings.errors import (
    BindingNotInitializedError,
    MetadataError,
    TwinUpdateError,
    UnsupportedOperationError,
)
from contribkit.codec import canonical_json_bytes
from contribkit.metadata import get_bool
from contribkit.models.bindings import (
    BindingMetadata,
    InvokeRequest,
    InvokeResponse,
    OperationKind,
)
from contribkit.models.patch import TwinPatch

logger = logging.getLogger(__name__)

COMPONENT_TYPE = "bindings.azure.digitaltwins"

TWIN_ID_METADATA_KEYS = ("twinId", "twinID")

# Component property name -> AzureDigitalTwinsMetadata field, in check order.
REQUIRED_PROPERTIES: dict[str, str] = {
    "clientId": "client_id",
    "clientSecret": "client_secret",
    "tenantId": "tenant_id",
    "adtInstanceUrl": "adt_instance_url",
}
GROUP_BY_TWIN_PROPERTY = "groupByTwin"


class AzureDigitalTwinsMetadata(BaseModel):
    """Parsed component properties for the binding."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str = Field(repr=False)
    tenant_id: str
    adt_instance_url: str
    group_by_twin: bool = False

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> AzureDigitalTwinsMetadata:
        """Build from the component's property map.

        Raises
        ------
        MetadataError
            Naming the first required property that is missing or empty.
        """
        values: dict[str, Any] = {}
        for prop, field_name in REQUIRED_PROPERTIES.items():
            value = properties.get(prop, "")
            if not value:
                raise MetadataError(f"azureDigitalTwins error: missing {prop}")
            values[field_name] = value
        values["group_by_twin"] = get_bool(properties, GROUP_BY_TWIN_PROPERTY)
        return cls(**values)


def create_client(metadata: AzureDigitalTwinsMetadata) -> DigitalTwinsClient:
    """Create a ``DigitalTwinsClient`` authenticated with a client secret.

    The SDK scopes tokens to ``https://digitaltwins.azure.net/.default``.
    """
    credential = ClientSecretCredential(
        tenant_id=metadata.tenant_id,
        client_id=metadata.client_id,
        client_secret=metadata.client_secret,
    )
    client = DigitalTwinsClient(metadata.adt_instance_url, credential)
    logger.info("Created ADT client for: %s", metadata.adt_instance_url)
    return client


class AzureDigitalTwinsBinding:
    """Output binding that patches Azure Digital Twins.

    Parameters
    ----------
    client_factory:
        Builds the SDK client from parsed metadata.  Defaults to
        ``create_client``; tests pass a factory returning a mock.
    """

    def __init__(
        self,
        client_factory: Callable[[AzureDigitalTwinsMetadata], Any] = create_client,
    ) -> None:
        self._client_factory = client_factory
        self._metadata: AzureDigitalTwinsMetadata | None = None
        self._client: Any | None = None

    @property
    def metadata(self) -> AzureDigitalTwinsMetadata | None:
        """The parsed component metadata, once ``init()`` has succeeded."""
        return self._metadata

    def init(self, metadata: BindingMetadata) -> None:
        """Parse component properties and create the SDK client."""
        logger.info("Init invoked for Azure Digital Twins binding %r", metadata.name)
        parsed = AzureDigitalTwinsMetadata.from_properties(metadata.properties)
        self._client = self._client_factory(parsed)
        self._metadata = parsed

    def operations(self) -> list[OperationKind]:
        return [OperationKind.CREATE]

    def invoke(self, request: InvokeRequest) -> InvokeResponse:
        """Apply the request's JSON Patch document to one or more twins.

        Raises
        ------
        BindingNotInitializedError
            If ``init()`` has not succeeded.
        UnsupportedOperationError
            If ``request.operation`` is not ``create``.
        InvalidRequestError
            If the data is not a non-empty JSON Patch document.
        PathFormatError
            If, in multi-twin mode, any path lacks the twin id segment.
        TwinUpdateError
            If the service rejects an update.
        """
        if self._client is None or self._metadata is None:
            raise BindingNotInitializedError("Azure Digital Twins binding is not initialized")
        if request.operation not in self.operations():
            raise UnsupportedOperationError(
                f"Operation {request.operation.value!r} is not supported; "
                f"supported: {[op.value for op in self.operations()]}"
            )

        logger.debug("Invoke called with data: %r", request.data)
        logger.debug("Invoke called with metadata: %s", request.metadata)

        operations = parse_patch_batch(request.data)
        twin_id = _twin_id_from(request.metadata)
        if twin_id:
            logger.info("Patching single twin %s (%d operations)", twin_id, len(operations))
            patches = [TwinPatch(twin_id=twin_id, operations=tuple(operations))]
        else:
            logger.info("Metadata twinId not found, splitting %d operations by path", len(operations))
            patches = split_patch_batch(operations)
            if self._metadata.group_by_twin:
                patches = group_by_twin(patches)

        updated = self._submit(patches)
        return InvokeResponse(
            data=canonical_json_bytes(updated),
            metadata={
                "updatedTwins": str(len(updated)),
                "updateCalls": str(len(patches)),
                "operations": str(len(operations)),
            },
        )

    def close(self) -> None:
        """Release the SDK client."""
        if self._client is not None and hasattr(self._client, "close"):
            self._client.close()
        self._client = None
        logger.info("Azure Digital Twins binding closed")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _submit(self, patches: list[TwinPatch]) -> list[str]:
        """Issue one update per patch; return the distinct twins updated."""
        applied: list[str] = []
        for index, patch in enumerate(patches):
            document = patch.to_document()
            logger.info(
                "[%d] Calling API for twin (%s) with patch: %s",
                index,
                patch.twin_id,
                canonical_json_bytes(document).decode("utf-8"),
            )
            try:
                self._client.update_digital_twin(
                    patch.twin_id,
                    document,
                    match_condition=MatchConditions.IfPresent,
                )
            except AzureError as exc:
                logger.error("Update of twin %s failed: %s", patch.twin_id, exc)
                raise TwinUpdateError(patch.twin_id, str(exc), applied=applied) from exc
            if patch.twin_id not in applied:
                applied.append(patch.twin_id)
        return applied


def _twin_id_from(metadata: Mapping[str, str]) -> str:
    for key in TWIN_ID_METADATA_KEYS:
        value = metadata.get(key, "")
        if value:
            return value
    return ""
