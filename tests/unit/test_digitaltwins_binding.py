"""Tests for the Azure Digital Twins output binding."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from azure.core import MatchConditions
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from contribkit.bindings.azure.digitaltwins import (
    AzureDigitalTwinsBinding,
    AzureDigitalTwinsMetadata,
    create_client,
)
from contribkit.bindings.base import OutputBinding
from contribkit.bindings.errors import (
    BindingNotInitializedError,
    InvalidRequestError,
    MetadataError,
    PathFormatError,
    TwinUpdateError,
    UnsupportedOperationError,
)
from contribkit.models.bindings import BindingMetadata, InvokeRequest, OperationKind


def _request(ops: list[dict], **metadata: str) -> InvokeRequest:
    return InvokeRequest(data=json.dumps(ops).encode("utf-8"), metadata=metadata)


def _calls(client: MagicMock) -> list[tuple[str, list]]:
    return [(c.args[0], c.args[1]) for c in client.update_digital_twin.call_args_list]


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMetadata:
    def test_complete_properties(self, adt_properties):
        meta = AzureDigitalTwinsMetadata.from_properties(adt_properties)
        assert meta.adt_instance_url == adt_properties["adtInstanceUrl"]
        assert meta.group_by_twin is False

    @pytest.mark.parametrize("missing", ["clientId", "clientSecret", "tenantId", "adtInstanceUrl"])
    def test_missing_property_named(self, adt_properties, missing):
        del adt_properties[missing]
        with pytest.raises(MetadataError, match=f"azureDigitalTwins error: missing {missing}"):
            AzureDigitalTwinsMetadata.from_properties(adt_properties)

    def test_empty_value_counts_as_missing(self, adt_properties):
        adt_properties["tenantId"] = ""
        with pytest.raises(MetadataError, match="missing tenantId"):
            AzureDigitalTwinsMetadata.from_properties(adt_properties)

    def test_first_missing_in_check_order(self):
        with pytest.raises(MetadataError, match="missing clientId"):
            AzureDigitalTwinsMetadata.from_properties({})

    def test_group_by_twin_flag(self, adt_properties):
        adt_properties["groupByTwin"] = "true"
        assert AzureDigitalTwinsMetadata.from_properties(adt_properties).group_by_twin is True

    def test_secret_not_in_repr(self, adt_properties):
        meta = AzureDigitalTwinsMetadata.from_properties(adt_properties)
        assert "s3cret" not in repr(meta)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_satisfies_protocol(self):
        assert isinstance(AzureDigitalTwinsBinding(), OutputBinding)

    def test_operations_is_create_only(self):
        assert AzureDigitalTwinsBinding().operations() == [OperationKind.CREATE]

    def test_init_failure_leaves_binding_uninitialized(self, adt_properties):
        factory = MagicMock()
        binding = AzureDigitalTwinsBinding(client_factory=factory)
        del adt_properties["clientSecret"]
        with pytest.raises(MetadataError):
            binding.init(BindingMetadata(properties=adt_properties))
        factory.assert_not_called()
        assert binding.metadata is None

    def test_invoke_before_init(self):
        with pytest.raises(BindingNotInitializedError):
            AzureDigitalTwinsBinding().invoke(_request([{"op": "remove", "path": "/a/b"}]))

    def test_unsupported_operation(self, binding, fake_client):
        request = InvokeRequest(
            data=b'[{"op": "remove", "path": "/a/b"}]', operation=OperationKind.DELETE
        )
        with pytest.raises(UnsupportedOperationError):
            binding.invoke(request)
        fake_client.update_digital_twin.assert_not_called()

    def test_close_releases_client(self, binding, fake_client):
        binding.close()
        fake_client.close.assert_called_once()
        with pytest.raises(BindingNotInitializedError):
            binding.invoke(_request([{"op": "remove", "path": "/a/b"}]))

    def test_create_client_uses_client_secret_credential(self, adt_properties):
        meta = AzureDigitalTwinsMetadata.from_properties(adt_properties)
        with patch(
            "contribkit.bindings.azure.digitaltwins.ClientSecretCredential"
        ) as credential_cls, patch(
            "contribkit.bindings.azure.digitaltwins.DigitalTwinsClient"
        ) as client_cls:
            client = create_client(meta)
        credential_cls.assert_called_once_with(
            tenant_id=meta.tenant_id, client_id=meta.client_id, client_secret=meta.client_secret
        )
        client_cls.assert_called_once_with(meta.adt_instance_url, credential_cls.return_value)
        assert client is client_cls.return_value


# ---------------------------------------------------------------------------
# Invoke
# ---------------------------------------------------------------------------


class TestSingleTwin:
    def test_whole_document_sent_unchanged(self, binding, fake_client):
        ops = [
            {"op": "replace", "path": "/temperature", "value": 21.5},
            {"op": "add", "path": "/humidity", "value": 40},
        ]
        response = binding.invoke(_request(ops, twinId="room-1"))
        assert _calls(fake_client) == [("room-1", ops)]
        assert json.loads(response.data) == ["room-1"]
        assert response.metadata["updateCalls"] == "1"

    def test_twin_id_key_variant(self, binding, fake_client):
        binding.invoke(_request([{"op": "remove", "path": "/x"}], twinID="room-2"))
        assert _calls(fake_client)[0][0] == "room-2"

    def test_unconditional_update(self, binding, fake_client):
        binding.invoke(_request([{"op": "remove", "path": "/x"}], twinId="room-1"))
        kwargs = fake_client.update_digital_twin.call_args.kwargs
        assert kwargs["match_condition"] is MatchConditions.IfPresent

    def test_single_twin_paths_not_validated(self, binding, fake_client):
        binding.invoke(_request([{"op": "remove", "path": "/x"}], twinId="room-1"))
        fake_client.update_digital_twin.assert_called_once()


class TestMultiTwin:
    def test_one_call_per_operation(self, binding, fake_client):
        ops = [
            {"op": "replace", "path": "/a/x", "value": 1},
            {"op": "replace", "path": "/b/y", "value": 2},
            {"op": "replace", "path": "/a/z", "value": 3},
        ]
        response = binding.invoke(_request(ops))
        assert _calls(fake_client) == [
            ("a", [{"op": "replace", "path": "/x", "value": 1}]),
            ("b", [{"op": "replace", "path": "/y", "value": 2}]),
            ("a", [{"op": "replace", "path": "/z", "value": 3}]),
        ]
        assert json.loads(response.data) == ["a", "b"]
        assert response.metadata == {"updatedTwins": "2", "updateCalls": "3", "operations": "3"}

    def test_grouped_one_call_per_twin(self, make_binding, fake_client):
        binding = make_binding(groupByTwin="true")
        ops = [
            {"op": "replace", "path": "/a/x", "value": 1},
            {"op": "replace", "path": "/b/y", "value": 2},
            {"op": "replace", "path": "/a/z", "value": 3},
        ]
        binding.invoke(_request(ops))
        assert _calls(fake_client) == [
            (
                "a",
                [
                    {"op": "replace", "path": "/x", "value": 1},
                    {"op": "replace", "path": "/z", "value": 3},
                ],
            ),
            ("b", [{"op": "replace", "path": "/y", "value": 2}]),
        ]

    def test_invalid_path_submits_nothing(self, binding, fake_client):
        ops = [
            {"op": "replace", "path": "/a/x", "value": 1},
            {"op": "replace", "path": "/bad", "value": 2},
        ]
        with pytest.raises(PathFormatError):
            binding.invoke(_request(ops))
        fake_client.update_digital_twin.assert_not_called()

    def test_empty_batch_rejected(self, binding, fake_client):
        with pytest.raises(InvalidRequestError):
            binding.invoke(InvokeRequest(data=b"[]"))
        fake_client.update_digital_twin.assert_not_called()

    def test_malformed_data_rejected(self, binding, fake_client):
        with pytest.raises(InvalidRequestError):
            binding.invoke(InvokeRequest(data=b"{not json"))
        fake_client.update_digital_twin.assert_not_called()


class TestUpdateFailure:
    def test_first_failure_stops_and_reports_applied(self, binding, fake_client):
        fake_client.update_digital_twin.side_effect = [
            None,
            ResourceNotFoundError("twin b not found"),
            None,
        ]
        ops = [
            {"op": "replace", "path": "/a/x", "value": 1},
            {"op": "replace", "path": "/b/y", "value": 2},
            {"op": "replace", "path": "/c/z", "value": 3},
        ]
        with pytest.raises(TwinUpdateError) as excinfo:
            binding.invoke(_request(ops))
        assert excinfo.value.twin_id == "b"
        assert excinfo.value.applied == ["a"]
        assert fake_client.update_digital_twin.call_count == 2

    def test_http_error_wrapped(self, binding, fake_client):
        fake_client.update_digital_twin.side_effect = HttpResponseError("bad patch")
        with pytest.raises(TwinUpdateError, match="room-1"):
            binding.invoke(_request([{"op": "remove", "path": "/x"}], twinId="room-1"))
