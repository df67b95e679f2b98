"""Tests for BedrockEmbeddingProvider with a mocked bedrock-runtime client."""

import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from vector_ingest.core.embedding import (
    BedrockEmbeddingProvider,
    EmbedRequest,
    ServingTarget,
    TruncationPolicy,
)
from vector_ingest.core.exceptions import ProtocolViolation, ProviderRejection


def _response(payload) -> dict:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return {"body": io.BytesIO(body)}


def _request(*texts: str, target: ServingTarget | None = None) -> EmbedRequest:
    return EmbedRequest(
        serving_target=target or ServingTarget.on_demand("cohere.embed-english-v3"),
        tenant_id="tenant-a",
        inputs=texts,
        truncation=TruncationPolicy.START,
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """Provide a bedrock-runtime client double."""
    return MagicMock()


@pytest.fixture
def provider(mock_client) -> BedrockEmbeddingProvider:
    return BedrockEmbeddingProvider(client=mock_client)


class TestRequestBody:
    """Test Cohere request body construction."""

    def test_body_fields(self) -> None:
        """Should map inputs, input type and truncation onto the Cohere schema."""
        body = BedrockEmbeddingProvider.build_body(_request("a", "b"))

        assert body == {
            "texts": ["a", "b"],
            "input_type": "search_document",
            "truncate": "START",
            "embedding_types": ["float"],
        }

    def test_invoke_model_arguments(self, provider, mock_client) -> None:
        """Should send the on-demand model id as modelId."""
        mock_client.invoke_model.return_value = _response({"embeddings": [[0.1, 0.2]]})

        provider.embed(_request("a"))

        kwargs = mock_client.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "cohere.embed-english-v3"
        assert kwargs["contentType"] == "application/json"
        assert json.loads(kwargs["body"])["texts"] == ["a"]

    def test_dedicated_endpoint_used_as_model_id(self, provider, mock_client) -> None:
        """Should route dedicated requests to the provisioned throughput ARN."""
        arn = "arn:aws:bedrock:us-east-1:123456789012:provisioned-model/abc123"
        mock_client.invoke_model.return_value = _response({"embeddings": [[0.1]]})

        provider.embed(_request("a", target=ServingTarget.dedicated(arn)))

        assert mock_client.invoke_model.call_args.kwargs["modelId"] == arn


class TestResponseParsing:
    """Test both Cohere response shapes."""

    def test_plain_embeddings_list(self, provider, mock_client) -> None:
        """Should read embeddings given as a list of vectors."""
        mock_client.invoke_model.return_value = _response({"embeddings": [[0.1, 0.2], [0.3, 0.4]]})

        response = provider.embed(_request("a", "b"))

        assert response.vectors == [[0.1, 0.2], [0.3, 0.4]]
        assert response.model_id == "cohere.embed-english-v3"

    def test_typed_embeddings_mapping(self, provider, mock_client) -> None:
        """Should read embeddings keyed by type."""
        mock_client.invoke_model.return_value = _response({"embeddings": {"float": [[1.0, 2.0]]}})

        response = provider.embed(_request("a"))

        assert response.vectors == [[1.0, 2.0]]

    def test_missing_embeddings(self, provider, mock_client) -> None:
        """Should raise ProtocolViolation when no float embeddings are present."""
        mock_client.invoke_model.return_value = _response({"id": "abc"})

        with pytest.raises(ProtocolViolation):
            provider.embed(_request("a"))

    def test_undecodable_body(self, provider, mock_client) -> None:
        """Should raise ProtocolViolation for a non-JSON body."""
        mock_client.invoke_model.return_value = _response(b"not json")

        with pytest.raises(ProtocolViolation):
            provider.embed(_request("a"))

    def test_non_numeric_components(self, provider, mock_client) -> None:
        """Should raise ProtocolViolation for string vector components."""
        mock_client.invoke_model.return_value = _response({"embeddings": [["x", "y"]]})

        with pytest.raises(ProtocolViolation):
            provider.embed(_request("a"))


class TestErrorMapping:
    """Test boto errors become ProviderRejection."""

    def test_client_error(self, provider, mock_client) -> None:
        """Should carry the Bedrock error code and HTTP status."""
        mock_client.invoke_model.side_effect = ClientError(
            {
                "Error": {"Code": "ValidationException", "Message": "input too long"},
                "ResponseMetadata": {"HTTPStatusCode": 400},
            },
            "InvokeModel",
        )

        with pytest.raises(ProviderRejection) as exc_info:
            provider.embed(_request("a"))

        assert exc_info.value.error_code == "ValidationException"
        assert exc_info.value.details["status_code"] == 400
        assert exc_info.value.details["tenant_id"] == "tenant-a"
        assert "input too long" in exc_info.value.message

    def test_connection_error(self, provider, mock_client) -> None:
        """Should map transport failures to ProviderRejection."""
        mock_client.invoke_model.side_effect = EndpointConnectionError(endpoint_url="https://bedrock")

        with pytest.raises(ProviderRejection) as exc_info:
            provider.embed(_request("a"))

        assert exc_info.value.error_code == "EndpointConnectionError"

    def test_single_attempt(self, provider, mock_client) -> None:
        """Should call Bedrock once per embed even on failure."""
        mock_client.invoke_model.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "slow down"}},
            "InvokeModel",
        )

        with pytest.raises(ProviderRejection):
            provider.embed(_request("a"))

        assert mock_client.invoke_model.call_count == 1
