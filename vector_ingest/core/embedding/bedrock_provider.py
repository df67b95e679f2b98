"""
Amazon Bedrock embedding provider (Cohere embed models).

Speaks the Cohere embed request schema over bedrock-runtime InvokeModel:
``texts`` (max 96), ``input_type``, ``truncate`` (NONE/START/END) and
``embedding_types``. Inputs longer than 512 tokens are rejected by the model
when ``truncate`` is NONE.

The serving target resolves to the Bedrock ``modelId``: a foundation model id
for on-demand capacity, a provisioned throughput ARN for dedicated capacity.

Dependencies: boto3, botocore
System role: Concrete EmbeddingProvider used in deployed runs
"""

import json
import logging
import time
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from vector_ingest.core.embedding.models import EmbedRequest, EmbedResponse
from vector_ingest.core.exceptions import ProtocolViolation, ProviderRejection

logger = logging.getLogger(__name__)

# Failures surface to the pipeline caller on the first attempt
_NO_RETRY_CONFIG = Config(retries={"total_max_attempts": 1, "mode": "standard"})


class BedrockEmbeddingProvider:
    """Embed text batches with a Cohere model hosted on Amazon Bedrock."""

    def __init__(
        self,
        region: str = "us-east-1",
        client: Any | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            region: AWS region hosting the model or provisioned throughput
            client: Pre-built bedrock-runtime client (created when None)
        """
        self._region = region
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=region,
            config=_NO_RETRY_CONFIG,
        )

    @staticmethod
    def build_body(request: EmbedRequest) -> dict[str, Any]:
        """
        Build the Cohere embed request body.

        Args:
            request: Provider-agnostic embed request

        Returns:
            dict: JSON-serialisable InvokeModel body
        """
        return {
            "texts": list(request.inputs),
            "input_type": request.input_type,
            "truncate": request.truncation.value,
            "embedding_types": ["float"],
        }

    def embed(self, request: EmbedRequest) -> EmbedResponse:
        """
        Invoke the model for one batch.

        Args:
            request: Inputs, serving target, tenant and truncation policy

        Returns:
            EmbedResponse: Vectors in request order

        Raises:
            ProviderRejection: Bedrock refused the call (validation, throttling, auth)
            ProtocolViolation: The response body could not be decoded
        """
        model_id = request.serving_target.resource_id
        start = time.monotonic()
        try:
            response = self._client.invoke_model(
                modelId=model_id,
                body=json.dumps(self.build_body(request)),
                contentType="application/json",
                accept="application/json",
            )
            payload = json.loads(response["body"].read())
        except ClientError as e:
            error = e.response.get("Error", {})
            raise ProviderRejection(
                f"Bedrock rejected embed request: {error.get('Message', e)}",
                error_code=error.get("Code", "Unknown"),
                status_code=e.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
                details={"model_id": model_id, "tenant_id": request.tenant_id},
            ) from e
        except BotoCoreError as e:
            raise ProviderRejection(
                f"Bedrock embed request failed: {e}",
                error_code=type(e).__name__,
                details={"model_id": model_id, "tenant_id": request.tenant_id},
            ) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolViolation(
                f"Bedrock returned an undecodable body: {e}",
                details={"model_id": model_id},
            ) from e

        vectors = self._extract_vectors(payload, model_id)
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "%s:embed - Bedrock embed call completed",
            __name__,
            extra={
                "model_id": model_id,
                "tenant_id": request.tenant_id,
                "batch_size": len(request.inputs),
                "latency_ms": latency_ms,
            },
        )
        try:
            return EmbedResponse(vectors=vectors, model_id=model_id)
        except ValidationError as e:
            raise ProtocolViolation(
                f"Bedrock returned non-numeric embeddings: {e.error_count()} errors",
                details={"model_id": model_id},
            ) from e

    @staticmethod
    def _extract_vectors(payload: Any, model_id: str) -> list[list[float]]:
        """
        Pull the float vectors out of either Cohere response shape.

        ``embeddings`` is a list of vectors for plain requests and a
        ``{"float": [...]}`` mapping when ``embedding_types`` is set.
        """
        embeddings = payload.get("embeddings") if isinstance(payload, dict) else None
        if isinstance(embeddings, dict):
            embeddings = embeddings.get("float")
        if not isinstance(embeddings, list):
            raise ProtocolViolation(
                "Bedrock response has no float embeddings",
                details={"model_id": model_id},
            )
        return embeddings
