"""
Embedding domain models.

Request/response shapes for the provider capability, the batch container
handed from batcher to invoker, and the per-chunk Embedding result.
Serving target and truncation policy are plain immutable data carried on
every request.

Dependencies: pydantic
System role: Data contracts for the batched embedding core
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Cohere embed models accept at most 96 texts per request
PROVIDER_MAX_BATCH_SIZE = 96


class TruncationPolicy(str, Enum):
    """Provider behaviour for inputs longer than the per-input token limit."""

    NONE = "NONE"
    START = "START"
    END = "END"


class ServingMode(str, Enum):
    """Which kind of serving capacity handles a request."""

    ON_DEMAND = "ON_DEMAND"
    DEDICATED = "DEDICATED"


class ServingTarget(BaseModel):
    """Serving target selector: on-demand model or dedicated endpoint."""

    model_config = ConfigDict(frozen=True)

    mode: ServingMode = Field(default=ServingMode.ON_DEMAND, description="Serving mode")
    model_id: str = Field(default="", description="Model identifier (on-demand)")
    endpoint_id: str = Field(default="", description="Dedicated endpoint identifier")

    @model_validator(mode="after")
    def _check_identifier(self) -> "ServingTarget":
        if self.mode is ServingMode.DEDICATED and not self.endpoint_id:
            raise ValueError("endpoint_id is required for DEDICATED serving mode")
        if self.mode is ServingMode.ON_DEMAND and not self.model_id:
            raise ValueError("model_id is required for ON_DEMAND serving mode")
        return self

    @classmethod
    def on_demand(cls, model_id: str) -> "ServingTarget":
        return cls(mode=ServingMode.ON_DEMAND, model_id=model_id)

    @classmethod
    def dedicated(cls, endpoint_id: str) -> "ServingTarget":
        return cls(mode=ServingMode.DEDICATED, endpoint_id=endpoint_id)

    @property
    def resource_id(self) -> str:
        """Identifier the provider routes on."""
        if self.mode is ServingMode.DEDICATED:
            return self.endpoint_id
        return self.model_id


class Batch(BaseModel):
    """Owned, contiguous slice of a chunk sequence."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Batch number within the source sequence")
    offset: int = Field(ge=0, description="Position of the first chunk in the source sequence")
    texts: tuple[str, ...] = Field(description="Chunk texts in source order")

    def __len__(self) -> int:
        return len(self.texts)


class EmbedRequest(BaseModel):
    """One provider call worth of inputs."""

    model_config = ConfigDict(frozen=True)

    serving_target: ServingTarget
    tenant_id: str = Field(min_length=1, description="Compartment / tenant the call is billed to")
    inputs: tuple[str, ...] = Field(description="Texts to embed, in order")
    truncation: TruncationPolicy = TruncationPolicy.NONE
    input_type: str = Field(default="search_document", description="Provider input type hint")


class EmbedResponse(BaseModel):
    """Vectors returned by the provider, positionally aligned with the request inputs."""

    model_config = ConfigDict(frozen=True)

    vectors: list[list[float]] = Field(default_factory=list)
    model_id: str | None = Field(default=None, description="Model that served the request")


class Embedding(BaseModel):
    """Vector paired with the chunk text it was derived from."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Originating chunk text")
    vector: list[float] = Field(description="Embedding components")

    @property
    def dimension(self) -> int:
        return len(self.vector)
