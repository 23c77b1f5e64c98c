from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL_NAME = "default:latest"
DEFAULT_MODIFIED_AT = "1970-01-01T00:00:00.000000Z"
DEFAULT_DIGEST = "sha256:" + "0" * 64


# Catalog models (as advertised by /api/tags)
class ModelDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    parent_model: str = ""
    format: str = "gguf"
    family: str = "unknown"
    families: list[str] | None = None
    parameter_size: str = "N/A"
    quantization_level: str = "unknown"


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = DEFAULT_MODEL_NAME
    model: str = ""
    modified_at: str = DEFAULT_MODIFIED_AT
    size: int = Field(default=0, ge=0)
    digest: str = DEFAULT_DIGEST
    details: ModelDetails = Field(default_factory=ModelDetails)


@dataclass
class LoadedModel:
    """A catalog entry simulated as resident, with a monotonic-clock expiry."""
    entry: CatalogEntry
    expires_at: float
    size_vram: int | None = None

    def __post_init__(self) -> None:
        if self.size_vram is None:
            self.size_vram = self.entry.size


# Request bodies (Ollama-compatible, unknown fields ignored)
class ModelRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    # Older clients still send "name"
    name: str | None = None

    @property
    def target(self) -> str | None:
        return self.model or self.name


class ShowRequest(ModelRequest):
    verbose: bool = False


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str
    content: str = ""
    images: list[str] | None = None


class GenerateRequest(ModelRequest):
    prompt: str = ""
    system: str | None = None
    stream: bool = True
    keep_alive: float | str | None = None
    options: dict[str, Any] | None = None


class ChatRequest(ModelRequest):
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: bool = True
    keep_alive: float | str | None = None
    options: dict[str, Any] | None = None


# Response bodies
class TagsResponse(BaseModel):
    models: list[CatalogEntry]


class ProcessModel(BaseModel):
    name: str
    model: str
    size: int
    digest: str
    details: ModelDetails
    expires_at: str
    size_vram: int


class ProcessResponse(BaseModel):
    models: list[ProcessModel]


class VersionResponse(BaseModel):
    version: str


class GenerateResponse(BaseModel):
    model: str
    created_at: str
    response: str = ""
    done: bool = True
    done_reason: Literal["load", "unload", "stop"] = "load"


class ChatResponse(BaseModel):
    model: str
    created_at: str
    message: ChatMessage
    done: bool = True
    done_reason: Literal["load", "unload", "stop"] = "load"


# Error Models
class ErrorResponse(BaseModel):
    error: str
