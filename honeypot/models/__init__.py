from .schemas import (
    CatalogEntry,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    LoadedModel,
    ModelDetails,
    ModelRequest,
    ProcessModel,
    ProcessResponse,
    ShowRequest,
    TagsResponse,
    VersionResponse,
)

__all__ = [
    "CatalogEntry",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "GenerateRequest",
    "GenerateResponse",
    "LoadedModel",
    "ModelDetails",
    "ModelRequest",
    "ProcessModel",
    "ProcessResponse",
    "ShowRequest",
    "TagsResponse",
    "VersionResponse",
]
