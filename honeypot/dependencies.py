import json
from datetime import datetime, timezone
from typing import TypeVar

from fastapi import Request
from pydantic import ValidationError

from .models.schemas import ModelRequest
from .state import HoneypotState

MISSING_MODEL = "missing 'model' field in request"
MISSING_MODEL_IN_BODY = "missing 'model' field in request body"
INVALID_JSON = "invalid json request format"

RequestT = TypeVar("RequestT", bound=ModelRequest)


class OllamaAPIError(Exception):
    """An error rendered to the client as an Ollama-style ``{"error": ...}`` body."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def get_state(request: Request) -> HoneypotState:
    return request.app.state.honeypot


def get_logger(request: Request):
    return request.app.state.logs.ops


async def read_json_body(request: Request) -> dict:
    """Read the raw request body as a JSON object, the way Ollama rejects bad input."""
    body = await request.body()
    if not body.strip():
        raise OllamaAPIError("missing request body")

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise OllamaAPIError(INVALID_JSON)

    if not isinstance(payload, dict):
        raise OllamaAPIError(INVALID_JSON)
    return payload


def parse_model_request(
    schema: type[RequestT], payload: dict, missing_message: str = MISSING_MODEL
) -> RequestT:
    """Validate ``payload`` against ``schema`` and require a model name."""
    try:
        parsed = schema.model_validate(payload)
    except ValidationError as e:
        fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
        if fields & {"model", "name"}:
            raise OllamaAPIError(missing_message) from e
        raise OllamaAPIError(INVALID_JSON) from e

    if not parsed.target:
        raise OllamaAPIError(missing_message)
    return parsed


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
