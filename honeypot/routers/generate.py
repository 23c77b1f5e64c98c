from datetime import timedelta

from fastapi import APIRouter, Depends

from ..dependencies import (
    OllamaAPIError,
    get_logger,
    get_state,
    parse_model_request,
    read_json_body,
    utc_timestamp,
)
from ..models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    GenerateRequest,
    GenerateResponse,
)
from ..services.keep_alive import KeepAliveError, parse_keep_alive
from ..state import HoneypotState

router = APIRouter(prefix="/api", tags=["generate"])


def _load(state: HoneypotState, name: str, keep_alive_value) -> timedelta:
    """Load or refresh ``name`` and return the keep-alive that was applied."""
    try:
        keep_alive = parse_keep_alive(keep_alive_value)
    except KeepAliveError as e:
        raise OllamaAPIError(str(e)) from e

    if not state.registry.load_or_refresh(name, keep_alive):
        raise OllamaAPIError(f"model '{name}' not found, try pulling it first", status_code=404)
    return keep_alive


def _done_reason(keep_alive: timedelta, has_input: bool) -> str:
    if has_input:
        return "stop"
    return "unload" if keep_alive <= timedelta(0) else "load"


@router.post("/generate")
def generate(
    payload: dict = Depends(read_json_body),
    state: HoneypotState = Depends(get_state),
    logger=Depends(get_logger),
):
    """
    Simulate /api/generate.

    No text is produced. The call exists so clients can load a model, or
    extend its keep-alive, the same way they would on a real server.
    """
    request = parse_model_request(GenerateRequest, payload)
    logger.debug("generate_requested", model=request.target, prompt_length=len(request.prompt))

    keep_alive = _load(state, request.target, request.keep_alive)
    return GenerateResponse(
        model=request.target,
        created_at=utc_timestamp(),
        done_reason=_done_reason(keep_alive, bool(request.prompt)),
    ).model_dump()


@router.post("/chat")
def chat(
    payload: dict = Depends(read_json_body),
    state: HoneypotState = Depends(get_state),
    logger=Depends(get_logger),
):
    """Simulate /api/chat; an empty message list loads the model."""
    request = parse_model_request(ChatRequest, payload)
    logger.debug("chat_requested", model=request.target, messages=len(request.messages))

    keep_alive = _load(state, request.target, request.keep_alive)
    return ChatResponse(
        model=request.target,
        created_at=utc_timestamp(),
        message=ChatMessage(role="assistant", content=""),
        done_reason=_done_reason(keep_alive, bool(request.messages)),
    ).model_dump(exclude_none=True)
