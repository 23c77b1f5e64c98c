from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..dependencies import (
    MISSING_MODEL_IN_BODY,
    OllamaAPIError,
    get_logger,
    get_state,
    parse_model_request,
    read_json_body,
)
from ..models.schemas import ModelRequest, ProcessModel, ProcessResponse, ShowRequest, TagsResponse
from ..services.detail_loader import DetailFileError, strip_verbose_fields
from ..state import HoneypotState

router = APIRouter(prefix="/api", tags=["models"])


def _wall_clock_expiry(seconds_left: float) -> str:
    """Render a monotonic-clock expiry as local wall-clock time, like `ollama ps`."""
    return (datetime.now().astimezone() + timedelta(seconds=seconds_left)).isoformat()


@router.get("/tags")
def list_models(state: HoneypotState = Depends(get_state)):
    """List every model in the catalog."""
    return TagsResponse(models=state.registry.list_catalog()).model_dump()


@router.get("/ps")
def list_running_models(state: HoneypotState = Depends(get_state)):
    """List models that are currently loaded and not yet expired."""
    registry = state.registry
    now = registry.now()
    models = [
        ProcessModel(
            name=loaded.entry.name,
            model=loaded.entry.model,
            size=loaded.entry.size,
            digest=loaded.entry.digest,
            details=loaded.entry.details,
            expires_at=_wall_clock_expiry(registry.remaining(loaded, now)),
            size_vram=loaded.size_vram,
        )
        for loaded in registry.list_loaded()
    ]
    return ProcessResponse(models=models).model_dump()


@router.post("/show")
def show_model(
    payload: dict = Depends(read_json_body),
    state: HoneypotState = Depends(get_state),
    logger=Depends(get_logger),
):
    """Return the detail document for a model."""
    request = parse_model_request(ShowRequest, payload, MISSING_MODEL_IN_BODY)
    name = request.target
    logger.debug("show_requested", model=name, verbose=request.verbose)

    try:
        document = state.details.get_details(name)
    except DetailFileError as e:
        raise OllamaAPIError(str(e), status_code=500) from e

    if document is None:
        logger.info("show_unknown_model", model=name)
        raise OllamaAPIError(f"model '{name}' not found", status_code=404)

    if request.verbose:
        return document

    if not isinstance(document.get("model_info"), dict):
        logger.warning("show_document_missing_model_info", model=name)
    return strip_verbose_fields(document)


@router.delete("/delete")
def delete_model(
    payload: dict = Depends(read_json_body),
    state: HoneypotState = Depends(get_state),
    logger=Depends(get_logger),
):
    """Delete a model from the catalog, the loaded set and the detail map."""
    name = parse_model_request(ModelRequest, payload).target
    logger.info("delete_requested", model=name)

    if not state.registry.delete(name):
        raise OllamaAPIError(f"model '{name}' not found", status_code=404)

    return Response(status_code=200)
