from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..dependencies import get_state
from ..models.schemas import VersionResponse
from ..state import HoneypotState

router = APIRouter(tags=["misc"])


@router.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def root():
    """Liveness banner, identical to the real server's."""
    return "Ollama is running"


@router.get("/api/version")
async def version(state: HoneypotState = Depends(get_state)):
    """Report the configured server version."""
    return VersionResponse(version=state.config.api_behavior.ollama_version).model_dump()
