from .generate import router as generate_router
from .misc import router as misc_router
from .models import router as models_router

__all__ = ["generate_router", "misc_router", "models_router"]
