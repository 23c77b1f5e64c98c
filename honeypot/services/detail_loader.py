import copy
import json
from typing import TYPE_CHECKING, Any

from ..config import HoneypotConfig
from ..logging_setup import emit

if TYPE_CHECKING:
    from ..state.detail_cache import DetailCache
    from ..state.registry import ModelRegistry

# model_info keys that only appear in /api/show output when verbose is set
VERBOSE_MODEL_INFO_KEYS = (
    "tokenizer.ggml.merges",
    "tokenizer.ggml.token_type",
    "tokenizer.ggml.tokens",
)


class DetailFileError(Exception):
    """A detail file could not be read or parsed."""

    UNREADABLE = "unreadable"
    INVALID_JSON = "invalid_json"

    def __init__(self, model: str, path: str, reason: str, message: str):
        self.model = model
        self.path = path
        self.reason = reason
        super().__init__(message)


def strip_verbose_fields(document: dict) -> dict:
    """
    Return a copy of ``document`` with the bulky tokenizer fields nulled.

    Documents without a ``model_info`` object come back as an unmodified
    copy. The input is never mutated, so cached documents stay intact.
    """
    result = copy.deepcopy(document)
    model_info = result.get("model_info") if isinstance(result, dict) else None
    if isinstance(model_info, dict):
        for key in VERBOSE_MODEL_INFO_KEYS:
            model_info[key] = None
    return result


class DetailLoader:
    """Resolves a model name to its detail document, reading through the cache."""

    def __init__(
        self,
        config: HoneypotConfig,
        registry: "ModelRegistry",
        cache: "DetailCache",
        logger,
    ):
        self.config = config
        self.registry = registry
        self.cache = cache
        self._logger = logger.bind(component="detail_loader")

    def get_details(self, name: str) -> dict[str, Any] | None:
        """
        Return the detail document for ``name``, or None if it has no mapping.

        Raises DetailFileError when the file is unreadable or not valid JSON.
        Failures are not cached, so the next request tries the file again.
        """
        relative_path = self.registry.resolve_detail_path(name)
        if relative_path is None:
            return None

        path = str(self.config.resolve_detail_file(relative_path))

        document = self.cache.get(path)
        if document is not None:
            return document

        # Registry lock is not held here; file I/O happens outside it
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            emit(self._logger, "error", "detail_file_unreadable", model=name, path=path, error=str(e))
            raise DetailFileError(
                name,
                path,
                DetailFileError.UNREADABLE,
                f"internal error: detail file for model '{name}' missing or unreadable",
            ) from e

        try:
            document = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            emit(self._logger, "error", "detail_file_invalid_json", model=name, path=path, error=str(e))
            raise DetailFileError(
                name,
                path,
                DetailFileError.INVALID_JSON,
                f"internal error: detail file for model '{name}' is invalid JSON",
            ) from e

        # A detail document is always an object; None is reserved for "unmapped"
        if not isinstance(document, dict):
            emit(
                self._logger,
                "error",
                "detail_file_not_an_object",
                model=name,
                path=path,
                type=type(document).__name__,
            )
            raise DetailFileError(
                name,
                path,
                DetailFileError.INVALID_JSON,
                f"internal error: detail file for model '{name}' is invalid JSON",
            )

        self.cache.put(path, document)
        emit(self._logger, "debug", "detail_file_loaded", model=name, path=path)
        return document
