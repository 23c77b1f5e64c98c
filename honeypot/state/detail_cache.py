import threading
from typing import Any

from ..logging_setup import emit


class DetailCache:
    """
    Memoized detail documents, keyed by resolved file path.

    Unbounded with no expiry: the set of detail files is fixed at startup.
    Guarded by its own lock, separate from the registry's, so populating
    the cache never contends with catalog reads. Two requests racing on the
    same cold path may both parse the file; the last ``put`` wins.
    """

    def __init__(self, logger):
        self._documents: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._logger = logger.bind(component="detail_cache")

    def get(self, path: str) -> Any | None:
        with self._lock:
            document = self._documents.get(path)

        emit(self._logger, "debug", "cache_hit" if document is not None else "cache_miss", path=path)
        return document

    def put(self, path: str, document: Any) -> None:
        with self._lock:
            self._documents[path] = document

        emit(self._logger, "debug", "cache_stored", path=path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)
