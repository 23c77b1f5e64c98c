import time
from dataclasses import replace
from datetime import timedelta
from typing import Callable

from ..logging_setup import emit
from ..models.schemas import CatalogEntry, LoadedModel
from .locks import ReadWriteLock


class ModelRegistry:
    """
    In-memory model lifecycle state.

    Holds the advertised catalog, the set of simulated "loaded" models and
    the name -> detail file mapping. All three sit behind one reader/writer
    lock because ``delete`` mutates them together. Loaded models expire
    lazily: ``list_loaded`` filters out anything past its expiry but never
    removes it.

    Nothing is logged while the lock is held; events are emitted after
    release.
    """

    def __init__(
        self,
        catalog: list[CatalogEntry],
        detail_paths: dict[str, str],
        logger,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._catalog: list[CatalogEntry] = list(catalog)
        self._loaded: list[LoadedModel] = []
        self._detail_paths: dict[str, str] = dict(detail_paths)
        self._lock = ReadWriteLock()
        self._clock = clock
        self._logger = logger.bind(component="registry")

        emit(
            self._logger,
            "debug",
            "registry_initialized",
            catalog_size=len(self._catalog),
            detail_mappings=len(self._detail_paths),
        )

    def now(self) -> float:
        return self._clock()

    def list_catalog(self) -> list[CatalogEntry]:
        """Snapshot of every advertised model."""
        with self._lock.read():
            return list(self._catalog)

    def list_loaded(self) -> list[LoadedModel]:
        """Snapshot of loaded models whose keep-alive has not yet run out."""
        with self._lock.read():
            now = self._clock()
            return [replace(loaded) for loaded in self._loaded if loaded.expires_at > now]

    def resolve_detail_path(self, name: str) -> str | None:
        with self._lock.read():
            return self._detail_paths.get(name)

    def delete(self, name: str) -> bool:
        """
        Remove ``name`` from the catalog, the loaded set and the path map.

        Returns True if anything was removed; deleting an unknown name is a
        no-op that returns False.
        """
        with self._lock.write():
            catalog_before = len(self._catalog)
            self._catalog = [entry for entry in self._catalog if entry.name != name]
            removed_from_catalog = len(self._catalog) != catalog_before

            loaded_before = len(self._loaded)
            self._loaded = [loaded for loaded in self._loaded if loaded.entry.name != name]
            removed_from_loaded = len(self._loaded) != loaded_before

            removed_mapping = self._detail_paths.pop(name, None) is not None

        deleted = removed_from_catalog or removed_from_loaded or removed_mapping
        if deleted:
            emit(
                self._logger,
                "info",
                "model_deleted",
                model=name,
                catalog=removed_from_catalog,
                loaded=removed_from_loaded,
                detail_mapping=removed_mapping,
            )
        return deleted

    def load_or_refresh(self, name: str, keep_alive: timedelta) -> bool:
        """
        Simulate loading ``name`` for ``keep_alive``.

        A model that is already loaded only gets its expiry pushed out; its
        size and metadata are left alone. Returns False, without touching
        any state, when ``name`` is not in the catalog.
        """
        refreshed = False
        with self._lock.write():
            entry = next((e for e in self._catalog if e.name == name), None)
            if entry is not None:
                expires_at = self._clock() + keep_alive.total_seconds()
                loaded = next((lm for lm in self._loaded if lm.entry.name == name), None)
                if loaded is not None:
                    loaded.expires_at = expires_at
                    refreshed = True
                else:
                    self._loaded.append(
                        LoadedModel(entry=entry.model_copy(), expires_at=expires_at)
                    )

        if entry is None:
            emit(self._logger, "warning", "load_unknown_model", model=name)
            return False

        emit(
            self._logger,
            "debug" if refreshed else "info",
            "model_keep_alive_refreshed" if refreshed else "model_loaded",
            model=name,
            keep_alive_seconds=keep_alive.total_seconds(),
        )
        return True

    def remaining(self, loaded: LoadedModel, now: float | None = None) -> float:
        """Seconds left before ``loaded`` expires (negative once expired)."""
        if now is None:
            now = self._clock()
        return loaded.expires_at - now
