from dataclasses import dataclass

from ..config import HoneypotConfig
from ..services.detail_loader import DetailLoader
from .detail_cache import DetailCache
from .locks import ReadWriteLock
from .registry import ModelRegistry


@dataclass(frozen=True)
class HoneypotState:
    """Process-wide state, built once from a validated configuration."""
    config: HoneypotConfig
    registry: ModelRegistry
    detail_cache: DetailCache
    details: DetailLoader

    @classmethod
    def from_config(cls, config: HoneypotConfig, logger) -> "HoneypotState":
        registry = ModelRegistry(
            catalog=config.api_behavior.tag_models,
            detail_paths=config.api_behavior.show_file_map,
            logger=logger,
        )
        detail_cache = DetailCache(logger)
        return cls(
            config=config,
            registry=registry,
            detail_cache=detail_cache,
            details=DetailLoader(config, registry, detail_cache, logger),
        )


__all__ = ["DetailCache", "HoneypotState", "ModelRegistry", "ReadWriteLock"]
