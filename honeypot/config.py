import json
from collections import Counter
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.schemas import DEFAULT_MODEL_NAME, CatalogEntry

# Catalog entries whose alias is empty or still carries this placeholder get
# their name copied into the alias after parsing.
MODEL_ALIAS_SENTINEL = DEFAULT_MODEL_NAME

LOG_LEVELS = {"trace", "debug", "info", "warn", "warning", "err", "error", "critical", "off"}
LOG_OUTPUTS = {"stdout", "stderr", "file"}
LOG_FORMATS = {"console", "json"}


class Settings(BaseSettings):
    """Process settings, read from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="HONEYPOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: str = "config/honeypot.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()


class ConfigError(Exception):
    """Raised when the configuration document cannot be used.

    Every problem found is collected in ``problems`` so a single failed
    startup reports all of them at once.
    """

    def __init__(self, config_path: str | Path, problems: list[str]):
        self.config_path = str(config_path)
        self.problems = problems
        super().__init__("; ".join(problems))


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    listen_address: str = "0.0.0.0"
    listen_port: int = Field(default=11434, ge=0, le=65535)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_level: str = "info"
    log_outputs: list[str] = Field(default_factory=lambda: ["stdout"])
    log_format: str = "console"
    log_file_path: str = "honeypot_operational.log"
    log_pattern: str = "[%(asctime)s] [%(levelname)s] [%(threadName)s] %(message)s"
    request_log_path: str = "honeypot_requests.jsonl"

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {sorted(LOG_LEVELS)}")
        return v

    @field_validator("log_outputs")
    @classmethod
    def validate_outputs(cls, v: list[str]) -> list[str]:
        unknown = [output for output in v if output not in LOG_OUTPUTS]
        if unknown:
            raise ValueError(f"unknown log output type(s): {', '.join(unknown)}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log format must be one of {sorted(LOG_FORMATS)}")
        return v


class ApiBehaviorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    ollama_version: str = "0.6.0"
    tag_models: list[CatalogEntry] = Field(default_factory=list)
    show_file_map: dict[str, StrictStr] = Field(default_factory=dict)


class HoneypotConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api_behavior: ApiBehaviorConfig = Field(default_factory=ApiBehaviorConfig)

    # Directory the document was read from; detail paths are relative to it.
    config_dir: Path = Field(default=Path("."), exclude=True)

    def resolve_detail_file(self, relative_path: str) -> Path:
        return self.config_dir / relative_path


def backfill_model_aliases(entries: list[CatalogEntry]) -> list[CatalogEntry]:
    """Fill in the ``model`` alias from ``name`` where it was left unset."""
    return [
        entry.model_copy(update={"model": entry.name})
        if entry.model in ("", MODEL_ALIAS_SENTINEL)
        else entry
        for entry in entries
    ]


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "<root>"
    return f"'{location}': {error['msg']}"


def find_config_problems(config: HoneypotConfig) -> list[str]:
    """Semantic checks that run after the document parsed cleanly."""
    problems = []

    if config.server.listen_port == 0:
        problems.append("'server.listen_port' cannot be 0")

    if "file" in config.logging.log_outputs and not config.logging.log_file_path:
        problems.append("'file' log output specified but 'logging.log_file_path' is empty")

    counts = Counter(entry.name for entry in config.api_behavior.tag_models)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        problems.append(
            f"duplicate model names in 'api_behavior.tag_models': {', '.join(duplicates)}"
        )

    missing_files = [
        relative_path
        for relative_path in config.api_behavior.show_file_map.values()
        if not config.resolve_detail_file(relative_path).is_file()
    ]
    if missing_files:
        problems.append(
            "the following files listed in 'show_file_map' were not found relative to "
            f"'{config.config_dir}': {', '.join(missing_files)}"
        )

    return problems


def load_config(config_path: str | Path) -> HoneypotConfig:
    """Parse, validate and normalize the configuration document.

    Raises ConfigError on any defect; nothing partial is ever returned.
    """
    path = Path(config_path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(path, [f"failed to open configuration file: {e.strerror or e}"]) from e
    except UnicodeDecodeError as e:
        raise ConfigError(path, [f"configuration file is not valid UTF-8: {e}"]) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(path, [f"JSON syntax error - {e}"]) from e

    if not isinstance(data, dict):
        raise ConfigError(path, ["top-level value must be a JSON object"])
    data.pop("config_dir", None)

    try:
        config = HoneypotConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path, [_format_validation_error(err) for err in e.errors()]) from e

    config = config.model_copy(update={"config_dir": path.parent})

    problems = find_config_problems(config)
    if problems:
        raise ConfigError(path, problems)

    # Backward-compatibility pass, kept separate from parsing
    api_behavior = config.api_behavior.model_copy(
        update={"tag_models": backfill_model_aliases(config.api_behavior.tag_models)}
    )
    return config.model_copy(update={"api_behavior": api_behavior})
