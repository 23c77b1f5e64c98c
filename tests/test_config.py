"""
Configuration loading and validation tests.
"""
import json

import pytest
from pydantic import ValidationError

from honeypot.config import (
    ConfigError,
    HoneypotConfig,
    LoggingConfig,
    Settings,
    backfill_model_aliases,
    load_config,
)
from honeypot.models.schemas import CatalogEntry

from .helpers import base_document, write_config


class TestDefaults:
    """Test field defaults for an almost empty document."""

    def test_empty_document(self, tmp_path):
        config = load_config(write_config(tmp_path, {}, detail_files={}))

        assert config.server.listen_address == "0.0.0.0"
        assert config.server.listen_port == 11434
        assert config.logging.log_level == "info"
        assert config.logging.log_outputs == ["stdout"]
        assert config.logging.request_log_path == "honeypot_requests.jsonl"
        assert config.api_behavior.ollama_version == "0.6.0"
        assert config.api_behavior.tag_models == []
        assert config.api_behavior.show_file_map == {}

    def test_catalog_entry_defaults(self, tmp_path):
        document = {"api_behavior": {"tag_models": [{"name": "tiny:latest"}]}}
        entry = load_config(write_config(tmp_path, document, detail_files={})).api_behavior.tag_models[0]

        assert entry.model == "tiny:latest"
        assert entry.modified_at == "1970-01-01T00:00:00.000000Z"
        assert entry.size == 0
        assert entry.digest == "sha256:" + "0" * 64
        assert entry.details.format == "gguf"
        assert entry.details.family == "unknown"
        assert entry.details.families is None
        assert entry.details.parameter_size == "N/A"
        assert entry.details.quantization_level == "unknown"

    def test_settings_default_path(self, monkeypatch):
        monkeypatch.delenv("HONEYPOT_CONFIG_PATH", raising=False)
        assert Settings(_env_file=None).config_path == "config/honeypot.json"

    def test_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("HONEYPOT_CONFIG_PATH", "/etc/honeypot.json")
        assert Settings(_env_file=None).config_path == "/etc/honeypot.json"


class TestValidation:
    """Test that every defect fails the whole load."""

    def test_valid_config(self, config_path):
        config = load_config(config_path)

        assert isinstance(config, HoneypotConfig)
        assert config.config_dir == config_path.parent
        assert config.resolve_detail_file("models/alpha.json").is_file()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "absent.json")
        assert "failed to open" in str(exc_info.value)

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "honeypot.json"
        path.write_text("{\"server\": ", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "JSON syntax error" in str(exc_info.value)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "honeypot.json"
        path.write_bytes(b'{"server": {"listen_address": "\xff"}}')

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "not valid UTF-8" in str(exc_info.value)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "honeypot.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_zero_port_rejected(self, tmp_path):
        document = base_document()
        document["server"]["listen_port"] = 0

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document))
        assert "'server.listen_port' cannot be 0" in str(exc_info.value)

    def test_out_of_range_port_rejected(self, tmp_path):
        document = base_document()
        document["server"]["listen_port"] = 70000

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document))
        assert "server.listen_port" in str(exc_info.value)

    def test_missing_detail_file_named(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, base_document(), detail_files={}))
        assert "models/alpha.json" in str(exc_info.value)

    def test_all_missing_detail_files_listed(self, tmp_path):
        document = base_document()
        document["api_behavior"]["show_file_map"]["beta:latest"] = "models/beta.json"

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document, detail_files={}))

        message = str(exc_info.value)
        assert "models/alpha.json" in message
        assert "models/beta.json" in message

    def test_detail_paths_relative_to_config_dir(self, tmp_path, monkeypatch):
        config_dir = tmp_path / "etc"
        config_dir.mkdir()
        path = write_config(config_dir, base_document())

        # A different working directory must not matter
        monkeypatch.chdir(tmp_path)
        assert load_config(path).config_dir == config_dir

    def test_non_string_detail_path(self, tmp_path):
        document = base_document()
        document["api_behavior"]["show_file_map"]["alpha:latest"] = 42

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document))
        assert "show_file_map" in str(exc_info.value)

    def test_duplicate_names_rejected(self, tmp_path):
        document = base_document()
        document["api_behavior"]["tag_models"].append({"name": "alpha:latest", "size": 5})

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document))
        assert "duplicate model names" in str(exc_info.value)
        assert "alpha:latest" in str(exc_info.value)

    def test_problems_are_aggregated(self, tmp_path):
        document = base_document()
        document["server"]["listen_port"] = 0

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(tmp_path, document, detail_files={}))
        assert len(exc_info.value.problems) == 2

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            LoggingConfig(log_level="verbose")

    def test_invalid_log_output(self):
        with pytest.raises(ValueError):
            LoggingConfig(log_outputs=["stdout", "syslog"])

    def test_log_level_is_normalized(self):
        assert LoggingConfig(log_level="WARN").log_level == "warn"


class TestAliasBackfill:
    """Test the alias normalization pass."""

    def test_empty_alias_backfilled(self):
        [entry] = backfill_model_aliases([CatalogEntry(name="alpha:latest")])
        assert entry.model == "alpha:latest"

    def test_sentinel_alias_backfilled(self):
        [entry] = backfill_model_aliases([CatalogEntry(name="alpha:latest", model="default:latest")])
        assert entry.model == "alpha:latest"

    def test_explicit_alias_kept(self):
        [entry] = backfill_model_aliases([CatalogEntry(name="alpha:latest", model="alpha")])
        assert entry.model == "alpha"

    def test_loaded_config_is_backfilled(self, config):
        models = {e.name: e.model for e in config.api_behavior.tag_models}
        assert models == {"alpha:latest": "alpha:latest", "beta:latest": "beta:latest"}

    def test_config_is_frozen(self, config):
        with pytest.raises(ValidationError):
            config.server = None
