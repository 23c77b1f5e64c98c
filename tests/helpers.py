"""
Config builders and fakes shared by the test modules.
"""
import json

ALPHA_DETAIL = {
    "license": "MIT",
    "details": {"format": "gguf", "family": "llama"},
    "model_info": {
        "general.architecture": "llama",
        "tokenizer.ggml.merges": ["a b"],
        "tokenizer.ggml.token_type": [1],
        "tokenizer.ggml.tokens": ["a"],
    },
}


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def base_document() -> dict:
    return {
        "server": {"listen_address": "127.0.0.1", "listen_port": 11434},
        "logging": {"log_outputs": ["stdout"], "request_log_path": ""},
        "api_behavior": {
            "ollama_version": "0.6.0",
            "tag_models": [
                {
                    "name": "alpha:latest",
                    "size": 100,
                    "digest": "sha256:" + "a" * 64,
                    "details": {"family": "llama", "parameter_size": "1B"},
                },
                {"name": "beta:latest", "model": "beta:latest", "size": 200},
            ],
            "show_file_map": {"alpha:latest": "models/alpha.json"},
        },
    }


def write_config(directory, document: dict, detail_files: dict | None = None):
    """Write a config document and its detail files below ``directory``."""
    if detail_files is None:
        detail_files = {"models/alpha.json": ALPHA_DETAIL}

    for relative_path, content in detail_files.items():
        path = directory / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")

    config_path = directory / "honeypot.json"
    config_path.write_text(json.dumps(document), encoding="utf-8")
    return config_path
