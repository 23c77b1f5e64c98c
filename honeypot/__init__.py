"""Decoy Ollama-compatible server backed by static configuration."""

__version__ = "1.0.0"
