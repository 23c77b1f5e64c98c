"""
Shared fixtures for the honeypot tests.
"""
import logging

import pytest
import structlog
from fastapi.testclient import TestClient

from honeypot.config import load_config
from honeypot.logging_setup import OPS_LOGGER_NAME, REQUEST_LOGGER_NAME, LogHandles
from honeypot.models.schemas import CatalogEntry
from main import create_app

from .helpers import FakeClock, base_document, write_config


@pytest.fixture
def logs():
    return LogHandles(ops=structlog.get_logger("honeypot.tests"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return [
        CatalogEntry(name="alpha:latest", model="alpha:latest", size=100),
        CatalogEntry(name="beta:latest", model="beta:latest", size=200),
    ]


@pytest.fixture
def config_path(tmp_path):
    return write_config(tmp_path, base_document())


@pytest.fixture
def config(config_path):
    return load_config(config_path)


@pytest.fixture
def app(config, logs):
    return create_app(config, logs)


@pytest.fixture
def client(app):
    """Create a test client with proper lifespan handling."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def reset_logging():
    """Undo global structlog/stdlib changes made by setup_logging."""
    yield
    for name in (OPS_LOGGER_NAME, REQUEST_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    structlog.reset_defaults()
