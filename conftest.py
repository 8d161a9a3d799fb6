"""
Global pytest configuration and fixtures.
Provides a fresh factory and clean global state for every test.
"""

import logging

import pytest

from cranker.config_factory import PACKAGE_LOGGER, EngineConfig, reset_config
from tests.factories.models import DATABASE
from tests.factories.sample_factory import SampleFactory


@pytest.fixture(scope="function", autouse=True)
def reset_global_state():
    """Reset global configuration, the cranker log level and the in-memory database."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    log_level = package_logger.level
    reset_config()
    DATABASE.clear()

    yield

    reset_config()
    package_logger.setLevel(log_level)


@pytest.fixture(scope="function")
def engine_config():
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture(scope="function")
def factory(engine_config):
    """Provide a fresh SampleFactory."""
    return SampleFactory(engine_config)


@pytest.fixture(scope="function")
def database():
    """Provide the in-memory database backing the test models."""
    return DATABASE
