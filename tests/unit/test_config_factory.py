"""
Configuration Factory Tests
Tests for the engine configuration and its environment loading.
"""

import logging
import os
from unittest.mock import patch

import pytest

from cranker.config_factory import (
    ConfigurationFactory, EngineConfig, ConfigError, PACKAGE_LOGGER,
    get_config, get_config_or_default, load_config, load_config_from_dict, override_config, reset_config
)


class TestEngineConfig:
    """Test EngineConfig dataclass"""

    def test_config_initialization_with_defaults(self):
        """Test EngineConfig initialization with default values"""
        config = EngineConfig()

        assert config.fixture_file is None
        assert config.stats_file is None
        assert config.record_stats is True
        assert config.log_level == 'warning'
        assert config.logging_level == logging.WARNING

    def test_config_initialization_with_custom_values(self):
        """Test EngineConfig initialization with custom values"""
        config = EngineConfig(
            fixture_file='fixtures.yml',
            stats_file='stats.yml',
            record_stats=False,
            log_level='DEBUG'
        )

        assert config.fixture_file == 'fixtures.yml'
        assert config.record_stats is False
        assert config.logging_level == logging.DEBUG

    def test_config_validation_invalid_log_level(self):
        """Test validation fails for unknown log levels"""
        with pytest.raises(ConfigError, match="Invalid log_level"):
            EngineConfig(log_level='loud')

    def test_config_validation_blank_paths(self):
        """Test validation fails for blank file names"""
        with pytest.raises(ConfigError, match="fixture_file cannot be blank"):
            EngineConfig(fixture_file='  ')

        with pytest.raises(ConfigError, match="stats_file cannot be blank"):
            EngineConfig(stats_file='')

    def test_config_validation_same_file(self):
        """Test fixture and stats files must differ"""
        with pytest.raises(ConfigError, match="must be different files"):
            EngineConfig(fixture_file='crank.yml', stats_file='./crank.yml')


class TestConfigurationFactory:
    """Test ConfigurationFactory class"""

    def setup_method(self):
        """Setup for each test method"""
        self.factory = ConfigurationFactory()
        self.factory.reset()

    def test_singleton_pattern(self):
        """Test that ConfigurationFactory implements singleton pattern"""
        assert ConfigurationFactory() is ConfigurationFactory()

    def test_load_from_environment(self):
        """Test loading configuration from environment variables"""
        env_vars = {
            'CRANKER_FIXTURE_FILE': 'test/fixtures.yml',
            'CRANKER_STATS_FILE': 'tmp/stats.yml',
            'CRANKER_RECORD_STATS': 'false',
            'CRANKER_LOG_LEVEL': 'info',
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = self.factory.load_from_environment()

        assert config.fixture_file == 'test/fixtures.yml'
        assert config.stats_file == 'tmp/stats.yml'
        assert config.record_stats is False
        assert config.log_level == 'info'

    def test_load_from_environment_defaults(self):
        """Test loading with no variables set"""
        with patch.dict(os.environ, {}, clear=True):
            config = self.factory.load_from_environment()

        assert config == EngineConfig()

    def test_load_from_environment_with_prefix(self):
        """Test loading with a custom prefix"""
        with patch.dict(os.environ, {'TEST_FIXTURE_FILE': 'other.yml'}, clear=True):
            config = self.factory.load_from_environment('TEST_')

        assert config.fixture_file == 'other.yml'

    def test_load_sets_package_log_level(self):
        """Test loading configuration sets the cranker logger level"""
        with patch.dict(os.environ, {'CRANKER_LOG_LEVEL': 'error'}, clear=True):
            self.factory.load_from_environment()

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.ERROR

        self.factory.load_from_dict({'log_level': 'debug'})
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG

        self.factory.override_setting('log_level', 'info')
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO

    def test_load_from_dict(self):
        """Test loading configuration from dictionary"""
        config = self.factory.load_from_dict({'stats_file': 'stats.yml'})

        assert config.stats_file == 'stats.yml'
        assert self.factory.is_loaded()

    def test_override_setting(self):
        """Test overriding configuration settings"""
        self.factory.load_from_dict({})

        result = self.factory.override_setting('record_stats', False)

        assert result is self.factory
        assert self.factory.get_config().record_stats is False

    def test_override_setting_applies_to_later_loads(self):
        """Test overrides survive reloading from the environment"""
        self.factory.override_setting('log_level', 'error')

        with patch.dict(os.environ, {'CRANKER_LOG_LEVEL': 'debug'}, clear=True):
            config = self.factory.load_from_environment()

        assert config.log_level == 'error'

    def test_override_setting_with_validation(self):
        """Test overrides are validated"""
        self.factory.load_from_dict({})

        with pytest.raises(ConfigError):
            self.factory.override_setting('log_level', 'loud')

    def test_get_config_before_loading(self):
        """Test getting configuration before loading raises error"""
        with pytest.raises(ConfigError, match="Configuration not loaded"):
            self.factory.get_config()

    def test_to_dict(self):
        """Test converting configuration to dictionary"""
        self.factory.load_from_dict({'fixture_file': 'fixtures.yml'})

        assert self.factory.to_dict() == {
            'fixture_file': 'fixtures.yml',
            'stats_file': None,
            'record_stats': True,
            'log_level': 'warning',
        }


class TestGlobalFunctions:
    """Test global configuration functions"""

    def test_get_config_or_default(self):
        """Test defaults are used until a configuration is loaded"""
        assert get_config_or_default() == EngineConfig()

        load_config_from_dict({'record_stats': False})

        assert get_config_or_default().record_stats is False

    def test_load_config_function(self):
        """Test global load_config function"""
        with patch.dict(os.environ, {'CRANKER_STATS_FILE': 'stats.yml'}, clear=True):
            config = load_config()

        assert get_config() is config
        assert config.stats_file == 'stats.yml'

    def test_override_and_reset(self):
        """Test global override_config and reset_config functions"""
        load_config_from_dict({})
        override_config('fixture_file', 'fixtures.yml')

        assert get_config().fixture_file == 'fixtures.yml'

        reset_config()

        with pytest.raises(ConfigError):
            get_config()
