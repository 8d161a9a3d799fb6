"""
Configuration Factory - Centralized configuration management for cranker
Provides type-safe configuration with validation and environment variable loading.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from dataclasses import dataclass


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


PACKAGE_LOGGER = 'cranker'

VALID_LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


@dataclass
class EngineConfig:
    """Factory engine configuration with type safety and validation"""

    # Fixture and stats files
    fixture_file: Optional[str] = None
    stats_file: Optional[str] = None

    # Stats recording
    record_stats: bool = True

    # Logging
    log_level: str = 'warning'

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.log_level.lower() not in VALID_LOG_LEVELS:
            raise ConfigError(f"Invalid log_level: {self.log_level}")

        if self.fixture_file is not None and not str(self.fixture_file).strip():
            raise ConfigError("fixture_file cannot be blank")

        if self.stats_file is not None and not str(self.stats_file).strip():
            raise ConfigError("stats_file cannot be blank")

        if (self.fixture_file and self.stats_file
                and os.path.abspath(self.fixture_file) == os.path.abspath(self.stats_file)):
            raise ConfigError("fixture_file and stats_file must be different files")

    @property
    def logging_level(self) -> int:
        """Numeric logging level for the standard logging module"""
        return getattr(logging, self.log_level.upper())


class ConfigurationFactory:
    """
    Factory for creating and managing engine configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[EngineConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = 'CRANKER_') -> EngineConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Prefix for environment variables

        Returns:
            Configured EngineConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None:
                return default

            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            return value

        config = EngineConfig(
            fixture_file=get_env_var('FIXTURE_FILE'),
            stats_file=get_env_var('STATS_FILE'),
            record_stats=get_env_var('RECORD_STATS', True, bool),
            log_level=get_env_var('LOG_LEVEL', 'warning')
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        config._validate()

        self._config = config
        self._apply_log_level()
        self._logger.info(f"Configuration loaded with {env_prefix}* variables")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> EngineConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured EngineConfig instance
        """
        self._config = EngineConfig(**config_dict)
        self._apply_log_level()
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        # Update current config if loaded
        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()
            self._apply_log_level()

        return self

    def _apply_log_level(self) -> None:
        """Set the cranker logger level from the loaded configuration"""
        logging.getLogger(PACKAGE_LOGGER).setLevel(self._config.logging_level)

    def get_config(self) -> EngineConfig:
        """
        Get the current configuration.

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def is_loaded(self) -> bool:
        return self._config is not None

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            config_dict[field_info.name] = getattr(self._config, field_info.name)

        return config_dict


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> EngineConfig:
    """Get the global engine configuration"""
    return _config_factory.get_config()


def get_config_or_default() -> EngineConfig:
    """Get the global configuration, or defaults when none was loaded"""
    if _config_factory.is_loaded():
        return _config_factory.get_config()
    return EngineConfig()


def load_config(env_prefix: str = 'CRANKER_') -> EngineConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> EngineConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
