"""
Base Service - Common patterns and utilities for engine services

Provides:
- Consistent logging setup
- Configuration access
- Standard initialization and reset patterns
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from cranker.config_factory import EngineConfig, get_config_or_default


class BaseService(ABC):
    """
    Base class for the stateful services owned by a factory.

    Features:
    - Automatic logger setup with service-specific namespace
    - Configuration access
    - Consistent initialization and reset
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 service_config: Optional[Dict[str, Any]] = None):
        """
        Initialize base service.

        Args:
            config: Engine configuration, the global one when omitted
            service_config: Optional service-specific settings
        """
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._app_config: EngineConfig = config or get_config_or_default()
        self._service_config = service_config or {}

        self._initialize()
        self._logger.debug(f"{self.__class__.__name__} initialized")

    @abstractmethod
    def _initialize(self) -> None:
        """
        Initialize service-specific state.
        Also called by reset(), so it must leave the service empty.
        """
        pass

    def reset(self) -> None:
        """Return the service to its freshly constructed state."""
        self._initialize()
        self._logger.debug(f"{self.__class__.__name__} reset")

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value with fallback hierarchy.

        Priority:
        1. Service-specific config
        2. Engine config
        3. Default value
        """
        if key in self._service_config:
            return self._service_config[key]

        if hasattr(self._app_config, key):
            return getattr(self._app_config, key)

        return default

    def log_info(self, message: str, **context) -> None:
        log_context = {
            'service': self.__class__.__name__,
            **context
        }
        self._logger.info(message, extra=log_context)

    def log_debug(self, message: str, **context) -> None:
        log_context = {
            'service': self.__class__.__name__,
            **context
        }
        self._logger.debug(message, extra=log_context)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
