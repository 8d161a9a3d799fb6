"""
Lint Service - Checks that factories and traits produce valid items
"""

import logging
from enum import Enum
from typing import Any, List

from cranker.core.errors import LintFailure
from cranker.core.persistable import error_details

logger = logging.getLogger(__name__)


class LintStrategy(Enum):
    """What to lint."""
    FACTORY = "factory"
    FACTORY_AND_TRAITS = "factory_and_traits"


class Linter:
    """Builds each factory (and optionally each trait) and reports invalid items."""

    def __init__(self, factory: Any, factory_names: List[str], strategy: LintStrategy = LintStrategy.FACTORY):
        self.factory = factory
        self.factory_names = list(factory_names)
        self.strategy = strategy
        self.failures: List[str] = []

    def lint(self) -> None:
        """
        Run the checks.

        Raises:
            LintFailure: If any factory or trait produced an invalid item
        """
        self.failures = []
        for name in self.factory_names:
            self._check(name, {})
            if self.strategy == LintStrategy.FACTORY_AND_TRAITS:
                for trait in self.factory.traits_for(name):
                    self._check(name, {'traits': [trait]}, trait)

        if self.failures:
            raise LintFailure(self.failures)
        logger.info(f"Linted {len(self.factory_names)} factories ({self.strategy.value})")

    def _check(self, name: str, overrides: dict, trait: str = None) -> None:
        label = f"{name}+{trait}" if trait else name
        try:
            item = self.factory.build(name, overrides)
        except Exception as e:
            self.failures.append(f"{label} - {type(e).__name__}: {e}")
            return

        for entry in (item if isinstance(item, list) else [item]):
            is_valid = getattr(entry, 'is_valid', None)
            if callable(is_valid) and not is_valid():
                self.failures.append(f"{label} - {type(entry).__name__}: {error_details(entry)}")
