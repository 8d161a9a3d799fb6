"""
Services package for cranker

Contains the stateful services a factory is composed of.
"""

from .cache_service import DigestCache
from .stats_service import StatsEntry, StatsRecorder
from .fixture_service import FixtureLoader, FixtureRecord
from .trait_service import TraitResolver
from .lint_service import Linter, LintStrategy

__all__ = [
    'DigestCache',
    'StatsEntry',
    'StatsRecorder',
    'FixtureLoader',
    'FixtureRecord',
    'TraitResolver',
    'Linter',
    'LintStrategy'
]
