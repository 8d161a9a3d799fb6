"""
cranker - test data factories

Declarative factory methods, traits, nested builds and digest-keyed fixture
reuse for automated tests.
"""

from cranker.core.errors import (
    ContractViolation,
    ErrorCode,
    FactoryError,
    FixtureFormatError,
    LintFailure,
    PersistenceFailure,
    UnknownFactory,
    UnknownTrait,
    ValidationFailure,
)
from cranker.core.persistable import Persistable
from cranker.factory import Factory

__version__ = "0.3.0"

__all__ = [
    'Factory',
    'Persistable',
    'ErrorCode',
    'FactoryError',
    'ContractViolation',
    'UnknownFactory',
    'UnknownTrait',
    'ValidationFailure',
    'PersistenceFailure',
    'FixtureFormatError',
    'LintFailure'
]
