"""
Container package for factory capability registration.
"""

from .capability_container import (
    CapabilityContainer,
    CapabilityKind,
    CapabilityNotRegisteredError,
    discover_capabilities,
)

__all__ = [
    'CapabilityContainer',
    'CapabilityKind',
    'CapabilityNotRegisteredError',
    'discover_capabilities'
]
