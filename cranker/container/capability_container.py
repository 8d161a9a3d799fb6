"""
Capability Container for factory methods, traits and hooks

This module provides the registry a factory consults instead of looking
methods up by name at build time. Capabilities are discovered from naming
conventions once, when the factory is constructed, and are then resolved by
key lookup.
"""

import inspect
import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

TRAIT_PREFIX = 'apply_trait_'
TRAIT_SEPARATOR = '_to_'
TRAIT_METHOD_PATTERN = re.compile(r'^apply_trait_(\w+)_to_(\w+)$')


class CapabilityKind(Enum):
    """Kinds of callables a factory can declare."""
    BUILD = "build"
    TRAIT = "trait"
    AFTER_BUILD = "after_build"
    BEFORE_CREATE = "before_create"
    AFTER_CREATE = "after_create"


HOOK_KINDS = (CapabilityKind.AFTER_BUILD, CapabilityKind.BEFORE_CREATE, CapabilityKind.AFTER_CREATE)

CapabilityKey = Tuple[CapabilityKind, str, Optional[str]]


class CapabilityNotRegisteredError(Exception):
    """Raised when attempting to get a capability that hasn't been registered."""
    pass


def _noop(*args, **kwargs) -> None:
    return None


class CapabilityContainer:
    """
    A registry of the callables declared by a factory.

    Keys are (kind, target, trait) triples; trait is None for everything but
    trait mutators. Optional hooks resolve to a no-op when not registered.
    """

    def __init__(self):
        self._capabilities: Dict[CapabilityKey, Callable] = {}

    def register(self, kind: CapabilityKind, target: str, capability: Callable,
                 trait: Optional[str] = None) -> 'CapabilityContainer':
        """
        Register a capability.

        Args:
            kind: What the callable does
            target: Factory target it applies to
            capability: The callable itself
            trait: Trait name, required for trait mutators only

        Returns:
            Self for method chaining
        """
        if not callable(capability):
            raise ValueError(f"Capability for '{target}' must be callable")
        if (kind == CapabilityKind.TRAIT) != (trait is not None):
            raise ValueError("A trait name is required for, and only for, trait capabilities")

        key = (kind, target, trait)
        if key in self._capabilities:
            logger.warning(f"Replacing existing {kind.value} capability for {target}")
        self._capabilities[key] = capability
        logger.debug(f"Registered {kind.value} capability: {target}" + (f" [{trait}]" if trait else ""))
        return self

    def get(self, kind: CapabilityKind, target: str, trait: Optional[str] = None) -> Callable:
        """
        Get a capability.

        Raises:
            CapabilityNotRegisteredError: If the capability hasn't been registered
        """
        key = (kind, target, trait)
        if key not in self._capabilities:
            raise CapabilityNotRegisteredError(
                f"No {kind.value} capability registered for '{target}'" + (f" with trait '{trait}'" if trait else "")
            )
        return self._capabilities[key]

    def get_hook(self, kind: CapabilityKind, target: str) -> Callable:
        """Get an optional hook, defaulting to a no-op."""
        return self._capabilities.get((kind, target, None), _noop)

    def has(self, kind: CapabilityKind, target: str, trait: Optional[str] = None) -> bool:
        return (kind, target, trait) in self._capabilities

    def targets(self, kind: CapabilityKind = CapabilityKind.BUILD) -> List[str]:
        """Sorted target names that have a capability of the given kind."""
        return sorted({target for (k, target, _) in self._capabilities if k == kind})

    def traits_for(self, target: str) -> List[str]:
        """Sorted trait names bound to a target."""
        return sorted(
            trait for (kind, t, trait) in self._capabilities
            if kind == CapabilityKind.TRAIT and t == target
        )

    def get_all_capabilities(self) -> Dict[str, str]:
        """Get a readable mapping of every registered capability."""
        capabilities = {}
        for (kind, target, trait), capability in self._capabilities.items():
            label = f"{kind.value}:{target}" + (f":{trait}" if trait else "")
            capabilities[label] = getattr(capability, '__name__', type(capability).__name__)
        return capabilities

    def clear(self) -> None:
        """Clear all registered capabilities. Useful for testing."""
        self._capabilities.clear()
        logger.debug("Capability container cleared")

    def __len__(self) -> int:
        return len(self._capabilities)


def split_trait_method(name: str, factory_names: List[str]) -> Optional[Tuple[str, str]]:
    """
    Split an apply_trait_<trait>_to_<target> method name.

    Both trait and target names may contain underscores, so the longest known
    factory name that ends the method name wins. Without a match the split is
    made at the last separator.

    Returns:
        (trait, target) or None if the name is not a trait method
    """
    if not TRAIT_METHOD_PATTERN.match(name):
        return None

    body = name[len(TRAIT_PREFIX):]
    for target in sorted(factory_names, key=len, reverse=True):
        suffix = f"{TRAIT_SEPARATOR}{target}"
        if body.endswith(suffix) and len(body) > len(suffix):
            return body[:-len(suffix)], target

    trait, _, target = body.rpartition(TRAIT_SEPARATOR)
    return trait, target


def declared_methods(instance: Any, stop_at: type) -> Dict[str, Callable]:
    """
    Collect public methods declared on the instance's classes below stop_at.

    Methods inherited from stop_at and its bases (the library's own API) are
    excluded. Subclasses win over their parents.
    """
    methods: Dict[str, Callable] = {}
    for cls in type(instance).__mro__:
        if cls is stop_at or issubclass(stop_at, cls):
            continue
        for name, attribute in vars(cls).items():
            if name.startswith('_') or name in methods:
                continue
            if inspect.isfunction(attribute):
                methods[name] = getattr(instance, name)
    return methods


def discover_capabilities(instance: Any, stop_at: type) -> CapabilityContainer:
    """
    Build a container from a factory's method names.

    - apply_trait_<trait>_to_<target> -> TRAIT
    - after_build_<target>, before_create_<target>, after_create_<target> -> hooks
    - any other public method -> BUILD for the target of the same name
    """
    container = CapabilityContainer()
    methods = declared_methods(instance, stop_at)
    hook_prefixes = {f"{kind.value}_": kind for kind in HOOK_KINDS}

    factory_names = []
    for name, method in methods.items():
        if TRAIT_METHOD_PATTERN.match(name):
            continue
        hook_kind = next((kind for prefix, kind in hook_prefixes.items() if name.startswith(prefix)), None)
        if hook_kind is not None:
            container.register(hook_kind, name[len(hook_kind.value) + 1:], method)
            continue
        container.register(CapabilityKind.BUILD, name, method)
        factory_names.append(name)

    for name, method in methods.items():
        split = split_trait_method(name, factory_names)
        if split:
            trait, target = split
            container.register(CapabilityKind.TRAIT, target, method, trait=trait)

    logger.debug(f"Discovered {len(container)} capabilities on {type(instance).__name__}")
    return container
