"""
Factory - Build orchestration for test data

Subclass Factory and declare one method per target:

    class Factory(cranker.Factory):
        def user(self):
            return self.define(User, name="Fred", role=self.fetch("role", "user"))

        def apply_trait_admin_to_user(self, user):
            user.role = "admin"

        def after_create_user(self, user):
            ...

    factory = Factory()
    factory.create("user", traits=["admin"])

Factory methods, trait mutators and hooks are discovered once, when the
factory is instantiated, and looked up by key afterwards.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from cranker.config_factory import ConfigError, EngineConfig, get_config_or_default
from cranker.container.capability_container import CapabilityContainer, CapabilityKind, discover_capabilities
from cranker.core.errors import (
    ContractViolation, FactoryError, PersistenceFailure, UnknownFactory, ValidationFailure
)
from cranker.core.job import ATTRS_SUFFIX, RETURN_ATTRIBUTES, JobStack
from cranker.core.persistable import error_details
from cranker.services.cache_service import DigestCache
from cranker.services.digest_service import compute_digest, is_cacheable
from cranker.services.fixture_service import FixtureLoader
from cranker.services.lint_service import Linter, LintStrategy
from cranker.services.stats_service import StatsRecorder
from cranker.services.trait_service import TraitResolver

logger = logging.getLogger(__name__)

_MISSING = object()


def _as_list(item: Any) -> List[Any]:
    if isinstance(item, (list, tuple)):
        return list(item)
    return [item]


def _merge(overrides: Optional[Dict[str, Any]], extra: Dict[str, Any]) -> Dict[str, Any]:
    return {**(overrides or {}), **extra}


class Factory:
    """
    Base class for user factories.

    Holds the job stack, the fixture cache and the usage stats. All state is
    per instance; reset() returns an instance to its freshly built state.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or get_config_or_default()

        self._capabilities: CapabilityContainer = discover_capabilities(self, Factory)
        self._traits = TraitResolver(self._capabilities)
        self._jobs = JobStack()
        self._cache = DigestCache(self._config)
        self._stats = StatsRecorder(self._config)
        self._fixtures = FixtureLoader(self._config)
        self._sequence = 0

    # ----------------------------------------
    # Build strategies
    # ----------------------------------------
    def build(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """Build an item (or list of items) without saving it."""
        item, _, _ = self._build(target, _merge(overrides, kwargs))
        return item

    def create(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """
        Build and save an item.

        Saving is best effort: when save() fails the unsaved item is returned
        and after_create_<target> is not called.
        """
        item, target, attribute_only = self._build(target, _merge(overrides, kwargs))
        if attribute_only:
            return item

        for entry in _as_list(item):
            self._capabilities.get_hook(CapabilityKind.BEFORE_CREATE, target)(entry)
            if entry.is_persisted() or entry.save():
                self._capabilities.get_hook(CapabilityKind.AFTER_CREATE, target)(entry)
        return item

    def create_strict(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """
        Build and save an item, raising if it cannot be saved.

        Raises:
            PersistenceFailure: If saving any produced item fails
        """
        item, target, attribute_only = self._build(target, _merge(overrides, kwargs))
        if attribute_only:
            return item

        self._persist_strict(target, item)
        return item

    def attributes_for(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Get the attributes a factory would build with, as a plain dict."""
        overrides = _merge(overrides, kwargs)
        overrides[RETURN_ATTRIBUTES] = True
        return self.build(target, overrides)

    def debug(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """
        Build like build(), failing if the factory produced an invalid item.

        Raises:
            ValidationFailure: Naming the invalid item's type and its errors
        """
        item, _, attribute_only = self._build(target, _merge(overrides, kwargs))
        if not attribute_only:
            self._check_valid(item)
        return item

    def debug_strict(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """Same as debug(), then save the item like create_strict()."""
        item, target, attribute_only = self._build(target, _merge(overrides, kwargs))
        if not attribute_only:
            self._check_valid(item)
            self._persist_strict(target, item)
        return item

    # ----------------------------------------
    # Helpers for factory methods
    # ----------------------------------------
    def define(self, model: Any = None, **defaults) -> Any:
        """
        Make the item for the running factory method.

        Overrides given to the build call win over these defaults. Callable
        defaults are evaluated lazily with the other attributes available.
        """
        job = self._jobs.current()
        job.defaults = defaults
        return job.execute(model)

    def options(self) -> Dict[str, Any]:
        """Overrides passed to the running factory method."""
        return self._jobs.current().overrides

    def fetch(self, key: str, default: Any = _MISSING) -> Any:
        """
        Get one override of the running factory method.

        Raises:
            KeyError: If the option is absent and no default is given
        """
        options = self.options()
        if default is _MISSING:
            return options[key]
        return options.get(key, default)

    def inherit(self, target: str, overrides: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """
        Build another target with the running job's options merged in.

        The running job's options win over the given overrides, and an
        attribute-only build stays attribute-only.
        """
        merged = {**_merge(overrides, kwargs), **self.options()}
        if self._jobs.current().return_attributes:
            merged[RETURN_ATTRIBUTES] = True
        return self.build(target, merged)

    def sequence(self) -> int:
        """Next value of this factory's counter, starting at 1."""
        self._sequence += 1
        return self._sequence

    # ----------------------------------------
    # Introspection
    # ----------------------------------------
    def factory_names(self) -> List[str]:
        return self._capabilities.targets(CapabilityKind.BUILD)

    def traits_for(self, factory_name: str) -> List[str]:
        return self._traits.traits_for(factory_name)

    def lint(self, factory_names: Optional[List[str]] = None, traits: bool = False) -> None:
        """
        Check that factories (and optionally their traits) build valid items.

        Raises:
            LintFailure: Listing every invalid factory or trait
        """
        names = list(factory_names) if factory_names else self.factory_names()
        strategy = LintStrategy.FACTORY_AND_TRAITS if traits else LintStrategy.FACTORY
        Linter(self, names, strategy).lint()

    @property
    def job_depth(self) -> int:
        return self._jobs.depth

    @property
    def capabilities(self) -> CapabilityContainer:
        return self._capabilities

    @property
    def cache(self) -> DigestCache:
        return self._cache

    @property
    def stats(self) -> StatsRecorder:
        return self._stats

    # ----------------------------------------
    # Fixtures and stats
    # ----------------------------------------
    def load_fixture(self, filename: Optional[str] = None) -> int:
        """
        Create every item listed in a fixture file and cache it by digest.

        Later builds of a matching request return the cached item instead of
        building a new one.

        Returns:
            Number of items built
        """
        filename = filename or self._config.fixture_file
        if not filename:
            return 0
        return self._fixtures.load(filename, self.create_strict, self._cache)

    def reload_fixture(self) -> int:
        """Reload every cached fixture item from its store."""
        return self._fixtures.reload(self._cache)

    def dump_stats(self, filename: Optional[str] = None) -> bool:
        """
        Write usage stats, most used first.

        Returns:
            False when there were no stats to write
        """
        if not len(self._stats):
            return False

        filename = filename or self._config.stats_file
        if not filename:
            raise ConfigError("No stats file given and no stats_file configured")
        return self._stats.dump(filename)

    def reset(self) -> None:
        """
        Clear the job stack, fixture cache, stats and sequence counter.

        Raises:
            ContractViolation: If called from within a running factory method
        """
        if self._jobs.depth:
            raise ContractViolation("reset() cannot be called while a factory method is running")
        self._jobs.clear()
        self._cache.reset()
        self._stats.reset()
        self._fixtures.reset()
        self._sequence = 0

    # ----------------------------------------
    # Internals
    # ----------------------------------------
    def _build(self, target: str, overrides: Dict[str, Any]) -> Tuple[Any, str, bool]:
        item, target, attribute_only = self._crank(target, overrides)
        if not attribute_only:
            self._capabilities.get_hook(CapabilityKind.AFTER_BUILD, target)(item)
        return item, target, attribute_only

    def _crank(self, target: str, overrides: Dict[str, Any]) -> Tuple[Any, str, bool]:
        """Execute the requested factory method, crank out the target object!"""
        target = str(target)
        overrides = dict(overrides)
        if target.endswith(ATTRS_SUFFIX):
            target = target[:-len(ATTRS_SUFFIX)]
            overrides[RETURN_ATTRIBUTES] = True
        attribute_only = bool(overrides.get(RETURN_ATTRIBUTES))

        digest = compute_digest(target, overrides)
        cacheable = not attribute_only and is_cacheable(overrides)
        if cacheable:
            cached = self._cache.get(digest, _MISSING)
            if cached is not _MISSING:
                logger.debug(f"Using fixture {digest[:12]} for {target}")
                return cached, target, attribute_only

        constructor = self._constructor_for(target)
        with self._jobs.frame(target, overrides, constructor) as job:
            logger.debug(f"Cranking {target} at depth {self._jobs.depth}")
            item = constructor()
            item = self._traits.apply(target, item, job.traits)

        if cacheable:
            self._stats.record(target, overrides, digest)
        return item, target, attribute_only

    def _constructor_for(self, target: str):
        if not self._capabilities.has(CapabilityKind.BUILD, target):
            raise UnknownFactory(target)
        return self._capabilities.get(CapabilityKind.BUILD, target)

    def _persist_strict(self, target: str, item: Any) -> None:
        for entry in _as_list(item):
            self._capabilities.get_hook(CapabilityKind.BEFORE_CREATE, target)(entry)
            if not entry.is_persisted():
                self._save_strict(entry)
            self._capabilities.get_hook(CapabilityKind.AFTER_CREATE, target)(entry)

    @staticmethod
    def _save_strict(entry: Any) -> None:
        save_strict = getattr(entry, 'save_strict', None)
        if save_strict is None:
            if not entry.save():
                raise PersistenceFailure(type(entry).__name__, error_details(entry))
            return

        try:
            save_strict()
        except FactoryError:
            raise
        except Exception as e:
            raise PersistenceFailure(type(entry).__name__, error_details(entry)) from e

    @staticmethod
    def _check_valid(item: Any) -> None:
        invalid = next((entry for entry in _as_list(item) if not entry.is_valid()), None)
        if invalid is not None:
            raise ValidationFailure(type(invalid).__name__, error_details(invalid))

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(factories={len(self.factory_names())}, "
                f"jobs={self._jobs.depth}, fixtures={len(self._cache)}, stats={len(self._stats)})")
