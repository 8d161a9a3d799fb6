"""
Fixture Service - Loading of previously built items into the digest cache

Handles loading and validation of YAML fixture files. A fixture file is a list
of records naming a target, the digest of the original request and the JSON
serialized overrides, exactly the shape written by a stats dump.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import yaml

from cranker.core.errors import FixtureFormatError
from cranker.core.job import ATTRS_SUFFIX, RETURN_ATTRIBUTES
from cranker.services.base_service import BaseService
from cranker.services.cache_service import DigestCache

REQUIRED_FIELDS = ('target', 'digest', 'overrides')


@dataclass
class FixtureRecord:
    """One fixture file entry."""
    target: str
    digest: str
    overrides: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> 'FixtureRecord':
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise FixtureFormatError(f"Fixture record {index} missing required fields: {missing}", {'index': index})

        overrides = data['overrides']
        if isinstance(overrides, str):
            try:
                overrides = json.loads(overrides) if overrides.strip() else {}
            except json.JSONDecodeError as e:
                raise FixtureFormatError(
                    f"Fixture record {index} has invalid overrides JSON: {e}", {'index': index}
                ) from e
        if overrides is None:
            overrides = {}
        if not isinstance(overrides, dict):
            raise FixtureFormatError(f"Fixture record {index} 'overrides' must be a mapping", {'index': index})

        target = data['target']
        digest = data['digest']
        if not isinstance(target, str) or not target.strip():
            raise FixtureFormatError(f"Fixture record {index} 'target' must be a non-empty string", {'index': index})
        if not isinstance(digest, str) or not digest.strip():
            raise FixtureFormatError(f"Fixture record {index} 'digest' must be a non-empty string", {'index': index})

        return cls(target=target, digest=digest, overrides=overrides)

    @property
    def attribute_only(self) -> bool:
        return self.target.endswith(ATTRS_SUFFIX) or bool(self.overrides.get(RETURN_ATTRIBUTES))


class FixtureLoader(BaseService):
    """Reads fixture files and replays them into a digest cache."""

    def _initialize(self) -> None:
        self.loaded_files: List[str] = []

    def read_records(self, filename: str) -> List[FixtureRecord]:
        """
        Parse and validate a fixture file.

        Raises:
            FixtureFormatError: If the structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        with open(filename, 'r', encoding='utf-8') as file:
            data = yaml.safe_load(file)

        if data is None:
            return []
        if not isinstance(data, list):
            raise FixtureFormatError("Fixture file root must be a list", {'path': filename})

        records = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise FixtureFormatError(f"Fixture record {index} must be a mapping", {'index': index})
            records.append(FixtureRecord.from_dict(entry, index))
        return records

    def load(self, filename: str, crank: Callable[[str, Dict[str, Any]], Any], cache: DigestCache) -> int:
        """
        Build every record not already cached and store it under its digest.

        Args:
            filename: Fixture file path; a missing file is ignored
            crank: Callable building an item from (target, overrides)
            cache: Cache receiving the built items

        Returns:
            Number of items built
        """
        if not os.path.exists(filename):
            self.log_debug(f"No fixture file at {filename}", path=filename)
            return 0

        records = self.read_records(filename)
        self.log_info(f"Loading {len(records)} fixtures from {filename}", path=filename)

        built = 0
        for record in records:
            if record.attribute_only or cache.exists(record.digest):
                continue
            cache.store(record.digest, crank(record.target, record.overrides))
            built += 1

        self.loaded_files.append(filename)
        self.log_info(f"Fixtures loaded: {built} built, {len(records) - built} reused", path=filename)
        return built

    def reload(self, cache: DigestCache) -> int:
        """Call reload() on every cached item that supports it."""
        reloaded = 0
        for item in cache.values():
            for entry in (item if isinstance(item, list) else [item]):
                reload = getattr(entry, 'reload', None)
                if callable(reload):
                    reload()
                    reloaded += 1
        return reloaded
