"""
Stats Service - Usage statistics for factory builds

Counts how often each distinct build request (identified by its digest) is
cranked out. Dumped stats use the same record shape as fixture files, so the
most used requests can be promoted to fixtures.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import yaml

from cranker.services.base_service import BaseService
from cranker.services.digest_service import serialize_overrides


@dataclass
class StatsEntry:
    """Usage count for one build request."""
    target: str
    overrides: str
    digest: str
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StatsRecorder(BaseService):
    """Frequency counter keyed by build request digest."""

    def _initialize(self) -> None:
        self._entries: Dict[str, StatsEntry] = {}

    @property
    def enabled(self) -> bool:
        return bool(self.get_config_value('record_stats', True))

    def record(self, target: str, overrides: Dict[str, Any], digest: str) -> Optional[StatsEntry]:
        """
        Count one build of a request.

        Args:
            target: Factory target name
            overrides: Overrides the build was called with
            digest: Digest of the request

        Returns:
            The updated entry, or None when recording is disabled
        """
        if not self.enabled:
            return None

        current = self._entries.get(digest)
        count = current.count + 1 if current else 1
        entry = StatsEntry(
            target=target,
            overrides=serialize_overrides(overrides),
            digest=digest,
            count=count
        )
        self._entries[digest] = entry
        return entry

    def get(self, digest: str) -> Optional[StatsEntry]:
        return self._entries.get(digest)

    def count(self, digest: str) -> int:
        entry = self._entries.get(digest)
        return entry.count if entry else 0

    def entries(self) -> List[StatsEntry]:
        """All entries, most used first."""
        return sorted(self._entries.values(), key=lambda entry: -entry.count)

    def clear(self) -> None:
        self._initialize()

    def dump(self, filename: str) -> bool:
        """
        Write the stats to a YAML file.

        Args:
            filename: Destination path

        Returns:
            True if a file was written, False when there was nothing to dump
        """
        if not self._entries:
            return False

        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(filename, 'w', encoding='utf-8') as file:
            yaml.safe_dump([entry.to_dict() for entry in self.entries()], file, sort_keys=False)

        self.log_info(f"Dumped {len(self._entries)} stats entries to {filename}", path=filename)
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StatsRecorder(entries={len(self._entries)})"
