"""
Persistable collaborator contract

Items produced by factory methods are expected to follow this protocol when
they are created or debugged. Plain attribute snapshots never are.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Persistable(Protocol):
    """Structural type for objects the factory can save and validate."""

    errors: Any

    def is_persisted(self) -> bool:
        ...

    def save(self) -> bool:
        """Best-effort save, returning False on failure."""
        ...

    def save_strict(self) -> None:
        """Save or raise."""
        ...

    def is_valid(self) -> bool:
        ...


def error_details(item: Any) -> Any:
    """Get the most structured error detail an item exposes."""
    errors = getattr(item, 'errors', None)
    messages = getattr(errors, 'messages', None)
    if messages is not None:
        return messages
    return errors
