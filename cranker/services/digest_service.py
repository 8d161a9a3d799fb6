"""
Digest Service - Content digests for build requests

A digest is the SHA-256 of a canonical JSON form of a (target, overrides)
pair. Mapping keys are sorted before hashing so the digest does not depend on
insertion order and is stable across runs and processes.

Requests whose overrides carry functions cannot be written to a stats file
and read back, so they are reported as not cacheable.
"""

import dataclasses
import hashlib
import json
from typing import Any, Dict, FrozenSet


def _is_function_value(value: Any) -> bool:
    # Classes are callable but are plain values
    return callable(value) and not isinstance(value, type)


def _code_fingerprint(code) -> str:
    """Hash of a code object's bytecode and constants, nested code included."""
    digest = hashlib.sha256(code.co_code)
    for const in code.co_consts:
        if hasattr(const, 'co_code'):
            digest.update(_code_fingerprint(const).encode('utf-8'))
        else:
            digest.update(repr(const).encode('utf-8'))
    return digest.hexdigest()[:16]


def _describe_callable(value: Any) -> str:
    module = getattr(value, '__module__', None) or ''
    name = getattr(value, '__qualname__', None) or type(value).__qualname__
    code = getattr(value, '__code__', None)
    if code is None:
        return f"<callable {module}.{name}>"
    return f"<callable {module}.{name}:{code.co_firstlineno}:{_code_fingerprint(code)}>"


def canonicalize(value: Any, _seen: FrozenSet[int] = frozenset()) -> Any:
    """
    Convert a value into a JSON-compatible structure with a fixed ordering.

    Objects already being converted higher up (back-references between
    models) are replaced by a "<ref Type>" marker.

    Args:
        value: Any override value

    Returns:
        Plain JSON data (dict, list, str, int, float, bool or None)
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if id(value) in _seen:
        return f"<ref {type(value).__qualname__}>"
    seen = _seen | {id(value)}

    if isinstance(value, dict):
        return {
            str(key): canonicalize(item, seen)
            for key, item in sorted(value.items(), key=lambda kv: str(kv[0]))
        }

    if isinstance(value, (list, tuple)):
        return [canonicalize(item, seen) for item in value]

    if isinstance(value, (set, frozenset)):
        return sorted((canonicalize(item, seen) for item in value), key=lambda item: json.dumps(item, sort_keys=True))

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: canonicalize(getattr(value, field.name), seen)
            for field in dataclasses.fields(value)
        }

    to_dict = getattr(value, 'to_dict', None)
    if callable(to_dict):
        return canonicalize(to_dict(), seen)

    # Callables are identified by name and code; their repr carries a memory address
    if callable(value):
        return _describe_callable(value)

    return repr(value)


def is_cacheable(value: Any, _seen: FrozenSet[int] = frozenset()) -> bool:
    """
    Check that overrides hold no functions, at any depth.

    Only such requests can be recorded in stats and matched against fixtures,
    since a fixture file stores overrides as JSON.
    """
    if value is None or isinstance(value, (bool, int, float, str, type)):
        return True
    if id(value) in _seen:
        return True
    seen = _seen | {id(value)}

    if isinstance(value, dict):
        return all(is_cacheable(item, seen) for item in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(is_cacheable(item, seen) for item in value)
    if dataclasses.is_dataclass(value):
        return all(is_cacheable(getattr(value, field.name), seen) for field in dataclasses.fields(value))
    return not _is_function_value(value)


def serialize_overrides(overrides: Dict[str, Any]) -> str:
    """Serialize overrides to the canonical JSON string stored in stats and fixtures."""
    return json.dumps(canonicalize(overrides), sort_keys=True, separators=(',', ':'))


def compute_digest(target: str, overrides: Dict[str, Any]) -> str:
    """
    Compute the digest of a build request.

    Args:
        target: Factory target name
        overrides: Overrides passed to the build call

    Returns:
        Hex encoded SHA-256 digest
    """
    payload = json.dumps(
        {'target': str(target), 'overrides': canonicalize(overrides)},
        sort_keys=True,
        separators=(',', ':')
    )
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()
