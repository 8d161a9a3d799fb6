"""
Factory jobs and the job stack

A job is the context of one build call. Factory methods can themselves invoke
other factory methods to build dependent objects, so jobs are pushed onto a
stack and executed in last in, first out order.
"""

import inspect
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, List, Optional

from cranker.core.errors import ContractViolation, ErrorCode, FactoryError

# Options consumed by the engine itself and never passed on to models
RETURN_ATTRIBUTES = '_return_attributes'
TRAITS = 'traits'
ATTRS_SUFFIX = '_attrs'
RESERVED_OPTIONS = frozenset({RETURN_ATTRIBUTES, TRAITS})


def _is_lazy(value: Any) -> bool:
    # Classes are callable but are plain attribute values
    return callable(value) and not isinstance(value, type)


def _accepted_by(model: Callable[..., Any], values: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the attributes the model accepts as keyword arguments."""
    try:
        parameters = inspect.signature(model).parameters.values()
    except (TypeError, ValueError):
        return values

    if any(p.kind == inspect.Parameter.VAR_KEYWORD for p in parameters):
        return values
    accepted = {
        p.name for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    }
    return {key: value for key, value in values.items() if key in accepted}


@dataclass
class Job:
    """Context for a single in-flight build call."""
    target: str
    overrides: Dict[str, Any] = field(default_factory=dict)
    constructor: Optional[Callable[[], Any]] = None
    defaults: Dict[str, Any] = field(default_factory=dict)

    @property
    def return_attributes(self) -> bool:
        """True when this job should produce an attribute snapshot."""
        return bool(self.overrides.get(RETURN_ATTRIBUTES))

    @property
    def traits(self) -> List[str]:
        traits = self.overrides.get(TRAITS) or []
        if isinstance(traits, str):
            return [traits]
        return list(traits)

    @property
    def attributes(self) -> Dict[str, Any]:
        """Defaults overlaid with overrides, minus engine options."""
        merged = {**self.defaults, **self.overrides}
        return {key: value for key, value in merged.items() if key not in RESERVED_OPTIONS}

    def resolve_attributes(self) -> Dict[str, Any]:
        """
        Resolve lazy attribute values.

        Plain values are taken as they are. Callables are then invoked in
        declaration order with a namespace holding every attribute resolved so
        far, so a lazy value may depend on any plain value or earlier lazy one.
        """
        attributes = self.attributes
        resolved = {key: value for key, value in attributes.items() if not _is_lazy(value)}
        for key, value in attributes.items():
            if _is_lazy(value):
                resolved[key] = value(SimpleNamespace(**resolved))
        # Keep declaration order in the snapshot
        return {key: resolved[key] for key in attributes}

    def execute(self, model: Optional[Callable[..., Any]] = None) -> Any:
        """Produce the job's item, or a plain dict in attribute-only mode."""
        values = self.resolve_attributes()
        if self.return_attributes:
            return values

        if model is None:
            raise FactoryError(
                ErrorCode.MISSING_MODEL,
                f"Factory '{self.target}' did not name a model to instantiate",
                {'target': self.target}
            )
        return model(**_accepted_by(model, values))


class JobStack:
    """LIFO stack of jobs for the build calls currently being unwound."""

    def __init__(self):
        self._jobs: List[Job] = []

    def push(self, target: str, overrides: Dict[str, Any],
             constructor: Optional[Callable[[], Any]] = None) -> Job:
        job = Job(target=target, overrides=overrides, constructor=constructor)
        self._jobs.append(job)
        return job

    def pop(self) -> Job:
        if not self._jobs:
            raise ContractViolation("Cannot pop a job from an empty job stack")
        return self._jobs.pop()

    def current(self) -> Job:
        """
        Get the topmost job.

        Raises:
            ContractViolation: If no factory method is currently running
        """
        if not self._jobs:
            raise ContractViolation(
                "No active factory job; define(), options() and fetch() "
                "can only be used from within a factory method"
            )
        return self._jobs[-1]

    @contextmanager
    def frame(self, target: str, overrides: Dict[str, Any],
              constructor: Optional[Callable[[], Any]] = None) -> Iterator[Job]:
        """Push a job for the duration of the block, popping it on every exit path."""
        job = self.push(target, overrides, constructor)
        try:
            yield job
        finally:
            self.pop()

    @property
    def depth(self) -> int:
        return len(self._jobs)

    def clear(self) -> None:
        self._jobs.clear()

    def __len__(self) -> int:
        return len(self._jobs)

    def __repr__(self) -> str:
        return f"JobStack(depth={len(self._jobs)})"
