"""
Trait Service - Resolution and application of trait mutators
"""

import logging
from typing import Any, Iterable, List

from cranker.container.capability_container import CapabilityContainer, CapabilityKind
from cranker.core.errors import UnknownTrait

logger = logging.getLogger(__name__)


class TraitResolver:
    """Applies trait mutators bound in a capability container."""

    def __init__(self, capabilities: CapabilityContainer):
        self._capabilities = capabilities

    def traits_for(self, target: str) -> List[str]:
        return self._capabilities.traits_for(target)

    def resolve(self, target: str, trait: str):
        """
        Get the mutator for a trait.

        Raises:
            UnknownTrait: If no mutator is bound for the trait and target
        """
        if not self._capabilities.has(CapabilityKind.TRAIT, target, trait):
            raise UnknownTrait(trait, target)
        return self._capabilities.get(CapabilityKind.TRAIT, target, trait)

    def apply(self, target: str, item: Any, traits: Iterable[str]) -> Any:
        """
        Apply traits to an item in the order given.

        Each mutator may change the item in place or return a replacement,
        which is what later traits (and the caller) receive.
        """
        for trait in traits:
            mutator = self.resolve(target, str(trait))
            replacement = mutator(item)
            if replacement is not None:
                item = replacement
            logger.debug(f"Applied trait {trait} to {target}")
        return item
