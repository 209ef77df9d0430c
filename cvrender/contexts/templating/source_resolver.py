"""
Template Source Resolution

Decides which template stores take part in a lookup for a given subscription
tier. Stores are looked up by key in a runtime registry, so adding a new kind
of store means registering an instance, not changing the resolver.

Configuration (see cvrender.utils.config):

    template:
      source:
        types: [FILESYSTEM, BUNDLED]     # priority order, first wins on id conflicts
        tier_types:
          FREE: [BUNDLED]
"""

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from cvrender.contexts.templating.exceptions import ConfigurationError
from cvrender.contexts.templating.logger import _log_debug, _log_info
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_store import TemplateStore


class TemplateSourceType(Enum):
    """Known store types and the registry key each one is registered under."""

    BUNDLED = "bundled"
    FILESYSTEM = "filesystem"

    @property
    def registry_key(self) -> str:
        return self.value


DEFAULT_SOURCE_TYPES = [TemplateSourceType.BUNDLED.name]


def registry_key_for(source_type) -> str:
    """
    Map a configured source type to the registry key its store uses.

    Known types use TemplateSourceType; any other name maps to its lower-cased
    form, so custom stores only need to be registered under that key.
    """
    if isinstance(source_type, TemplateSourceType):
        return source_type.registry_key
    name = str(source_type).strip()
    try:
        return TemplateSourceType[name.upper()].registry_key
    except KeyError:
        return name.lower()


class TemplateStoreRegistry:
    """Fixed mapping of registry key -> store instance."""

    def __init__(self, stores: Optional[Mapping[str, TemplateStore]] = None):
        self._stores: Dict[str, TemplateStore] = dict(stores or {})

    def register(self, key: str, store: TemplateStore) -> None:
        self._stores[key] = store

    def get(self, key: str) -> TemplateStore:
        """
        Raises:
            KeyError: If nothing is registered under key
        """
        if key not in self._stores:
            raise KeyError(f"Unsupported source: {key}. Available: {self.available_sources()}")
        return self._stores[key]

    def available_sources(self) -> List[str]:
        return sorted(self._stores)

    def __contains__(self, key: str) -> bool:
        return key in self._stores


class TemplateSourceResolver:
    """
    Returns the ordered, non-empty list of stores active for a tier.

    Args:
        registry: Registry of store instances
        source_types: Default ordered list of source type names
        tier_source_types: Optional per-tier override of source_types,
            keyed by tier name or SubscriptionTier
    """

    def __init__(
        self,
        registry: TemplateStoreRegistry,
        source_types: Optional[Sequence[str]] = None,
        tier_source_types: Optional[Mapping] = None,
    ):
        self.registry = registry
        self.source_types = list(source_types or [])
        self.tier_source_types = {
            SubscriptionTier.parse(tier): list(types)
            for tier, types in (tier_source_types or {}).items()
        }

    def configured_types(self, tier: SubscriptionTier) -> List[str]:
        """Source types for tier: tier override, else default list, else BUNDLED."""
        types = self.tier_source_types.get(tier) or self.source_types
        return [str(t.name if isinstance(t, TemplateSourceType) else t) for t in types] or list(
            DEFAULT_SOURCE_TYPES
        )

    def active_stores(self, tier: SubscriptionTier) -> List[TemplateStore]:
        """
        Resolve the active stores for tier, in priority order.

        Every configured type is checked before any is mapped, so one error
        names all missing types at once.

        Raises:
            ConfigurationError: If any configured type has no registered store,
                or if no store resolves at all
        """
        configured = self.configured_types(tier)
        _log_debug(f"Resolving template stores for tier={tier}, types={configured}")

        missing = [
            (source_type, registry_key_for(source_type))
            for source_type in configured
            if registry_key_for(source_type) not in self.registry
        ]
        if missing:
            details = ", ".join(f"type '{t}' (expected key: '{key}')" for t, key in missing)
            raise ConfigurationError(
                f"Missing template store for configured source type(s): {details}. "
                f"Available sources: {self.registry.available_sources()}",
                missing=missing,
                available=self.registry.available_sources(),
            )

        stores = _unique(self.registry.get(registry_key_for(t)) for t in configured)
        if not stores:
            raise ConfigurationError(
                f"No template stores resolved for configured types: {configured}. "
                f"Available sources: {self.registry.available_sources()}",
                available=self.registry.available_sources(),
            )

        _log_info(
            f"Active template stores for tier={tier}: "
            f"{[store.describe() for store in stores]}"
        )
        return stores


def _unique(stores: Iterable[TemplateStore]) -> List[TemplateStore]:
    """Drop repeated stores, keeping the first (highest priority) position."""
    result = []
    for store in stores:
        if not any(store is seen for seen in result):
            result.append(store)
    return result
