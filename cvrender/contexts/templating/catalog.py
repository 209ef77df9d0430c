"""
Template Catalog

Lists the templates a caller on a given tier can see, across every active
store. Stores are read in priority order; when two stores hold the same id the
earlier store's descriptor is kept.
"""

from typing import List, Optional

from cvrender.contexts.templating.logger import _log_debug
from cvrender.contexts.templating.source_resolver import TemplateSourceResolver
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import TemplateMetadata


class TemplateCatalog:
    def __init__(self, resolver: TemplateSourceResolver):
        self.resolver = resolver

    def list_templates(
        self, tier: SubscriptionTier, limit: Optional[int] = None
    ) -> List[TemplateMetadata]:
        """
        List templates visible to tier.

        Args:
            tier: Caller's subscription tier
            limit: Maximum number of results; None or <= 0 means no limit

        Returns:
            Templates in store priority order, then discovery order

        Raises:
            ConfigurationError: If the active stores for tier cannot be resolved
        """
        stores = self.resolver.active_stores(tier)

        merged = {}
        for store in stores:
            for template in store.find_all():
                if template.id in merged:
                    _log_debug(
                        f"Template '{template.id}' from {store.describe()} shadowed by "
                        f"higher-priority store"
                    )
                    continue
                merged[template.id] = template

        # Filter first, truncate after, so hidden templates never eat into the limit
        visible = [template for template in merged.values() if template.is_accessible_by(tier)]
        if limit is not None and limit > 0:
            visible = visible[:limit]

        _log_debug(
            f"Listed {len(visible)} of {len(merged)} templates for tier={tier} (limit={limit})"
        )
        return visible
