"""
Template Finder

Looks a template up by id across the active stores and checks that the caller's
tier may use it. Existence is decided before eligibility, so a caller learns
that a premium template exists (and what tier it needs) rather than being told
it does not.
"""

from typing import Optional

from cvrender.contexts.templating.exceptions import (
    TemplateAccessDeniedError,
    TemplateNotFoundError,
)
from cvrender.contexts.templating.logger import _log_debug, _log_warning
from cvrender.contexts.templating.source_resolver import TemplateSourceResolver
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import TemplateMetadata


class TemplateFinder:
    def __init__(self, resolver: TemplateSourceResolver):
        self.resolver = resolver

    def find_by_id(self, template_id: str, tier: SubscriptionTier) -> Optional[TemplateMetadata]:
        """First match across the stores active for tier, or None."""
        for store in self.resolver.active_stores(tier):
            template = store.find_by_id(template_id)
            if template is not None:
                _log_debug(f"Template '{template_id}' found in {store.describe()}")
                return template
        return None

    def find_by_id_and_validate_access(
        self, template_id: str, caller_id: str, tier: SubscriptionTier
    ) -> TemplateMetadata:
        """
        Find a template and check the caller may use it.

        Args:
            template_id: Requested template
            caller_id: Opaque caller identifier, used for logging only
            tier: Caller's subscription tier

        Returns:
            The first matching TemplateMetadata

        Raises:
            TemplateNotFoundError: If no active store has the id
            TemplateAccessDeniedError: If the template requires a higher tier
            ConfigurationError: If the active stores cannot be resolved
        """
        template = self.find_by_id(template_id, tier)
        if template is None:
            _log_warning(f"Template '{template_id}' not found (caller={caller_id}, tier={tier})")
            raise TemplateNotFoundError(template_id)

        if not template.is_accessible_by(tier):
            _log_warning(
                f"Caller {caller_id} (tier={tier}) denied template '{template_id}' "
                f"(requires {template.required_tier})"
            )
            raise TemplateAccessDeniedError(template_id, template.required_tier, tier)

        return template
