"""Exceptions for template resolution and access control."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.utils.errors import CVRenderError


class ConfigurationError(CVRenderError):
    """
    Raised when configured template source types cannot be resolved.

    Fatal: surfaced on first use and never retried.

    Attributes:
        missing: (source type, expected registry key) pairs with no registered store
        available: Registry keys that do have a store
    """

    default_user_message = "Templates are temporarily unavailable."

    def __init__(
        self,
        message: str,
        missing: Optional[List[Tuple[str, str]]] = None,
        available: Optional[List[str]] = None,
    ):
        self.missing = missing or []
        self.available = available or []
        super().__init__(message)


class InvalidTemplateDescriptorError(ValueError):
    """
    Raised when a template descriptor (metadata.yaml) is malformed or incomplete.

    Template stores catch this during discovery, log it and skip the descriptor.
    """

    def __init__(self, message: str, source: Optional[Path] = None):
        self.source = source
        super().__init__(f"{message} in {source}" if source else message)


class TemplateNotFoundError(CVRenderError):
    """Raised when no active template store contains the requested id."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(
            f"Template not found: {template_id}",
            user_message=f"Template '{template_id}' does not exist.",
        )


class TemplateAccessDeniedError(CVRenderError):
    """
    Raised when a template exists but the caller's tier is too low.

    Kept distinct from TemplateNotFoundError so callers can offer an upgrade.

    Attributes:
        template_id: Requested template
        required_tier: Tier the template requires
        caller_tier: Tier the caller has
    """

    def __init__(
        self, template_id: str, required_tier: SubscriptionTier, caller_tier: SubscriptionTier
    ):
        self.template_id = template_id
        self.required_tier = required_tier
        self.caller_tier = caller_tier
        super().__init__(
            f"Template '{template_id}' requires {required_tier} but caller has {caller_tier}",
            user_message=(
                f"Template '{template_id}' requires the {required_tier.display_name} plan "
                f"or higher."
            ),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "templateId": self.template_id,
            "requiredTier": self.required_tier.name,
            "callerTier": self.caller_tier.name,
        }
