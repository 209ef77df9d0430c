"""
Template Metadata Data Structures

Defines the immutable description of a template as discovered by a template
store: identity, version, the tier it requires and where its content lives.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from cvrender.contexts.templating.subscription import SubscriptionTier

DEFAULT_PREVIEW_URL = "https://placehold.co/300x600.png"


class Locale(Enum):
    """Languages templates can be rendered in."""

    EN = "en"
    ES = "es"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code) -> "Locale":
        """
        Look up a locale by code (case-insensitive, region suffix ignored).

        Raises:
            ValueError: If the language is not supported
        """
        if isinstance(code, cls):
            return code
        language = str(code).strip().lower().replace("_", "-").split("-")[0]
        for locale in cls:
            if locale.value == language:
                return locale
        raise ValueError(f"Unsupported locale '{code}'. Supported: {[l.value for l in cls]}")


@dataclass(frozen=True)
class TemplateParams:
    """
    Presentation parameters declared by a template.

    Attributes:
        color_palette: Default color palette name
        font_family: Default font family
        spacing: Default spacing preset
        density: Default density preset
        custom_params: Any other declared parameter, passed through untouched
    """

    color_palette: Optional[str] = None
    font_family: Optional[str] = None
    spacing: Optional[str] = None
    density: Optional[str] = None
    custom_params: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with camelCase keys; unset standard params are omitted."""
        result = {
            "colorPalette": self.color_palette,
            "fontFamily": self.font_family,
            "spacing": self.spacing,
            "density": self.density,
        }
        result = {key: value for key, value in result.items() if value is not None}
        result.update(self.custom_params)
        return result


@dataclass(frozen=True)
class TemplateMetadata:
    """
    Description of one template, owned by the store that discovered it.

    Attributes:
        id: Identifier, unique within a store
        name: Human-readable name
        version: Template version string
        content_location: Locator of the template content, relative to template_dir
        required_tier: Lowest tier allowed to use the template
        supported_locales: Locales the template has labels for (empty = any)
        preview_url: Thumbnail shown in template pickers
        params: Declared presentation parameters
        descriptions: Localized descriptions
        template_dir: Directory the descriptor was found in (not part of equality)
    """

    id: str
    name: str
    version: str
    content_location: str
    required_tier: SubscriptionTier = SubscriptionTier.FREE
    supported_locales: Tuple[Locale, ...] = ()
    preview_url: str = DEFAULT_PREVIEW_URL
    params: TemplateParams = field(default_factory=TemplateParams)
    descriptions: Mapping[Locale, str] = field(default_factory=dict)
    template_dir: Optional[Path] = field(default=None, compare=False)

    def is_accessible_by(self, tier: SubscriptionTier) -> bool:
        """True if a caller on `tier` may use this template."""
        return tier.is_at_least(self.required_tier)

    def supports_locale(self, locale: Locale) -> bool:
        return not self.supported_locales or locale in self.supported_locales

    def resolve_content_path(self) -> Path:
        """
        Resolve content_location against the descriptor directory.

        Raises:
            ValueError: If the template was not loaded from a directory, or if
                the locator points outside of it
        """
        if self.template_dir is None:
            raise ValueError(f"Template '{self.id}' has no template directory")

        base = self.template_dir.resolve()
        content_path = (base / self.content_location).resolve()
        if content_path != base and base not in content_path.parents:
            raise ValueError(
                f"Content location '{self.content_location}' of template '{self.id}' "
                f"escapes its template directory"
            )
        return content_path

    def summary(self) -> Dict[str, Any]:
        """Caller-facing listing entry."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "supportedLocales": [locale.code for locale in self.supported_locales],
            "params": self.params.to_dict(),
            "previewUrl": self.preview_url,
        }
