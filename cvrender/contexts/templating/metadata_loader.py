"""
Template descriptor loading.

Parses a template's metadata.yaml into TemplateMetadata. Expected format:

    id: engineering
    name: Engineering Resume
    version: 1.2.0
    requiredTier: FREE              # alias: requiredSubscriptionTier
    templateContentLocation: engineering.tex.jinja   # alias: templatePath
    supportedLocales: [en, es]
    previewUrl: https://example.com/engineering.png
    descriptions:
      en: Clean single-column layout
    params:
      colorPalette:
        default: blue
        options: [blue, green]
      fontFamily: Roboto
      sidebar: true                 # unknown keys kept as custom params
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from omegaconf import OmegaConf

from cvrender.contexts.templating.exceptions import InvalidTemplateDescriptorError
from cvrender.contexts.templating.logger import _log_debug, _log_warning
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import (
    DEFAULT_PREVIEW_URL,
    Locale,
    TemplateMetadata,
    TemplateParams,
)

METADATA_FILENAME = "metadata.yaml"

REQUIRED_FIELDS = ["id", "name", "version"]

# First key present wins
FIELD_ALIASES = {
    "requiredTier": ["requiredTier", "requiredSubscriptionTier"],
    "templateContentLocation": ["templateContentLocation", "templatePath"],
}

STANDARD_PARAMS = {
    "colorPalette": "color_palette",
    "fontFamily": "font_family",
    "spacing": "spacing",
    "density": "density",
}


def load_template_metadata(metadata_path: Path) -> TemplateMetadata:
    """
    Load one template descriptor.

    Args:
        metadata_path: Path to a metadata.yaml file

    Returns:
        TemplateMetadata whose template_dir is the descriptor's directory

    Raises:
        InvalidTemplateDescriptorError: If the file cannot be read or parsed,
            or a required field is missing
    """
    try:
        raw = OmegaConf.to_container(OmegaConf.load(metadata_path), resolve=False)
    except Exception as e:
        raise InvalidTemplateDescriptorError(f"Unreadable descriptor ({e})", metadata_path) from e

    return parse_template_metadata(raw, source=metadata_path, template_dir=metadata_path.parent)


def parse_template_metadata(
    raw: Any, source: Path = None, template_dir: Path = None
) -> TemplateMetadata:
    """
    Validate a raw descriptor mapping and build TemplateMetadata.

    Raises:
        InvalidTemplateDescriptorError: If raw is not a mapping or misses a required field
    """
    if not isinstance(raw, Mapping):
        raise InvalidTemplateDescriptorError("Descriptor must be a mapping", source)

    for field_name in REQUIRED_FIELDS:
        if _is_blank(raw.get(field_name)):
            raise InvalidTemplateDescriptorError(f"Missing required field: {field_name}", source)

    content_location = _first_present(raw, FIELD_ALIASES["templateContentLocation"])
    if _is_blank(content_location):
        raise InvalidTemplateDescriptorError(
            "Missing required field: templateContentLocation", source
        )

    metadata = TemplateMetadata(
        id=str(raw["id"]).strip(),
        name=str(raw["name"]).strip(),
        version=str(raw["version"]).strip(),
        content_location=str(content_location).strip(),
        required_tier=_parse_tier(_first_present(raw, FIELD_ALIASES["requiredTier"]), source),
        supported_locales=_parse_locales(raw.get("supportedLocales") or [], source),
        preview_url=raw.get("previewUrl") or DEFAULT_PREVIEW_URL,
        params=_parse_params(raw.get("params") or {}),
        descriptions=_parse_descriptions(raw.get("descriptions") or {}, source),
        template_dir=template_dir,
    )

    _log_debug(
        f"Loaded template metadata from {source}: id={metadata.id}, "
        f"version={metadata.version}, requiredTier={metadata.required_tier}"
    )
    return metadata


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _first_present(raw: Mapping, keys: List[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _parse_tier(value: Any, source: Path) -> SubscriptionTier:
    """Missing tier means FREE; an unknown tier is logged and treated as FREE."""
    if _is_blank(value):
        return SubscriptionTier.FREE
    try:
        return SubscriptionTier.parse(value)
    except ValueError:
        _log_warning(f"Unknown subscription tier '{value}' in {source}, defaulting to FREE")
        return SubscriptionTier.FREE


def _parse_locales(values: Any, source: Path) -> Tuple[Locale, ...]:
    if isinstance(values, str):
        values = [values]

    locales = []
    for code in values:
        try:
            locale = Locale.from_code(code)
        except ValueError:
            _log_warning(f"Unknown locale code '{code}' in supportedLocales of {source}")
            continue
        if locale not in locales:
            locales.append(locale)
    return tuple(locales)


def _parse_descriptions(values: Any, source: Path) -> Dict[Locale, str]:
    if not isinstance(values, Mapping):
        return {}

    descriptions = {}
    for code, text in values.items():
        try:
            descriptions[Locale.from_code(code)] = str(text)
        except ValueError:
            _log_warning(f"Unknown locale code '{code}' in descriptions of {source}")
    return descriptions


def _default_value(value: Any):
    """Accept either a plain value or a mapping with a 'default' key."""
    if isinstance(value, Mapping):
        value = value.get("default")
    return None if value is None else str(value)


def _parse_params(values: Any) -> TemplateParams:
    if not isinstance(values, Mapping):
        return TemplateParams()

    standard = {attr: _default_value(values.get(key)) for key, attr in STANDARD_PARAMS.items()}
    custom = {key: value for key, value in values.items() if key not in STANDARD_PARAMS}
    return TemplateParams(**standard, custom_params=custom)
