"""
Templating Context

Responsibilities:
- Discovers template descriptors from bundled and filesystem stores
- Resolves which stores are active for a subscription tier
- Lists and finds templates, enforcing tier access
- Converts caller documents into escaped render models

Owns: Template metadata, store resolution, Document -> RenderModel mapping
Never: Invokes the LaTeX compiler
"""

from cvrender.contexts.templating.catalog import TemplateCatalog
from cvrender.contexts.templating.document import Document, load_document
from cvrender.contexts.templating.exceptions import (
    ConfigurationError,
    TemplateAccessDeniedError,
    TemplateNotFoundError,
)
from cvrender.contexts.templating.finder import TemplateFinder
from cvrender.contexts.templating.mapper import to_render_model
from cvrender.contexts.templating.source_resolver import (
    TemplateSourceResolver,
    TemplateSourceType,
    TemplateStoreRegistry,
)
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import Locale, TemplateMetadata
from cvrender.contexts.templating.template_store import (
    BundledTemplateStore,
    FilesystemTemplateStore,
    TemplateStore,
)

__all__ = [
    # Lookup
    "TemplateCatalog",
    "TemplateFinder",
    "TemplateSourceResolver",
    "TemplateSourceType",
    "TemplateStoreRegistry",
    # Stores
    "TemplateStore",
    "BundledTemplateStore",
    "FilesystemTemplateStore",
    # Data
    "Document",
    "load_document",
    "to_render_model",
    "TemplateMetadata",
    "SubscriptionTier",
    "Locale",
    # Errors
    "ConfigurationError",
    "TemplateNotFoundError",
    "TemplateAccessDeniedError",
]
