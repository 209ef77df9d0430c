"""
Document Rendering

Entry point of the subsystem. Exposes the two caller operations:

    list_templates(tier, limit)  -> template summaries visible to a tier
    render(document, template_id, tier, locale, caller_id) -> RenderedDocument

Render pipeline:
    1. find the template and check the caller's tier
    2. map the Document to an escaped RenderModel
    3. fill the template (Jinja2) to get LaTeX markup
    4. verify no unescaped content reached the markup
    5. compile to PDF under the compiler's deadline

Every outcome is appended to the render event log when one is configured.
"""

import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from cvrender.contexts.rendering.compiler import LatexCompiler
from cvrender.contexts.rendering.content_guard import ensure_safe
from cvrender.contexts.rendering.logger import _log_info, _log_success, _log_warning
from cvrender.contexts.rendering.template_renderer import TemplateRenderer
from cvrender.contexts.templating.catalog import TemplateCatalog
from cvrender.contexts.templating.document import Document
from cvrender.contexts.templating.finder import TemplateFinder
from cvrender.contexts.templating.mapper import to_render_model
from cvrender.contexts.templating.source_resolver import (
    TemplateSourceResolver,
    TemplateStoreRegistry,
)
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import Locale, TemplateMetadata
from cvrender.contexts.templating.template_store import (
    BundledTemplateStore,
    FilesystemTemplateStore,
)
from cvrender.utils.config import Settings
from cvrender.utils.errors import CVRenderError
from cvrender.utils.event_logging import log_render_event

PDF_CONTENT_TYPE = "application/pdf"
DEFAULT_FILENAME = "resume.pdf"


@dataclass(frozen=True)
class RenderedDocument:
    """
    A compiled document.

    Attributes:
        content: PDF bytes
        content_type: MIME type of content
        filename: Suggested download name
        elapsed_s: Total time spent in render()
        page_count: Pages in the PDF (None if it could not be read)
        template_id: Template used
        locale: Locale code actually used
    """

    content: bytes
    content_type: str = PDF_CONTENT_TYPE
    filename: str = DEFAULT_FILENAME
    elapsed_s: float = 0.0
    page_count: Optional[int] = None
    template_id: str = ""
    locale: str = Locale.EN.code


class DocumentRenderer:
    def __init__(
        self,
        catalog: TemplateCatalog,
        finder: TemplateFinder,
        template_renderer: TemplateRenderer,
        compiler: LatexCompiler,
        events_file: Optional[Path] = None,
    ):
        self.catalog = catalog
        self.finder = finder
        self.template_renderer = template_renderer
        self.compiler = compiler
        self.events_file = events_file

    def list_templates(
        self, tier: SubscriptionTier, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Summaries of the templates visible to tier.

        Returns:
            List of {id, name, version, supportedLocales, params, previewUrl}

        Raises:
            ConfigurationError: If the active stores cannot be resolved
        """
        return [template.summary() for template in self.catalog.list_templates(tier, limit)]

    def resolve_locale(self, metadata: TemplateMetadata, locale: Union[str, Locale, None]) -> Locale:
        """
        Pick the locale to render in.

        An unknown or unsupported locale falls back to the template's first
        supported locale (English when the template lists none).
        """
        fallback = metadata.supported_locales[0] if metadata.supported_locales else Locale.EN
        if locale is None:
            return fallback
        try:
            requested = Locale.from_code(locale)
        except ValueError:
            _log_warning(f"Unknown locale '{locale}', rendering '{metadata.id}' in {fallback.code}")
            return fallback
        if not metadata.supports_locale(requested):
            _log_warning(
                f"Template '{metadata.id}' does not support {requested.code}, "
                f"rendering in {fallback.code}"
            )
            return fallback
        return requested

    def render_markup(
        self,
        document: Union[Document, Mapping[str, Any]],
        template_id: str,
        tier: SubscriptionTier,
        locale: Union[str, Locale, None] = Locale.EN,
        caller_id: str = "anonymous",
    ) -> str:
        """
        Produce the checked LaTeX markup render() would compile.

        Raises:
            Same as render(), except the compilation errors
        """
        if not isinstance(document, Document):
            document = Document.from_dict(document)
        _, _, markup = self._prepare(document, template_id, tier, locale, caller_id)
        return markup

    def _prepare(
        self,
        document: Document,
        template_id: str,
        tier: SubscriptionTier,
        locale: Union[str, Locale, None],
        caller_id: str,
    ) -> Tuple[TemplateMetadata, Locale, str]:
        metadata = self.finder.find_by_id_and_validate_access(template_id, caller_id, tier)
        resolved_locale = self.resolve_locale(metadata, locale)

        model = to_render_model(document)
        ensure_safe(model)
        markup = self.template_renderer.render(metadata, model, resolved_locale)
        ensure_safe(model, markup, document, self.template_renderer.template_source(metadata))
        return metadata, resolved_locale, markup

    async def render(
        self,
        document: Union[Document, Mapping[str, Any]],
        template_id: str,
        tier: SubscriptionTier,
        locale: Union[str, Locale, None] = Locale.EN,
        caller_id: str = "anonymous",
        request_id: Optional[str] = None,
    ) -> RenderedDocument:
        """
        Render a document to PDF.

        Args:
            document: Document, or a JSON Resume mapping
            template_id: Template to render with
            tier: Caller's subscription tier
            locale: Requested locale (falls back, see resolve_locale)
            caller_id: Opaque caller identifier for logs and events
            request_id: Correlation id (generated when omitted)

        Returns:
            RenderedDocument with the PDF bytes

        Raises:
            ConfigurationError: Template stores misconfigured
            TemplateNotFoundError: No active store has template_id
            TemplateAccessDeniedError: Template requires a higher tier
            UnsafeContentDetectedError: Escaping was bypassed
            RenderingFailedError: Template engine failed
            CompilationFailedError: Compiler reported an error
            CompilationTimeoutError: Compiler exceeded its deadline
        """
        request_id = request_id or uuid.uuid4().hex
        start_time = time.monotonic()
        if not isinstance(document, Document):
            document = Document.from_dict(document)

        _log_info(
            f"Render started - request={request_id}, template={template_id}, "
            f"caller={caller_id}, tier={tier}, locale={locale}"
        )

        try:
            metadata, resolved_locale, markup = self._prepare(
                document, template_id, tier, locale, caller_id
            )
            result = await self.compiler.compile(markup)
        except CVRenderError as e:
            log_render_event(
                event_type="render_failed",
                request_id=request_id,
                source="rendering",
                events_file=self.events_file,
                template_id=template_id,
                caller_id=caller_id,
                tier=tier.name,
                error_type=type(e).__name__,
                elapsed_s=round(time.monotonic() - start_time, 3),
            )
            raise

        elapsed_s = time.monotonic() - start_time
        rendered = RenderedDocument(
            content=result.pdf_bytes,
            elapsed_s=elapsed_s,
            page_count=result.page_count,
            template_id=metadata.id,
            locale=resolved_locale.code,
        )

        _log_success(
            f"Render completed - request={request_id}, template={metadata.id}, "
            f"size={len(rendered.content)} bytes, pages={rendered.page_count}, {elapsed_s:.2f}s"
        )
        log_render_event(
            event_type="render_completed",
            request_id=request_id,
            source="rendering",
            events_file=self.events_file,
            template_id=metadata.id,
            caller_id=caller_id,
            tier=tier.name,
            locale=resolved_locale.code,
            size_bytes=len(rendered.content),
            page_count=rendered.page_count,
            elapsed_s=round(elapsed_s, 3),
        )
        return rendered


def build_registry(settings: Settings) -> TemplateStoreRegistry:
    """Register the bundled store and, when a path is configured, the filesystem store."""
    registry = TemplateStoreRegistry()
    registry.register(BundledTemplateStore.registry_key, BundledTemplateStore())
    if settings.template.source.path:
        registry.register(
            FilesystemTemplateStore.registry_key,
            FilesystemTemplateStore(Path(settings.template.source.path)),
        )
    return registry


def build_document_renderer(
    settings: Settings, registry: Optional[TemplateStoreRegistry] = None
) -> DocumentRenderer:
    """Wire a DocumentRenderer from settings."""
    registry = registry or build_registry(settings)
    resolver = TemplateSourceResolver(
        registry,
        source_types=settings.template.source.types,
        tier_source_types=settings.template.source.tier_types,
    )
    compiler_settings = settings.compiler
    compiler = LatexCompiler(
        command=compiler_settings.command,
        num_passes=compiler_settings.num_passes,
        timeout_s=compiler_settings.timeout_s,
        max_concurrent=compiler_settings.max_concurrent,
        keep_artifacts=compiler_settings.keep_artifacts,
        docker_image=compiler_settings.docker_image,
        docker_memory_mb=compiler_settings.docker_memory_mb,
        docker_cpus=compiler_settings.docker_cpus,
    )
    events_file = settings.logging.render_events_file
    return DocumentRenderer(
        catalog=TemplateCatalog(resolver),
        finder=TemplateFinder(resolver),
        template_renderer=TemplateRenderer(),
        compiler=compiler,
        events_file=Path(events_file) if events_file else None,
    )
