"""
Template Rendering

Fills a template's Jinja2 source with an escaped RenderModel to produce LaTeX
markup. Templates use custom delimiters to avoid conflicts with LaTeX syntax:
- Variable: <<< var >>>
- Block: <%% block %%>
- Comment: <# comment #>

Layout of a template directory:

    engineering/
        metadata.yaml
        engineering.tex.jinja      # templateContentLocation
        i18n/
            en.yaml                # section labels per locale
            es.yaml

Template context:
    resume:       RenderModel.to_context()
    i18n:         labels for the locale (falls back to en.yaml)
    locale:       locale code
    last_updated: localized "Month YYYY"
    params:       template's declared presentation parameters
"""

import threading
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from omegaconf import OmegaConf

from cvrender.contexts.rendering.exceptions import RenderingFailedError
from cvrender.contexts.rendering.logger import _log_debug, _log_error, _log_warning
from cvrender.contexts.templating.render_model import RenderModel
from cvrender.contexts.templating.template_metadata import Locale, TemplateMetadata
from cvrender.utils.timestamp import format_month_year

I18N_DIRNAME = "i18n"
FALLBACK_LOCALE = Locale.EN


def create_environment(template_dir: Path) -> Environment:
    """Jinja2 environment for one template directory."""
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        # Catches silent failures
        undefined=StrictUndefined,
        # Custom delimiters to avoid LaTeX brace conflicts
        variable_start_string="<<<",
        variable_end_string=">>>",
        block_start_string="<%%",
        block_end_string="%%>",
        comment_start_string="<#",
        comment_end_string="#>",
        # Preserve whitespace (important for LaTeX)
        trim_blocks=False,
        lstrip_blocks=False,
        keep_trailing_newline=True,
        # Values are escaped by the mapper; HTML autoescaping would corrupt them
        autoescape=False,
    )


class TemplateRenderer:
    """
    Renders templates to LaTeX markup, caching one environment per template directory.

    Args:
        today: Callable returning the date shown as "last updated" (default: date.today)
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self._environments: Dict[Path, Environment] = {}
        self._labels: Dict[Tuple[Path, Locale], Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def environment_for(self, template_dir: Path) -> Environment:
        template_dir = Path(template_dir).resolve()
        with self._lock:
            env = self._environments.get(template_dir)
            if env is None:
                env = create_environment(template_dir)
                self._environments[template_dir] = env
                _log_debug(f"Created and cached Jinja environment for {template_dir}")
            return env

    def load_labels(self, template_dir: Path, locale: Locale) -> Dict[str, Any]:
        """
        Load the section labels for a locale, falling back to English.

        Returns:
            Label mapping (empty if the template ships no labels at all)
        """
        template_dir = Path(template_dir).resolve()
        key = (template_dir, locale)
        with self._lock:
            if key in self._labels:
                return self._labels[key]

        labels_path = template_dir / I18N_DIRNAME / f"{locale.code}.yaml"
        if not labels_path.exists() and locale != FALLBACK_LOCALE:
            _log_warning(
                f"No {locale.code} labels in {template_dir}, falling back to {FALLBACK_LOCALE.code}"
            )
            labels_path = template_dir / I18N_DIRNAME / f"{FALLBACK_LOCALE.code}.yaml"

        labels = {}
        if labels_path.exists():
            labels = OmegaConf.to_container(OmegaConf.load(labels_path), resolve=True) or {}
            _log_debug(f"Loaded {len(labels)} labels from {labels_path}")

        with self._lock:
            self._labels[key] = labels
        return labels

    def build_context(
        self, metadata: TemplateMetadata, model: RenderModel, locale: Locale
    ) -> Dict[str, Any]:
        return {
            "resume": model.to_context(),
            "i18n": self.load_labels(metadata.template_dir, locale),
            "locale": locale.code,
            "last_updated": format_month_year(locale.code, self._today()),
            "params": metadata.params.to_dict(),
        }

    def _locate(self, metadata: TemplateMetadata) -> Tuple[Environment, str]:
        """Environment and loader name of a template's content file."""
        content_path = metadata.resolve_content_path()
        template_dir = metadata.template_dir.resolve()
        return self.environment_for(template_dir), content_path.relative_to(template_dir).as_posix()

    def template_source(self, metadata: TemplateMetadata) -> str:
        """
        Raw Jinja source of a template's content file.

        Raises:
            RenderingFailedError: If the source cannot be located or read
        """
        try:
            env, name = self._locate(metadata)
            source, _, _ = env.loader.get_source(env, name)
        except Exception as e:
            raise RenderingFailedError(
                f"Failed to read template '{metadata.id}': {e}", template_id=metadata.id
            ) from e
        return source

    def render(self, metadata: TemplateMetadata, model: RenderModel, locale: Locale) -> str:
        """
        Render a template to LaTeX markup.

        Args:
            metadata: Template to render (must come from a template store)
            model: Escaped resume content
            locale: Locale for labels and dates

        Returns:
            Complete LaTeX source

        Raises:
            RenderingFailedError: If the template cannot be located, parsed or
                rendered. The underlying error is chained as __cause__.
        """
        try:
            env, name = self._locate(metadata)
            template = env.get_template(name)
            markup = template.render(**self.build_context(metadata, model, locale))
        except Exception as e:
            _log_error(f"Failed to render template '{metadata.id}': {type(e).__name__}: {e}")
            raise RenderingFailedError(
                f"Failed to render template '{metadata.id}': {e}", template_id=metadata.id
            ) from e

        _log_debug(
            f"Rendered template '{metadata.id}' for locale {locale.code} ({len(markup)} chars)"
        )
        return markup
