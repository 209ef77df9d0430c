"""Helpers shared by unit and integration tests."""

import textwrap
from pathlib import Path

from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.contexts.templating.template_metadata import TemplateMetadata
from cvrender.contexts.templating.template_store import TemplateStore

MINIMAL_TEMPLATE = textwrap.dedent(
    r"""
    \documentclass{article}
    \begin{document}
    <<< resume.basics.name or "" >>>
    <%% for job in resume.work %%>
    <<< job.position >>> -- <<< job.summary or "" >>>
    <%% endfor %%>
    <<< i18n.experience >>> <<< last_updated >>>
    \end{document}
    """
).lstrip()

# Stand-in LaTeX engine, run with the current interpreter. Markup containing
# FAKE_SLEEP hangs (writing its pid to $FAKE_ENGINE_PIDFILE when set, and first
# forking a sleeping helper whose pid goes to $FAKE_ENGINE_CHILD_PIDFILE when
# set), FAKE_FAIL exits 1 with a LaTeX-style log, anything else produces a
# (fake) PDF.
FAKE_ENGINE = textwrap.dedent(
    """
    import os
    import subprocess
    import sys
    import time
    from pathlib import Path

    tex_name = sys.argv[-1]
    stem = Path(tex_name).stem
    source = Path(tex_name).read_text(encoding="utf-8")

    if "FAKE_SLEEP" in source:
        child_pidfile = os.environ.get("FAKE_ENGINE_CHILD_PIDFILE")
        if child_pidfile:
            child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"])
            Path(child_pidfile).write_text(str(child.pid))
        pidfile = os.environ.get("FAKE_ENGINE_PIDFILE")
        if pidfile:
            Path(pidfile).write_text(str(os.getpid()))
        time.sleep(60)

    if "FAKE_FAIL" in source:
        Path(stem + ".log").write_text("! Undefined control sequence.\\nl.3 \\\\broken\\n")
        sys.exit(1)

    Path(stem + ".log").write_text("LaTeX Warning: Reference undefined.\\n")
    Path(stem + ".pdf").write_bytes(b"%PDF-1.4 fake " + source.encode("utf-8"))
    """
)


def write_template(
    root: Path,
    template_id: str,
    tier: str = "FREE",
    name: str = None,
    version: str = "1.0.0",
    content: str = MINIMAL_TEMPLATE,
    locales=("en", "es"),
    directory: str = None,
) -> Path:
    """Create a template directory with metadata.yaml, content and i18n labels."""
    template_dir = root / (directory or template_id)
    (template_dir / "i18n").mkdir(parents=True, exist_ok=True)
    locale_list = ", ".join(locales)
    (template_dir / "metadata.yaml").write_text(
        f"id: {template_id}\n"
        f"name: {name or template_id.title()}\n"
        f"version: {version}\n"
        f"requiredTier: {tier}\n"
        f"templateContentLocation: {template_id}.tex.jinja\n"
        f"supportedLocales: [{locale_list}]\n"
    )
    (template_dir / f"{template_id}.tex.jinja").write_text(content)
    (template_dir / "i18n" / "en.yaml").write_text("experience: Experience\npresent: Present\n")
    (template_dir / "i18n" / "es.yaml").write_text("experience: Experiencia\npresent: Actualidad\n")
    return template_dir


def make_metadata(
    template_id: str,
    tier: SubscriptionTier = SubscriptionTier.FREE,
    name: str = None,
    version: str = "1.0.0",
) -> TemplateMetadata:
    """TemplateMetadata without a backing directory."""
    return TemplateMetadata(
        id=template_id,
        name=name or template_id.title(),
        version=version,
        content_location=f"{template_id}.tex.jinja",
        required_tier=tier,
    )


class InMemoryTemplateStore(TemplateStore):
    """Template store serving a fixed list of descriptors."""

    def __init__(self, templates, registry_key: str = "memory"):
        super().__init__()
        self._templates = list(templates)
        self.registry_key = registry_key

    @property
    def root(self) -> Path:
        return Path(f"<{self.registry_key}>")

    def _discover(self):
        return list(self._templates)
