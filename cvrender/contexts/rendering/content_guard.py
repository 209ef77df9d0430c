"""
Unsafe content detection.

Last check before markup reaches the compiler. Two conditions are verified:

1. Every string leaf of the RenderModel is fully escaped (no control
   character outside an escape sequence).
2. No raw caller string that contains a control sequence (e.g. "\\input")
   appears verbatim in the rendered markup, unless the template's own source
   already contains that text (a keyword such as "\\end{center}" legitimately
   matches template markup).

A violation means escaping was bypassed somewhere. The request is rejected
with UnsafeContentDetectedError; content is never sanitised here.
"""

import re
from typing import Any, Iterator, List, Optional, Tuple

from cvrender.contexts.rendering.exceptions import UnsafeContentDetectedError
from cvrender.contexts.rendering.logger import _log_error
from cvrender.contexts.templating.document import Document
from cvrender.contexts.templating.render_model import RenderModel
from cvrender.utils.latex_escaping import find_unescaped

CONTROL_SEQUENCE = re.compile(r"\\[A-Za-z@]+")


def iter_text_leaves(value: Any, path: str = "resume") -> Iterator[Tuple[str, str]]:
    """Yield (dotted path, text) for every string inside nested dicts and lists."""
    if isinstance(value, str):
        yield path, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from iter_text_leaves(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            yield from iter_text_leaves(item, f"{path}[{i}]")


def find_unescaped_leaves(model: RenderModel) -> List[Tuple[str, str]]:
    """(path, detail) for each model leaf holding an unescaped control character."""
    findings = []
    for path, text in iter_text_leaves(model.to_context()):
        unescaped = find_unescaped(text)
        if unescaped:
            chars = "".join(sorted({char for _, char in unescaped}))
            findings.append((path, f"unescaped {chars!r} at {[pos for pos, _ in unescaped]}"))
    return findings


def find_verbatim_commands(
    markup: str, document: Document, template_source: str = ""
) -> List[Tuple[str, str]]:
    """
    (excerpt, detail) for each raw caller string with a control sequence found in markup.

    Strings that also occur in template_source are skipped: their presence in
    the markup is explained by the template itself.
    """
    findings = []
    for text in set(document.text_leaves()):
        stripped = text.strip()
        if not CONTROL_SEQUENCE.search(stripped):
            continue
        if stripped in template_source:
            continue
        if stripped in markup:
            findings.append((stripped[:40], "raw caller text with control sequence in markup"))
    return findings


def ensure_safe(
    model: RenderModel,
    markup: Optional[str] = None,
    document: Document = None,
    template_source: str = "",
) -> None:
    """
    Reject content that could alter LaTeX structure.

    Args:
        model: RenderModel produced by the mapper
        markup: Rendered LaTeX, checked against document when both are given
        document: Raw caller document the model was built from
        template_source: Jinja source the markup was rendered from

    Raises:
        UnsafeContentDetectedError: If any check fails
    """
    findings = find_unescaped_leaves(model)
    if markup is not None and document is not None:
        findings.extend(find_verbatim_commands(markup, document, template_source))

    if findings:
        for location, detail in findings:
            _log_error(f"Unsafe content at {location}: {detail}")
        raise UnsafeContentDetectedError(
            f"Unsafe content detected in {len(findings)} place(s)", findings=findings
        )
