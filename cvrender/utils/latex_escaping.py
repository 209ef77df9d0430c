"""
LaTeX escaping utilities.

Converts caller-supplied plaintext into LaTeX that typesets the same characters
without changing document structure, and back again.

Functions:
    to_latex: Escape plaintext for LaTeX (single pass, total, deterministic)
    to_plaintext: Exact inverse of to_latex
    find_unescaped: Locate control characters not covered by an escape sequence
    escape_url: Make a URL safe to place inside \\href{...}
"""

import re
from typing import List, Tuple
from urllib.parse import quote

# Characters with syntactic meaning in LaTeX, mapped to their escaped form.
# < and > are included because the OT1 font encoding prints them as ¡ and ¿.
LATEX_ESCAPES = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "#": r"\#",
    "^": r"\textasciicircum{}",
    "_": r"\_",
    "~": r"\textasciitilde{}",
    "%": r"\%",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
}

LATEX_SPECIAL_CHARS = "\\{}$&#^_~%"

# Longest sequences first so \textbackslash{} is never read as \t + ...
_UNESCAPE_PATTERN = re.compile(
    "|".join(re.escape(seq) for seq in sorted(LATEX_ESCAPES.values(), key=len, reverse=True))
)
_ESCAPE_TABLE = str.maketrans(LATEX_ESCAPES)
_PLAINTEXT_BY_SEQUENCE = {seq: char for char, seq in LATEX_ESCAPES.items()}

# Characters a URL may keep verbatim once percent-encoded
_URL_SAFE = ":/?=@.-+,;!*'()[]"


def to_latex(plaintext_str: str) -> str:
    """
    Convert plaintext to LaTeX by escaping special characters.

    Every character is translated independently in a single pass, so an
    escape sequence produced for one character is never re-escaped by the
    rule for another (a backslash becomes ``\\textbackslash{}``, not
    ``\\textbackslash\\{\\}``).

    Args:
        plaintext_str: Plain text string

    Returns:
        LaTeX string with special characters escaped

    Example:
        >>> to_latex("AI & Machine Learning")
        'AI \\\\& Machine Learning'
        >>> to_latex("87% on-time delivery")
        '87\\\\% on-time delivery'
    """
    if not plaintext_str:
        return ""
    return plaintext_str.translate(_ESCAPE_TABLE)


def to_plaintext(latex_str: str) -> str:
    """
    Reverse to_latex().

    Only the sequences to_latex() emits are recognised; any other text is
    returned unchanged, so ``to_plaintext(to_latex(s)) == s`` for every ``s``.
    """
    if not latex_str:
        return ""
    return _UNESCAPE_PATTERN.sub(lambda m: _PLAINTEXT_BY_SEQUENCE[m.group(0)], latex_str)


def find_unescaped(latex_str: str) -> List[Tuple[int, str]]:
    """
    Find LaTeX control characters that are not part of an escape sequence.

    Walks the string, skipping over every sequence to_latex() can produce.
    Whatever special character remains is structural and would be
    interpreted by the compiler.

    Args:
        latex_str: Text that is expected to be fully escaped

    Returns:
        List of (position, character) for each unescaped control character.
        Empty when the text is safe.
    """
    found = []
    pos = 0
    while pos < len(latex_str):
        match = _UNESCAPE_PATTERN.match(latex_str, pos)
        if match:
            pos = match.end()
            continue
        char = latex_str[pos]
        if char in LATEX_SPECIAL_CHARS:
            found.append((pos, char))
        pos += 1
    return found


def is_escaped(latex_str: str) -> bool:
    """True if latex_str contains no unescaped control character."""
    return not find_unescaped(latex_str)


def escape_url(url: str) -> str:
    """
    Prepare a URL for use as the first argument of \\href.

    Percent-encodes everything outside a conservative safe set (braces,
    backslashes, carets, tildes and spaces become %XX), then escapes the
    remaining % and # for LaTeX. hyperref turns ``\\%`` and ``\\#`` back into
    the literal characters in the link target.
    """
    if not url:
        return ""
    encoded = quote(url, safe=_URL_SAFE + "%#&")
    # Re-encode any literal % that is not followed by two hex digits
    encoded = re.sub(r"%(?![0-9A-Fa-f]{2})", "%25", encoded)
    # quote() never encodes _ and ~, both of which are LaTeX control characters
    encoded = encoded.replace("_", "%5F").replace("~", "%7E")
    return encoded.replace("%", r"\%").replace("#", r"\#").replace("&", r"\&")
