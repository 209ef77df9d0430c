"""Unit tests for LaTeX escaping, its inverse and the unescaped-content detector."""

import pytest

from cvrender.utils.latex_escaping import (
    LATEX_ESCAPES,
    escape_url,
    find_unescaped,
    is_escaped,
    to_latex,
    to_plaintext,
)

TRICKY_STRINGS = [
    "",
    "plain text",
    "50% {bonus} \\injected",
    "\\textbackslash{}",
    "\\\\ double backslash",
    "$x^2_i$ & #1 ~ %",
    "<script>alert('x')</script>",
    "}{",
    "\\{already\\}",
    "C# & F# at 100%",
    "ümlauts and ñ stay as they are",
]


@pytest.mark.unit
def test_injection_scenario_escapes_every_control_character():
    """Command names and braces from callers are typeset, never interpreted."""
    assert to_latex("50% {bonus} \\injected") == r"50\% \{bonus\} \textbackslash{}injected"


@pytest.mark.unit
@pytest.mark.parametrize("char,expected", sorted(LATEX_ESCAPES.items()))
def test_each_special_character(char, expected):
    """Test the escape sequence of each special character."""
    assert to_latex(char) == expected


@pytest.mark.unit
def test_backslash_escape_is_not_re_escaped():
    """A sequential replace would turn \\textbackslash{} into \\textbackslash\\{\\}."""
    assert to_latex("a\\b") == r"a\textbackslash{}b"
    assert to_latex("{\\}") == r"\{\textbackslash{}\}"


@pytest.mark.unit
@pytest.mark.parametrize("text", TRICKY_STRINGS)
def test_to_plaintext_inverts_to_latex(text):
    """Test that to_plaintext() reverses to_latex()."""
    assert to_plaintext(to_latex(text)) == text


@pytest.mark.unit
@pytest.mark.parametrize("text", TRICKY_STRINGS)
def test_escaped_output_has_no_unescaped_characters(text):
    """Test that escaped text passes the detector."""
    assert find_unescaped(to_latex(text)) == []
    assert is_escaped(to_latex(text))


@pytest.mark.unit
def test_to_latex_handles_none_and_empty():
    """Test escaping of empty input."""
    assert to_latex("") == ""
    assert to_latex(None) == ""
    assert to_plaintext("") == ""


class TestFindUnescaped:
    """find_unescaped() reports structural characters with their positions."""

    @pytest.mark.unit
    def test_reports_raw_percent(self):
        """Test detection of a raw percent sign."""
        assert find_unescaped("50% off") == [(2, "%")]

    @pytest.mark.unit
    def test_reports_command_and_braces(self):
        """Test detection of a raw command and braces."""
        assert find_unescaped(r"\textbf{x}") == [(0, "\\"), (7, "{"), (9, "}")]

    @pytest.mark.unit
    def test_accepts_escape_sequences(self):
        """Test that escape sequences are not reported."""
        assert find_unescaped(r"50\% \{ok\} \textasciitilde{}") == []

    @pytest.mark.unit
    def test_angle_brackets_are_not_control_characters(self):
        """Test that raw angle brackets are not reported."""
        assert find_unescaped("a < b > c") == []


class TestEscapeUrl:
    """escape_url() output is safe inside \\href{...}."""

    @pytest.mark.unit
    def test_plain_url_is_unchanged(self):
        """Test that an ordinary URL passes through."""
        assert escape_url("https://example.com/path?q=1") == "https://example.com/path?q=1"

    @pytest.mark.unit
    def test_tilde_and_underscore_are_percent_encoded(self):
        """Test percent-encoding of tilde and underscore."""
        assert escape_url("https://example.com/~ada_l") == r"https://example.com/\%7Eada\%5Fl"

    @pytest.mark.unit
    def test_braces_and_spaces_are_percent_encoded(self):
        """Test percent-encoding of braces and spaces."""
        assert escape_url("https://x.com/a b{c}") == r"https://x.com/a\%20b\%7Bc\%7D"

    @pytest.mark.unit
    def test_existing_percent_encoding_is_kept(self):
        """Test that valid percent-escapes are not double encoded."""
        assert escape_url("https://x.com/a%20b") == r"https://x.com/a\%20b"

    @pytest.mark.unit
    def test_stray_percent_is_encoded(self):
        """Test encoding of a percent sign without hex digits."""
        assert escape_url("https://x.com/?q=100%") == r"https://x.com/?q=100\%25"

    @pytest.mark.unit
    def test_fragment_and_ampersand_are_escaped(self):
        """Test LaTeX escaping of fragment and query separators."""
        assert escape_url("https://x.com/?a=1&b=2#top") == r"https://x.com/?a=1\&b=2\#top"

    @pytest.mark.unit
    def test_backslash_cannot_survive(self):
        """Test that no backslash survives URL escaping."""
        assert "\\input" not in escape_url("https://x.com/\\input{/etc/passwd}")
        assert find_unescaped(escape_url("https://x.com/\\input{/etc/passwd}")) == []
