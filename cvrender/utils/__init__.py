"""
Shared utilities for cvrender.

Common functionality used across contexts:
- LaTeX escaping
- Settings loading
- Logging (detailed loguru sessions and the render event log)
- Timestamps and PDF helpers
"""

from cvrender.utils.latex_escaping import find_unescaped, to_latex, to_plaintext
from cvrender.utils.timestamp import now, now_exact

__all__ = ["find_unescaped", "to_latex", "to_plaintext", "now", "now_exact"]
