"""
cvrender - tier-gated resume template resolution and LaTeX rendering

Turns a structured resume (JSON Resume schema) into a PDF using a template the
caller's subscription tier allows.

Architecture:
- Templating Context: template stores, tier-gated lookup, document model and escaping
- Rendering Context: template filling, unsafe-content checks and bounded PDF compilation
"""

__version__ = "0.1.0"
