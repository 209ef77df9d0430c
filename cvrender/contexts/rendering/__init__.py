"""
Rendering Context

Responsibilities:
- Fills LaTeX templates with escaped resume content
- Rejects markup carrying unescaped caller content
- Compiles LaTeX to PDF under a deadline and concurrency limit
- Translates compiler failures into typed errors

Owns: Template filling, LaTeX compilation, PDF output
Never: Decides which templates a caller may use
"""
