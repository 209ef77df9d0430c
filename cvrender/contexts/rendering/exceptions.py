"""Exceptions raised while turning a RenderModel into a PDF."""

from typing import List, Optional, Tuple

from cvrender.utils.errors import CVRenderError


class UnsafeContentDetectedError(CVRenderError):
    """
    Raised when text that could change LaTeX structure reaches the compiler boundary.

    Indicates an escaping defect, never bad caller input: the request is
    rejected and nothing is sanitised.

    Attributes:
        findings: (location, detail) pairs describing each violation
    """

    default_user_message = "The resume could not be generated safely."

    def __init__(self, message: str, findings: Optional[List[Tuple[str, str]]] = None):
        self.findings = findings or []
        super().__init__(message)


class RenderingFailedError(CVRenderError):
    """Raised when the template engine cannot produce markup (the engine error is __cause__)."""

    def __init__(self, message: str, template_id: Optional[str] = None):
        self.template_id = template_id
        super().__init__(message)


class CompilationFailedError(CVRenderError):
    """
    Raised when the compiler exits with an error or produces no PDF.

    Attributes:
        errors: Error lines parsed from the compiler log (internal only)
        returncode: Exit status of the last compiler pass
    """

    def __init__(
        self, message: str, errors: Optional[List[str]] = None, returncode: Optional[int] = None
    ):
        self.errors = errors or []
        self.returncode = returncode
        super().__init__(message)


class CompilationTimeoutError(CVRenderError):
    """
    Raised when compilation exceeds its wall-clock deadline.

    The compiler process has been killed and reaped before this is raised.

    Attributes:
        timeout_s: Deadline that was exceeded
        pid: Process id of the killed compiler (None if it never started)
    """

    default_user_message = "The resume took too long to generate. Please try again."

    def __init__(self, timeout_s: float, pid: Optional[int] = None):
        self.timeout_s = timeout_s
        self.pid = pid
        super().__init__(f"Compilation exceeded {timeout_s}s deadline (pid={pid})")
