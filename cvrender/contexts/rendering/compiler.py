"""
LaTeX Compilation Module

Compiles LaTeX markup to PDF bytes with an external engine (pdflatex by
default), bounded in time and concurrency.

- Each compilation runs in its own temporary directory.
- All passes share one wall-clock deadline. When it expires, or when the
  caller cancels, the engine's process group is killed and the engine reaped
  before control returns, so no compiler (or helper it forked) outlives its
  request.
- A semaphore caps concurrent compilations.
- With docker_image set, the engine runs in a throwaway container without
  network access and with memory/cpu limits.
"""

import asyncio
import os
import re
import shlex
import shutil
import signal
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from cvrender.contexts.rendering.exceptions import CompilationFailedError, CompilationTimeoutError
from cvrender.contexts.rendering.logger import (
    _log_debug,
    _log_warning,
    log_compilation_result,
    log_compilation_start,
)
from cvrender.utils.pdf_processing import page_count

DEFAULT_JOB_NAME = "resume"

# Flags passed to the engine on every pass
ENGINE_FLAGS = [
    "-interaction=nonstopmode",
    "-halt-on-error",
    "-no-shell-escape",
    "-file-line-error",
]

# LaTeX intermediate files created during compilation
LATEX_ARTIFACTS = [".aux", ".log", ".out", ".toc"]

DOCKER_WORKDIR = "/work"


@dataclass
class CompilationResult:
    """
    Result of LaTeX compilation.

    Attributes:
        success: Whether compilation succeeded
        pdf_bytes: Generated PDF (None if failed)
        stdout: Standard output from the engine, all passes
        stderr: Standard error from the engine, all passes
        errors: List of parsed LaTeX errors
        warnings: List of parsed LaTeX warnings
        page_count: Number of pages in generated PDF (None if not available)
        returncode: Exit status of the last pass
        elapsed_s: Wall-clock compilation time
    """

    success: bool
    pdf_bytes: Optional[bytes] = None
    stdout: str = ""
    stderr: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    page_count: Optional[int] = None
    returncode: Optional[int] = None
    elapsed_s: float = 0.0


def _parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse LaTeX log file for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # -file-line-error style: "./resume.tex:12: Undefined control sequence."
    file_line_pattern = re.compile(r"^\S+\.tex:\d+: (.+)$", re.MULTILINE)
    for match in file_line_pattern.finditer(log_content):
        message = match.group(1).strip()
        if message not in errors:
            errors.append(message)

    # Additional error patterns that don't start with "!"
    additional_error_patterns = [
        r"Undefined control sequence",
        r"File ended while scanning use of",
        r"Emergency stop",
    ]
    for pattern in additional_error_patterns:
        match = re.search(rf"({pattern}.*?)$", log_content, re.MULTILINE)
        if match and not any(match.group(1) in err for err in errors):
            errors.append(match.group(1))

    # Common warning patterns
    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        for match in re.finditer(pattern, log_content, re.MULTILINE):
            warnings.append(match.group(1).strip())

    return errors, warnings


def _decode(output: Optional[bytes]) -> str:
    # Replace invalid UTF-8 bytes instead of crashing
    return output.decode("utf-8", errors="replace") if output else ""


class _ProcessState:
    """Tracks the engine process of one compilation so it can be killed on timeout."""

    def __init__(self, container_name: Optional[str] = None):
        self.pid: Optional[int] = None
        self.container_name = container_name


class LatexCompiler:
    """
    Async, bounded LaTeX-to-PDF compiler.

    Args:
        command: Engine executable, or full argv prefix (e.g. [python, fake_engine.py])
        num_passes: Engine passes per compilation (2+ for cross-references)
        timeout_s: Wall-clock deadline shared by all passes
        max_concurrent: Maximum simultaneous compilations
        keep_artifacts: Keep the temporary working directory for debugging
        docker_image: Run the engine inside this image instead of on the host
        docker_memory_mb: Container memory limit
        docker_cpus: Container cpu limit
    """

    def __init__(
        self,
        command: Union[str, Sequence[str]] = "pdflatex",
        num_passes: int = 1,
        timeout_s: float = 30.0,
        max_concurrent: int = 4,
        keep_artifacts: bool = False,
        docker_image: Optional[str] = None,
        docker_memory_mb: int = 512,
        docker_cpus: float = 1.0,
    ):
        if num_passes < 1:
            raise ValueError(f"num_passes must be at least 1, got {num_passes}")
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")

        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.num_passes = num_passes
        self.timeout_s = timeout_s
        self.max_concurrent = max_concurrent
        self.keep_artifacts = keep_artifacts
        self.docker_image = docker_image
        self.docker_memory_mb = docker_memory_mb
        self.docker_cpus = docker_cpus

        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._stats_lock = threading.Lock()
        self._stats = {"started": 0, "succeeded": 0, "failed": 0, "timed_out": 0, "in_flight": 0}

    @property
    def stats(self) -> Dict[str, int]:
        """Snapshot of compilation counters."""
        with self._stats_lock:
            return dict(self._stats)

    def _count(self, key: str, delta: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += delta

    def build_command(self, tex_name: str, work_dir: Path, state: _ProcessState) -> List[str]:
        """Argv for one engine pass."""
        engine = self.command + ENGINE_FLAGS + [tex_name]
        if not self.docker_image:
            return engine
        return [
            "docker", "run", "--rm",
            "--name", state.container_name,
            "--network", "none",
            "--memory", f"{self.docker_memory_mb}m",
            "--cpus", str(self.docker_cpus),
            "--volume", f"{work_dir}:{DOCKER_WORKDIR}",
            "--workdir", DOCKER_WORKDIR,
            self.docker_image,
        ] + engine

    async def compile(self, markup: str, job_name: str = DEFAULT_JOB_NAME) -> CompilationResult:
        """
        Compile markup to PDF.

        Args:
            markup: Complete LaTeX document
            job_name: Base name of the .tex file (also used in logs)

        Returns:
            Successful CompilationResult with pdf_bytes set

        Raises:
            CompilationFailedError: If the engine exits non-zero or produces no PDF
            CompilationTimeoutError: If the deadline expires (process already killed)
            asyncio.CancelledError: If the caller cancels (process already killed)
        """
        result = await self.run(markup, job_name)
        if not result.success:
            raise CompilationFailedError(
                f"Compilation of {job_name} failed: {'; '.join(result.errors[:3]) or 'no PDF produced'}",
                errors=result.errors,
                returncode=result.returncode,
            )
        return result

    async def run(self, markup: str, job_name: str = DEFAULT_JOB_NAME) -> CompilationResult:
        """
        Like compile(), but reports engine failures in the result instead of raising.

        Timeouts and cancellation still raise.
        """
        async with self._semaphore:
            self._count("started")
            self._count("in_flight")
            work_dir = Path(tempfile.mkdtemp(prefix="cvrender_"))
            try:
                result = await self._run_in(work_dir, markup, job_name)
            finally:
                self._count("in_flight", -1)
                if self.keep_artifacts:
                    _log_debug(f"Keeping compilation directory: {work_dir}")
                else:
                    shutil.rmtree(work_dir, ignore_errors=True)

        self._count("succeeded" if result.success else "failed")
        return result

    async def _run_in(self, work_dir: Path, markup: str, job_name: str) -> CompilationResult:
        tex_file = work_dir / f"{job_name}.tex"
        tex_file.write_text(markup, encoding="utf-8")

        state = _ProcessState(container_name=f"cvrender-{uuid.uuid4().hex[:12]}")
        log_compilation_start(job_name, work_dir, self.num_passes)
        start_time = time.monotonic()

        try:
            returncode, stdout, stderr = await asyncio.wait_for(
                self._run_passes(tex_file.name, work_dir, state), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            self._count("timed_out")
            _log_warning(
                f"{job_name}: compilation exceeded {self.timeout_s}s, killed pid {state.pid}"
            )
            raise CompilationTimeoutError(self.timeout_s, pid=state.pid) from None
        except asyncio.CancelledError:
            self._count("timed_out")
            _log_warning(f"{job_name}: compilation cancelled, killed pid {state.pid}")
            raise

        elapsed_s = time.monotonic() - start_time
        result = self._collect(work_dir, job_name, returncode, stdout, stderr)
        result.elapsed_s = elapsed_s
        log_compilation_result(job_name, result, elapsed_s)
        return result

    async def _run_passes(
        self, tex_name: str, work_dir: Path, state: _ProcessState
    ) -> Tuple[int, str, str]:
        all_stdout = []
        all_stderr = []
        returncode = 0

        # Multiple passes needed for cross-references, TOC, and page numbers
        for _ in range(self.num_passes):
            returncode, stdout, stderr = await self._run_process(
                self.build_command(tex_name, work_dir, state), work_dir, state
            )
            all_stdout.append(stdout)
            all_stderr.append(stderr)
            # Stop on fatal errors
            if returncode != 0:
                break

        return returncode, "\n".join(all_stdout), "\n".join(all_stderr)

    async def _run_process(
        self, cmd: List[str], cwd: Path, state: _ProcessState
    ) -> Tuple[int, str, str]:
        _log_debug(f"Running: {' '.join(cmd)}")
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            # Own process group, so helpers the engine forks can be killed with it
            start_new_session=True,
        )
        state.pid = process.pid
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            await self._terminate(process, state)
            raise
        return process.returncode, _decode(stdout), _decode(stderr)

    async def _terminate(self, process: asyncio.subprocess.Process, state: _ProcessState) -> None:
        """Kill the engine's process group (and container), then reap the engine."""
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        await process.wait()
        _log_debug(f"Engine process {process.pid} terminated (returncode={process.returncode})")

        if self.docker_image:
            # Killing the docker client does not stop the container itself
            killer = await asyncio.create_subprocess_exec(
                "docker", "kill", state.container_name,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await killer.wait()

    def _collect(
        self, work_dir: Path, job_name: str, returncode: int, stdout: str, stderr: str
    ) -> CompilationResult:
        errors = []
        warnings = []

        log_file = work_dir / f"{job_name}.log"
        if log_file.exists():
            # pdflatex writes log files in latin-1 encoding (font metadata contains non-UTF-8)
            errors, warnings = _parse_latex_log(log_file.read_text(encoding="latin-1"))

        pdf_path = work_dir / f"{job_name}.pdf"
        pdf_bytes = pdf_path.read_bytes() if pdf_path.exists() else None

        success = returncode == 0 and pdf_bytes is not None
        if not success and not errors:
            if pdf_bytes is None:
                errors.append("PDF file was not generated")
            else:
                errors.append(f"Compiler exited with status {returncode}")

        return CompilationResult(
            success=success,
            pdf_bytes=pdf_bytes if success else None,
            stdout=stdout,
            stderr=stderr,
            errors=errors,
            warnings=warnings,
            page_count=page_count(pdf_bytes) if success else None,
            returncode=returncode,
        )
