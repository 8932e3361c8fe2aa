"""
Run external commands and surface their failures as exceptions.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


class ExecutionError(RuntimeError):
    """
    Raised when a command cannot be started or exits with a non-zero status.

    Attributes:
        command: The executable that was run.
        code: Exit status, or None when the process never started.
        stdout: Captured standard output (empty unless captured).
        stderr: Captured standard error (empty unless captured).
    """

    def __init__(
        self,
        message: str,
        *,
        command: str,
        code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.code = code
        self.stdout = stdout
        self.stderr = stderr


@dataclass(frozen=True)
class ExecutionResult:
    code: int
    stdout: str
    stderr: str


def execute(
    command: str,
    args: Sequence[str] = (),
    *,
    capture: bool = False,
    cwd: Path | str | None = None,
    env: Optional[Mapping[str, str]] = None,
    input_text: Optional[str] = None,
) -> ExecutionResult:
    """
    Run a command to completion.

    Args:
        command: Executable to run (e.g. ``node``).
        args: Arguments passed to the executable.
        capture: Capture stdout/stderr instead of streaming them to the console.
        cwd: Working directory (defaults to the current directory).
        env: Environment for the child (defaults to the current environment).
        input_text: Text written to the child's stdin; stdin is inherited when omitted.

    Returns:
        The exit code and the trimmed captured output.

    Raises:
        ExecutionError: If the command cannot be started or exits non-zero.
    """
    argv = [command, *args]
    stdout_mode = subprocess.PIPE if capture else None
    logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd or os.getcwd())
    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            input=input_text,
            stdout=stdout_mode,
            stderr=stdout_mode,
            text=True,
            encoding="utf-8" if capture or input_text is not None else None,
            check=False,
        )
    except OSError as exc:
        raise ExecutionError(
            f'Failed to start command "{command}": {exc}',
            command=command,
        ) from exc

    stdout = (completed.stdout or "").strip() if capture else ""
    stderr = (completed.stderr or "").strip() if capture else ""
    if completed.returncode != 0:
        raise ExecutionError(
            f'Command "{command}" exited with code {completed.returncode}',
            command=command,
            code=completed.returncode,
            stdout=stdout,
            stderr=stderr,
        )
    return ExecutionResult(code=completed.returncode, stdout=stdout, stderr=stderr)
