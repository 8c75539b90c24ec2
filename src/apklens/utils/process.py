"""Subprocess wrapper for the external decoder."""

import subprocess
from dataclasses import dataclass

from apklens.exceptions import ProcessError


@dataclass
class ProcessResult:
    """Captured output of a finished tool run."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_tool(
    command: list[str],
    *,
    check: bool = True,
    timeout: float | None = None,
    cwd: str | None = None,
) -> ProcessResult:
    """Run a tool to completion and capture both streams as text.

    Undecodable output bytes are replaced; decoder dumps can carry arbitrary
    resource strings. With the default ``timeout=None`` the call blocks until
    the tool exits.

    Raises:
        ProcessError: If the tool cannot be started or times out, or if it
            exits non-zero while ``check`` is set.
    """
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        raise ProcessError(command, -1, f"Timed out after {timeout}s") from e
    except (FileNotFoundError, PermissionError) as e:
        raise ProcessError(command, -1, f"Cannot execute {command[0]}: {e}") from e

    result = ProcessResult(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if check and not result.success:
        raise ProcessError(command, result.returncode, result.stderr)
    return result
