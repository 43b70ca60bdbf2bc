"""Subprocess execution for external collaborators.

docker, buildx and git are only ever started from here. Failures come back
as ProcessError values:

    result = run(["git", "describe", "--tags", "--abbrev=0"], cwd=repo)
    if isinstance(result, Err):
        console.error(result.error.stderr)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from tika_ci.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]

NOT_STARTED = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out or could not be started.

    `returncode` is NOT_STARTED when the process never produced an exit
    status (missing binary, timeout).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        # Trailing arguments can be long (tags, labels); show the head only
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _invoke(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    *,
    timeout: float | None,
    input: str | None,
    capture: bool,
) -> Result[subprocess.CompletedProcess[str], ProcessError]:
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(command, NOT_STARTED, partial, f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, NOT_STARTED, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, proc.stdout or "", proc.stderr or ""))
    return Ok(proc)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    input: str | None = None,
) -> Result[str, ProcessError]:
    """Run a command and capture its output.

    Args:
        cmd: Program and arguments.
        cwd: Working directory.
        env: Full environment for the child (inherits ours if None).
        timeout: Seconds before the command is killed.
        input: Text written to stdin. Secrets go here, never on argv.

    Returns:
        Ok(stdout), or Err(ProcessError) carrying the captured stderr.
    """
    result = _invoke(cmd, cwd, env, timeout=timeout, input=input, capture=True)
    if isinstance(result, Err):
        return result
    return Ok(result.value.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run a command with its output streaming straight to the CI log.

    Used for image builds. Nothing is captured, so a failure only reports
    the exit status.
    """
    result = _invoke(cmd, cwd, env, timeout=timeout, input=None, capture=False)
    if isinstance(result, Err):
        return result
    return Ok(None)
