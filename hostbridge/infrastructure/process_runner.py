"""Process Runner — runs one external command to completion and captures its output.

Invariants:
    - stdout and stderr are fully drained before the exit code is read
    - Output is decoded as UTF-8 with replacement; undecodable bytes never raise
    - run() never raises for command failures: a missing executable, a timeout, or an
      OS error becomes a CommandResult with a non-zero exit code and a diagnostic in stderr
    - env entries are layered on top of the parent environment, never replacing it
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""
    command: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def diagnostic(self) -> str:
        """stderr if the command wrote any, else stdout (npm reports some errors there)."""
        return (self.stderr or self.stdout).strip()


class ProcessRunner:
    """subprocess.run wrapper. Tests substitute a fake with the same run() signature."""

    def run(
        self,
        command: list[str],
        cwd: str | Path,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        argv = tuple(command)
        if not argv:
            return CommandResult(argv, 1, stderr="Empty command")
        logger.info(f"Running {' '.join(argv)} in {cwd}", extra={"command": " ".join(argv)})
        full_env = {**os.environ, **env} if env else None
        try:
            # communicate() under the hood drains both pipes before wait()
            completed = subprocess.run(
                [shutil.which(argv[0]) or argv[0], *argv[1:]],
                cwd=str(cwd),
                env=full_env,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError:
            return CommandResult(argv, EXIT_NOT_FOUND, stderr=f"Executable not found: {argv[0]}")
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                argv, EXIT_TIMEOUT,
                stdout=_as_text(e.stdout),
                stderr=f"Timed out after {timeout}s\n{_as_text(e.stderr)}".strip(),
                timed_out=True,
            )
        except OSError as e:
            return CommandResult(argv, 1, stderr=f"Failed to start {argv[0]}: {e}")
        return CommandResult(argv, completed.returncode, completed.stdout or "", completed.stderr or "")


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data
