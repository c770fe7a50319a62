"""Companion Orchestrator — makes sure the companion worker's build artifact exists.

Invariants:
    - Artifact already present: no external command runs (attempted=False, succeeded=True)
    - Steps run strictly in order (install, then build); the first failure aborts the sequence
    - A failed step's stderr becomes the diagnostic; later steps are never started
    - After both steps succeed the artifact is checked again; still missing means failure
    - No retries at any step
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from hostbridge.config import Settings
from hostbridge.core.domain_types import ARTIFACT_RELATIVE_PATH
from hostbridge.infrastructure.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestrationResult:
    """Outcome of one ensure_built() call."""
    attempted: bool
    succeeded: bool
    diagnostic: str = ""


@dataclass(frozen=True)
class BuildStep:
    label: str
    command: tuple[str, ...]


class CompanionOrchestrator:
    """Runs the worker's install and build steps when its artifact is missing."""

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        install_command: list[str] | tuple[str, ...] = ("npm", "install"),
        build_command: list[str] | tuple[str, ...] = ("npm", "run", "build"),
        artifact: Path | str = ARTIFACT_RELATIVE_PATH,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ):
        self.runner = runner or ProcessRunner()
        self.steps = (
            BuildStep("install", tuple(install_command)),
            BuildStep("build", tuple(build_command)),
        )
        self.artifact = Path(artifact)
        self.timeout = timeout
        self.env = env

    @classmethod
    def from_settings(cls, settings: Settings, runner: ProcessRunner | None = None) -> "CompanionOrchestrator":
        return cls(
            runner=runner,
            install_command=settings.install_command,
            build_command=settings.build_command,
            timeout=settings.command_timeout_seconds,
            env=settings.companion_environment(),
        )

    def artifact_path(self, worker_path: str | Path) -> Path:
        return Path(worker_path) / self.artifact

    def is_built(self, worker_path: str | Path) -> bool:
        return self.artifact_path(worker_path).is_file()

    def ensure_built(self, worker_path: str | Path) -> OrchestrationResult:
        worker_path = Path(worker_path)
        log_extra = {"worker_path": str(worker_path)}
        if self.is_built(worker_path):
            logger.info("Companion worker is already built", extra=log_extra)
            return OrchestrationResult(attempted=False, succeeded=True)

        logger.info("Companion worker needs to be built. Building now...", extra=log_extra)
        for step in self.steps:
            result = self.runner.run(
                list(step.command), cwd=worker_path, timeout=self.timeout, env=self.env,
            )
            if not result.ok:
                diagnostic = result.diagnostic or f"{' '.join(step.command)} exited with code {result.exit_code}"
                logger.error(
                    f"Companion {step.label} step failed with exit code {result.exit_code}: {diagnostic}",
                    extra={**log_extra, "exit_code": result.exit_code, "command": " ".join(step.command)},
                )
                return OrchestrationResult(attempted=True, succeeded=False, diagnostic=diagnostic)
            logger.info(f"Companion {step.label} step completed", extra=log_extra)

        if not self.is_built(worker_path):
            diagnostic = f"Build finished but {self.artifact.as_posix()} was not produced"
            logger.error(diagnostic, extra=log_extra)
            return OrchestrationResult(attempted=True, succeeded=False, diagnostic=diagnostic)

        logger.info("Companion worker built successfully", extra=log_extra)
        return OrchestrationResult(attempted=True, succeeded=True)
