"""Companion Orchestrator — tests for the install/build sequence.

Tests cover:
    - Artifact present: no commands run
    - Install failure aborts before build, stderr becomes the diagnostic
    - Build failure after a successful install
    - Both steps succeed but the artifact never appears
    - Happy path: artifact produced by the build step
    - Settings feed commands, timeout, and the companion environment
"""

from pathlib import Path

from hostbridge.config import Settings
from hostbridge.services.orchestrator import CompanionOrchestrator


def _write_artifact(worker: Path):
    (Path(worker) / "build").mkdir(parents=True, exist_ok=True)
    (Path(worker) / "build" / "index.js").write_text("// built\n")


def test_artifact_present_runs_nothing(tmp_path, fake_runner):
    _write_artifact(tmp_path)
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert result.attempted is False
    assert result.succeeded is True
    assert fake_runner.calls == []


def test_install_failure_skips_build(tmp_path, fake_runner):
    fake_runner.exit_codes["npm install"] = 1
    fake_runner.stderr["npm install"] = "npm ERR! network unreachable"
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert result.attempted is True
    assert result.succeeded is False
    assert result.diagnostic == "npm ERR! network unreachable"
    assert fake_runner.commands() == ["npm install"]


def test_build_failure_after_install(tmp_path, fake_runner):
    fake_runner.exit_codes["npm run build"] = 2
    fake_runner.stderr["npm run build"] = "tsc: error TS2304"
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert (result.attempted, result.succeeded) == (True, False)
    assert "TS2304" in result.diagnostic
    assert fake_runner.commands() == ["npm install", "npm run build"]


def test_missing_artifact_after_build_is_failure(tmp_path, fake_runner):
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert (result.attempted, result.succeeded) == (True, False)
    assert "build/index.js" in result.diagnostic


def test_successful_build(tmp_path, fake_runner):
    fake_runner.on_run["npm run build"] = _write_artifact
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert (result.attempted, result.succeeded) == (True, True)
    assert all(call["cwd"] == str(tmp_path) for call in fake_runner.calls)


def test_failure_without_stderr_reports_exit_code(tmp_path, fake_runner):
    fake_runner.exit_codes["npm install"] = 3
    result = CompanionOrchestrator(fake_runner).ensure_built(tmp_path)
    assert result.diagnostic == "npm install exited with code 3"


def test_from_settings_uses_configured_commands(tmp_path, fake_runner):
    settings = Settings(
        port=9100, request_timeout_seconds=30,
        install_command=["pnpm", "install"], build_command=["pnpm", "build"],
    )
    fake_runner.on_run["pnpm build"] = _write_artifact
    orchestrator = CompanionOrchestrator.from_settings(settings, runner=fake_runner)
    assert orchestrator.ensure_built(tmp_path).succeeded
    assert fake_runner.commands() == ["pnpm install", "pnpm build"]
    assert fake_runner.calls[0]["env"] == {
        "HOSTBRIDGE_PORT": "9100",
        "HOSTBRIDGE_REQUEST_TIMEOUT_SECONDS": "30",
    }
