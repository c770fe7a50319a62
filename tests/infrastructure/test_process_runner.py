"""Process Runner — tests against real child processes (the current interpreter).

Tests cover:
    - Exit code and captured output
    - Missing executable maps to 127
    - Timeout maps to 124 with timed_out set
    - env entries reach the child on top of the parent environment
    - Empty command
    - Non-UTF-8 output is decoded with replacement characters
"""

import sys

from hostbridge.infrastructure.process_runner import EXIT_NOT_FOUND, EXIT_TIMEOUT, ProcessRunner


def test_captures_output_and_exit_code(tmp_path):
    result = ProcessRunner().run(
        [sys.executable, "-c", "import sys; print('out'); sys.stderr.write('bad'); sys.exit(3)"],
        cwd=tmp_path,
    )
    assert result.exit_code == 3
    assert not result.ok
    assert result.stdout.strip() == "out"
    assert result.diagnostic == "bad"


def test_success(tmp_path):
    result = ProcessRunner().run([sys.executable, "-c", "print('ok')"], cwd=tmp_path)
    assert result.ok
    assert result.diagnostic == "ok"


def test_missing_executable(tmp_path):
    result = ProcessRunner().run(["hostbridge-no-such-binary"], cwd=tmp_path)
    assert result.exit_code == EXIT_NOT_FOUND
    assert "hostbridge-no-such-binary" in result.stderr


def test_timeout(tmp_path):
    result = ProcessRunner().run(
        [sys.executable, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.5,
    )
    assert result.exit_code == EXIT_TIMEOUT
    assert result.timed_out


def test_env_is_layered(tmp_path, monkeypatch):
    monkeypatch.setenv("HOSTBRIDGE_PARENT_VALUE", "parent")
    result = ProcessRunner().run(
        [sys.executable, "-c",
         "import os; print(os.environ['HOSTBRIDGE_PORT'], os.environ['HOSTBRIDGE_PARENT_VALUE'])"],
        cwd=tmp_path,
        env={"HOSTBRIDGE_PORT": "9100"},
    )
    assert result.ok, result.stderr
    assert result.stdout.split() == ["9100", "parent"]


def test_runs_in_cwd(tmp_path):
    result = ProcessRunner().run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
    assert result.stdout.strip() == str(tmp_path.resolve())


def test_empty_command(tmp_path):
    result = ProcessRunner().run([], cwd=tmp_path)
    assert result.exit_code == 1
    assert result.diagnostic == "Empty command"


def test_undecodable_output_is_replaced(tmp_path):
    result = ProcessRunner().run(
        [sys.executable, "-c",
         "import sys; sys.stderr.buffer.write(b'\\xff\\xfe npm ERR!'); sys.exit(1)"],
        cwd=tmp_path,
    )
    assert result.exit_code == 1
    assert "\ufffd" in result.stderr
    assert result.diagnostic.endswith("npm ERR!")
