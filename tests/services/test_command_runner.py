import sys

import pytest

from endpointwizard.errors import WizardError
from endpointwizard.services.command_runner import CommandRunner


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_command_runner_raises_with_stderr():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(WizardError, match="compose exploded"):
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('compose exploded'); sys.exit(1)"],
            capture_output=True,
        )


def test_command_runner_returns_when_check_disabled():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run([sys.executable, "-c", "import sys; sys.exit(3)"], check=False, capture_output=True)

    assert result.returncode == 3


def test_command_runner_runs_in_project_directory_and_retries(tmp_path):
    runner = CommandRunner(logger=DummyLogger(), cwd=str(tmp_path))
    command = [
        sys.executable,
        "-c",
        (
            "from pathlib import Path;"
            "p=Path('attempts.txt');"
            "n=int(p.read_text()) if p.exists() else 0;"
            "p.write_text(str(n+1));"
            "import sys; sys.exit(1 if n == 0 else 0)"
        ),
    ]

    result = runner.run(command, capture_output=True, retry_count=1)

    assert result.returncode == 0
    assert (tmp_path / "attempts.txt").read_text() == "2"


def test_command_runner_reports_missing_binary():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(WizardError, match="Required command not found"):
        runner.run(["definitely-not-a-real-binary-4466"])


def test_command_runner_timeout_raises_error():
    runner = CommandRunner(logger=DummyLogger(), default_timeout=0.1)

    with pytest.raises(WizardError, match="timed out"):
        runner.run([sys.executable, "-c", "import time; time.sleep(2)"], capture_output=True)
