import subprocess

import pytest

import endpointwizard.services.docker_runtime as docker_runtime_module
from endpointwizard.errors import WizardError
from endpointwizard.services.docker_runtime import DockerRuntimeService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeSubprocess:
    CalledProcessError = subprocess.CalledProcessError

    def __init__(self, available):
        self.available = available
        self.calls = []

    def run(self, cmd, **_kwargs):
        self.calls.append(cmd)
        if cmd[0] not in self.available:
            raise FileNotFoundError(cmd[0])
        if cmd[:2] == ["docker", "compose"] and "docker compose" not in self.available:
            raise subprocess.CalledProcessError(1, cmd)
        return subprocess.CompletedProcess(cmd, 0)


class FlakyCluster:
    base_url = "http://localhost:4466"

    def __init__(self, online_after):
        self.online_after = online_after
        self.checks = 0

    def is_online(self):
        self.checks += 1
        return self.checks > self.online_after


def test_get_docker_compose_cmd_prefers_plugin():
    fake = FakeSubprocess(available={"docker", "docker compose"})
    service = DockerRuntimeService(DummyLogger(), DummyConsole(), subprocess_module=fake)

    assert service.get_docker_compose_cmd() == ["docker", "compose"]


def test_get_docker_compose_cmd_falls_back_to_legacy_binary():
    fake = FakeSubprocess(available={"docker", "docker-compose"})
    service = DockerRuntimeService(DummyLogger(), DummyConsole(), subprocess_module=fake)

    assert service.get_docker_compose_cmd() == ["docker-compose"]


def test_get_docker_compose_cmd_raises_without_docker():
    service = DockerRuntimeService(DummyLogger(), DummyConsole(), subprocess_module=FakeSubprocess(set()))

    with pytest.raises(WizardError, match="Docker Compose is not available"):
        service.get_docker_compose_cmd()


def test_start_stack_runs_compose_up():
    calls = []
    service = DockerRuntimeService(DummyLogger(), DummyConsole())

    service.start_stack(["docker", "compose"], lambda cmd, **kwargs: calls.append((cmd, kwargs)))

    cmd, kwargs = calls[0]
    assert cmd == ["docker", "compose", "-f", "docker-compose.yml", "up", "-d"]
    assert kwargs["retry_count"] == 2


def test_wait_for_server_polls_until_online(monkeypatch):
    monkeypatch.setattr(docker_runtime_module.time, "sleep", lambda *_args: None)
    cluster = FlakyCluster(online_after=2)
    service = DockerRuntimeService(DummyLogger(), DummyConsole())

    service.wait_for_server(cluster, max_retries=5)

    assert cluster.checks == 3


def test_wait_for_server_raises_when_never_online(monkeypatch):
    monkeypatch.setattr(docker_runtime_module.time, "sleep", lambda *_args: None)
    service = DockerRuntimeService(DummyLogger(), DummyConsole())

    with pytest.raises(WizardError, match="did not come online"):
        service.wait_for_server(FlakyCluster(online_after=10), max_retries=2)
