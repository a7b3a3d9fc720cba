"""Starts the generated Compose stack and waits for the local server."""

import subprocess
import time
from typing import Callable, List

from endpointwizard.constants import DOCKER_COMPOSE_FILE
from endpointwizard.errors import WizardError
from endpointwizard.errors_catalog import actionable_error


class DockerRuntimeService:
    """Detects docker compose and brings up the local stack."""

    def __init__(self, logger, console, subprocess_module=subprocess):
        self.logger = logger
        self.console = console
        self.subprocess = subprocess_module

    def get_docker_compose_cmd(self) -> List[str]:
        try:
            self.subprocess.run(["docker", "compose", "version"], check=True, capture_output=True)
            return ["docker", "compose"]
        except (self.subprocess.CalledProcessError, FileNotFoundError):
            try:
                self.subprocess.run(["docker-compose", "--version"], check=True, capture_output=True)
                return ["docker-compose"]
            except (self.subprocess.CalledProcessError, FileNotFoundError):
                raise WizardError(
                    "Docker Compose is not available. Install Docker Compose v2 (`docker compose`) "
                    "or v1 (`docker-compose`) and try again."
                )

    def start_stack(self, compose_cmd: List[str], run_cmd: Callable):
        self.console.print("[blue]Starting local server with Docker Compose...[/blue]")
        self.logger.info("Starting docker compose stack from %s", DOCKER_COMPOSE_FILE)
        run_cmd(
            compose_cmd + ["-f", DOCKER_COMPOSE_FILE, "up", "-d"],
            capture_output=True,
            retry_count=2,
            retry_backoff_seconds=3.0,
        )

    def wait_for_server(self, cluster, max_retries: int = 30, delay_seconds: float = 2.0):
        self.console.print("[yellow]Waiting for the server to come online...[/yellow]")

        for _ in range(max_retries):
            if cluster.is_online():
                self.console.print(f"[green]Server is online at {cluster.base_url}.[/green]")
                return
            time.sleep(delay_seconds)

        raise WizardError(actionable_error("local_server_not_ready", endpoint=cluster.base_url))
