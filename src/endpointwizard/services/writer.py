"""Writes the wizard outcome into the project folder."""

import os
from typing import Dict, List

import yaml

from endpointwizard.constants import DATAMODEL_FILE, DOCKER_COMPOSE_FILE, PROJECT_FILE
from endpointwizard.errors import WizardError
from endpointwizard.models import EndpointResult, Generator

GENERATED_CLIENT_DIR = "./generated/prisma-client/"


class ProjectWriter:
    """Persists compose, datamodel and project files."""

    def __init__(self, project_dir: str, logger, console):
        self.project_dir = project_dir
        self.logger = logger
        self.console = console

    def build_project_definition(self, result: EndpointResult) -> Dict:
        definition: Dict = {
            "endpoint": result.endpoint,
            "datamodel": DATAMODEL_FILE,
        }
        if result.management_secret:
            definition["secret"] = result.management_secret
        if result.generator and result.generator is not Generator.NO_GENERATION:
            definition["generate"] = [
                {"generator": result.generator.value, "output": GENERATED_CLIENT_DIR}
            ]
        return definition

    def write(self, result: EndpointResult) -> List[str]:
        files = {
            DATAMODEL_FILE: result.datamodel,
            PROJECT_FILE: yaml.safe_dump(
                self.build_project_definition(result),
                default_flow_style=False,
                sort_keys=False,
            ),
        }
        if result.write_docker_compose_yml:
            files[DOCKER_COMPOSE_FILE] = result.docker_compose_yml

        written = []
        for file_name, content in files.items():
            path = os.path.join(self.project_dir, file_name)
            if os.path.exists(path):
                self.logger.warning("Overwriting existing %s", path)
            try:
                with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
                    file_obj.write(content)
            except OSError as exc:
                raise WizardError(f"Could not write {path}: {exc}") from exc
            self.logger.debug("Wrote %s", path)
            written.append(file_name)

        self.console.print(f"[green]Created {', '.join(written)} in {self.project_dir}[/green]")
        return written
