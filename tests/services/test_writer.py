import pytest
import yaml
from rich.console import Console

from endpointwizard.errors import WizardError
from endpointwizard.models import EndpointResult, Generator
from endpointwizard.services.writer import GENERATED_CLIENT_DIR, ProjectWriter


class DummyLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, message, *args):
        self.warnings.append(message % args)

    def debug(self, *_args, **_kwargs):
        return None


def make_result(**overrides):
    values = {
        "endpoint": "http://localhost:4466",
        "cluster": None,
        "workspace": None,
        "service": "default",
        "stage": "default",
        "local_cluster_running": False,
        "docker_compose_yml": "version: '3'\n",
        "datamodel": "type User {\n  id: ID! @id\n}\n",
        "new_database": True,
        "write_docker_compose_yml": True,
    }
    values.update(overrides)
    return EndpointResult(**values)


def test_write_creates_all_project_files(tmp_path):
    writer = ProjectWriter(str(tmp_path), DummyLogger(), Console(record=True))

    written = writer.write(make_result())

    assert written == ["datamodel.prisma", "prisma.yml", "docker-compose.yml"]
    assert (tmp_path / "docker-compose.yml").read_text(encoding="utf-8") == "version: '3'\n"
    assert yaml.safe_load((tmp_path / "prisma.yml").read_text(encoding="utf-8")) == {
        "endpoint": "http://localhost:4466",
        "datamodel": "datamodel.prisma",
    }


def test_write_skips_compose_file_when_not_requested(tmp_path):
    writer = ProjectWriter(str(tmp_path), DummyLogger(), Console(record=True))

    written = writer.write(make_result(write_docker_compose_yml=False))

    assert "docker-compose.yml" not in written
    assert not (tmp_path / "docker-compose.yml").exists()


def test_project_definition_includes_secret_and_generator(tmp_path):
    writer = ProjectWriter(str(tmp_path), DummyLogger(), Console(record=True))

    definition = writer.build_project_definition(
        make_result(management_secret="s3cret", generator=Generator.TYPESCRIPT_CLIENT)
    )

    assert definition["secret"] == "s3cret"
    assert definition["generate"] == [
        {"generator": "typescript-client", "output": GENERATED_CLIENT_DIR}
    ]


def test_project_definition_omits_generate_for_no_generation(tmp_path):
    writer = ProjectWriter(str(tmp_path), DummyLogger(), Console(record=True))

    definition = writer.build_project_definition(make_result(generator=Generator.NO_GENERATION))

    assert "generate" not in definition


def test_write_warns_before_overwriting(tmp_path):
    (tmp_path / "datamodel.prisma").write_text("old", encoding="utf-8")
    logger = DummyLogger()

    ProjectWriter(str(tmp_path), logger, Console(record=True)).write(make_result())

    assert any("datamodel.prisma" in warning for warning in logger.warnings)
    assert (tmp_path / "datamodel.prisma").read_text(encoding="utf-8").startswith("type User")


def test_write_failure_raises_wizard_error(tmp_path):
    writer = ProjectWriter(str(tmp_path / "missing"), DummyLogger(), Console(record=True))

    with pytest.raises(WizardError, match="Could not write"):
        writer.write(make_result())
