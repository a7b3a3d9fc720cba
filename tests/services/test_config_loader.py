import pytest

from endpointwizard.errors import WizardError
from endpointwizard.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".endpointwizard.yml"
    config_file.write_text(
        "local_endpoint: http://localhost:4467\nmax_restarts: 2\ngenerator: true\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["local_endpoint"] == "http://localhost:4467"
    assert loaded["max_restarts"] == 2
    assert loaded["generator"] is True


def test_config_loader_returns_empty_mapping_without_path_or_content(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")

    assert ConfigLoader().load(None) == {}
    assert ConfigLoader().load(str(empty)) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".endpointwizard.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(WizardError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_non_mapping_and_missing_files(tmp_path):
    config_file = tmp_path / "list.yml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(WizardError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))
    with pytest.raises(WizardError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))
