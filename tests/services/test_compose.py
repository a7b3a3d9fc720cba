import pytest
import yaml

from endpointwizard.models import DatabaseCredentials, DatabaseKind
from endpointwizard.services.compose import (
    default_credentials,
    print_database_config,
    print_database_service,
)


@pytest.mark.parametrize(
    "kind, port",
    [(DatabaseKind.POSTGRES, 5432), (DatabaseKind.MYSQL, 3306), (DatabaseKind.MONGO, 27017)],
)
def test_database_config_falls_back_to_default_port(kind, port):
    credentials = DatabaseCredentials(kind=kind, host="db", port=None, user="u", password="p")

    block = yaml.safe_load(print_database_config(credentials))

    assert block["databases"]["default"]["port"] == port


def test_database_config_is_indented_and_has_no_blank_lines():
    credentials = DatabaseCredentials(
        kind=DatabaseKind.POSTGRES,
        host="localhost",
        port=5433,
        user="admin",
        password="secret",
        database="shop",
        schema="public",
        ssl=True,
        already_data=True,
    )

    text = print_database_config(credentials)

    lines = text.split("\n")
    assert all(line.startswith(" " * 8) and line.strip() for line in lines)
    assert lines[0] == "        databases:"
    assert yaml.safe_load(text) == {
        "databases": {
            "default": {
                "connector": "postgres",
                "host": "localhost",
                "port": 5433,
                "database": "shop",
                "schema": "public",
                "user": "admin",
                "password": "secret",
                "migrations": False,
                "rawAccess": True,
            }
        }
    }


def test_database_config_omits_empty_database_and_schema():
    block = yaml.safe_load(print_database_config(default_credentials(DatabaseKind.MYSQL)))
    default = block["databases"]["default"]

    assert "database" not in default
    assert "schema" not in default
    assert default["user"] == "root"
    assert default["host"] == "mysql"
    assert default["migrations"] is True


@pytest.mark.parametrize("kind", list(DatabaseKind))
def test_service_fragment_declares_volume_for_each_kind(kind):
    fragment = print_database_service(kind)

    assert f"\n  {kind.value}:\n" in fragment
    assert f"volumes:\n  {kind.value}:" in fragment
