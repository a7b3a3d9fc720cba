"""Docker Compose text generation for new and existing databases."""

from typing import Any, Dict

import yaml

from endpointwizard.models import DatabaseCredentials, DatabaseKind

_SERVICE_DEFINITIONS = {
    DatabaseKind.POSTGRES: """
  postgres:
    image: postgres
    restart: always
    environment:
      POSTGRES_USER: prisma
      POSTGRES_PASSWORD: prisma
    volumes:
      - postgres:/var/lib/postgresql/data
volumes:
  postgres:
""",
    DatabaseKind.MYSQL: """
  mysql:
    image: mysql:5.7
    restart: always
    environment:
      MYSQL_ROOT_PASSWORD: prisma
    volumes:
      - mysql:/var/lib/mysql
volumes:
  mysql:
""",
    DatabaseKind.MONGO: """
  mongo:
    image: mongo:3.6
    restart: always
    environment:
      MONGO_INITDB_ROOT_USERNAME: prisma
      MONGO_INITDB_ROOT_PASSWORD: prisma
    ports:
      - "27017:27017"
    volumes:
      - mongo:/var/lib/mongo
volumes:
  mongo:""",
}

CONFIG_INDENT = " " * 8


def default_credentials(kind: DatabaseKind) -> DatabaseCredentials:
    """Credentials matching the service fragment generated for ``kind``."""
    return DatabaseCredentials(
        kind=kind,
        host=kind.value,
        port=kind.default_port,
        user=kind.default_user,
        password="prisma",
    )


def database_config(credentials: DatabaseCredentials) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "connector": credentials.kind.value,
        "host": credentials.host,
        "port": credentials.port or credentials.kind.default_port,
    }
    if credentials.database:
        config["database"] = credentials.database
    if credentials.schema:
        config["schema"] = credentials.schema
    config.update(
        {
            "user": credentials.user,
            "password": credentials.password,
            "migrations": not credentials.already_data,
            "rawAccess": True,
        }
    )
    return config


def print_database_config(credentials: DatabaseCredentials) -> str:
    """Render the ``databases.default`` block nested under PRISMA_CONFIG."""
    dumped = yaml.safe_dump(
        {"databases": {"default": database_config(credentials)}},
        default_flow_style=False,
        sort_keys=False,
    )
    lines = [line for line in dumped.split("\n") if line.strip()]
    return "\n".join(f"{CONFIG_INDENT}{line}" for line in lines)


def print_database_service(kind: DatabaseKind) -> str:
    return _SERVICE_DEFINITIONS[kind]
