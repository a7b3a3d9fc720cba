"""Database introspection backed by SQLAlchemy's inspector."""

import dataclasses
import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import sqltypes

from endpointwizard.constants import LOCAL_DOCKER_HOST_ALIASES, SYSTEM_SCHEMAS
from endpointwizard.errors import WizardError
from endpointwizard.errors_catalog import actionable_error
from endpointwizard.models import DatabaseCredentials, DatabaseKind, IntrospectionResult

_DRIVERS = {
    DatabaseKind.POSTGRES: "postgresql+psycopg",
    DatabaseKind.MYSQL: "mysql+pymysql",
}

_SSL_CONNECT_ARGS = {
    DatabaseKind.POSTGRES: {"sslmode": "require"},
    DatabaseKind.MYSQL: {"ssl": {"check_hostname": False}},
}


def replace_local_docker_host(credentials: DatabaseCredentials) -> DatabaseCredentials:
    """Point container network aliases back at localhost."""
    if credentials.host in LOCAL_DOCKER_HOST_ALIASES:
        return dataclasses.replace(credentials, host="localhost")
    return credentials


def build_url(credentials: DatabaseCredentials) -> URL:
    if credentials.kind not in _DRIVERS:
        raise WizardError(f"Introspection is not supported for {credentials.kind.value}.")
    return URL.create(
        _DRIVERS[credentials.kind],
        username=credentials.user,
        password=credentials.password,
        host=credentials.host,
        port=credentials.port,
        database=credentials.database or None,
    )


def _type_name(table_name: str) -> str:
    parts = [part for part in re.split(r"[^0-9A-Za-z]+", table_name) if part]
    name = "".join(part[:1].upper() + part[1:] for part in parts)
    return name or "Table"


def _relation_field_name(column_name: str) -> str:
    for suffix in ("_id", "Id"):
        if column_name.endswith(suffix) and len(column_name) > len(suffix):
            return column_name[: -len(suffix)]
    return column_name


def _scalar_for(column_type: Any) -> str:
    if isinstance(column_type, sqltypes.Boolean):
        return "Boolean"
    if isinstance(column_type, sqltypes.Integer):
        return "Int"
    if isinstance(column_type, sqltypes.Numeric):
        return "Float"
    if isinstance(column_type, (sqltypes.DateTime, sqltypes.Date, sqltypes.Time)):
        return "DateTime"
    if isinstance(column_type, sqltypes.JSON):
        return "Json"
    return "String"


class DatabaseIntrospector:
    """Reads table structure of an existing database into datamodel SDL."""

    def __init__(self, credentials: DatabaseCredentials, logger=None, engine_factory=create_engine):
        self.credentials = credentials
        self.logger = logger or logging.getLogger("endpointwizard")
        connect_args = _SSL_CONNECT_ARGS.get(credentials.kind, {}) if credentials.ssl else {}
        self.engine = engine_factory(
            build_url(credentials),
            connect_args=connect_args,
            poolclass=NullPool,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self.engine.dispose()

    def list_schemas(self) -> List[str]:
        try:
            names = inspect(self.engine).get_schema_names()
        except SQLAlchemyError as exc:
            raise WizardError(actionable_error("database_connection_failed", reason=str(exc))) from exc
        schemas = [name for name in names if name not in SYSTEM_SCHEMAS]
        self.logger.debug("Found schemas: %s", ", ".join(schemas) or "<none>")
        return schemas

    def introspect(self, schema: Optional[str]) -> IntrospectionResult:
        try:
            inspector = inspect(self.engine)
            table_names = sorted(inspector.get_table_names(schema=schema))
            blocks = [self._render_type(inspector, table, schema) for table in table_names]
        except SQLAlchemyError as exc:
            raise WizardError(f"Could not introspect schema '{schema}': {exc}") from exc

        self.logger.info("Introspected %s table(s) in schema %s", len(table_names), schema)
        sdl = "\n\n".join(blocks)
        return IntrospectionResult(table_count=len(table_names), sdl=f"{sdl}\n" if sdl else "")

    def _render_type(self, inspector, table: str, schema: Optional[str]) -> str:
        primary_key = inspector.get_pk_constraint(table, schema=schema) or {}
        pk_columns = primary_key.get("constrained_columns") or []
        unique_columns = {
            constraint["column_names"][0]
            for constraint in inspector.get_unique_constraints(table, schema=schema)
            if len(constraint.get("column_names") or []) == 1
        }
        relations: Dict[str, str] = {}
        for foreign_key in inspector.get_foreign_keys(table, schema=schema):
            constrained = foreign_key.get("constrained_columns") or []
            if len(constrained) == 1:
                relations[constrained[0]] = foreign_key["referred_table"]

        type_name = _type_name(table)
        header = f"type {type_name}"
        if type_name != table:
            header = f'{header} @db(name: "{table}")'

        lines = [f"{header} {{"]
        for column in inspector.get_columns(table, schema=schema):
            lines.append(f"  {self._render_field(column, pk_columns, unique_columns, relations)}")
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _render_field(column, pk_columns, unique_columns, relations) -> str:
        name = column["name"]
        required = "" if column.get("nullable", True) else "!"

        if len(pk_columns) == 1 and name == pk_columns[0]:
            return f"{name}: ID! @id"

        if name in relations:
            field = _relation_field_name(name)
            rendered = f"{field}: {_type_name(relations[name])}{required}"
            if field != name:
                rendered = f'{rendered} @db(name: "{name}")'
            return rendered

        rendered = f"{name}: {_scalar_for(column['type'])}{required}"
        if name in unique_columns:
            rendered = f"{rendered} @unique"
        return rendered
