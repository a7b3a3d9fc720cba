"""Shared domain models for endpointwizard."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Union


class DatabaseKind(str, Enum):
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MONGO = "mongo"

    @property
    def default_port(self) -> int:
        return _DEFAULT_PORTS[self]

    @property
    def default_user(self) -> str:
        return "root" if self is DatabaseKind.MYSQL else "prisma"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_DEFAULT_PORTS = {
    DatabaseKind.POSTGRES: 5432,
    DatabaseKind.MYSQL: 3306,
    DatabaseKind.MONGO: 27017,
}

_KIND_LABELS = {
    DatabaseKind.MYSQL: ("MySQL", "MySQL compliant databases like MySQL or MariaDB"),
    DatabaseKind.POSTGRES: ("PostgreSQL", "PostgreSQL database"),
    DatabaseKind.MONGO: ("MongoDB", "Mongo Database"),
}


class ConfigurationChoice(str, Enum):
    """Top level menu entries that are not cluster names."""

    LOCAL_DOCKER = "Create new database"
    EXISTING_DATABASE = "Use existing database"
    DEMO_SERVER = "Demo server"
    CUSTOM_SERVER = "Use other server"


class Generator(str, Enum):
    TYPESCRIPT_CLIENT = "typescript-client"
    FLOW_CLIENT = "flow-client"
    JAVASCRIPT_CLIENT = "javascript-client"
    GO_CLIENT = "go-client"
    NO_GENERATION = "no-generation"


GENERATOR_LABELS = {
    Generator.TYPESCRIPT_CLIENT: "TypeScript Client",
    Generator.FLOW_CLIENT: "Flow Client",
    Generator.JAVASCRIPT_CLIENT: "JavaScript Client",
    Generator.GO_CLIENT: "Go Client",
    Generator.NO_GENERATION: "Don't generate",
}


class DialogState(str, Enum):
    CHOOSE_MODE = "choose-mode"
    COLLECT_CREDENTIALS = "collect-credentials"
    RESOLVE_CLUSTER = "resolve-cluster"
    COLLECT_NAMES = "collect-names"
    DONE = "done"


@dataclass(frozen=True)
class DatabaseCredentials:
    """Connection parameters for a database the server will use."""

    kind: DatabaseKind
    host: str
    port: int
    user: str
    password: str
    database: Optional[str] = None
    schema: Optional[str] = None
    ssl: bool = False
    already_data: bool = False


@dataclass(frozen=True)
class IntrospectionResult:
    table_count: int
    sdl: str


class QuestionKind(str, Enum):
    INPUT = "input"
    PASSWORD = "password"
    LIST = "list"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class Choice:
    value: str
    label: str


@dataclass(frozen=True)
class Separator:
    """Non-selectable row of a list question."""

    text: str = ""


@dataclass
class Question:
    name: str
    message: str
    kind: QuestionKind = QuestionKind.INPUT
    default: Optional[Any] = None
    choices: List[Union[Choice, Separator]] = field(default_factory=list)
    validate: Optional[Callable[[str], Union[bool, str]]] = None
    required: bool = False

    def selectable(self) -> List[Choice]:
        return [choice for choice in self.choices if isinstance(choice, Choice)]


@dataclass
class EndpointResult:
    """Outcome of one wizard run, persisted by the caller."""

    endpoint: str
    cluster: Any
    workspace: Optional[str]
    service: str
    stage: str
    local_cluster_running: bool
    docker_compose_yml: str
    datamodel: str
    new_database: bool
    write_docker_compose_yml: bool
    database: Optional[DatabaseCredentials] = None
    management_secret: Optional[str] = None
    generator: Optional[Generator] = None


@dataclass(frozen=True)
class EnvironmentFacts:
    """What the wizard knows about the machine before asking anything."""

    local_cluster_running: bool
    logged_in: bool
    has_docker_compose_yml: bool
    folder_name: str
    clusters: List[Any]
