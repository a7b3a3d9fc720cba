import logging
import os
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from rich.console import Console

from .constants import (
    DEFAULT_CLOUD_API_URL,
    DEFAULT_DATAMODEL,
    DEFAULT_DOCKER_COMPOSE,
    DEFAULT_NEW_STAGE,
    DEFAULT_SERVICE_NAME,
    DEFAULT_STAGE_NAME,
    DOCKER_COMPOSE_FILE,
    LOCAL_ENDPOINT,
    PUBLIC_NAME_ADJECTIVES,
    PUBLIC_NAME_NOUNS,
    SHARED_CLUSTER_REGIONS,
)
from .errors import WizardError
from .errors_catalog import actionable_error
from .models import (
    GENERATOR_LABELS,
    Choice,
    ConfigurationChoice,
    DatabaseCredentials,
    DatabaseKind,
    DialogState,
    EndpointResult,
    EnvironmentFacts,
    Generator,
    Question,
    QuestionKind,
    Separator,
)
from .services.cloud import CloudClient, shared_clusters
from .services.cluster import Cluster, concat_name
from .services.command_runner import CommandRunner
from .services.compose import default_credentials, print_database_config, print_database_service
from .services.docker_runtime import DockerRuntimeService
from .services.introspection import DatabaseIntrospector, replace_local_docker_host
from .services.latency import ping_region
from .services.prompter import RichPrompter
from .services.writer import ProjectWriter

console = Console()
logger = logging.getLogger("endpointwizard")

# Legacy shared cluster names and their public aliases, in both directions.
_PUBLIC_ALIASES = {
    "prisma-eu1": "demo-eu1",
    "demo-eu1": "prisma-eu1",
    "prisma-us1": "demo-us1",
    "demo-us1": "prisma-us1",
}

_SANDBOX_CHOICES = [
    [ConfigurationChoice.DEMO_SERVER.value, "Hosted demo environment incl. database (requires login)"],
    [ConfigurationChoice.CUSTOM_SERVER.value, "Manually provide endpoint of a running server"],
]

_DATABASE_CHOICES = [
    [ConfigurationChoice.EXISTING_DATABASE.value, "Connect to existing database"],
    [ConfigurationChoice.LOCAL_DOCKER.value, "Set up a local database using Docker"],
]

_BLANK = Separator("                       ")


def _swap_alias(label: str) -> str:
    workspace, _, name = label.rpartition("/")
    swapped = _PUBLIC_ALIASES.get(name, name)
    return f"{workspace}/{swapped}" if workspace else swapped


def encode_name(name: str) -> str:
    """Display name for a cluster."""
    return _swap_alias(name)


def decode_name(label: str) -> str:
    """Cluster name behind a displayed ``[workspace/]name`` label."""
    return _swap_alias(label)


def split_cluster_choice(choice: str) -> Tuple[Optional[str], str]:
    parts = choice.split("/")
    workspace = parts[0] if len(parts) > 1 else None
    return workspace, parts[-1]


def public_name(rng=random) -> str:
    adjective = rng.choice(PUBLIC_NAME_ADJECTIVES)
    noun = rng.choice(PUBLIC_NAME_NOUNS)
    return f"public-{adjective}-{noun}-{rng.randint(0, 1000)}"


def pretty_time(milliseconds: float) -> str:
    if milliseconds < 1000:
        return f"{milliseconds:.0f}ms"
    return f"{milliseconds / 1000:.2f}s"


def convert_choices(rows: List[List[str]], padding: int = 6) -> List[Choice]:
    """Align ``[value, description]`` rows into two columns."""
    if not rows:
        return []
    width = max(len(row[0]) for row in rows) + padding
    return [Choice(value=row[0], label=f"{row[0].ljust(width)}{row[1]}") for row in rows]


@dataclass
class _Draft:
    """Values collected while the dialog runs."""

    cluster: Optional[Cluster] = None
    workspace: Optional[str] = None
    service: str = DEFAULT_SERVICE_NAME
    stage: str = DEFAULT_STAGE_NAME
    credentials: Optional[DatabaseCredentials] = None
    docker_compose_yml: str = DEFAULT_DOCKER_COMPOSE
    datamodel: str = DEFAULT_DATAMODEL
    new_database: bool = False
    management_secret: Optional[str] = None
    write_docker_compose_yml: bool = True


class EndpointDialog:
    """Asks the user where the server should run and resolves its endpoint."""

    def __init__(
        self,
        prompter,
        cloud_client,
        project_dir: str,
        ask_generator: bool = False,
        local_endpoint: str = LOCAL_ENDPOINT,
        max_restarts: int = 3,
        introspector_factory: Callable = DatabaseIntrospector,
        cluster_factory: Callable = Cluster,
        shared_cluster_factory: Callable = shared_clusters,
        ping: Callable[[str], float] = ping_region,
        rng=random,
    ):
        self.prompter = prompter
        self.cloud_client = cloud_client
        self.project_dir = project_dir
        self.ask_generator = ask_generator
        self.local_endpoint = local_endpoint
        self.max_restarts = max_restarts
        self.introspector_factory = introspector_factory
        self.cluster_factory = cluster_factory
        self.shared_cluster_factory = shared_cluster_factory
        self.ping = ping
        self.rng = rng
        self.state = DialogState.CHOOSE_MODE

    def _transition(self, state: DialogState):
        logger.debug("Dialog state: %s -> %s", self.state.value, state.value)
        self.state = state

    def gather_facts(self) -> EnvironmentFacts:
        local_cluster = self.cluster_factory("local", self.local_endpoint)
        local_running = local_cluster.is_online()
        logged_in = self.cloud_client.is_authenticated()
        files = os.listdir(self.project_dir) if os.path.isdir(self.project_dir) else []

        facts = EnvironmentFacts(
            local_cluster_running=local_running,
            logged_in=logged_in,
            has_docker_compose_yml=DOCKER_COMPOSE_FILE in files,
            folder_name=os.path.basename(os.path.abspath(self.project_dir)),
            clusters=[local_cluster] + self._remote_clusters(logged_in),
        )
        logger.debug(
            "Local server running: %s, logged in: %s, clusters: %s",
            facts.local_cluster_running,
            facts.logged_in,
            ", ".join(cluster.name for cluster in facts.clusters),
        )
        return facts

    def _remote_clusters(self, logged_in: bool) -> List[Cluster]:
        clusters = self.cloud_client.list_clusters() if logged_in else []
        if not any(cluster.shared for cluster in clusters):
            clusters = self.shared_cluster_factory() + clusters
        return clusters

    @staticmethod
    def cloud_clusters(clusters: List[Cluster]) -> List[Cluster]:
        return [cluster for cluster in clusters if cluster.shared or cluster.is_private]

    def get_endpoint(self) -> EndpointResult:
        for attempt in range(1, self.max_restarts + 2):
            self._transition(DialogState.CHOOSE_MODE)
            facts = self.gather_facts()
            question = self.build_cluster_question(
                from_scratch=not facts.logged_in and not facts.local_cluster_running,
                has_docker_compose_yml=facts.has_docker_compose_yml,
                clusters=self.cloud_clusters(facts.clusters),
            )
            choice = decode_name(self.prompter.ask(question))
            logger.info("Selected setup option: %s", choice)

            result = self.handle_choice(choice, facts)
            if result is not None:
                return result

            console.print("[yellow]No demo server selected. Starting over...[/yellow]")
            logger.info("Restarting dialog after attempt %s", attempt)

        raise WizardError(
            actionable_error("demo_cluster_unavailable", attempts=str(self.max_restarts + 1))
        )

    def handle_choice(self, choice: str, facts: EnvironmentFacts) -> Optional[EndpointResult]:
        """Run one pass of the dialog. ``None`` means the dialog should restart."""
        draft = _Draft()
        self._transition(DialogState.COLLECT_CREDENTIALS)

        if choice == ConfigurationChoice.CUSTOM_SERVER.value:
            self._use_custom_server(draft, facts)
        elif choice in ("local", ConfigurationChoice.LOCAL_DOCKER.value):
            self._create_local_database(draft, facts, ask_for_kind=choice != "local")
        elif choice == ConfigurationChoice.EXISTING_DATABASE.value:
            self._use_existing_database(draft)
        elif choice == ConfigurationChoice.DEMO_SERVER.value:
            draft.write_docker_compose_yml = False
            draft.cluster = self.get_demo_cluster()
            if draft.cluster is None:
                return None
        else:
            self._use_named_cluster(draft, facts, choice)

        self._transition(DialogState.RESOLVE_CLUSTER)
        cluster = draft.cluster
        if cluster is None:
            raise WizardError(actionable_error("cluster_not_resolved", choice=choice))

        self._transition(DialogState.COLLECT_NAMES)
        if not cluster.local or self.project_exists(cluster, draft.service, draft.stage, draft.workspace):
            draft.service = self.ask_for_service(facts.folder_name)
        if not cluster.local or self.project_exists(cluster, draft.service, draft.stage, draft.workspace):
            draft.stage = self.ask_for_stage(DEFAULT_NEW_STAGE)

        generator = self.ask_for_generator() if self.ask_generator else None
        workspace = draft.workspace or cluster.workspace_slug

        self._transition(DialogState.DONE)
        return EndpointResult(
            endpoint=cluster.get_api_endpoint(draft.service, draft.stage, workspace),
            cluster=cluster,
            workspace=workspace,
            service=draft.service,
            stage=draft.stage,
            local_cluster_running=facts.local_cluster_running,
            database=draft.credentials,
            docker_compose_yml=draft.docker_compose_yml,
            datamodel=draft.datamodel,
            new_database=draft.new_database,
            management_secret=draft.management_secret,
            write_docker_compose_yml=draft.write_docker_compose_yml,
            generator=generator,
        )

    def _use_custom_server(self, draft: _Draft, facts: EnvironmentFacts):
        endpoint = self._ask(
            "endpoint",
            "Enter the endpoint of your server",
            required=True,
            validate=_validate_endpoint,
        )
        draft.cluster = self.cluster_factory("custom", endpoint)
        if draft.cluster.needs_auth():
            draft.management_secret = self._ask(
                "managementSecret",
                "Enter the management API secret",
                kind=QuestionKind.PASSWORD,
            )
            draft.cluster.secret = draft.management_secret
        draft.service = self._ask("serviceName", "Choose a name for your service", default=facts.folder_name)
        draft.stage = self._ask("stageName", "Choose a name for your stage", default=DEFAULT_NEW_STAGE)
        draft.write_docker_compose_yml = False

    def _create_local_database(self, draft: _Draft, facts: EnvironmentFacts, ask_for_kind: bool):
        draft.cluster = next(
            (cluster for cluster in facts.clusters if cluster.name == "local"),
            None,
        ) or self.cluster_factory("local", self.local_endpoint)

        kind = self.ask_for_database_kind() if ask_for_kind else DatabaseKind.MYSQL
        draft.credentials = default_credentials(kind)
        draft.docker_compose_yml += print_database_config(draft.credentials)
        draft.docker_compose_yml += print_database_service(kind)
        draft.new_database = True

    def _use_existing_database(self, draft: _Draft):
        credentials = self.ask_for_database()
        if credentials.kind is not DatabaseKind.MONGO:
            datamodel = self.introspect_database(credentials)
            if datamodel is not None:
                draft.datamodel = datamodel

        draft.credentials = credentials
        draft.docker_compose_yml += print_database_config(credentials)
        draft.cluster = self.cluster_factory("custom", self.local_endpoint)

    def _use_named_cluster(self, draft: _Draft, facts: EnvironmentFacts, choice: str):
        workspace, name = split_cluster_choice(choice)
        clusters = self.cloud_clusters(facts.clusters)

        if workspace is None:
            draft.cluster = next((cluster for cluster in clusters if cluster.name == name), None)
            if not facts.logged_in and draft.cluster is not None and draft.cluster.shared:
                draft.workspace = public_name(self.rng)
        else:
            draft.cluster = next(
                (
                    cluster
                    for cluster in clusters
                    if cluster.name == name and cluster.workspace_slug == workspace
                ),
                None,
            )
            draft.workspace = workspace

    def introspect_database(self, credentials: DatabaseCredentials) -> Optional[str]:
        """Connect to an existing database and, when it holds data, derive a datamodel."""
        console.print()
        action = "Introspecting database" if credentials.already_data else "Connecting to database"
        started = time.perf_counter()

        introspector = self.introspector_factory(replace_local_docker_host(credentials))
        try:
            with console.status(f"{action}..."):
                schemas = introspector.list_schemas()

            if not (credentials.already_data and schemas):
                console.print(f"[green]{action} done[/green] {pretty_time(_elapsed_ms(started))}")
                return None

            schema = self._pick_schema(credentials, schemas)
            with console.status(f"{action}..."):
                result = introspector.introspect(schema)
        finally:
            introspector.close()

        if result.table_count == 0:
            message = actionable_error("database_without_tables")
            console.print(f"\n[bold red]Error:[/bold red] [red]{message}[/red]")
            logger.error(message)
            raise SystemExit(1)

        console.print(f"[green]{action} done[/green] {pretty_time(_elapsed_ms(started))}")
        console.print(f"Created datamodel definition based on {result.table_count} database tables.")
        return result.sdl

    def _pick_schema(self, credentials: DatabaseCredentials, schemas: List[str]) -> str:
        if credentials.schema:
            return credentials.schema
        if credentials.kind is DatabaseKind.MYSQL and credentials.database in schemas:
            return credentials.database
        if len(schemas) == 1:
            return schemas[0]
        return self.select_schema(schemas)

    def select_schema(self, schemas: List[str]) -> str:
        return self.prompter.ask(
            Question(
                name="schema",
                message="Please select the schema you want to introspect",
                kind=QuestionKind.LIST,
                choices=[Choice(value=schema, label=schema) for schema in schemas],
            )
        )

    def get_demo_cluster(self) -> Optional[Cluster]:
        """Pick a demo cluster from the account's own listing.

        Returns ``None`` when the account has no demo cluster, which restarts the dialog.
        """
        if not self.cloud_client.is_authenticated():
            self.login()
        return self.ask_for_demo_cluster(self.cloud_clusters(self.cloud_client.list_clusters()))

    def login(self):
        console.print("[blue]The demo server requires a cloud account.[/blue]")
        token = self._ask("token", "Paste your cloud session token", kind=QuestionKind.PASSWORD, required=True)
        self.cloud_client.login(token)
        console.print("[green]Logged in.[/green]")

    def ask_for_demo_cluster(self, clusters: List[Cluster]) -> Optional[Cluster]:
        latencies: Dict[str, float] = {region: self.ping(region) for region in SHARED_CLUSTER_REGIONS.values()}
        candidates = [cluster for cluster in clusters if cluster.name in SHARED_CLUSTER_REGIONS]
        if not candidates:
            logger.warning("No demo clusters available for this account.")
            return None

        rows = []
        for cluster in candidates:
            region = SHARED_CLUSTER_REGIONS[cluster.name]
            rows.append(
                [
                    cluster_label(cluster),
                    f"Hosted on AWS in {region} using MySQL [{latencies[region]:.0f}ms latency]",
                ]
            )

        answer = self.prompter.ask(
            Question(
                name="cluster",
                message="Choose the region of your demo server",
                kind=QuestionKind.LIST,
                choices=convert_choices(rows),
            )
        )
        return next((cluster for cluster in candidates if cluster_label(cluster) == answer), None)

    def build_cluster_question(
        self,
        from_scratch: bool,
        has_docker_compose_yml: bool,
        clusters: List[Cluster],
    ) -> Question:
        message = "Set up a new server or deploy to an existing server?"

        if from_scratch and not has_docker_compose_yml:
            database_choices = convert_choices(_DATABASE_CHOICES + _SANDBOX_CHOICES)
            choices = [
                _BLANK,
                Separator("[bold]You can set up a server for local development (based on docker-compose)[/bold]"),
                *database_choices[:2],
                _BLANK,
                Separator("[bold]Or deploy to an existing server:[/bold]"),
                *database_choices[2:],
            ]
            return Question(name="choice", message=message, kind=QuestionKind.LIST, choices=choices)

        cluster_rows = (
            [cluster_choice(cluster) for cluster in clusters if not cluster.shared]
            if clusters
            else [list(row) for row in _SANDBOX_CHOICES]
        )
        converted = convert_choices(_DATABASE_CHOICES + cluster_rows + _SANDBOX_CHOICES)
        docker_choices = []
        if not has_docker_compose_yml:
            docker_choices = [
                Separator("[bold]Set up a new server for local development (based on docker-compose):[/bold]"),
                *converted[:2],
            ]
        choices = [
            _BLANK,
            *docker_choices,
            _BLANK,
            Separator("[bold]Or deploy to an existing server:[/bold]"),
            *_dedupe(converted[2:]),
        ]
        return Question(name="choice", message=message, kind=QuestionKind.LIST, choices=choices)

    def project_exists(self, cluster: Cluster, service: str, stage: str, workspace: Optional[str]) -> bool:
        try:
            return bool(self.cloud_client.get_project(cluster, concat_name(cluster, service, workspace), stage))
        except WizardError as exc:
            logger.debug("Project lookup failed, treating as missing: %s", exc)
            return False

    def ask_for_database_kind(self, introspect: bool = False) -> DatabaseKind:
        choices = [
            Choice(value=kind.value, label=f"{kind.label[0].ljust(18)}{kind.label[1]}")
            for kind in (DatabaseKind.MYSQL, DatabaseKind.POSTGRES, DatabaseKind.MONGO)
        ]
        answer = self.prompter.ask(
            Question(
                name="dbType",
                message=f"What kind of database do you want to {'introspect' if introspect else 'deploy to'}?",
                kind=QuestionKind.LIST,
                choices=choices,
            )
        )
        return DatabaseKind(answer)

    def ask_for_existing_data(self) -> bool:
        answer = self.prompter.ask(
            Question(
                name="existingData",
                message="Does your database contain existing data?",
                kind=QuestionKind.LIST,
                choices=[
                    Choice(value="no", label="No"),
                    Choice(value="yes", label="Yes (experimental - migrations not yet supported)"),
                    Separator(
                        "\n[yellow]Warning: Introspecting databases with existing data is currently "
                        "an experimental feature.[/yellow]\n"
                    ),
                ],
            )
        )
        return answer == "yes"

    def ask_for_database(self, introspection: bool = False) -> DatabaseCredentials:
        kind = self.ask_for_database_kind(introspection)
        already_data = False if kind is DatabaseKind.MONGO else introspection or self.ask_for_existing_data()

        host = self._ask("host", "Enter database host", default="localhost")
        port = self._ask("port", "Enter database port", default=str(kind.default_port), validate=_validate_port)
        user = self._ask("user", "Enter database user", required=True)
        password = self._ask("password", "Enter database password", kind=QuestionKind.PASSWORD)
        database = self._ask(
            "database",
            "Enter name of existing database" if already_data else "Enter database name",
        )
        ssl = self.prompter.ask(Question(name="ssl", message="Use SSL?", kind=QuestionKind.CONFIRM, default=False))
        schema = None
        if kind is DatabaseKind.POSTGRES and already_data:
            schema = self._ask("schema", "Enter name of existing schema")

        return DatabaseCredentials(
            kind=kind,
            host=host,
            port=int(port),
            user=user,
            password=password,
            database=database or None,
            schema=schema or None,
            ssl=bool(ssl),
            already_data=already_data,
        )

    def ask_for_service(self, default_name: str) -> str:
        return self._ask("service", "Choose a name for your service", default=default_name)

    def ask_for_stage(self, default_name: str) -> str:
        return self._ask("stage", "Choose a name for your stage", default=default_name)

    def ask_for_generator(self) -> Generator:
        answer = self.prompter.ask(
            Question(
                name="generator",
                message="Select the programming language for the generated client",
                kind=QuestionKind.LIST,
                choices=[Choice(value=generator.value, label=GENERATOR_LABELS[generator]) for generator in Generator],
            )
        )
        return Generator(answer)

    def _ask(
        self,
        key: str,
        message: str,
        default: Optional[str] = None,
        kind: QuestionKind = QuestionKind.INPUT,
        required: bool = False,
        validate: Optional[Callable] = None,
    ) -> str:
        return self.prompter.ask(
            Question(
                name=key,
                message=message,
                kind=kind,
                default=default,
                required=required,
                validate=validate,
            )
        )


def cluster_label(cluster: Cluster) -> str:
    prefix = f"{cluster.workspace_slug}/" if cluster.workspace_slug else ""
    return f"{prefix}{encode_name(cluster.name)}"


def cluster_choice(cluster: Cluster) -> List[str]:
    if cluster.shared:
        description = "Free development server on the cloud (incl. database)"
    else:
        description = "Production cluster"
    return [cluster_label(cluster), description]


def _dedupe(choices: List[Choice]) -> List[Choice]:
    seen = set()
    unique = []
    for choice in choices:
        if choice.value in seen:
            continue
        seen.add(choice.value)
        unique.append(choice)
    return unique


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _validate_port(value: str):
    if value.isdigit() and 0 < int(value) < 65536:
        return True
    return "Please provide a valid port"


def _validate_endpoint(value: str):
    parsed = urlparse(value)
    if parsed.scheme in {"http", "https"} and parsed.netloc:
        return True
    return "Please provide a valid endpoint, e.g. http://localhost:4466"


class SetupWizard:
    """Runs the endpoint dialog and persists its outcome."""

    def __init__(
        self,
        project_dir: str,
        ask_generator: bool = False,
        local_endpoint: str = LOCAL_ENDPOINT,
        cloud_api_url: str = DEFAULT_CLOUD_API_URL,
        cloud_token: Optional[str] = None,
        max_restarts: int = 3,
        request_timeout: float = 10.0,
        start: bool = False,
    ):
        self.project_dir = os.path.abspath(project_dir)
        self.start = start

        self.cloud_client = CloudClient(
            api_url=cloud_api_url,
            token=cloud_token,
            logger=logger,
            requests_module=requests,
            timeout=request_timeout,
        )
        self.dialog = EndpointDialog(
            prompter=RichPrompter(console),
            cloud_client=self.cloud_client,
            project_dir=self.project_dir,
            ask_generator=ask_generator,
            local_endpoint=local_endpoint,
            max_restarts=max_restarts,
        )
        self.writer = ProjectWriter(project_dir=self.project_dir, logger=logger, console=console)
        self.command_runner = CommandRunner(logger=logger, cwd=self.project_dir)
        self.docker_runtime_service = DockerRuntimeService(logger=logger, console=console)

    def start_local_server(self, result: EndpointResult):
        compose_cmd = self.docker_runtime_service.get_docker_compose_cmd()
        self.docker_runtime_service.start_stack(compose_cmd, self.command_runner.run)
        self.docker_runtime_service.wait_for_server(result.cluster)

    def print_next_steps(self, result: EndpointResult, started: bool):
        console.print()
        console.print(f"[bold]Endpoint:[/bold] {result.endpoint}")
        steps = []
        if result.write_docker_compose_yml and not started:
            steps.append("Start your server: docker compose up -d")
        steps.append(f"Deploy your service {result.service}@{result.stage}")
        console.print("[bold]Next steps:[/bold]")
        for number, step in enumerate(steps, start=1):
            console.print(f"  {number}. {step}")

    def run(self) -> int:
        try:
            logger.info("Starting endpoint setup in %s", self.project_dir)
            result = self.dialog.get_endpoint()
            self.writer.write(result)

            started = False
            if self.start and result.new_database and result.write_docker_compose_yml:
                self.start_local_server(result)
                started = True

            self.print_next_steps(result, started)
            return 0
        except KeyboardInterrupt:
            console.print("[bold red]Setup cancelled by user.[/bold red]")
            logger.info("Setup cancelled by user")
            return 1
        except WizardError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            return 1
