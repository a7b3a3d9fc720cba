import logging
import os

import click
from rich.logging import RichHandler

from .constants import CLOUD_TOKEN_ENV_VAR, DEFAULT_CLOUD_API_URL, LOCAL_ENDPOINT
from .core import SetupWizard, WizardError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--dir",
    "project_dir",
    required=False,
    type=click.Path(file_okay=False),
    help="Project folder to set up (default: current directory).",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .endpointwizard.yml if present.",
)
@click.option(
    "--generator/--no-generator",
    "generator",
    default=None,
    help="Ask which client to generate for the service.",
)
@click.option(
    "--local-endpoint",
    required=False,
    help=f"Endpoint probed for a running local server (default: {LOCAL_ENDPOINT}).",
)
@click.option("--cloud-api-url", required=False, help="Cloud API used for login and cluster lookup.")
@click.option(
    "--max-restarts",
    required=False,
    type=int,
    default=None,
    help="How often the dialog may start over when no demo server is selected.",
)
@click.option(
    "--request-timeout",
    required=False,
    type=float,
    default=None,
    help="HTTP timeout in seconds for cloud API requests.",
)
@click.option(
    "--start",
    is_flag=True,
    default=None,
    help="Run `docker compose up -d` after creating a new local database.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    project_dir,
    config,
    generator,
    local_endpoint,
    cloud_api_url,
    max_restarts,
    request_timeout,
    start,
    verbose,
    log_file,
):
    """Set up a new server or connect a project to an existing one."""
    logger = logging.getLogger("endpointwizard")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), ".endpointwizard.yml")
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except WizardError as exc:
        raise click.ClickException(str(exc)) from exc

    project_dir = _resolve_option(project_dir, config_values, "dir", default=os.getcwd())
    generator = bool(_resolve_option(generator, config_values, "generator", default=False))
    local_endpoint = _resolve_option(
        local_endpoint, config_values, "local_endpoint", default=LOCAL_ENDPOINT
    )
    cloud_api_url = _resolve_option(
        cloud_api_url, config_values, "cloud_api_url", default=DEFAULT_CLOUD_API_URL
    )
    cloud_token = config_values.get("cloud_token") or os.environ.get(CLOUD_TOKEN_ENV_VAR)
    max_restarts = int(_resolve_option(max_restarts, config_values, "max_restarts", default=3))
    request_timeout = float(
        _resolve_option(request_timeout, config_values, "request_timeout", default=10.0)
    )
    start = bool(_resolve_option(start, config_values, "start", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if max_restarts < 0:
        raise click.ClickException("--max-restarts must not be negative.")
    if not os.path.isdir(project_dir):
        raise click.ClickException(f"Project folder not found: {project_dir}")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        wizard = SetupWizard(
            project_dir=project_dir,
            ask_generator=generator,
            local_endpoint=local_endpoint,
            cloud_api_url=cloud_api_url,
            cloud_token=cloud_token,
            max_restarts=max_restarts,
            request_timeout=request_timeout,
            start=start,
        )
    except WizardError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(wizard.run())


if __name__ == "__main__":
    main()
