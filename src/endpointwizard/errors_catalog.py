"""Actionable error catalog for endpointwizard."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "database_connection_failed": {
        "what": "Could not connect to database. {reason}",
        "next": "Check host, port, credentials and SSL settings, then run the wizard again.",
    },
    "database_without_tables": {
        "what": "The provided database doesn't contain any tables.",
        "next": 'Provide another database or answer "No" to "Does your database contain existing data?".',
    },
    "cluster_not_resolved": {
        "what": "Could not resolve target cluster '{choice}'.",
        "next": "Pick a cluster listed in the menu or log in to load your workspace clusters.",
    },
    "demo_cluster_unavailable": {
        "what": "No demo cluster could be selected after {attempts} attempt(s).",
        "next": "Check your login and network, or choose 'Use other server'.",
    },
    "login_failed": {
        "what": "Login to the cloud API failed: {reason}",
        "next": "Generate a new session token and try again.",
    },
    "region_unreachable": {
        "what": "Could not measure latency for region {region}: {reason}",
        "next": "Check your network connection before choosing a demo server.",
    },
    "local_server_not_ready": {
        "what": "The local server at {endpoint} did not come online.",
        "next": "Inspect `docker compose logs` and start the stack manually.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
