"""Round-trip latency probes for hosted regions."""

import time

import requests

from endpointwizard.constants import REGION_PING_URL
from endpointwizard.errors import WizardError
from endpointwizard.errors_catalog import actionable_error


def ping_region(region: str, requests_module=requests, timeout: float = 5.0) -> float:
    """Return the round-trip time to ``region`` in milliseconds."""
    url = REGION_PING_URL.format(region=region)
    started = time.perf_counter()
    try:
        response = requests_module.get(url, timeout=timeout)
        response.raise_for_status()
    except requests_module.RequestException as exc:
        raise WizardError(actionable_error("region_unreachable", region=region, reason=str(exc))) from exc
    return (time.perf_counter() - started) * 1000
