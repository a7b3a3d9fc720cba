"""Configuration loader for endpointwizard."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from endpointwizard.errors import WizardError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "dir",
        "local_endpoint",
        "cloud_api_url",
        "cloud_token",
        "generator",
        "max_restarts",
        "request_timeout",
        "start",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise WizardError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise WizardError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise WizardError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise WizardError(f"Unknown configuration keys: {unknown_list}")

        return parsed
