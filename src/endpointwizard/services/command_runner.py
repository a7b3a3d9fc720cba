"""Subprocess execution for docker commands."""

import subprocess
import time
from typing import List, Optional

from endpointwizard.errors import WizardError


class CommandRunner:
    """Runs external commands and turns failures into WizardError."""

    def __init__(self, logger, cwd: Optional[str] = None, default_timeout: Optional[float] = None):
        self.logger = logger
        self.cwd = cwd
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        retry_count: int = 0,
        retry_backoff_seconds: float = 0.0,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout
        max_attempts = max(1, retry_count + 1)

        for attempt in range(1, max_attempts + 1):
            try:
                result = subprocess.run(
                    cmd,
                    cwd=self.cwd,
                    text=True,
                    capture_output=capture_output,
                    timeout=effective_timeout,
                )
            except FileNotFoundError as exc:
                raise WizardError(
                    f"Required command not found: {cmd[0]}. Please install it and try again."
                ) from exc
            except subprocess.TimeoutExpired as exc:
                if attempt < max_attempts:
                    self.logger.warning(
                        "Command timed out on attempt %s/%s, retrying: %s",
                        attempt,
                        max_attempts,
                        cmd_str,
                    )
                    time.sleep(retry_backoff_seconds)
                    continue
                raise WizardError(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc

            if result.returncode == 0:
                return result

            stderr = (result.stderr or "").strip() if capture_output else ""
            message = f"Command failed ({result.returncode}): {cmd_str}"
            if stderr:
                message = f"{message}\n{stderr}"

            if attempt < max_attempts:
                self.logger.warning("%s\nRetrying in %.1fs.", message, retry_backoff_seconds)
                time.sleep(retry_backoff_seconds)
                continue

            if check:
                raise WizardError(message)

            self.logger.warning(message)
            return result

        raise WizardError(f"Command failed after retries: {cmd_str}")
