"""Cloud API client for authentication, clusters and project lookups."""

import logging
from typing import Any, Dict, List, Optional

import requests

from endpointwizard.constants import SHARED_CLUSTER_REGIONS
from endpointwizard.errors import WizardError
from endpointwizard.errors_catalog import actionable_error
from endpointwizard.services.cluster import Cluster

_ME_QUERY = "{ me { id } }"

_CLUSTERS_QUERY = """
{
  me {
    memberships {
      workspace {
        slug
        clusters {
          name
          connectInfo {
            endpoint
          }
        }
      }
    }
  }
}
"""

_PROJECT_QUERY = """
query ($name: String!, $stage: String!) {
  project(name: $name, stage: $stage) {
    name
    stage
  }
}
"""


def shared_clusters(requests_module=requests, timeout: float = 5.0) -> List[Cluster]:
    """Public demo clusters available without a workspace."""
    return [
        Cluster(
            name,
            f"https://{name.split('-', 1)[1]}.prisma.sh",
            local=False,
            shared=True,
            requests_module=requests_module,
            timeout=timeout,
        )
        for name in SHARED_CLUSTER_REGIONS
    ]


class CloudClient:
    """Talks to the hosted cloud API on behalf of the wizard."""

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        requests_module=requests,
        timeout: float = 10.0,
    ):
        self.api_url = api_url
        self.token = token
        self.logger = logger or logging.getLogger("endpointwizard")
        self.requests = requests_module
        self.timeout = timeout

    def _graphql(
        self,
        url: str,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.requests.post(
                url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (self.requests.RequestException, ValueError) as exc:
            raise WizardError(f"Request to {url} failed: {exc}") from exc

        errors = payload.get("errors")
        if errors:
            message = errors[0].get("message", "unknown error")
            raise WizardError(f"Request to {url} failed: {message}")
        return payload.get("data") or {}

    def is_authenticated(self) -> bool:
        if not self.token:
            return False
        try:
            data = self._graphql(self.api_url, _ME_QUERY, token=self.token)
        except WizardError as exc:
            self.logger.debug("Authentication check failed: %s", exc)
            return False
        return bool(data.get("me"))

    def login(self, token: str):
        self.token = token.strip() if token else None
        if not self.is_authenticated():
            self.token = None
            raise WizardError(actionable_error("login_failed", reason="token was rejected"))
        self.logger.info("Logged in to %s", self.api_url)

    def list_clusters(self) -> List[Cluster]:
        if not self.token:
            return []

        data = self._graphql(self.api_url, _CLUSTERS_QUERY, token=self.token)
        clusters: List[Cluster] = []
        for membership in (data.get("me") or {}).get("memberships") or []:
            workspace = membership.get("workspace") or {}
            slug = workspace.get("slug")
            for entry in workspace.get("clusters") or []:
                name = entry.get("name")
                endpoint = (entry.get("connectInfo") or {}).get("endpoint")
                if not name or not endpoint:
                    self.logger.warning("Skipping cluster without endpoint in workspace %s: %s", slug, name)
                    continue
                shared = name in SHARED_CLUSTER_REGIONS
                clusters.append(
                    Cluster(
                        name,
                        endpoint,
                        local=False,
                        shared=shared,
                        is_private=not shared,
                        workspace_slug=slug,
                        secret=self.token,
                        requests_module=self.requests,
                    )
                )
        return clusters

    def get_project(self, cluster: Cluster, name: str, stage: str) -> Optional[Dict[str, Any]]:
        # The session token only goes to cloud hosted clusters.
        token = cluster.secret or (self.token if cluster.shared else None)
        data = self._graphql(
            cluster.management_endpoint,
            _PROJECT_QUERY,
            {"name": name, "stage": stage},
            token=token,
        )
        return data.get("project")
