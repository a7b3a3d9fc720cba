"""Deployment targets exposing a management API."""

from typing import Any, Dict, Optional

import requests


class Cluster:
    """A named server that hosts services and stages."""

    def __init__(
        self,
        name: str,
        base_url: str,
        local: bool = True,
        shared: bool = False,
        is_private: bool = False,
        workspace_slug: Optional[str] = None,
        secret: Optional[str] = None,
        requests_module=requests,
        timeout: float = 5.0,
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.local = local
        self.shared = shared
        self.is_private = is_private
        self.workspace_slug = workspace_slug
        self.secret = secret
        self.requests = requests_module
        self.timeout = timeout

    def __repr__(self) -> str:
        return (
            f"Cluster(name={self.name!r}, base_url={self.base_url!r}, local={self.local}, "
            f"shared={self.shared}, workspace_slug={self.workspace_slug!r})"
        )

    @property
    def management_endpoint(self) -> str:
        return f"{self.base_url}/management"

    def _post_management(self, query: str) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.secret:
            headers["Authorization"] = f"Bearer {self.secret}"
        response = self.requests.post(
            self.management_endpoint,
            json={"query": query},
            headers=headers,
            timeout=self.timeout,
        )
        return response.json()

    def is_online(self) -> bool:
        try:
            data = self._post_management("{ __typename }")
        except (self.requests.RequestException, ValueError):
            return False
        return (data.get("data") or {}).get("__typename") == "Query"

    def needs_auth(self) -> bool:
        try:
            data = self._post_management("{ listProjects { name stage } }")
        except (self.requests.RequestException, ValueError):
            return False
        return bool(data.get("errors"))

    def get_api_endpoint(self, service: str, stage: str, workspace: Optional[str] = None) -> str:
        if not self.shared and service == "default" and stage == "default":
            return self.base_url
        if not self.shared and stage == "default":
            return f"{self.base_url}/{service}"
        if self.is_private or self.local:
            return f"{self.base_url}/{service}/{stage}"
        workspace_part = f"{workspace}/" if workspace else ""
        return f"{self.base_url}/{workspace_part}{service}/{stage}"


def concat_name(cluster: Cluster, name: str, workspace: Optional[str]) -> str:
    """Project name as the cloud API stores it."""
    if cluster.shared and workspace:
        return f"{workspace}~{name}"
    return name
