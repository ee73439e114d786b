"""Rancher v3 API client."""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from rancher_kubeconfig_proxy.rancher.models import (
    ClusterCollection,
    KubeconfigResponse,
    RancherCluster,
)
from rancher_kubeconfig_proxy.utils.errors import ConfigurationError, FetchError

if TYPE_CHECKING:
    from rancher_kubeconfig_proxy.config import ProxyConfig

logger = logging.getLogger(__name__)

# Response bodies quoted in error messages are cut to this length
MAX_ERROR_BODY = 500


def build_verify(config: ProxyConfig) -> bool | ssl.SSLContext:
    """Build the TLS verification setting for httpx.

    Raises:
        ConfigurationError: If the CA certificate cannot be loaded.
    """
    if config.insecure_skip_tls_verify:
        return False

    if config.ca_cert is not None:
        try:
            return ssl.create_default_context(cafile=str(config.ca_cert))
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(
                f"Failed to load CA certificate {config.ca_cert}: {e}"
            ) from e

    return True


class RancherClient:
    """Async client for the Rancher API.

    Usage:
        async with RancherClient(config) as client:
            clusters = await client.list_clusters()
    """

    def __init__(
        self,
        config: ProxyConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RancherClient:
        access_key, secret_key = self._config.get_basic_auth()
        self._client = httpx.AsyncClient(
            base_url=self._config.url or "",
            auth=(access_key, secret_key),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=self._config.request_timeout,
            verify=build_verify(self._config),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        """Get the HTTP client.

        Raises:
            RuntimeError: If the client is not open.
        """
        if self._client is None:
            raise RuntimeError("RancherClient is not open, use 'async with'")
        return self._client

    async def _request(
        self, method: str, url: str, what: str, cluster_name: str | None = None
    ) -> Any:
        try:
            response = await self.http.request(method, url)
        except httpx.HTTPError as e:
            raise FetchError(f"{what}: request failed: {e}", cluster_name=cluster_name) from e

        if response.status_code != 200:
            raise FetchError(
                f"{what}: status {response.status_code}, "
                f"body: {response.text[:MAX_ERROR_BODY]}",
                cluster_name=cluster_name,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"{what}: invalid JSON response: {e}", cluster_name=cluster_name
            ) from e

    async def list_clusters(self) -> list[RancherCluster]:
        """List all clusters managed by Rancher.

        Raises:
            FetchError: If the request fails or the response is malformed.
        """
        payload = await self._request("GET", "/v3/clusters", "Failed to list clusters")
        try:
            collection = ClusterCollection.model_validate(payload)
        except ValidationError as e:
            raise FetchError(f"Failed to decode clusters response: {e}") from e

        logger.debug(f"Rancher reported {len(collection.data)} clusters")
        return collection.data

    def kubeconfig_action_url(self, cluster: RancherCluster) -> str:
        """Get the generateKubeconfig action URL for a cluster."""
        if cluster.actions.generate_kubeconfig:
            return cluster.actions.generate_kubeconfig
        return f"/v3/clusters/{cluster.id}?action=generateKubeconfig"

    async def get_cluster_kubeconfig(self, cluster: RancherCluster) -> str:
        """Generate the kubeconfig for one cluster.

        Raises:
            FetchError: If the request fails or the response is malformed.
        """
        what = f"Failed to get kubeconfig for cluster {cluster.name}"
        payload = await self._request(
            "POST", self.kubeconfig_action_url(cluster), what, cluster_name=cluster.name
        )
        try:
            response = KubeconfigResponse.model_validate(payload)
        except ValidationError as e:
            raise FetchError(
                f"{what}: unexpected response: {e}", cluster_name=cluster.name
            ) from e

        return response.config
