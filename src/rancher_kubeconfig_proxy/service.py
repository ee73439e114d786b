"""End-to-end kubeconfig generation: fetch from Rancher, merge, serialize."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rancher_kubeconfig_proxy.kubeconfig.generator import GenerateResult, KubeconfigGenerator
from rancher_kubeconfig_proxy.rancher.client import RancherClient
from rancher_kubeconfig_proxy.rancher.fetcher import KubeconfigFetcher

if TYPE_CHECKING:
    from rancher_kubeconfig_proxy.config import ProxyConfig
    from rancher_kubeconfig_proxy.rancher.models import RancherCluster

logger = logging.getLogger(__name__)


@dataclass
class GeneratedKubeconfig:
    """Merged kubeconfig text and the report of how it was built."""

    text: str
    result: GenerateResult
    inactive: list[str]
    attempted: int

    def summary(self) -> str:
        """One-line report of the run."""
        return self.result.summary(total=self.attempted)


async def generate_kubeconfig(
    client: RancherClient,
    generator: KubeconfigGenerator,
    cluster_ids: Sequence[str] | None = None,
    concurrency: int = 8,
    timeout: float = 30.0,
    cancel_event: asyncio.Event | None = None,
) -> GeneratedKubeconfig:
    """Fetch every eligible cluster's kubeconfig and merge them.

    Fetch warnings come first in the result's warning list, followed by
    parse failures and name collisions.

    Raises:
        FetchError: If the cluster list cannot be retrieved.
        FetchCancelledError: If the batch was cancelled.
        EncodingError: If the merged kubeconfig cannot be serialized.
    """
    fetcher = KubeconfigFetcher(client, concurrency=concurrency, timeout=timeout)
    fetched = await fetcher.fetch_all(cluster_ids, cancel_event=cancel_event)

    text, result = generator.generate(fetched.kubeconfigs)
    result.warnings[:0] = fetched.warnings

    return GeneratedKubeconfig(
        text=text,
        result=result,
        inactive=fetched.inactive,
        attempted=fetched.attempted,
    )


async def generate_from_config(
    config: ProxyConfig,
    cluster_ids: Sequence[str] | None = None,
    cancel_event: asyncio.Event | None = None,
) -> GeneratedKubeconfig:
    """Generate a merged kubeconfig using a validated configuration."""
    generator = KubeconfigGenerator(prefix=config.cluster_prefix)
    async with RancherClient(config) as client:
        return await generate_kubeconfig(
            client,
            generator,
            cluster_ids=cluster_ids,
            concurrency=config.fetch_concurrency,
            timeout=config.request_timeout,
            cancel_event=cancel_event,
        )


async def list_clusters(config: ProxyConfig) -> list[RancherCluster]:
    """List the clusters known to Rancher using a validated configuration."""
    async with RancherClient(config) as client:
        return await client.list_clusters()
