"""Concurrent kubeconfig retrieval for Rancher clusters.

Fetches for different clusters are independent, so they run concurrently
with a bounded number in flight. A failed, timed-out or malformed fetch
excludes only that cluster; the batch always runs to completion and the
failures come back as warnings next to the successful results.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rancher_kubeconfig_proxy.models.common import FetchWarning, WarningKind
from rancher_kubeconfig_proxy.utils.errors import FetchCancelledError, FetchError

if TYPE_CHECKING:
    from rancher_kubeconfig_proxy.rancher.client import RancherClient
    from rancher_kubeconfig_proxy.rancher.models import RancherCluster

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8
DEFAULT_TIMEOUT = 30.0


@dataclass
class FetchResult:
    """Kubeconfigs retrieved in one batch."""

    kubeconfigs: dict[str, str] = field(default_factory=dict)
    warnings: list[FetchWarning] = field(default_factory=list)
    inactive: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        """Number of clusters a fetch was attempted for."""
        return len(self.kubeconfigs) + sum(
            1 for w in self.warnings if w.kind == WarningKind.FETCH_FAILED
        )


def select_clusters(
    clusters: Sequence[RancherCluster], cluster_ids: Sequence[str] | None
) -> tuple[list[RancherCluster], list[FetchWarning]]:
    """Pick the clusters matching the requested IDs or names.

    Returns:
        The selected clusters (all of them when ``cluster_ids`` is empty)
        and a warning for each identifier that matched nothing.
    """
    if not cluster_ids:
        return list(clusters), []

    selected: list[RancherCluster] = []
    warnings: list[FetchWarning] = []
    for identifier in cluster_ids:
        match = next((c for c in clusters if identifier in (c.id, c.name)), None)
        if match is None:
            warnings.append(
                FetchWarning(
                    kind=WarningKind.NOT_FOUND,
                    cluster_name=identifier,
                    message="cluster not found in Rancher",
                )
            )
        elif match not in selected:
            selected.append(match)
    return selected, warnings


class KubeconfigFetcher:
    """Retrieves kubeconfigs for a set of Rancher clusters."""

    def __init__(
        self,
        client: RancherClient,
        concurrency: int = DEFAULT_CONCURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._client = client
        self._concurrency = concurrency
        self._timeout = timeout

    async def _fetch_one(
        self,
        cluster: RancherCluster,
        semaphore: asyncio.Semaphore,
        cancel_event: asyncio.Event | None,
    ) -> tuple[str, str | None, FetchWarning | None]:
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                return cluster.name, None, None

            logger.debug(f"Fetching kubeconfig for cluster {cluster.name} ({cluster.id})")
            try:
                kubeconfig = await asyncio.wait_for(
                    self._client.get_cluster_kubeconfig(cluster), timeout=self._timeout
                )
            except asyncio.TimeoutError:
                error = FetchError(
                    f"Timed out after {self._timeout:g}s getting kubeconfig for "
                    f"cluster {cluster.name}",
                    cluster_name=cluster.name,
                )
                return cluster.name, None, FetchWarning.from_error(cluster.name, error)
            except Exception as e:
                logger.debug(f"Fetch for cluster {cluster.name} failed: {e}")
                return cluster.name, None, FetchWarning.from_error(cluster.name, e)

            if not kubeconfig:
                error = FetchError(
                    f"Rancher returned an empty kubeconfig for cluster {cluster.name}",
                    cluster_name=cluster.name,
                )
                return cluster.name, None, FetchWarning.from_error(cluster.name, error)

            return cluster.name, kubeconfig, None

    async def fetch_all(
        self,
        cluster_ids: Sequence[str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> FetchResult:
        """Fetch kubeconfigs for all active (or the requested) clusters.

        Args:
            cluster_ids: Cluster IDs or names to restrict the batch to.
            cancel_event: When set, no further fetches are started.

        Returns:
            FetchResult keyed by cluster name.

        Raises:
            FetchError: If the cluster list cannot be retrieved.
            FetchCancelledError: If ``cancel_event`` was set during the batch.
        """
        clusters = await self._client.list_clusters()
        selected, warnings = select_clusters(clusters, cluster_ids)

        result = FetchResult(warnings=warnings)
        eligible: list[RancherCluster] = []
        for cluster in selected:
            if cluster.is_active:
                eligible.append(cluster)
            else:
                logger.debug(f"Skipping cluster {cluster.name} in state '{cluster.state}'")
                result.inactive.append(cluster.name)

        if not eligible:
            return result

        semaphore = asyncio.Semaphore(min(len(eligible), self._concurrency))
        outcomes = await asyncio.gather(
            *(self._fetch_one(cluster, semaphore, cancel_event) for cluster in eligible)
        )

        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelledError("Kubeconfig fetch was cancelled")

        for name, kubeconfig, warning in sorted(outcomes, key=lambda o: o[0]):
            if warning is not None:
                result.warnings.append(warning)
            elif kubeconfig is not None:
                result.kubeconfigs[name] = kubeconfig

        logger.info(
            f"Fetched {len(result.kubeconfigs)} of {len(eligible)} active cluster kubeconfigs"
        )
        return result
