"""Tests for KubeconfigFetcher."""

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from rancher_kubeconfig_proxy.models.common import FetchWarning, WarningKind
from rancher_kubeconfig_proxy.rancher.fetcher import (
    FetchResult,
    KubeconfigFetcher,
    select_clusters,
)
from rancher_kubeconfig_proxy.rancher.models import RancherCluster
from rancher_kubeconfig_proxy.utils.errors import FetchCancelledError, FetchError


def _cluster(cluster_id: str, name: str, state: str = "active") -> RancherCluster:
    return RancherCluster(id=cluster_id, name=name, state=state)


@pytest.fixture
def clusters() -> list[RancherCluster]:
    """Three active clusters and one still provisioning."""
    return [
        _cluster("c-m-1", "prod"),
        _cluster("c-m-2", "staging"),
        _cluster("c-m-3", "dev"),
        _cluster("c-m-4", "new", state="provisioning"),
    ]


@pytest.fixture
def mock_client(
    clusters: list[RancherCluster], make_kubeconfig: Callable[..., str]
) -> MagicMock:
    """RancherClient double returning a kubeconfig per cluster."""
    client = MagicMock()
    client.list_clusters = AsyncMock(return_value=clusters)

    async def get_kubeconfig(cluster: RancherCluster) -> str:
        return make_kubeconfig(cluster.name, cluster.id)

    client.get_cluster_kubeconfig = AsyncMock(side_effect=get_kubeconfig)
    return client


class TestSelectClusters:
    """Test select_clusters()."""

    def test_no_selection_returns_all(self, clusters: list[RancherCluster]) -> None:
        """Without identifiers every cluster is selected."""
        selected, warnings = select_clusters(clusters, None)

        assert selected == clusters
        assert warnings == []

    def test_select_by_id_or_name(self, clusters: list[RancherCluster]) -> None:
        """Identifiers match either the ID or the name."""
        selected, warnings = select_clusters(clusters, ["c-m-2", "dev", "staging"])

        assert [c.name for c in selected] == ["staging", "dev"]
        assert warnings == []

    def test_unknown_identifier_warns(self, clusters: list[RancherCluster]) -> None:
        """Identifiers matching nothing produce a not_found warning."""
        selected, warnings = select_clusters(clusters, ["prod", "ghost"])

        assert [c.name for c in selected] == ["prod"]
        assert len(warnings) == 1
        assert warnings[0].kind == WarningKind.NOT_FOUND
        assert warnings[0].cluster_name == "ghost"


class TestKubeconfigFetcher:
    """Test KubeconfigFetcher.fetch_all()."""

    def test_invalid_concurrency(self, mock_client: MagicMock) -> None:
        """Concurrency must be positive."""
        with pytest.raises(ValueError):
            KubeconfigFetcher(mock_client, concurrency=0)

    async def test_fetches_active_clusters(self, mock_client: MagicMock) -> None:
        """Only active clusters are fetched."""
        result = await KubeconfigFetcher(mock_client).fetch_all()

        assert isinstance(result, FetchResult)
        assert sorted(result.kubeconfigs) == ["dev", "prod", "staging"]
        assert result.inactive == ["new"]
        assert result.warnings == []
        assert result.attempted == 3
        calls = mock_client.get_cluster_kubeconfig.call_args_list
        fetched = {call.args[0].name for call in calls}
        assert fetched == {"prod", "staging", "dev"}

    async def test_failure_does_not_abort_batch(self, mock_client: MagicMock) -> None:
        """A failing cluster is reported and the others are kept."""
        original = mock_client.get_cluster_kubeconfig.side_effect

        async def flaky(cluster: RancherCluster) -> str:
            if cluster.name == "staging":
                raise FetchError("status 500", cluster_name=cluster.name, status_code=500)
            return await original(cluster)

        mock_client.get_cluster_kubeconfig.side_effect = flaky

        result = await KubeconfigFetcher(mock_client).fetch_all()

        assert sorted(result.kubeconfigs) == ["dev", "prod"]
        assert len(result.warnings) == 1
        assert result.warnings[0].kind == WarningKind.FETCH_FAILED
        assert result.warnings[0].cluster_name == "staging"
        assert "status 500" in result.warnings[0].message
        assert result.attempted == 3

    async def test_transport_error_becomes_warning(self, mock_client: MagicMock) -> None:
        """Unexpected exceptions from the client are reported, not raised."""
        mock_client.get_cluster_kubeconfig.side_effect = httpx.ReadError("reset by peer")

        result = await KubeconfigFetcher(mock_client).fetch_all()

        assert result.kubeconfigs == {}
        assert [w.cluster_name for w in result.warnings] == ["dev", "prod", "staging"]
        assert all(w.kind == WarningKind.FETCH_FAILED for w in result.warnings)

    async def test_timeout_becomes_warning(self, mock_client: MagicMock) -> None:
        """A fetch exceeding its timeout is reported like any other failure."""
        original = mock_client.get_cluster_kubeconfig.side_effect

        async def slow(cluster: RancherCluster) -> str:
            if cluster.name == "dev":
                await asyncio.sleep(5)
            return await original(cluster)

        mock_client.get_cluster_kubeconfig.side_effect = slow

        result = await KubeconfigFetcher(mock_client, timeout=0.05).fetch_all()

        assert sorted(result.kubeconfigs) == ["prod", "staging"]
        assert len(result.warnings) == 1
        assert result.warnings[0].cluster_name == "dev"
        assert "Timed out" in result.warnings[0].message

    async def test_empty_kubeconfig_becomes_warning(self, mock_client: MagicMock) -> None:
        """An empty config field is treated as a failure."""
        mock_client.get_cluster_kubeconfig.side_effect = None
        mock_client.get_cluster_kubeconfig.return_value = ""

        result = await KubeconfigFetcher(mock_client).fetch_all(["prod"])

        assert result.kubeconfigs == {}
        assert "empty kubeconfig" in result.warnings[0].message

    async def test_selection(self, mock_client: MagicMock) -> None:
        """Only requested clusters are fetched."""
        result = await KubeconfigFetcher(mock_client).fetch_all(["c-m-1", "ghost", "new"])

        assert list(result.kubeconfigs) == ["prod"]
        assert result.inactive == ["new"]
        assert [(w.kind, w.cluster_name) for w in result.warnings] == [
            (WarningKind.NOT_FOUND, "ghost")
        ]

    async def test_no_eligible_clusters(self, mock_client: MagicMock) -> None:
        """Nothing is fetched when no cluster is active."""
        result = await KubeconfigFetcher(mock_client).fetch_all(["new"])

        assert result.kubeconfigs == {}
        mock_client.get_cluster_kubeconfig.assert_not_called()

    async def test_list_failure_is_fatal(self, mock_client: MagicMock) -> None:
        """Failing to list clusters aborts the batch."""
        mock_client.list_clusters.side_effect = FetchError("Failed to list clusters: status 401")

        with pytest.raises(FetchError):
            await KubeconfigFetcher(mock_client).fetch_all()

    async def test_concurrency_is_bounded(self, mock_client: MagicMock) -> None:
        """No more than `concurrency` fetches run at once."""
        in_flight = 0
        peak = 0

        async def tracked(cluster: RancherCluster) -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "kind: Config\n"

        mock_client.get_cluster_kubeconfig.side_effect = tracked
        mock_client.list_clusters.return_value = [
            _cluster(f"c-m-{i}", f"cluster-{i}") for i in range(10)
        ]

        result = await KubeconfigFetcher(mock_client, concurrency=3).fetch_all()

        assert len(result.kubeconfigs) == 10
        assert peak <= 3

    async def test_results_independent_of_completion_order(
        self, mock_client: MagicMock
    ) -> None:
        """Results are keyed by name whatever order fetches finish in."""
        delays = {"prod": 0.03, "staging": 0.0, "dev": 0.015}

        async def delayed(cluster: RancherCluster) -> str:
            await asyncio.sleep(delays[cluster.name])
            return f"name: {cluster.name}\n"

        mock_client.get_cluster_kubeconfig.side_effect = delayed

        result = await KubeconfigFetcher(mock_client).fetch_all()

        assert list(result.kubeconfigs) == ["dev", "prod", "staging"]
        assert result.kubeconfigs["prod"] == "name: prod\n"

    async def test_cancel_before_start(self, mock_client: MagicMock) -> None:
        """A set cancel event stops new fetches and no result is returned."""
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(FetchCancelledError):
            await KubeconfigFetcher(mock_client).fetch_all(cancel_event=cancel)

        mock_client.get_cluster_kubeconfig.assert_not_called()

    async def test_cancel_mid_batch(self, mock_client: MagicMock) -> None:
        """Fetches already running finish, queued ones are not started."""
        cancel = asyncio.Event()
        started: list[str] = []

        async def first_cancels(cluster: RancherCluster) -> str:
            started.append(cluster.name)
            cancel.set()
            await asyncio.sleep(0.01)
            return "kind: Config\n"

        mock_client.get_cluster_kubeconfig.side_effect = first_cancels

        with pytest.raises(FetchCancelledError):
            await KubeconfigFetcher(mock_client, concurrency=1).fetch_all(cancel_event=cancel)

        assert len(started) == 1

    async def test_warning_from_unknown_exception(self, mock_client: MagicMock) -> None:
        """Exceptions without a message still produce a readable warning."""
        mock_client.get_cluster_kubeconfig.side_effect = RuntimeError()

        result = await KubeconfigFetcher(mock_client).fetch_all(["prod"])

        assert result.warnings[0].message == "RuntimeError"

    async def test_client_called_with_cluster_model(self, mock_client: MagicMock) -> None:
        """The orchestrator hands the cluster record to the client."""
        await KubeconfigFetcher(mock_client).fetch_all(["prod"])

        (cluster,), _ = mock_client.get_cluster_kubeconfig.call_args
        assert isinstance(cluster, RancherCluster)
        assert cluster.id == "c-m-1"


def test_fetch_result_attempted_ignores_not_found() -> None:
    """Unknown identifiers are not counted as attempted fetches."""
    result = FetchResult(
        kubeconfigs={"prod": "kind: Config\n"},
        warnings=[
            FetchWarning(kind=WarningKind.NOT_FOUND, cluster_name="ghost", message="missing"),
            FetchWarning(kind=WarningKind.FETCH_FAILED, cluster_name="dev", message="boom"),
        ],
    )

    assert result.attempted == 2
