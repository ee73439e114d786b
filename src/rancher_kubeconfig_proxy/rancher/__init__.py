"""Rancher domain - API client and concurrent kubeconfig retrieval."""

from rancher_kubeconfig_proxy.rancher.client import RancherClient
from rancher_kubeconfig_proxy.rancher.fetcher import FetchResult, KubeconfigFetcher
from rancher_kubeconfig_proxy.rancher.models import (
    ClusterCollection,
    KubeconfigResponse,
    RancherCluster,
)

__all__ = [
    "ClusterCollection",
    "FetchResult",
    "KubeconfigFetcher",
    "KubeconfigResponse",
    "RancherClient",
    "RancherCluster",
]
