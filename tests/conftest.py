"""Shared pytest fixtures."""

import os
from collections.abc import Callable

import pytest

from rancher_kubeconfig_proxy.kubeconfig.models import (
    AccessDocument,
    ClusterEntry,
    ContextEntry,
    CredentialEntry,
)

RANCHER_URL = "https://rancher.example.com"


@pytest.fixture(autouse=True)
def clean_rancher_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RANCHER_* variables from the outer environment out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("RANCHER_"):
            monkeypatch.delenv(key)


def rancher_kubeconfig(cluster_name: str, cluster_id: str = "c-m-abc123") -> str:
    """Kubeconfig text as issued by Rancher's generateKubeconfig action."""
    return f"""apiVersion: v1
kind: Config
clusters:
- name: "{cluster_name}"
  cluster:
    server: "{RANCHER_URL}/k8s/clusters/{cluster_id}"
    certificate-authority-data: "LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0t"
users:
- name: "{cluster_name}"
  user:
    token: "kubeconfig-user-xyz:{cluster_id}-secret"
contexts:
- name: "{cluster_name}"
  context:
    user: "{cluster_name}"
    cluster: "{cluster_name}"
current-context: "{cluster_name}"
"""


@pytest.fixture
def make_kubeconfig() -> Callable[..., str]:
    """Factory for Rancher-issued kubeconfig text."""
    return rancher_kubeconfig


@pytest.fixture
def ace_kubeconfig() -> str:
    """Kubeconfig with an authorized cluster endpoint entry next to the canonical one."""
    return f"""apiVersion: v1
kind: Config
clusters:
- name: "c1"
  cluster:
    server: "{RANCHER_URL}/k8s/clusters/c-m-c1"
- name: "c1-node1"
  cluster:
    server: "https://10.0.0.11:6443"
    certificate-authority-data: "LS0tLS1CRUdJTi1BQ0UtLS0t"
users:
- name: "c1"
  user:
    token: "kubeconfig-user-xyz:secret"
contexts:
- name: "c1"
  context:
    user: "c1"
    cluster: "c1"
- name: "c1-node1"
  context:
    user: "c1"
    cluster: "c1-node1"
    namespace: "kube-system"
current-context: "c1"
preferences: {{}}
"""


@pytest.fixture
def sample_document() -> AccessDocument:
    """Document for cluster c1 with a canonical and an extra context."""
    return AccessDocument(
        clusters={
            "c1": ClusterEntry(server="https://rancher.example.com/k8s/clusters/c-m-c1"),
            "c1-node1": ClusterEntry(
                server="https://10.0.0.11:6443",
                **{"certificate-authority-data": "LS0t"},
            ),
        },
        credentials={
            "c1": CredentialEntry(token="kubeconfig-user-xyz:secret"),
        },
        contexts={
            "c1": ContextEntry(cluster="c1", credential="c1"),
            "c1-alt": ContextEntry(cluster="c1", credential="c1", namespace="apps"),
            "c1-node1": ContextEntry(cluster="c1-node1", credential="c1"),
        },
        active_context="c1",
    )
