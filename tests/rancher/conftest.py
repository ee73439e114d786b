"""Pytest fixtures for Rancher client tests."""

from typing import Any

import pytest

from rancher_kubeconfig_proxy.config import ProxyConfig


def cluster_payload(
    cluster_id: str, name: str, state: str = "active", with_action: bool = True
) -> dict[str, Any]:
    """One item of the /v3/clusters response."""
    payload: dict[str, Any] = {
        "id": cluster_id,
        "type": "cluster",
        "name": name,
        "description": "",
        "state": state,
        "provider": "rke2",
        "links": {"self": f"https://rancher.example.com/v3/clusters/{cluster_id}"},
        "actions": {},
    }
    if with_action:
        payload["actions"]["generateKubeconfig"] = (
            f"https://rancher.example.com/v3/clusters/{cluster_id}?action=generateKubeconfig"
        )
    return payload


@pytest.fixture
def make_cluster_payload() -> Any:
    """Factory for cluster payloads."""
    return cluster_payload


@pytest.fixture
def config() -> ProxyConfig:
    """Validated configuration pointing at a fake Rancher."""
    cfg = ProxyConfig(
        _env_file=None,
        url="https://rancher.example.com/",
        token="token-abc12:s3cr3t",
    )
    cfg.validate_auth_config()
    return cfg
