"""Error types for rancher-kubeconfig-proxy.

Only ConfigurationError, EncodingError and FetchCancelledError abort a run.
FetchError and ParseError raised for a single cluster are converted into
warnings by the fetch orchestrator and the generator pipeline.
"""

from __future__ import annotations


class KubeconfigProxyError(Exception):
    """Base class for all rancher-kubeconfig-proxy errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(KubeconfigProxyError):
    """Missing, contradictory or malformed configuration."""

    pass


class FetchError(KubeconfigProxyError):
    """Failure talking to the Rancher API."""

    def __init__(
        self,
        message: str,
        cluster_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.cluster_name = cluster_name
        self.status_code = status_code
        super().__init__(message)


class FetchCancelledError(KubeconfigProxyError):
    """The fetch batch was cancelled before it completed."""

    pass


class ParseError(KubeconfigProxyError):
    """A kubeconfig document could not be decoded or is inconsistent."""

    def __init__(self, message: str, cluster_name: str | None = None) -> None:
        self.cluster_name = cluster_name
        if cluster_name:
            message = f"Failed to parse kubeconfig for cluster {cluster_name}: {message}"
        super().__init__(message)


class EncodingError(KubeconfigProxyError):
    """The merged kubeconfig could not be serialized."""

    pass
