"""Utility functions and helpers for rancher-kubeconfig-proxy."""

from rancher_kubeconfig_proxy.utils.errors import (
    ConfigurationError,
    EncodingError,
    FetchCancelledError,
    FetchError,
    KubeconfigProxyError,
    ParseError,
)

__all__ = [
    "ConfigurationError",
    "EncodingError",
    "FetchCancelledError",
    "FetchError",
    "KubeconfigProxyError",
    "ParseError",
]
