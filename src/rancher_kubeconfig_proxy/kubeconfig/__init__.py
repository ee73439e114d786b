"""Kubeconfig domain - decoding, prefixing and merging kubeconfig documents.

Exports:
    Models:
        - AccessDocument: A kubeconfig document with entries keyed by name
        - ClusterEntry, CredentialEntry, ContextEntry: Section entries
        - DocumentMetadata: Passthrough document-level fields

    Operations:
        - decode / encode: Kubeconfig YAML codec
        - rewrite: Apply a name prefix to one cluster's kubeconfig
        - combine: Merge prefixed kubeconfigs, reporting collisions
        - KubeconfigGenerator: decode -> rewrite -> combine -> encode pipeline
"""

from rancher_kubeconfig_proxy.kubeconfig.codec import decode, encode
from rancher_kubeconfig_proxy.kubeconfig.generator import GenerateResult, KubeconfigGenerator
from rancher_kubeconfig_proxy.kubeconfig.merger import MergeResult, combine
from rancher_kubeconfig_proxy.kubeconfig.models import (
    AccessDocument,
    ClusterEntry,
    ContextEntry,
    CredentialEntry,
    DocumentMetadata,
)
from rancher_kubeconfig_proxy.kubeconfig.rewriter import canonical_name, rewrite

__all__ = [
    "AccessDocument",
    "ClusterEntry",
    "ContextEntry",
    "CredentialEntry",
    "DocumentMetadata",
    "GenerateResult",
    "KubeconfigGenerator",
    "MergeResult",
    "canonical_name",
    "combine",
    "decode",
    "encode",
    "rewrite",
]
