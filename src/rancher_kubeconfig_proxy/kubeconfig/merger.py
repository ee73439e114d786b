"""Combine per-cluster kubeconfigs into a single document."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from rancher_kubeconfig_proxy.kubeconfig.models import AccessDocument, DocumentMetadata
from rancher_kubeconfig_proxy.models.common import CollisionWarning

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Merged document plus the name collisions found while merging."""

    document: AccessDocument
    collisions: list[CollisionWarning] = field(default_factory=list)


def _merge_section(
    section: str,
    target: dict[str, Any],
    owners: dict[str, str],
    entries: Mapping[str, Any],
    source: str,
    collisions: list[CollisionWarning],
) -> None:
    for name in sorted(entries):
        if name in target:
            collisions.append(
                CollisionWarning(
                    section=section,
                    name=name,
                    previous_source=owners[name],
                    source=source,
                )
            )
            logger.debug(f"{section} entry '{name}' from {owners[name]} replaced by {source}")
        target[name] = entries[name].model_copy(deep=True)
        owners[name] = source


def combine(
    docs: Mapping[str, AccessDocument] | Iterable[tuple[str, AccessDocument]],
) -> MergeResult:
    """Merge already-prefixed kubeconfigs.

    Documents are applied in the order given; a mapping is applied in sorted
    key order. An entry name defined by more than one document keeps the
    entry of the last document and produces a CollisionWarning.

    Args:
        docs: ``(cluster name, document)`` pairs, or a mapping of the same.

    Returns:
        MergeResult with a new document. The current context is kept only
        when exactly one document is merged.
    """
    if isinstance(docs, Mapping):
        ordered = [(name, docs[name]) for name in sorted(docs)]
    else:
        ordered = list(docs)

    clusters: dict[str, Any] = {}
    credentials: dict[str, Any] = {}
    contexts: dict[str, Any] = {}
    owners: dict[str, dict[str, str]] = {"clusters": {}, "users": {}, "contexts": {}}
    collisions: list[CollisionWarning] = []

    for source, doc in ordered:
        _merge_section("clusters", clusters, owners["clusters"], doc.clusters, source, collisions)
        _merge_section("users", credentials, owners["users"], doc.credentials, source, collisions)
        _merge_section("contexts", contexts, owners["contexts"], doc.contexts, source, collisions)

    active_context = ordered[0][1].active_context if len(ordered) == 1 else ""

    merged = AccessDocument(
        clusters=clusters,
        credentials=credentials,
        contexts=contexts,
        active_context=active_context,
        metadata=DocumentMetadata(),
    )
    return MergeResult(document=merged, collisions=collisions)
