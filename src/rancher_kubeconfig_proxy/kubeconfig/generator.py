"""Kubeconfig generation pipeline.

Turns a mapping of cluster name to raw kubeconfig text into one merged
kubeconfig: decode each document, apply the name prefix, merge them in
cluster-name order and encode the result. A cluster whose document cannot
be decoded is left out and reported as a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from rancher_kubeconfig_proxy.kubeconfig import codec
from rancher_kubeconfig_proxy.kubeconfig.merger import combine
from rancher_kubeconfig_proxy.kubeconfig.models import AccessDocument
from rancher_kubeconfig_proxy.kubeconfig.rewriter import rewrite
from rancher_kubeconfig_proxy.models.common import CollisionWarning, FetchWarning, WarningKind
from rancher_kubeconfig_proxy.utils.errors import ParseError

logger = logging.getLogger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


@dataclass
class GenerateResult:
    """Outcome of a generate run."""

    document: AccessDocument
    merged_clusters: list[str] = field(default_factory=list)
    warnings: list[FetchWarning | CollisionWarning] = field(default_factory=list)

    @property
    def failures(self) -> list[FetchWarning]:
        """Clusters that were left out, and requested clusters that do not exist."""
        return [w for w in self.warnings if isinstance(w, FetchWarning)]

    @property
    def skipped(self) -> list[FetchWarning]:
        """Clusters whose kubeconfig could not be fetched or parsed."""
        return [w for w in self.failures if w.kind != WarningKind.NOT_FOUND]

    @property
    def collisions(self) -> list[CollisionWarning]:
        """Entry names defined by more than one cluster."""
        return [w for w in self.warnings if isinstance(w, CollisionWarning)]

    def summary(self, total: int | None = None) -> str:
        """One-line report, e.g. "merged 8 of 10 clusters; 2 skipped; 1 name collision"."""
        merged = len(self.merged_clusters)
        if total is None:
            total = merged + len(self.skipped)
        parts = [f"merged {merged} of {_plural(total, 'cluster')}"]
        skipped = total - merged
        if skipped:
            parts.append(f"{skipped} skipped")
        not_found = len(self.failures) - len(self.skipped)
        if not_found:
            parts.append(f"{not_found} not found")
        if self.collisions:
            parts.append(_plural(len(self.collisions), "name collision"))
        return "; ".join(parts)


class KubeconfigGenerator:
    """Generates a merged kubeconfig with a configurable name prefix."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def parse_kubeconfig(self, data: str, cluster_name: str | None = None) -> AccessDocument:
        """Parse one cluster's kubeconfig.

        Raises:
            ParseError: If the document is malformed.
        """
        try:
            return codec.decode(data)
        except ParseError as e:
            if cluster_name is None:
                raise
            raise ParseError(e.message, cluster_name=cluster_name) from e

    def apply_prefix(self, document: AccessDocument, cluster_name: str) -> AccessDocument:
        """Apply the configured prefix to a cluster's kubeconfig."""
        return rewrite(document, self.prefix, cluster_name)

    def merge_configs(self, cluster_kubeconfigs: Mapping[str, str]) -> GenerateResult:
        """Merge raw kubeconfigs keyed by cluster name.

        Clusters are processed in sorted name order so collision outcomes do
        not depend on how the mapping was built.
        """
        prefixed: list[tuple[str, AccessDocument]] = []
        warnings: list[FetchWarning | CollisionWarning] = []

        for cluster_name in sorted(cluster_kubeconfigs):
            try:
                document = self.parse_kubeconfig(cluster_kubeconfigs[cluster_name], cluster_name)
            except ParseError as e:
                logger.debug(f"Skipping cluster {cluster_name}: {e}")
                warnings.append(FetchWarning.from_error(cluster_name, e))
                continue
            prefixed.append((cluster_name, self.apply_prefix(document, cluster_name)))

        merged = combine(prefixed)
        warnings.extend(merged.collisions)

        logger.info(
            f"Merged {len(prefixed)} kubeconfigs into {len(merged.document.contexts)} contexts"
        )
        return GenerateResult(
            document=merged.document,
            merged_clusters=[name for name, _ in prefixed],
            warnings=warnings,
        )

    def serialize(self, document: AccessDocument) -> str:
        """Serialize a kubeconfig to YAML.

        Raises:
            EncodingError: If the document cannot be serialized.
        """
        return codec.encode(document)

    def generate(self, cluster_kubeconfigs: Mapping[str, str]) -> tuple[str, GenerateResult]:
        """Create merged kubeconfig text from per-cluster kubeconfigs."""
        result = self.merge_configs(cluster_kubeconfigs)
        return self.serialize(result.document), result
