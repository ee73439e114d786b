"""Prefix renaming for a single cluster's kubeconfig.

Rancher issues one kubeconfig per downstream cluster, and the names inside
those documents (usually the cluster's own name) repeat across clusters and
across Rancher instances. Rewriting prefixes every cluster, user and context
name, and updates every reference with the same rule used to rename its
target so that references keep resolving.

Cluster and context names equal to the cluster's own name get the canonical
form ``<prefix><cluster name>``, which callers can construct to switch
contexts without reading the document.
"""

from __future__ import annotations

from rancher_kubeconfig_proxy.kubeconfig.models import AccessDocument, ContextEntry


def canonical_name(prefix: str, cluster_name: str) -> str:
    """Get the context name a cluster's kubeconfig is merged under."""
    return f"{prefix}{cluster_name}"


class PrefixRenamer:
    """Renaming rules for one document."""

    def __init__(self, prefix: str, own_cluster_name: str) -> None:
        self.prefix = prefix
        self.own_cluster_name = own_cluster_name

    def cluster(self, name: str) -> str:
        """Rename a cluster entry (or a reference to one)."""
        if not name:
            return name
        if name == self.own_cluster_name:
            return canonical_name(self.prefix, self.own_cluster_name)
        return f"{self.prefix}{name}"

    def credential(self, name: str) -> str:
        """Rename a user entry (or a reference to one)."""
        if not name:
            return name
        return f"{self.prefix}{name}"

    # contexts use the same canonical/non-canonical split as clusters
    context = cluster


def _rename_references(entry: ContextEntry, rename: PrefixRenamer) -> ContextEntry:
    # only references present in the entry are touched, absent keys stay absent
    update: dict[str, str] = {}
    if "cluster" in entry.model_fields_set:
        update["cluster"] = rename.cluster(entry.cluster)
    if "credential" in entry.model_fields_set:
        update["credential"] = rename.credential(entry.credential)
    return entry.model_copy(update=update, deep=True)


def rewrite(doc: AccessDocument, prefix: str, own_cluster_name: str) -> AccessDocument:
    """Apply a name prefix to every identifier in a kubeconfig.

    Args:
        doc: Document as issued for one cluster. Not modified.
        prefix: Prefix to prepend. An empty prefix returns ``doc`` itself.
        own_cluster_name: The cluster's name as known to Rancher.

    Returns:
        A new document whose entries are deep copies of the originals.
    """
    if not prefix:
        return doc

    rename = PrefixRenamer(prefix, own_cluster_name)

    clusters = {
        rename.cluster(name): entry.model_copy(deep=True)
        for name, entry in doc.clusters.items()
    }
    credentials = {
        rename.credential(name): entry.model_copy(deep=True)
        for name, entry in doc.credentials.items()
    }
    contexts = {
        rename.context(name): _rename_references(entry, rename)
        for name, entry in doc.contexts.items()
    }

    return AccessDocument(
        clusters=clusters,
        credentials=credentials,
        contexts=contexts,
        active_context=rename.context(doc.active_context),
        metadata=doc.metadata.model_copy(deep=True),
    )
