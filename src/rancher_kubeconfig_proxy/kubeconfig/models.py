"""Pydantic models for kubeconfig documents.

The model mirrors the kubeconfig ``v1`` layout, but keeps the three named
sections as mappings keyed by entry name instead of lists of ``{name, ...}``
items. Only names and the two context references are interpreted; every
other field is carried through untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClusterEntry(BaseModel):
    """Cluster endpoint and trust material (opaque)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    server: str | None = Field(None, description="API server URL")


class CredentialEntry(BaseModel):
    """Authentication material for a cluster user (opaque)."""

    model_config = ConfigDict(extra="allow", frozen=True)


class ContextEntry(BaseModel):
    """Named pairing of one cluster entry and at most one credential entry."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    cluster: str = Field("", description="Name of the referenced cluster entry")
    credential: str = Field(
        "", alias="user", description="Name of the referenced credential entry"
    )


class DocumentMetadata(BaseModel):
    """Document-level fields that are never interpreted."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    api_version: str = Field("v1", alias="apiVersion", description="Schema version")
    kind: str = Field("Config", description="Schema kind")
    preferences: dict[str, Any] = Field(default_factory=dict, description="Client preferences")
    extensions: list[Any] | None = Field(None, description="Named extensions")


class AccessDocument(BaseModel):
    """A kubeconfig document."""

    model_config = ConfigDict(frozen=True)

    clusters: dict[str, ClusterEntry] = Field(
        default_factory=dict, description="Cluster entries by name"
    )
    credentials: dict[str, CredentialEntry] = Field(
        default_factory=dict, description="Credential (user) entries by name"
    )
    contexts: dict[str, ContextEntry] = Field(
        default_factory=dict, description="Context entries by name"
    )
    active_context: str = Field("", description="Name of the current context")
    metadata: DocumentMetadata = Field(
        default_factory=DocumentMetadata, description="Passthrough document fields"
    )

    def dangling_references(self) -> list[str]:
        """Describe every context reference that does not resolve.

        Returns:
            One message per broken reference, empty when the document is
            referentially consistent.
        """
        problems: list[str] = []
        for name in sorted(self.contexts):
            context = self.contexts[name]
            if context.cluster and context.cluster not in self.clusters:
                problems.append(
                    f"context '{name}' references unknown cluster '{context.cluster}'"
                )
            if context.credential and context.credential not in self.credentials:
                problems.append(
                    f"context '{name}' references unknown user '{context.credential}'"
                )
        return problems

    def is_consistent(self) -> bool:
        """Check that every context reference resolves."""
        return not self.dangling_references()
