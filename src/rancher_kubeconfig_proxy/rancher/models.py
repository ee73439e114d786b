"""Pydantic models for Rancher v3 API responses."""

from pydantic import BaseModel, ConfigDict, Field

ACTIVE_STATE = "active"


class ClusterLinks(BaseModel):
    """Links advertised for a cluster."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    self_link: str = Field("", alias="self", description="Cluster resource URL")


class ClusterActions(BaseModel):
    """Actions advertised for a cluster."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    generate_kubeconfig: str = Field(
        "", alias="generateKubeconfig", description="generateKubeconfig action URL"
    )


class RancherCluster(BaseModel):
    """A Rancher managed downstream cluster."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Cluster ID (e.g. c-m-abc123)")
    name: str = Field(..., description="Cluster display name")
    description: str | None = Field(None, description="Cluster description")
    state: str = Field("", description="Cluster state, only 'active' clusters are fetched")
    provider: str | None = Field(None, description="Kubernetes provider")
    links: ClusterLinks = Field(default_factory=ClusterLinks, description="Resource links")
    actions: ClusterActions = Field(
        default_factory=ClusterActions, description="Available actions"
    )

    @property
    def is_active(self) -> bool:
        """Check whether the cluster can issue a kubeconfig."""
        return self.state == ACTIVE_STATE


class ClusterCollection(BaseModel):
    """Response of the clusters endpoint."""

    model_config = ConfigDict(extra="ignore")

    data: list[RancherCluster] = Field(default_factory=list, description="Clusters")


class KubeconfigResponse(BaseModel):
    """Response of the generateKubeconfig action."""

    model_config = ConfigDict(extra="ignore")

    config: str = Field(..., description="Kubeconfig YAML")
