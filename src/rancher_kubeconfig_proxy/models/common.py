"""Common Pydantic models shared across the fetch and merge stages."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from rancher_kubeconfig_proxy.utils.errors import KubeconfigProxyError, ParseError


class WarningKind(str, Enum):
    """Why a cluster was left out of the merged kubeconfig."""

    FETCH_FAILED = "fetch_failed"
    PARSE_FAILED = "parse_failed"
    NOT_FOUND = "not_found"


class FetchWarning(BaseModel):
    """A cluster that could not be included in the merge."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind = Field(..., description="Failure category")
    cluster_name: str = Field(..., description="Cluster name (or requested identifier)")
    message: str = Field(..., description="Human readable failure reason")

    @classmethod
    def from_error(cls, cluster_name: str, error: Exception) -> "FetchWarning":
        """Build a warning from the exception that excluded a cluster."""
        if isinstance(error, ParseError):
            kind = WarningKind.PARSE_FAILED
        else:
            kind = WarningKind.FETCH_FAILED

        if isinstance(error, KubeconfigProxyError):
            message = error.message
        else:
            message = str(error) or type(error).__name__
        return cls(kind=kind, cluster_name=cluster_name, message=message)

    def __str__(self) -> str:
        return f"{self.cluster_name}: {self.message} ({self.kind.value})"


class CollisionWarning(BaseModel):
    """Two source kubeconfigs defined the same entry name."""

    model_config = ConfigDict(frozen=True)

    section: str = Field(..., description="'clusters', 'users' or 'contexts'")
    name: str = Field(..., description="Colliding entry name")
    previous_source: str = Field(..., description="Cluster whose entry was overwritten")
    source: str = Field(..., description="Cluster whose entry was kept")

    def __str__(self) -> str:
        return (
            f"{self.section} entry '{self.name}' from cluster {self.previous_source} "
            f"was overwritten by cluster {self.source}"
        )
