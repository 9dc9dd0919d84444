"""Data models for cluster identity and node topology."""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

KIND_API_VERSION = "kind.x-k8s.io/v1alpha4"


class NodeRole(str, Enum):
    """Role of a node in the kind cluster."""

    CONTROL_PLANE = "control-plane"
    WORKER = "worker"


class ClusterIdentity(BaseModel):
    """Everything that names one local cluster instance.

    Passed to every component so that several isolated clusters can be
    handled side by side in one process.
    """

    name: str = "sanic"
    owner_label: str = "io.x-k8s.kind.cluster"
    kubeconfig_path: Path | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the cluster name is usable as a container name prefix."""
        if not v:
            raise ValueError("cluster name cannot be empty")
        if not re.fullmatch(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?", v):
            raise ValueError(
                f"cluster name '{v}' must contain only lowercase alphanumeric characters "
                "and hyphens, and cannot start or end with a hyphen"
            )
        return v

    @property
    def label_filter(self) -> str:
        """Docker label filter selecting this cluster's containers."""
        return f"{self.owner_label}={self.name}"

    def kubeconfig(self) -> Path:
        """Path of the kubeconfig kind writes for this cluster."""
        if self.kubeconfig_path is not None:
            return Path(self.kubeconfig_path).expanduser()
        return Path.home() / ".kube" / f"kind-config-{self.name}"


class ExpectedTopology(BaseModel):
    """Ordered list of node roles the cluster must have."""

    roles: list[NodeRole] = Field(
        default_factory=lambda: [
            NodeRole.CONTROL_PLANE,
            NodeRole.WORKER,
            NodeRole.WORKER,
            NodeRole.WORKER,
        ]
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, v: list[NodeRole]) -> list[NodeRole]:
        """Validate there is exactly one control-plane node."""
        control_planes = sum(1 for role in v if role == NodeRole.CONTROL_PLANE)
        if control_planes != 1:
            raise ValueError(f"topology must have exactly one control-plane node, got {control_planes}")
        return v

    @property
    def size(self) -> int:
        return len(self.roles)

    @property
    def workers(self) -> int:
        return sum(1 for role in self.roles if role == NodeRole.WORKER)


DEFAULT_TOPOLOGY = ExpectedTopology()


def required_container_names(identity: ClusterIdentity, topology: ExpectedTopology) -> list[str]:
    """Derive the container names kind gives the nodes of a topology.

    kind names the first node of each role ``<cluster>-<role>`` and the
    following ones ``<cluster>-<role>2``, ``<cluster>-<role>3`` and so on.
    Docker reports names with a leading slash, so the result has one too.
    """
    seen: dict[NodeRole, int] = {}
    names = []
    for role in topology.roles:
        seen[role] = seen.get(role, 0) + 1
        suffix = "" if seen[role] == 1 else str(seen[role])
        names.append(f"/{identity.name}-{role.value}{suffix}")
    return names


def kind_cluster_config(topology: ExpectedTopology) -> dict:
    """Build the kind ``Cluster`` document for a topology.

    Scheme defaults are applied first, then the node list is replaced
    with exactly the topology's roles.
    """
    config = _scheme_defaults()
    config["nodes"] = [{"role": role.value} for role in topology.roles]
    return config


def _scheme_defaults() -> dict:
    # kind's own default is a single control-plane node
    return {
        "kind": "Cluster",
        "apiVersion": KIND_API_VERSION,
        "nodes": [{"role": NodeRole.CONTROL_PLANE.value}],
    }
