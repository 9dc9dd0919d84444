"""Data models for cluster topology, state and provisioning results."""

from localdev_cluster.models.cluster import (
    ClusterHealthVerdict,
    Condition,
    ContainerSummary,
    HealthState,
    NodeCondition,
    NodeSnapshot,
    ProvisioningResult,
    ProvisioningState,
    ReadyStatus,
)
from localdev_cluster.models.topology import (
    DEFAULT_TOPOLOGY,
    ClusterIdentity,
    ExpectedTopology,
    NodeRole,
    kind_cluster_config,
    required_container_names,
)

__all__ = [
    "ClusterHealthVerdict",
    "ClusterIdentity",
    "Condition",
    "ContainerSummary",
    "DEFAULT_TOPOLOGY",
    "ExpectedTopology",
    "HealthState",
    "NodeCondition",
    "NodeRole",
    "NodeSnapshot",
    "ProvisioningResult",
    "ProvisioningState",
    "ReadyStatus",
    "kind_cluster_config",
    "required_container_names",
]
