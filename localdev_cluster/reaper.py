"""Removal of leftover node containers before a cluster is recreated."""

from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.topology import ClusterIdentity

logger = get_logger(__name__)


class StaleResourceReaper:
    """Force-removes every container owned by a cluster identity.

    kind does not reliably create a cluster while containers from an
    earlier one are still around, so this always runs before creation.
    """

    def __init__(self, identity: ClusterIdentity, runtime):
        self.identity = identity
        self.runtime = runtime

    def reap(self) -> int:
        """Remove the identity's containers, running or not.

        Returns:
            Number of containers removed

        Raises:
            ContainerRuntimeError: If listing or any removal fails
        """
        containers = self.runtime.list_containers(self.identity.label_filter)
        for container in containers:
            logger.info(f"Removing stale container {container.primary_name or container.id}")
            self.runtime.remove_container(container.id, force=True)
        if containers:
            logger.info(f"Removed {len(containers)} stale containers of {self.identity.name}")
        return len(containers)
