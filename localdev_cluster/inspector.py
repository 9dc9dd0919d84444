"""Classifying an existing local cluster as healthy, degraded or absent."""

from localdev_cluster.exceptions import ContainerRuntimeError, KubeconfigError, KubernetesError
from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.cluster import ClusterHealthVerdict
from localdev_cluster.models.topology import (
    DEFAULT_TOPOLOGY,
    ClusterIdentity,
    ExpectedTopology,
    required_container_names,
)
from localdev_cluster.readiness import ReadinessPolicy, is_ready

logger = get_logger(__name__)

NOT_READY_HINT = (
    "To note: after deploying initially, wait at least 30 seconds before "
    "deploying again to let the cluster start fully"
)


class ClusterInspector:
    """Read-only health check of one cluster identity.

    The kubeconfig is checked first: its absence is the normal state of a
    fresh machine and yields an Absent verdict without touching anything
    else. Then every required node container must be running, the API must
    answer, list exactly the expected number of nodes, and every node must
    be Ready.
    """

    def __init__(
        self,
        identity: ClusterIdentity,
        runtime,
        kube_api,
        topology: ExpectedTopology = DEFAULT_TOPOLOGY,
        readiness: ReadinessPolicy = is_ready,
    ):
        self.identity = identity
        self.runtime = runtime
        self.kube_api = kube_api
        self.topology = topology
        self.readiness = readiness

    def inspect(self) -> ClusterHealthVerdict:
        """Compute a fresh verdict."""
        verdict = self._inspect()
        logger.debug(f"Cluster {self.identity.name}: {verdict}")
        return verdict

    def _inspect(self) -> ClusterHealthVerdict:
        try:
            configuration = self.kube_api.load_config(self.identity.kubeconfig())
        except KubeconfigError as e:
            logger.debug(f"No usable kubeconfig: {e}")
            return ClusterHealthVerdict.absent("cluster not initialized")

        missing = self._first_stopped_container()
        if missing is not None:
            return ClusterHealthVerdict.degraded(missing)

        try:
            node_client = self.kube_api.new_client(configuration)
            nodes = node_client.list_nodes()
        except KubernetesError as e:
            logger.debug(f"Cluster API unreachable: {e}")
            return ClusterHealthVerdict.absent(f"API unreachable: {e.message}")

        expected = self.topology.size
        if len(nodes) != expected:
            return ClusterHealthVerdict.degraded(
                f"node count mismatch: got {len(nodes)} want {expected}"
            )

        for node in nodes:
            if not self.readiness(node.conditions):
                logger.debug(f"Node {node.name} is not ready")
                return ClusterHealthVerdict.degraded(f"a node was not ready.\n{NOT_READY_HINT}")

        return ClusterHealthVerdict.healthy()

    def _first_stopped_container(self) -> str | None:
        """Reason naming the first required container that is not running."""
        try:
            containers = self.runtime.list_containers(self.identity.label_filter)
        except ContainerRuntimeError as e:
            return f"could not list cluster containers: {e.message}"

        running = {c.primary_name: c.running for c in containers}
        for name in required_container_names(self.identity, self.topology):
            if not running.get(name, False):
                return f"container {name} not running"
        return None
