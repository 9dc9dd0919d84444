"""Ensuring a healthy local development cluster exists.

The provisioner reuses a healthy cluster as is. Anything else is torn
down and rebuilt in a fixed order, and any failing phase aborts the
attempt:

    Inspecting -> Done                                   (healthy)
    Inspecting -> Reaping -> Creating -> BootstrappingNetwork
               -> Converging -> Done | Failed
"""

import threading
from collections.abc import Callable

from localdev_cluster.config import ProvisionerSettings
from localdev_cluster.docker_runtime import DockerRuntime
from localdev_cluster.exceptions import LocaldevError, ProvisioningError
from localdev_cluster.inspector import ClusterInspector
from localdev_cluster.kind import KindCluster
from localdev_cluster.kube import KubeApi
from localdev_cluster.kubectl import NetworkBootstrapper
from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.cluster import ClusterHealthVerdict, ProvisioningResult, ProvisioningState
from localdev_cluster.models.topology import DEFAULT_TOPOLOGY, ClusterIdentity, ExpectedTopology
from localdev_cluster.reaper import StaleResourceReaper
from localdev_cluster.readiness import ReadinessPolicy, is_ready
from localdev_cluster.waiter import POLL_INTERVAL, ClusterConvergenceWaiter, MonotonicClock

logger = get_logger(__name__)

CONVERGENCE_TIMEOUT = 90.0


class ClusterProvisioner:
    """Top-level entry point: make sure the identity's cluster is usable."""

    def __init__(
        self,
        identity: ClusterIdentity,
        runtime,
        kube_api,
        creator,
        bootstrapper,
        topology: ExpectedTopology = DEFAULT_TOPOLOGY,
        convergence_timeout: float = CONVERGENCE_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        clock: MonotonicClock | None = None,
        readiness: ReadinessPolicy = is_ready,
        report: Callable[[str], None] | None = None,
    ):
        """Initialize the provisioner.

        Args:
            identity: Cluster to ensure
            runtime: Container runtime (``list_containers``, ``remove_container``)
            kube_api: Cluster API access (``load_config``, ``new_client``)
            creator: Cluster creation (``create``, ``config_path``)
            bootstrapper: Network bootstrap (``apply``)
            topology: Nodes the cluster must have
            convergence_timeout: Seconds to wait for every node to become Ready
            poll_interval: Seconds between readiness checks
            clock: Time source for the readiness wait
            readiness: Policy deciding whether a node is Ready
            report: Callback for operator-facing progress messages
        """
        self.identity = identity
        self.runtime = runtime
        self.kube_api = kube_api
        self.creator = creator
        self.bootstrapper = bootstrapper
        self.topology = topology
        self.convergence_timeout = convergence_timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.readiness = readiness
        self.report = report or logger.info
        self.state = ProvisioningState.INSPECTING

        self.inspector = ClusterInspector(
            identity, runtime, kube_api, topology=topology, readiness=readiness
        )
        self.reaper = StaleResourceReaper(identity, runtime)

    @classmethod
    def from_settings(
        cls,
        settings: ProvisionerSettings,
        report: Callable[[str], None] | None = None,
    ) -> "ClusterProvisioner":
        """Wire the provisioner to Docker, kind, kubectl and the Kubernetes API."""
        identity = settings.identity()
        creator = KindCluster(
            identity, kind_path=settings.kind_path, timeout=settings.kind_create_timeout
        )
        bootstrapper = NetworkBootstrapper(
            creator.config_path(),
            kubectl_path=settings.kubectl_path,
            timeout=settings.kubectl_timeout,
        )
        return cls(
            identity,
            DockerRuntime(version=settings.docker_api_version),
            KubeApi(request_timeout=settings.request_timeout),
            creator,
            bootstrapper,
            convergence_timeout=settings.convergence_timeout,
            poll_interval=settings.poll_interval,
            report=report,
        )

    def kubeconfig_location(self):
        """Path of the kubeconfig for this provisioner's cluster."""
        return self.creator.config_path()

    def ensure_cluster(self, cancel: threading.Event | None = None) -> ProvisioningResult:
        """Reuse the cluster if healthy, otherwise recreate it and wait for it.

        Args:
            cancel: Optional event that aborts the readiness wait when set

        Returns:
            The outcome; on failure ``phase`` names the failing state
        """
        self._enter(ProvisioningState.INSPECTING)
        verdict = self.inspector.inspect()
        if verdict.is_healthy:
            self._enter(ProvisioningState.DONE)
            return ProvisioningResult(state=ProvisioningState.DONE, verdict=verdict)

        self.report(f"Creating a new cluster, old one cannot be used: {verdict.reason}")
        self.report(
            "This takes between 1 and 10 minutes, depending on your internet connection speed."
        )

        try:
            self._enter(ProvisioningState.REAPING)
            self.reaper.reap()

            self._enter(ProvisioningState.CREATING)
            self.creator.create(self.topology, retain=False, wait_for_ready=0)

            self._enter(ProvisioningState.BOOTSTRAPPING_NETWORK)
            self.bootstrapper.apply()

            self._enter(ProvisioningState.CONVERGING)
            self.wait_for_nodes(cancel=cancel)
        except LocaldevError as e:
            return self._fail(verdict, e)

        self._enter(ProvisioningState.DONE)
        self.report("Done!")
        return ProvisioningResult(state=ProvisioningState.DONE, verdict=verdict, recreated=True)

    def wait_for_nodes(
        self, timeout: float | None = None, cancel: threading.Event | None = None
    ) -> None:
        """Wait for every node of the cluster to become Ready.

        A fresh API client is built from the kubeconfig; failing to do so
        means the cluster is not reachable at all.

        Raises:
            KubernetesError: If no client can be built, or the last readiness
                error once ``timeout`` (default: the convergence timeout) passes
            ConvergenceCancelledError: If ``cancel`` was set
        """
        configuration = self.kube_api.load_config(self.creator.config_path())
        node_client = self.kube_api.new_client(configuration)
        waiter = ClusterConvergenceWaiter(
            node_client,
            poll_interval=self.poll_interval,
            clock=self.clock,
            readiness=self.readiness,
            expected_nodes=self.topology.size,
        )
        self.report(
            "Nodes have been provisioned by kind, waiting for them to become ready. "
            "This will take up to a minute."
        )
        waiter.wait_until_ready(
            self.convergence_timeout if timeout is None else timeout, cancel=cancel
        )

    def _enter(self, state: ProvisioningState) -> None:
        logger.debug(f"Cluster {self.identity.name}: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, verdict: ClusterHealthVerdict, cause: LocaldevError) -> ProvisioningResult:
        phase = self.state
        error = ProvisioningError(phase.label, cause)
        logger.error(f"Provisioning {self.identity.name} failed while {phase.value}: {cause.message}")
        self._enter(ProvisioningState.FAILED)
        return ProvisioningResult(
            state=ProvisioningState.FAILED,
            verdict=verdict,
            phase=phase,
            error=error,
        )
