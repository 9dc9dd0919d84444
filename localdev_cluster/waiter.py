"""Bounded wait for every node of a new cluster to become Ready."""

import threading
import time

from localdev_cluster.exceptions import (
    ConvergenceCancelledError,
    KubernetesError,
    NodesNotReadyError,
)
from localdev_cluster.logging_config import get_logger
from localdev_cluster.readiness import ReadinessPolicy, is_ready

logger = get_logger(__name__)

POLL_INTERVAL = 0.3


class MonotonicClock:
    """Wall-clock-independent time source used by the waiter."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> bool:
        """Sleep, returning True early if ``cancel`` gets set."""
        if cancel is not None:
            return cancel.wait(seconds)
        time.sleep(seconds)
        return False


class ClusterConvergenceWaiter:
    """Polls the node list until all nodes are Ready or a deadline passes.

    Failures to list nodes are remembered and retried; only the deadline
    ends the wait. When it does, the most recently remembered error is
    raised so the caller can see what was still wrong.
    """

    def __init__(
        self,
        node_client,
        poll_interval: float = POLL_INTERVAL,
        clock: MonotonicClock | None = None,
        readiness: ReadinessPolicy = is_ready,
        expected_nodes: int | None = None,
    ):
        self.node_client = node_client
        self.poll_interval = poll_interval
        self.clock = clock or MonotonicClock()
        self.readiness = readiness
        self.expected_nodes = expected_nodes

    def wait_until_ready(self, timeout: float, cancel: threading.Event | None = None) -> None:
        """Block until every node is Ready.

        Args:
            timeout: Seconds from the start of the call after which to give up
            cancel: Optional event that aborts the wait when set

        Raises:
            KubernetesError: The last listing failure or NodesNotReadyError,
                once the deadline has passed
            ConvergenceCancelledError: If ``cancel`` was set
        """
        deadline = self.clock.now() + timeout
        attempts = 0
        while True:
            attempts += 1
            last_error = self._poll()
            if last_error is None:
                logger.debug(f"All nodes ready after {attempts} attempts")
                return

            remaining = deadline - self.clock.now()
            if remaining <= 0:
                logger.debug(f"Gave up after {attempts} attempts: {last_error}")
                raise last_error
            if self.clock.sleep(min(self.poll_interval, remaining), cancel):
                raise ConvergenceCancelledError(
                    "Waiting for nodes was cancelled", f"Last state: {last_error.message}"
                )

    def _poll(self) -> KubernetesError | None:
        try:
            nodes = self.node_client.list_nodes()
        except KubernetesError as e:
            logger.debug(f"Listing nodes failed: {e.message}")
            return e

        if self.expected_nodes is not None and len(nodes) != self.expected_nodes:
            return NodesNotReadyError(
                f"only {len(nodes)}/{self.expected_nodes} nodes have registered"
            )
        not_ready = [node.name for node in nodes if not self.readiness(node.conditions)]
        if not_ready:
            return NodesNotReadyError(
                "some nodes were not ready", f"Not ready: {', '.join(sorted(not_ready))}"
            )
        return None
