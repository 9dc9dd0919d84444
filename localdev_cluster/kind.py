"""Cluster creation through the kind command line."""

import shutil
import subprocess
from pathlib import Path

import yaml

from localdev_cluster.exceptions import KindError
from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.topology import ClusterIdentity, ExpectedTopology, kind_cluster_config

logger = get_logger(__name__)


class KindCluster:
    """Creates the kind cluster for one identity."""

    def __init__(
        self,
        identity: ClusterIdentity,
        kind_path: str | None = None,
        timeout: float = 900,
    ):
        """Initialize the creator.

        Args:
            identity: Cluster whose nodes are created
            kind_path: Path to the kind executable, looked up on PATH when omitted
            timeout: Seconds to allow ``kind create cluster`` to run
        """
        self.identity = identity
        self.kind_path = kind_path
        self.timeout = timeout

    def config_path(self) -> Path:
        """Path of the kubeconfig kind writes for this cluster."""
        return self.identity.kubeconfig()

    def executable(self) -> str:
        if self.kind_path:
            return self.kind_path
        found = shutil.which("kind")
        if found is None:
            raise KindError(
                "kind is not installed or not in PATH",
                "Install kind from https://kind.sigs.k8s.io/docs/user/quick-start/\n"
                "Or set LOCALDEV_KIND_PATH to its location",
            )
        return found

    def create(self, topology: ExpectedTopology, retain: bool = False, wait_for_ready: float = 0) -> None:
        """Create the cluster's nodes.

        Args:
            topology: Node roles to create
            retain: Keep node containers when creation fails
            wait_for_ready: Seconds kind itself waits for the control plane;
                0 returns as soon as the nodes exist

        Raises:
            KindError: If kind is missing, fails or times out
        """
        cluster_config = yaml.safe_dump(kind_cluster_config(topology), default_flow_style=False)
        kubeconfig = self.config_path()
        try:
            kubeconfig.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise KindError(f"Could not create kubeconfig directory {kubeconfig.parent}", str(e))

        command = [
            self.executable(),
            "create",
            "cluster",
            "--name",
            self.identity.name,
            "--config",
            "-",
            "--kubeconfig",
            str(kubeconfig),
            "--wait",
            f"{int(wait_for_ready)}s",
        ]
        if retain:
            command.append("--retain")

        logger.info(f"Creating kind cluster {self.identity.name} with {topology.size} nodes")
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                input=cluster_config,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"kind create cluster timed out after {self.timeout} seconds")
            raise KindError(
                "kind create cluster timed out",
                f"Cluster creation did not finish within {self.timeout} seconds.",
            )
        except FileNotFoundError:
            raise KindError("kind executable not found", f"Tried: {command[0]}")
        except OSError as e:
            logger.error(f"Could not run {command[0]}: {e}")
            raise KindError(f"Could not run kind at {command[0]}", str(e))

        if result.returncode != 0:
            logger.error(f"kind create cluster failed with return code {result.returncode}")
            raise KindError(
                f"kind create cluster failed with exit code {result.returncode}",
                result.stderr.strip() or None,
            )
        logger.debug(result.stderr)
