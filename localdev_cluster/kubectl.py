"""Applying manifests to the local cluster with kubectl."""

import os
import shutil
import subprocess
from pathlib import Path

from localdev_cluster.exceptions import KubectlError
from localdev_cluster.logging_config import get_logger
from localdev_cluster.manifests import TRAEFIK_INGRESS_YAML

logger = get_logger(__name__)


def kubectl_executable(kubectl_path: str | None = None) -> str:
    """Locate the kubectl binary.

    Raises:
        KubectlError: If kubectl cannot be found
    """
    if kubectl_path:
        return kubectl_path
    found = shutil.which("kubectl")
    if found is None:
        raise KubectlError(
            "kubectl is not installed or not in PATH",
            "Install kubectl from https://kubernetes.io/docs/tasks/tools/\n"
            "Or set LOCALDEV_KUBECTL_PATH to its location",
        )
    return found


class NetworkBootstrapper:
    """Applies the ingress controller manifest to a new cluster."""

    def __init__(
        self,
        kubeconfig: str | Path,
        kubectl_path: str | None = None,
        manifest: str = TRAEFIK_INGRESS_YAML,
        timeout: float = 120,
    ):
        self.kubeconfig = Path(kubeconfig)
        self.kubectl_path = kubectl_path
        self.manifest = manifest
        self.timeout = timeout

    def apply(self) -> None:
        """Run ``kubectl apply -f -`` with the manifest on stdin.

        Raises:
            KubectlError: If kubectl is missing, times out or exits non-zero;
                the captured stderr is in ``details``
        """
        command = [kubectl_executable(self.kubectl_path), "apply", "-f", "-"]
        env = {**os.environ, "KUBECONFIG": str(self.kubeconfig)}

        logger.info("Starting the ingress controller")
        try:
            result = subprocess.run(
                command,
                input=self.manifest,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise KubectlError(
                "kubectl apply timed out", f"No response within {self.timeout} seconds"
            )
        except FileNotFoundError:
            raise KubectlError("kubectl executable not found", f"Tried: {command[0]}")
        except OSError as e:
            logger.error(f"Could not run {command[0]}: {e}")
            raise KubectlError(f"Could not run kubectl at {command[0]}", str(e))

        for line in result.stdout.splitlines():
            logger.info(line)
        if result.returncode != 0:
            logger.error(f"kubectl apply failed with return code {result.returncode}: {result.stderr}")
            raise KubectlError(
                f"kubectl apply failed with exit code {result.returncode}",
                result.stderr.strip() or None,
            )
