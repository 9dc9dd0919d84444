"""Provisioner settings, read from LOCALDEV_* environment variables or YAML."""

from pathlib import Path

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from localdev_cluster.exceptions import ConfigurationError
from localdev_cluster.models.topology import ClusterIdentity

DEFAULT_CONVERGENCE_TIMEOUT = 90.0
DEFAULT_POLL_INTERVAL = 0.3


class ProvisionerSettings(BaseSettings):
    """Settings for the local cluster provisioner.

    Attributes:
        cluster_name: Name of the kind cluster and prefix of its containers.
        owner_label: Docker label kind puts on the cluster's containers.
        kubeconfig_path: Where kind writes the cluster's kubeconfig.
        kind_path: kind executable, looked up on PATH when unset.
        kubectl_path: kubectl executable, looked up on PATH when unset.
        docker_api_version: Docker API version to negotiate.
        convergence_timeout: Seconds to wait for all nodes to become Ready.
        poll_interval: Seconds between node readiness checks.
        kind_create_timeout: Seconds allowed for ``kind create cluster``.
        kubectl_timeout: Seconds allowed for ``kubectl apply``.
        request_timeout: Seconds allowed for a single Kubernetes API request.
    """

    model_config = SettingsConfigDict(env_prefix="LOCALDEV_", extra="ignore")

    cluster_name: str = "sanic"
    owner_label: str = "io.x-k8s.kind.cluster"
    kubeconfig_path: Path | None = None
    kind_path: str | None = None
    kubectl_path: str | None = None
    docker_api_version: str = "auto"
    convergence_timeout: float = Field(default=DEFAULT_CONVERGENCE_TIMEOUT, gt=0)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    kind_create_timeout: float = Field(default=900, gt=0)
    kubectl_timeout: float = Field(default=120, gt=0)
    request_timeout: float = Field(default=10, gt=0)

    def identity(self) -> ClusterIdentity:
        """Build the cluster identity these settings describe.

        Raises:
            ConfigurationError: If the cluster name is not usable
        """
        try:
            return ClusterIdentity(
                name=self.cluster_name,
                owner_label=self.owner_label,
                kubeconfig_path=self.kubeconfig_path,
            )
        except ValidationError as e:
            raise ConfigurationError("Invalid cluster identity", str(e))

    @classmethod
    def load(cls, path: str | Path) -> "ProvisionerSettings":
        """Load settings from a YAML file; environment variables still apply
        to keys the file leaves out.

        Raises:
            ConfigurationError: If the file is missing, malformed or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse configuration file {path}", str(e))
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {path} must contain a mapping of settings"
            )
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}", str(e))
