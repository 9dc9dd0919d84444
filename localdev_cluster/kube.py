"""Kubernetes API access for the local cluster."""

from pathlib import Path

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from localdev_cluster.exceptions import KubeconfigError, KubernetesError
from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.cluster import Condition, NodeSnapshot

logger = get_logger(__name__)


class NodeClient:
    """Lists nodes through a CoreV1Api bound to one cluster."""

    def __init__(self, core_api: client.CoreV1Api, request_timeout: float = 10):
        self.core_api = core_api
        self.request_timeout = request_timeout

    def list_nodes(self) -> list[NodeSnapshot]:
        """List the cluster's nodes with their conditions.

        Raises:
            KubernetesError: If the API server rejects or cannot serve the request
        """
        try:
            response = self.core_api.list_node(_request_timeout=self.request_timeout)
        except ApiException as e:
            raise KubernetesError(f"could not list kubernetes nodes: {e.status} {e.reason}", e.body)
        except HTTPError as e:
            raise KubernetesError(f"could not list kubernetes nodes: {e}")

        nodes = []
        for node in response.items:
            conditions = [
                Condition(type=c.type, status=c.status)
                for c in (node.status.conditions if node.status else None) or []
            ]
            nodes.append(NodeSnapshot(name=node.metadata.name, conditions=conditions))
        return nodes


class KubeApi:
    """Loads kubeconfig files and builds node clients from them."""

    def __init__(self, request_timeout: float = 10):
        self.request_timeout = request_timeout

    def load_config(self, path: str | Path) -> client.Configuration:
        """Load a kubeconfig file into a fresh client configuration.

        Raises:
            KubeconfigError: If the file does not exist or cannot be parsed
        """
        path = Path(path).expanduser()
        if not path.exists():
            raise KubeconfigError(
                "kind config did not exist, cluster has not been initialized",
                f"Expected kubeconfig at {path}",
            )

        configuration = client.Configuration()
        try:
            config.load_kube_config(config_file=str(path), client_configuration=configuration)
        except (ConfigException, OSError, ValueError) as e:
            raise KubeconfigError(f"Could not load kubeconfig {path}", str(e))
        logger.debug(f"Loaded kubeconfig {path} for {configuration.host}")
        return configuration

    def new_client(self, configuration: client.Configuration) -> NodeClient:
        """Build a node client for a loaded configuration.

        Raises:
            KubernetesError: If the configuration cannot back an API client
        """
        try:
            api_client = client.ApiClient(configuration=configuration)
        except (ValueError, HTTPError) as e:
            raise KubernetesError(
                "could not connect to kubernetes in kind, it is likely not running", str(e)
            )
        return NodeClient(client.CoreV1Api(api_client), request_timeout=self.request_timeout)
