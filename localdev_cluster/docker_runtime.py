"""Docker access for listing and removing the cluster's node containers."""

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import RequestException

from localdev_cluster.exceptions import ContainerRuntimeError
from localdev_cluster.logging_config import get_logger
from localdev_cluster.models.cluster import ContainerSummary

logger = get_logger(__name__)


class DockerRuntime:
    """Thin wrapper over the Docker low-level API."""

    def __init__(self, api_client=None, version: str = "auto"):
        """Initialize the runtime.

        Args:
            api_client: Preconfigured ``docker.APIClient``; created from the
                environment (DOCKER_HOST etc.) when omitted
            version: Docker API version to negotiate
        """
        self._api = api_client
        self._version = version

    @property
    def api(self):
        if self._api is None:
            try:
                self._api = docker.from_env(version=self._version).api
            except DockerException as e:
                logger.error(f"Could not connect to Docker: {e}")
                raise ContainerRuntimeError(
                    "Could not connect to Docker",
                    f"{e}\n\nMake sure the Docker daemon is running and that "
                    "DOCKER_HOST points at it if it is not on the default socket.",
                )
        return self._api

    def list_containers(self, label_filter: str) -> list[ContainerSummary]:
        """List all containers, stopped ones included, carrying a label.

        Args:
            label_filter: ``key`` or ``key=value`` label selector

        Raises:
            ContainerRuntimeError: If the daemon cannot be queried
        """
        try:
            raw = self.api.containers(all=True, filters={"label": label_filter})
        except (DockerException, RequestException) as e:
            raise ContainerRuntimeError(f"Could not list containers labelled {label_filter}", str(e))

        containers = [
            ContainerSummary(id=c["Id"], names=c.get("Names") or [], state=c.get("State", ""))
            for c in raw
        ]
        logger.debug(f"Found {len(containers)} containers labelled {label_filter}")
        return containers

    def remove_container(self, container_id: str, force: bool = True) -> None:
        """Remove a container, killing it first when ``force`` is set.

        A container that is already gone counts as removed.
        """
        try:
            self.api.remove_container(container_id, force=force)
        except NotFound:
            logger.debug(f"Container {container_id} already removed")
        except (DockerException, RequestException) as e:
            raise ContainerRuntimeError(f"Could not remove container {container_id}", str(e))
