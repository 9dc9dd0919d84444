"""Pytest configuration and shared fixtures."""

from pathlib import Path
from types import SimpleNamespace

import pytest
from hypothesis import Verbosity, settings

from localdev_cluster.exceptions import KubeconfigError
from localdev_cluster.models.cluster import Condition, ContainerSummary, NodeSnapshot
from localdev_cluster.models.topology import (
    DEFAULT_TOPOLOGY,
    ClusterIdentity,
    required_container_names,
)
from localdev_cluster.provisioner import ClusterProvisioner

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


def make_node(name: str, *statuses: str) -> NodeSnapshot:
    """Node whose conditions are Ready entries with the given statuses."""
    return NodeSnapshot(name=name, conditions=[Condition(type="Ready", status=s) for s in statuses])


def ready_nodes(count: int = 4) -> list[NodeSnapshot]:
    return [make_node(f"node-{i}", "True") for i in range(count)]


def running_containers(identity: ClusterIdentity, state: str = "running") -> list[ContainerSummary]:
    return [
        ContainerSummary(id=f"id{i}", names=[name], state=state)
        for i, name in enumerate(required_container_names(identity, DEFAULT_TOPOLOGY))
    ]


class FakeRuntime:
    """In-memory Docker daemon."""

    def __init__(self, events: list, containers=None, list_error=None, remove_error=None):
        self.events = events
        self.containers = list(containers or [])
        self.list_error = list_error
        self.remove_error = remove_error
        self.label_filters = []
        self.removed = []

    def list_containers(self, label_filter):
        self.events.append("list_containers")
        self.label_filters.append(label_filter)
        if self.list_error:
            raise self.list_error
        return list(self.containers)

    def remove_container(self, container_id, force=True):
        self.events.append("remove_container")
        if self.remove_error:
            raise self.remove_error
        self.removed.append((container_id, force))
        self.containers = [c for c in self.containers if c.id != container_id]


class FakeNodeClient:
    """Returns queued node lists or raises queued errors; repeats the last one."""

    def __init__(self, events: list, *responses):
        self.events = events
        self.responses = list(responses) or [[]]
        self.calls = 0

    def list_nodes(self):
        self.events.append("list_nodes")
        response = self.responses[min(self.calls, len(self.responses) - 1)]
        self.calls += 1
        if isinstance(response, Exception):
            raise response
        return response


class FakeKubeApi:
    def __init__(self, events: list, node_client, config_exists=True, client_error=None):
        self.events = events
        self.node_client = node_client
        self.config_exists = config_exists
        self.client_error = client_error
        self.loaded = []

    def load_config(self, path):
        self.events.append("load_config")
        self.loaded.append(Path(path))
        if not self.config_exists:
            raise KubeconfigError("kind config did not exist, cluster has not been initialized")
        return {"kubeconfig": str(path)}

    def new_client(self, configuration):
        self.events.append("new_client")
        if self.client_error:
            raise self.client_error
        return self.node_client


class FakeCreator:
    """Stands in for kind; writes the kubeconfig on success."""

    def __init__(self, events: list, identity: ClusterIdentity, kube_api: FakeKubeApi, error=None):
        self.events = events
        self.identity = identity
        self.kube_api = kube_api
        self.error = error
        self.calls = []

    def config_path(self):
        return self.identity.kubeconfig()

    def create(self, topology, retain=False, wait_for_ready=0):
        self.events.append("create")
        self.calls.append({"topology": topology, "retain": retain, "wait_for_ready": wait_for_ready})
        if self.error:
            raise self.error
        self.kube_api.config_exists = True


class FakeBootstrapper:
    def __init__(self, events: list, error=None):
        self.events = events
        self.error = error
        self.calls = 0

    def apply(self):
        self.events.append("bootstrap")
        self.calls += 1
        if self.error:
            raise self.error


class FakeClock:
    """Monotonic clock that only advances when slept on."""

    def __init__(self, start: float = 0.0):
        self.current = start
        self.sleeps = []

    def now(self):
        return self.current

    def sleep(self, seconds, cancel=None):
        self.sleeps.append(seconds)
        self.current += seconds
        return cancel.is_set() if cancel is not None else False


@pytest.fixture
def identity(tmp_path):
    """Cluster identity with its kubeconfig under a temporary directory."""
    return ClusterIdentity(name="sanic", kubeconfig_path=tmp_path / "kind-config-sanic")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def env(identity, fake_clock):
    """A healthy cluster made of fakes, plus a factory for its provisioner.

    Tests mutate the fakes to break the cluster in specific ways.
    """
    events = []
    node_client = FakeNodeClient(events, ready_nodes())
    runtime = FakeRuntime(events, running_containers(identity))
    kube_api = FakeKubeApi(events, node_client)
    creator = FakeCreator(events, identity, kube_api)
    bootstrapper = FakeBootstrapper(events)
    reports = []

    def provisioner(**kwargs):
        kwargs.setdefault("clock", fake_clock)
        kwargs.setdefault("report", reports.append)
        return ClusterProvisioner(identity, runtime, kube_api, creator, bootstrapper, **kwargs)

    return SimpleNamespace(
        events=events,
        identity=identity,
        node_client=node_client,
        runtime=runtime,
        kube_api=kube_api,
        creator=creator,
        bootstrapper=bootstrapper,
        clock=fake_clock,
        reports=reports,
        provisioner=provisioner,
    )


@pytest.fixture
def helpers():
    """Builders for nodes, containers and fake node clients."""
    return SimpleNamespace(
        make_node=make_node,
        ready_nodes=ready_nodes,
        running_containers=running_containers,
        FakeNodeClient=FakeNodeClient,
        FakeClock=FakeClock,
    )
