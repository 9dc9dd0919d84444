"""Tests for removing stale cluster containers."""

import pytest

from localdev_cluster.exceptions import ContainerRuntimeError
from localdev_cluster.models.cluster import ContainerSummary
from localdev_cluster.reaper import StaleResourceReaper


def test_reap_no_containers(env):
    env.runtime.containers = []

    removed = StaleResourceReaper(env.identity, env.runtime).reap()

    assert removed == 0
    assert env.runtime.removed == []


def test_reap_removes_running_and_stopped(env):
    env.runtime.containers[0] = ContainerSummary(id="id0", names=["/sanic-control-plane"], state="exited")

    removed = StaleResourceReaper(env.identity, env.runtime).reap()

    assert removed == 4
    assert sorted(cid for cid, _ in env.runtime.removed) == ["id0", "id1", "id2", "id3"]
    assert all(force for _, force in env.runtime.removed)


def test_reap_is_idempotent(env):
    reaper = StaleResourceReaper(env.identity, env.runtime)

    assert reaper.reap() == 4
    assert reaper.reap() == 0


def test_reap_uses_owner_label(env):
    StaleResourceReaper(env.identity, env.runtime).reap()

    assert env.runtime.label_filters == ["io.x-k8s.kind.cluster=sanic"]


def test_reap_propagates_removal_failure(env):
    env.runtime.remove_error = ContainerRuntimeError("Could not remove container id0")

    with pytest.raises(ContainerRuntimeError):
        StaleResourceReaper(env.identity, env.runtime).reap()
