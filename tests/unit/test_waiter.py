"""Tests for the bounded node readiness wait."""

import threading
import time

import pytest

from localdev_cluster.exceptions import ConvergenceCancelledError, KubernetesError, NodesNotReadyError
from localdev_cluster.waiter import ClusterConvergenceWaiter, MonotonicClock


def test_ready_on_first_poll_does_not_sleep(helpers):
    clock = helpers.FakeClock()
    client = helpers.FakeNodeClient([], helpers.ready_nodes())

    ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(90)

    assert client.calls == 1
    assert clock.sleeps == []


def test_returns_once_nodes_become_ready(helpers):
    clock = helpers.FakeClock()
    not_ready = [helpers.make_node("sanic-worker", "False")] + helpers.ready_nodes(3)
    client = helpers.FakeNodeClient([], not_ready, not_ready, helpers.ready_nodes())

    ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(90)

    assert client.calls == 3
    assert clock.sleeps == [0.3, 0.3]


def test_final_sleep_clipped_to_remaining_time(helpers):
    clock = helpers.FakeClock()
    client = helpers.FakeNodeClient([], [helpers.make_node("sanic-worker", "False")])
    waiter = ClusterConvergenceWaiter(client, poll_interval=0.375, clock=clock)

    with pytest.raises(NodesNotReadyError):
        waiter.wait_until_ready(1.0)

    assert clock.sleeps == [0.375, 0.375, 0.25]
    assert client.calls == 4
    assert clock.now() == 1.0


def test_deadline_raises_last_listing_error(helpers):
    clock = helpers.FakeClock()
    refused = KubernetesError("could not list kubernetes nodes: connection refused")
    client = helpers.FakeNodeClient([], [helpers.make_node("a", "False")], refused)

    with pytest.raises(KubernetesError) as exc_info:
        ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(1)

    assert exc_info.value is refused


def test_deadline_raises_not_ready_after_listing_recovers(helpers):
    clock = helpers.FakeClock()
    refused = KubernetesError("connection refused")
    client = helpers.FakeNodeClient([], refused, [helpers.make_node("sanic-worker3", "False")])

    with pytest.raises(NodesNotReadyError) as exc_info:
        ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(1)

    assert exc_info.value.message == "some nodes were not ready"
    assert "sanic-worker3" in exc_info.value.details


def test_listing_errors_do_not_end_wait_early(helpers):
    clock = helpers.FakeClock()
    refused = KubernetesError("connection refused")
    client = helpers.FakeNodeClient([], refused, refused, refused, helpers.ready_nodes())

    ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(90)

    assert client.calls == 4


def test_expected_node_count_mismatch_keeps_waiting(helpers):
    clock = helpers.FakeClock()
    client = helpers.FakeNodeClient([], helpers.ready_nodes(2), helpers.ready_nodes(4))

    ClusterConvergenceWaiter(client, clock=clock, expected_nodes=4).wait_until_ready(90)

    assert client.calls == 2


def test_expected_node_count_mismatch_reported_at_deadline(helpers):
    clock = helpers.FakeClock()
    client = helpers.FakeNodeClient([], helpers.ready_nodes(3))

    with pytest.raises(NodesNotReadyError) as exc_info:
        ClusterConvergenceWaiter(client, clock=clock, expected_nodes=4).wait_until_ready(1)

    assert "3/4" in exc_info.value.message


def test_cancelled_wait(helpers):
    clock = helpers.FakeClock()
    client = helpers.FakeNodeClient([], [helpers.make_node("a", "False")])
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ConvergenceCancelledError):
        ClusterConvergenceWaiter(client, clock=clock).wait_until_ready(90, cancel=cancel)

    assert client.calls == 1


def test_real_clock_bounded_by_timeout(helpers):
    """A never-ready cluster is given up on after about the timeout."""
    client = helpers.FakeNodeClient([], [helpers.make_node("a", "False")])
    waiter = ClusterConvergenceWaiter(client, clock=MonotonicClock())

    start = time.monotonic()
    with pytest.raises(NodesNotReadyError):
        waiter.wait_until_ready(1)
    elapsed = time.monotonic() - start

    assert 0.95 <= elapsed < 1.0 + 0.3 + 0.5
    assert client.calls >= 4
