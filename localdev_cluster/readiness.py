"""Node readiness policy.

A node is ready when its ``Ready`` condition has status ``"True"``. If a
node reports more than one ``Ready`` condition, the last one in the list
decides. That matches what the cluster tooling has always done, even
though the first (or a merged) condition is arguably what the API
intends. Callers that want a different rule pass their own
:data:`ReadinessPolicy` to the inspector and the waiter.
"""

from collections.abc import Callable, Iterable

from localdev_cluster.models.cluster import Condition, NodeCondition, NodeSnapshot, ReadyStatus

READY_CONDITION = "Ready"

ReadinessPolicy = Callable[[Iterable[Condition]], bool]


def ready_status(conditions: Iterable[Condition]) -> ReadyStatus:
    """Status of the last ``Ready`` condition, ``Unknown`` when there is none."""
    status = ReadyStatus.UNKNOWN
    for condition in conditions:
        if condition.type != READY_CONDITION:
            continue
        if condition.status == "True":
            status = ReadyStatus.READY
        elif condition.status == "False":
            status = ReadyStatus.NOT_READY
        else:
            status = ReadyStatus.UNKNOWN
    return status


def is_ready(conditions: Iterable[Condition]) -> bool:
    """Return True if the last ``Ready`` condition is ``"True"``."""
    return ready_status(conditions) == ReadyStatus.READY


def node_condition(node: NodeSnapshot) -> NodeCondition:
    return NodeCondition(name=node.name, status=ready_status(node.conditions))


def all_ready(nodes: Iterable[NodeSnapshot], policy: ReadinessPolicy = is_ready) -> bool:
    """Return True if every node passes the readiness policy."""
    return all(policy(node.conditions) for node in nodes)
