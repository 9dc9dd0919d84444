"""Data models for observed cluster state and provisioning outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReadyStatus(str, Enum):
    """Value of a node's Ready condition."""

    READY = "Ready"
    NOT_READY = "NotReady"
    UNKNOWN = "Unknown"


class Condition(BaseModel):
    """A single entry of a node's status.conditions list."""

    type: str
    status: str  # "True", "False", "Unknown"


class NodeSnapshot(BaseModel):
    """A node as listed by the cluster API."""

    name: str
    conditions: list[Condition] = Field(default_factory=list)


class NodeCondition(BaseModel):
    """A node's name and its derived readiness."""

    name: str
    status: ReadyStatus


class ContainerSummary(BaseModel):
    """A container as listed by the Docker daemon."""

    id: str
    names: list[str] = Field(default_factory=list)
    state: str  # created, running, exited, ...

    @property
    def primary_name(self) -> str | None:
        return self.names[0] if self.names else None

    @property
    def running(self) -> bool:
        return self.state == "running"


class HealthState(str, Enum):
    """Classification of an existing cluster."""

    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    ABSENT = "Absent"


class ClusterHealthVerdict(BaseModel):
    """Result of one inspection. Never cached."""

    state: HealthState
    reason: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def healthy(cls) -> "ClusterHealthVerdict":
        return cls(state=HealthState.HEALTHY)

    @classmethod
    def degraded(cls, reason: str) -> "ClusterHealthVerdict":
        return cls(state=HealthState.DEGRADED, reason=reason)

    @classmethod
    def absent(cls, reason: str) -> "ClusterHealthVerdict":
        return cls(state=HealthState.ABSENT, reason=reason)

    @property
    def is_healthy(self) -> bool:
        return self.state == HealthState.HEALTHY

    def __str__(self) -> str:
        if self.reason:
            return f"{self.state.value}: {self.reason}"
        return self.state.value


class ProvisioningState(str, Enum):
    """States of the provisioning state machine."""

    INSPECTING = "Inspecting"
    REAPING = "Reaping"
    CREATING = "Creating"
    BOOTSTRAPPING_NETWORK = "BootstrappingNetwork"
    CONVERGING = "Converging"
    DONE = "Done"
    FAILED = "Failed"

    @property
    def label(self) -> str:
        """Short phase name used to prefix errors."""
        return _PHASE_LABELS.get(self, self.value.lower())


_PHASE_LABELS = {
    ProvisioningState.REAPING: "reap",
    ProvisioningState.CREATING: "create",
    ProvisioningState.BOOTSTRAPPING_NETWORK: "bootstrap-network",
    ProvisioningState.CONVERGING: "converge",
}


class ProvisioningResult(BaseModel):
    """Outcome of one provisioning attempt.

    On failure ``phase`` names the state that failed and ``error`` holds
    the phase-prefixed :class:`ProvisioningError`.
    """

    state: ProvisioningState
    verdict: ClusterHealthVerdict | None = None
    phase: ProvisioningState | None = None
    error: Exception | None = None
    recreated: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def success(self) -> bool:
        return self.state == ProvisioningState.DONE

    def raise_for_failure(self) -> None:
        """Raise the recorded error if the attempt failed."""
        if self.error is not None:
            raise self.error
