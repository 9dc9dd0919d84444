"""Custom exceptions for the local development cluster provisioner."""


class LocaldevError(Exception):
    """Base exception for all provisioner errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class ContainerRuntimeError(LocaldevError):
    """Exception raised for Docker daemon errors."""

    pass


class KubernetesError(LocaldevError):
    """Exception raised for Kubernetes API errors."""

    pass


class KubeconfigError(KubernetesError):
    """Exception raised when the cluster's kubeconfig is missing or unusable."""

    pass


class NodesNotReadyError(KubernetesError):
    """Exception raised when the node list was read but not every node is Ready."""

    pass


class ConvergenceCancelledError(LocaldevError):
    """Exception raised when a readiness wait is cancelled by its caller."""

    pass


class KindError(LocaldevError):
    """Exception raised for kind cluster creation errors."""

    pass


class KubectlError(LocaldevError):
    """Exception raised for kubectl execution errors."""

    pass


class ConfigurationError(LocaldevError):
    """Exception raised for configuration errors."""

    pass


class ProvisioningError(LocaldevError):
    """A recreation phase failed and the provisioning attempt was aborted.

    The message is prefixed with the phase so operators know where
    recreation stopped; the underlying exception is kept as ``cause``.
    """

    def __init__(self, phase: str, cause: Exception):
        self.phase = phase
        self.cause = cause
        details = getattr(cause, "details", None)
        message = getattr(cause, "message", None) or str(cause)
        super().__init__(f"{phase}: {message}", details)
        self.__cause__ = cause
