"""Local development cluster provisioning on kind."""

__version__ = "0.1.0"
