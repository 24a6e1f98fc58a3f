"""Control-plane error types."""
from typing import Optional

from kubernetes.client.rest import ApiException


class ControlPlaneConnectionError(ConnectionError):
    """Credentials or a client for the control plane could not be obtained."""


class GatewayError(Exception):
    """A control-plane call failed."""

    def __init__(self, operation: str, status: Optional[int] = None, reason: str = ""):
        self.operation = operation
        self.status = status
        self.reason = reason
        detail = f" (status={status})" if status is not None else ""
        super().__init__(f"{operation} failed{detail}: {reason}")

    @property
    def not_found(self) -> bool:
        return self.status == 404

    @property
    def conflict(self) -> bool:
        return self.status == 409

    @property
    def gone(self) -> bool:
        """The watch resource version has been compacted away."""
        return self.status == 410

    @classmethod
    def from_api_exception(cls, operation: str, exc: ApiException) -> "GatewayError":
        return cls(operation, status=exc.status, reason=str(exc.reason or exc))
