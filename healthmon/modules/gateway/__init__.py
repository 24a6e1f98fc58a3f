"""
Gateway Module - Black Box Interface

Purpose: All access to the Kubernetes control plane
Interface: connect(), ControlPlaneGateway, list(), watch(), create_workload(), delete_workload()
Hidden: Credential loading, API groups, ApiException handling

Can be replaced with an async client or a fake without affecting other modules.
"""

from .errors import ControlPlaneConnectionError, GatewayError
from .gateway import ControlPlaneGateway, KubernetesGateway, connect

__all__ = [
    "ControlPlaneConnectionError",
    "ControlPlaneGateway",
    "GatewayError",
    "KubernetesGateway",
    "connect",
]
