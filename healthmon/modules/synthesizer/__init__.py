"""
Synthesizer Module - Black Box Interface

Purpose: Map a HealthCheckSpec to the desired monitoring Deployment
Interface: synthesize(), WorkloadSettings
Hidden: Container layout, env var names, auth material injection

Can be replaced with a templating engine (Helm, Jinja) without affecting other modules.
"""

from .synthesizer import (
    CONTAINER_NAME,
    MTLS_MOUNT_PATH,
    MTLS_VOLUME_NAME,
    WorkloadSettings,
    synthesize,
)

__all__ = [
    "CONTAINER_NAME",
    "MTLS_MOUNT_PATH",
    "MTLS_VOLUME_NAME",
    "WorkloadSettings",
    "synthesize",
]
