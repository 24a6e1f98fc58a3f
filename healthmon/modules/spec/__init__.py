"""
Spec Module - Black Box Interface

Purpose: Turn an untyped HealthCheck document into a validated spec
Interface: extract(), HealthCheckSpec, AuthSpec, ExtractionError
Hidden: Document layout, type checks, nested auth leniency

Can be replaced with a schema-driven decoder without affecting other modules.
"""

from .extractor import extract
from .models import (
    AuthSpec,
    ExtractionError,
    HealthCheckSpec,
    InvalidField,
    MissingSpec,
    MTLSSpec,
    OAuthSpec,
)

__all__ = [
    "extract",
    "AuthSpec",
    "ExtractionError",
    "HealthCheckSpec",
    "InvalidField",
    "MissingSpec",
    "MTLSSpec",
    "OAuthSpec",
]
