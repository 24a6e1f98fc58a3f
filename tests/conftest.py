"""
Shared pytest fixtures for healthmon tests.

This module provides common fixtures including:
- FakeGateway: In-memory control plane that records every call
- HealthCheck document factories
"""

import copy
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from healthmon.modules.gateway import GatewayError


# =============================================================================
# Control Plane Faking Infrastructure
# =============================================================================

@dataclass
class GatewayCall:
    """Record of a gateway call made during testing."""
    operation: str
    namespace: Optional[str] = None
    name: Optional[str] = None
    definition: Any = None


class FakeGateway:
    """
    In-memory stand-in for the Kubernetes gateway.

    List results and watch streams are scripted; create/delete/exists
    calls are recorded and can be made to fail.

    Usage:
        def test_create(fake_gateway):
            fake_gateway.fail("create", GatewayError("create deployment", status=409))
            reconciler = Reconciler(fake_gateway)
            ...
            assert fake_gateway.calls_for("create")
    """

    def __init__(self):
        self.calls: List[GatewayCall] = []
        self.existing: set = set()
        self._failures: Dict[str, GatewayError] = {}
        self._hooks: Dict[str, Callable[[], None]] = {}
        self._lists: List[Any] = []
        self._streams: List[Any] = []
        self.watch_calls: List[Tuple[Optional[str], Optional[str], int]] = []
        self.stop_watch_count = 0
        self.on_exhausted = None

    # Scripting

    def fail(self, operation: str, error: GatewayError) -> "FakeGateway":
        """Make every call to ``operation`` raise ``error``."""
        self._failures[operation] = error
        return self

    def on_call(self, operation: str, callback: Callable[[], None]) -> "FakeGateway":
        """Run ``callback`` inside every call to ``operation``, before any scripted failure."""
        self._hooks[operation] = callback
        return self

    def add_list(self, documents: List[Dict[str, Any]], resource_version: str) -> "FakeGateway":
        self._lists.append((documents, resource_version))
        return self

    def add_list_error(self, error: GatewayError) -> "FakeGateway":
        self._lists.append(error)
        return self

    def add_stream(self, events: List[Dict[str, Any]], error: Optional[GatewayError] = None) -> "FakeGateway":
        """Queue a watch stream; ``error`` is raised after the events are consumed."""
        self._streams.append((events, error))
        return self

    # Gateway interface

    def _maybe_fail(self, operation: str) -> None:
        if operation in self._hooks:
            self._hooks[operation]()
        if operation in self._failures:
            raise self._failures[operation]

    def list(self, namespace: Optional[str] = None):
        self.calls.append(GatewayCall("list", namespace=namespace))
        if not self._lists:
            raise AssertionError("list() called more often than scripted")
        result = self._lists.pop(0)
        if isinstance(result, GatewayError):
            raise result
        documents, resource_version = result
        return copy.deepcopy(documents), resource_version

    def watch(self, resource_version, namespace=None, timeout_seconds=300) -> Iterator[Dict[str, Any]]:
        self.watch_calls.append((resource_version, namespace, timeout_seconds))
        if not self._streams:
            # Nothing left to replay; let the test end the subscription
            if self.on_exhausted is not None:
                self.on_exhausted()
            return
        events, error = self._streams.pop(0)
        for event in events:
            yield copy.deepcopy(event)
        if error is not None:
            raise error

    def stop_watch(self) -> None:
        self.stop_watch_count += 1

    def create_workload(self, namespace: str, definition) -> None:
        self.calls.append(GatewayCall("create", namespace=namespace,
                                      name=definition.metadata.name, definition=definition))
        self._maybe_fail("create")
        self.existing.add((namespace, definition.metadata.name))

    def delete_workload(self, namespace: str, name: str) -> None:
        self.calls.append(GatewayCall("delete", namespace=namespace, name=name))
        self._maybe_fail("delete")
        self.existing.discard((namespace, name))

    def workload_exists(self, namespace: str, name: str) -> bool:
        self.calls.append(GatewayCall("exists", namespace=namespace, name=name))
        self._maybe_fail("exists")
        return (namespace, name) in self.existing

    # Assertions

    def calls_for(self, operation: str) -> List[GatewayCall]:
        return [c for c in self.calls if c.operation == operation]


@pytest.fixture
def fake_gateway():
    """Fixture that provides an empty FakeGateway."""
    return FakeGateway()


# =============================================================================
# HealthCheck Documents
# =============================================================================

def make_document(
    name: str = "svc-a",
    namespace: str = "default",
    resource_version: str = "1",
    **spec_fields,
) -> Dict[str, Any]:
    """Build a HealthCheck document as returned by the dynamic API."""
    spec = {
        "endpoint": "http://x/health",
        "intervalSeconds": 30,
        "expectedStatus": 200,
    }
    spec.update(spec_fields)
    return {
        "apiVersion": "example.com/v1",
        "kind": "HealthCheck",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": resource_version,
        },
        "spec": spec,
    }


@pytest.fixture
def healthcheck_document():
    """The minimal valid HealthCheck for default/svc-a."""
    return make_document()


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "e2e: End-to-end reconcile tests against the fake gateway"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a real cluster"
    )
