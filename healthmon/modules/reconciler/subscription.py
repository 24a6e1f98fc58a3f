"""
HealthCheck list/watch subscription.

Produces WatchEvents for the reconciler the way an informer would:
an initial list becomes synthetic ADDED events, then a watch streams
ADDED/DELETED transitions from the list's resourceVersion. There is no
periodic resync; the stream is only re-opened when the server closes it,
and only re-listed when the resourceVersion has expired.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Set, Tuple

from healthmon.modules.gateway import ControlPlaneGateway, GatewayError

from .events import EventType, WatchEvent

logger = logging.getLogger(__name__)

Identity = Tuple[str, str]


def _identity(document: Dict[str, Any]) -> Identity:
    metadata = document.get("metadata") or {}
    return metadata.get("namespace") or "", metadata.get("name") or ""


def _tombstone(identity: Identity) -> Dict[str, Any]:
    """Final-state-unknown document for an object deleted while unwatched."""
    namespace, name = identity
    return {"metadata": {"namespace": namespace, "name": name}}


class ResourceSubscription:
    """Runs list-then-watch on a background thread and forwards events to a sink."""

    def __init__(
        self,
        gateway: ControlPlaneGateway,
        sink: Callable[[WatchEvent], None],
        namespace: Optional[str] = None,
        timeout_seconds: int = 300,
        retry_seconds: float = 5,
    ):
        """
        Initialize subscription.

        Args:
            gateway: Control-plane gateway providing list() and watch()
            sink: Called with each WatchEvent, in delivery order
            namespace: Restrict to one namespace (None = all namespaces)
            timeout_seconds: Server-side watch timeout
            retry_seconds: Delay before re-watching after an error
        """
        self.gateway = gateway
        self.sink = sink
        self.namespace = namespace
        self.timeout_seconds = timeout_seconds
        self.retry_seconds = retry_seconds

        # Owned by the subscription thread only
        self._known: Set[Identity] = set()
        self._resource_version: Optional[str] = None
        self._needs_list = True

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the subscription thread."""
        self._thread = threading.Thread(target=self.run, name="healthcheck-watch", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Request a stop and interrupt the open watch stream."""
        self._stop.set()
        self.gateway.stop_watch()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        """Subscription loop; returns once stop() is called."""
        logger.info("Subscription started")

        while not self._stop.is_set():
            try:
                if self._needs_list:
                    self._list()
                self._watch()
            except GatewayError as e:
                if e.gone:
                    logger.warning("Watch resource version expired, re-listing")
                    self._needs_list = True
                    continue
                logger.error(f"Subscription error: {e}")
                logger.info(f"Retrying in {self.retry_seconds} seconds...")
                self._stop.wait(self.retry_seconds)
            except Exception as e:
                logger.exception(f"Unexpected subscription error: {e}")
                self._stop.wait(self.retry_seconds)

        logger.info("Subscription stopped")

    def _emit(self, event_type: EventType, document: Dict[str, Any]) -> None:
        self.sink(WatchEvent(type=event_type, document=document))

    def _list(self) -> None:
        """
        List all HealthChecks and reconcile the known set against it.

        Logic:
        1. ADDED for every listed object not already known
        2. DELETED (tombstone) for every known object no longer listed
        3. Resume watching from the list's resourceVersion
        """
        documents, resource_version = self.gateway.list(self.namespace)

        current: Dict[Identity, Dict[str, Any]] = {}
        for document in documents:
            current[_identity(document)] = document

        for identity, document in current.items():
            if identity not in self._known:
                self._emit(EventType.ADDED, document)

        for identity in sorted(self._known - set(current)):
            self._emit(EventType.DELETED, _tombstone(identity))

        self._known = set(current)
        self._resource_version = resource_version
        self._needs_list = False
        logger.info(f"Listed {len(current)} healthchecks at resourceVersion {resource_version}")

    def _watch(self) -> None:
        """Consume one watch stream until the server closes it."""
        stream = self.gateway.watch(
            self._resource_version,
            namespace=self.namespace,
            timeout_seconds=self.timeout_seconds,
        )

        for raw in stream:
            if self._stop.is_set():
                break

            event_type = raw.get("type")
            document = raw.get("object")
            if not isinstance(document, dict):
                continue

            if event_type == "ERROR":
                raise GatewayError(
                    "watch", status=document.get("code"), reason=document.get("message", "")
                )

            resource_version = (document.get("metadata") or {}).get("resourceVersion")
            if resource_version:
                self._resource_version = resource_version

            identity = _identity(document)
            if event_type == EventType.ADDED.value:
                if identity in self._known:
                    continue
                self._known.add(identity)
                self._emit(EventType.ADDED, document)
            elif event_type == EventType.DELETED.value:
                self._known.discard(identity)
                self._emit(EventType.DELETED, document)
            # MODIFIED and BOOKMARK only move the resourceVersion
