import logging
import threading
from queue import Empty, Full, Queue
from typing import Optional

from healthmon.modules.gateway import ControlPlaneGateway, GatewayError
from healthmon.modules.spec import ExtractionError, extract
from healthmon.modules.synthesizer import WorkloadSettings, synthesize

from .events import EventType, WatchEvent

logger = logging.getLogger(__name__)


class Reconciler:
    """Single consumer that drives one control-plane action per HealthCheck event."""

    def __init__(
        self,
        gateway: ControlPlaneGateway,
        settings: Optional[WorkloadSettings] = None,
        skip_existing: bool = False,
        poll_seconds: float = 0.5,
    ):
        """
        Initialize reconciler.

        Args:
            gateway: Control-plane gateway for Deployment create/delete
            settings: Image settings passed to the synthesizer
            skip_existing: Check for an existing Deployment before creating one
            poll_seconds: How often blocked submit() and run() re-check for a stop
        """
        self.gateway = gateway
        self.settings = settings or WorkloadSettings()
        self.skip_existing = skip_existing
        self.poll_seconds = poll_seconds

        # Single-slot handoff: the producer waits while the slot is taken
        self.events: Queue = Queue(maxsize=1)
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def submit(self, event: WatchEvent) -> None:
        """
        Hand an event to the consumer.

        Blocks while the previous event is still waiting to be taken, so the
        producer never runs more than one event ahead of run(). Events
        submitted after stop() are dropped.
        """
        while not self._stop.is_set():
            try:
                self.events.put(event, timeout=self.poll_seconds)
                return
            except Full:
                continue
        logger.debug(f"Reconciler stopped, dropping {event.type.value} event for {event.key}")

    def stop(self) -> None:
        """
        Ask run() to return once the in-flight event is handled.

        Only sets a flag, so it may be called from a signal handler running
        on the consumer thread.
        """
        self._stop.set()

    def run(self) -> None:
        """
        Main reconcile loop.

        Events are handled one at a time in submission order. A failure in
        one event is logged and never stops the loop. After stop(), an event
        still waiting in the handoff slot is not handled.
        """
        logger.info("Reconciler started")

        while not self._stop.is_set():
            try:
                event = self.events.get(timeout=self.poll_seconds)
            except Empty:
                continue

            try:
                if self._stop.is_set():
                    break
                self.handle_event(event)
            except Exception as e:
                logger.exception(f"Error processing event: {e}")
            finally:
                self.events.task_done()

        logger.info("Reconciler stopped")

    def handle_event(self, event: WatchEvent) -> None:
        """
        Dispatch one event.

        Args:
            event: ADDED or DELETED HealthCheck event
        """
        if not event.name:
            logger.warning(f"Dropping {event.type.value} event without a name")
            return

        if event.type is EventType.ADDED:
            self._on_added(event)
        elif event.type is EventType.DELETED:
            self._on_deleted(event)

    def _on_added(self, event: WatchEvent) -> None:
        """
        Create the Deployment for a new HealthCheck.

        Logic:
        1. Extract the spec; malformed documents are dropped
        2. Optionally skip when the Deployment already exists
        3. Synthesize and create; failures are reported, not retried
        """
        logger.info(f"Healthcheck added: {event.key}")

        try:
            spec = extract(event.document)
        except ExtractionError as e:
            logger.warning(f"Failed to parse spec for {event.key}: {e}")
            return

        if self.skip_existing:
            try:
                exists = self.gateway.workload_exists(event.namespace, event.name)
            except GatewayError as e:
                logger.error(f"Error checking deployment {event.key}: {e}")
                return
            if exists:
                logger.info(f"Deployment already exists, skipping: {event.key}")
                return

        deployment = synthesize(spec, event.namespace, event.name, self.settings)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Desired deployment for {event.key}: {deployment.to_dict()}")

        logger.info(f"Creating deployment for healthcheck: {event.key}")
        try:
            self.gateway.create_workload(event.namespace, deployment)
        except GatewayError as e:
            if e.conflict:
                logger.warning(f"Deployment already exists: {event.key}")
            else:
                logger.error(f"Error creating deployment {event.key}: {e}")
            return

        logger.info(f"Deployment created successfully: {event.key}")

    def _on_deleted(self, event: WatchEvent) -> None:
        logger.info(f"Healthcheck deleted: {event.key}")
        logger.info(f"Deleting deployment for healthcheck: {event.key}")

        try:
            self.gateway.delete_workload(event.namespace, event.name)
        except GatewayError as e:
            if e.not_found:
                logger.warning(f"Deployment not found: {event.key}")
            else:
                logger.error(f"Error deleting deployment {event.key}: {e}")
            return

        logger.info(f"Deployment deleted successfully: {event.key}")
