"""
Reconciler Module - Black Box Interface

Purpose: Turn HealthCheck add/delete events into Deployment create/delete calls
Interface: Reconciler.submit(), Reconciler.run(), ResourceSubscription.start()
Hidden: Event queue, list/watch bookkeeping, per-event error isolation

Can be replaced with an operator framework (kopf) without affecting other modules.
"""

from .events import EventType, WatchEvent
from .reconciler import Reconciler
from .subscription import ResourceSubscription

__all__ = ["EventType", "Reconciler", "ResourceSubscription", "WatchEvent"]
