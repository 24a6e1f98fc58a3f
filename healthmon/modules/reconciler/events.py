from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class EventType(str, Enum):
    """HealthCheck transitions the reconciler acts on."""

    ADDED = "ADDED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class WatchEvent:
    """One HealthCheck add or delete, keyed by namespace and name."""

    type: EventType
    document: Dict[str, Any]

    @property
    def metadata(self) -> Dict[str, Any]:
        metadata = self.document.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace") or ""

    @property
    def name(self) -> str:
        return self.metadata.get("name") or ""

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
