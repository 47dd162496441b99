"""
Analytics event payloads delivered to the collector.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from switchyard.user import UserContext


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Event:
    """Base event carrying the fields every collector payload has."""

    key: str
    user: UserContext
    kind: str = field(default="", init=False)
    creation_date: int = field(default_factory=_now_ms)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind,
            "creationDate": self.creation_date,
            "key": self.key,
            "user": self.user.to_dict(),
        }


@dataclass
class FeatureRequestEvent(Event):
    """Records that a flag was evaluated and what it produced."""

    value: Any = None
    default: Any = None

    def __post_init__(self):
        self.kind = "feature"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["value"] = self.value
        result["default"] = self.default
        return result


@dataclass
class CustomEvent(Event):
    """An application-defined event, e.g. a conversion."""

    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self.kind = "custom"

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.data is not None:
            result["data"] = self.data
        return result


@dataclass
class IdentifyEvent(Event):
    """Registers a user with the collector."""

    def __post_init__(self):
        self.kind = "identify"
