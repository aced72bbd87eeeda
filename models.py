"""Data models and dataclasses."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from constants import OUTCOME_COMPLETED


@dataclass(frozen=True)
class HubEndpoint:
    """Resolved base URL of the Legrand hub."""
    base_url: str
    resolved_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class Credentials:
    """Legrand login credentials."""
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Session:
    """Authenticated Legrand session."""
    token: str = field(repr=False)
    endpoint: HubEndpoint


@dataclass(frozen=True)
class Device:
    """Legrand device as read from the catalog."""
    id: str
    name: str
    type: str  # "light" | "other"
    state: str  # "on" | "off" | "unknown"
    target_id: Optional[str] = None  # Hubitat device id, None if unmapped


@dataclass(frozen=True)
class Command:
    """Command to send to a Hubitat device."""
    target_device_id: str
    action: str  # "on" | "off"


@dataclass
class CycleReport:
    """Outcome of one reconciliation cycle."""
    outcome: str = OUTCOME_COMPLETED
    considered: int = 0
    sent: int = 0
    skipped: int = 0
    errors: int = 0
    failures: Dict[str, str] = field(default_factory=dict)  # Legrand device id -> error
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome,
            "considered": self.considered,
            "sent": self.sent,
            "skipped": self.skipped,
            "errors": self.errors,
            "failures": dict(self.failures),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }
