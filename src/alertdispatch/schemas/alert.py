from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AlertSeverity(str, Enum):
    """Alert severity levels."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    FATAL = "fatal"

    @property
    def label(self) -> str:
        """Upper-case form used in titles and subjects."""
        return self.value.upper()


class AlertStatus(str, Enum):
    """Alert lifecycle states."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    SUPPRESSED = "suppressed"
    ACKNOWLEDGED = "acknowledged"

    @property
    def label(self) -> str:
        return self.value.title()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Alert(BaseModel):
    """One notification event, as handed to a channel for delivery.

    ``value`` and ``threshold`` use ``0`` to mean "not measured"; channels
    leave them out of human-readable output in that case.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str
    description: str = ""
    severity: AlertSeverity = AlertSeverity.INFO
    status: AlertStatus = AlertStatus.ACTIVE
    source: str = ""
    component: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    value: float = 0.0
    threshold: float = 0.0
    timestamp: datetime = Field(default_factory=_utcnow)
    count: int = Field(default=1, ge=1)

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive datetimes as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def title(self) -> str:
        return f"[{self.severity.label}] {self.name}"

    @property
    def unix_timestamp(self) -> int:
        return int(self.timestamp.timestamp())

    @property
    def rfc3339_timestamp(self) -> str:
        return format_rfc3339(self.timestamp)


def format_rfc3339(ts: datetime) -> str:
    """Render ``ts`` at second precision, using ``Z`` for UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def format_measure(value: float) -> str | None:
    """Two-decimal rendering of a measurement, or None when it is the 0 sentinel."""
    if value == 0:
        return None
    return f"{value:.2f}"


def build_test_alert() -> Alert:
    """Canonical alert used by channel self-tests."""
    return Alert(
        name="Test Alert",
        description="This is a test alert",
        severity=AlertSeverity.INFO,
        status=AlertStatus.ACTIVE,
        timestamp=_utcnow(),
    )
