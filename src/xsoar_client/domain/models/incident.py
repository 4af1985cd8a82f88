from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Optional

from xsoar_client.domain.exceptions import ValidationError


class Severity(enum.IntEnum):
    UNKNOWN = 0
    INFO = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5

    @classmethod
    def _missing_(cls, value: object) -> "Severity":
        return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.name.capitalize()


class IncidentStatus(enum.Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    DONE = "Done"
    ARCHIVED = "Archive"


# XSOAR reports unset timestamps as Go's zero time.
_ZERO_TIME_PREFIX = "0001-01-01"
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp from the API; ``None`` for empty or zero values."""
    if not value or not isinstance(value, str) or value.startswith(_ZERO_TIME_PREFIX):
        return None
    # datetime only keeps microseconds; the API may send nanoseconds.
    text = _FRACTION_RE.sub(r"\1", value)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Label:
    type: str = ""
    value: str = ""

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Label:
        return cls(type=payload.get("type", ""), value=payload.get("value", ""))

    def to_wire(self) -> dict[str, str]:
        return {"type": self.type, "value": self.value}


# Wire keys that map onto explicit Incident attributes.
_INCIDENT_KEYS = frozenset(
    {
        "id",
        "name",
        "type",
        "status",
        "severity",
        "owner",
        "description",
        "phase",
        "playbookId",
        "investigationId",
        "created",
        "modified",
        "closed",
        "labels",
        "CustomFields",
    }
)


def _parse_status(value: Any) -> Optional[IncidentStatus]:
    if value in (None, ""):
        return None
    try:
        return IncidentStatus(value)
    except ValueError:
        return None


@dataclass
class Incident:
    id: str = ""
    name: str = ""
    type: str = ""
    status: Optional[IncidentStatus] = None
    severity: Severity = Severity.UNKNOWN
    owner: str = ""
    description: str = ""
    phase: str = ""
    playbook_id: str = ""
    investigation_id: str = ""
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    closed: Optional[datetime] = None
    labels: list[Label] = field(default_factory=list)
    custom_fields: dict[str, Any] = field(default_factory=dict)
    # Fields returned by the API that are not modelled above.
    raw_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Incident:
        return cls(
            id=str(payload.get("id") or ""),
            name=payload.get("name") or "",
            type=payload.get("type") or "",
            status=_parse_status(payload.get("status")),
            severity=Severity(int(payload.get("severity") or 0)),
            owner=payload.get("owner") or "",
            description=payload.get("description") or "",
            phase=payload.get("phase") or "",
            playbook_id=payload.get("playbookId") or "",
            investigation_id=payload.get("investigationId") or "",
            created=parse_timestamp(payload.get("created")),
            modified=parse_timestamp(payload.get("modified")),
            closed=parse_timestamp(payload.get("closed")),
            labels=[Label.from_wire(item) for item in payload.get("labels") or []],
            custom_fields=dict(payload.get("CustomFields") or {}),
            raw_data={k: v for k, v in payload.items() if k not in _INCIDENT_KEYS},
        )

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "severity": int(self.severity),
        }
        if self.status is not None:
            body["status"] = self.status.value
        optional = {
            "owner": self.owner,
            "description": self.description,
            "phase": self.phase,
            "playbookId": self.playbook_id,
            "investigationId": self.investigation_id,
        }
        body.update({k: v for k, v in optional.items() if v})
        for key, stamp in (
            ("created", self.created),
            ("modified", self.modified),
            ("closed", self.closed),
        ):
            if stamp is not None:
                body[key] = format_timestamp(stamp)
        if self.labels:
            body["labels"] = [label.to_wire() for label in self.labels]
        if self.custom_fields:
            body["CustomFields"] = dict(self.custom_fields)
        return body


@dataclass
class IncidentFilter:
    """Search criteria for incidents.

    ``query`` is a Lucene-style query string; list criteria are OR-ed by the
    server. Empty criteria are left out of the request.
    """

    query: str = ""
    status: list[IncidentStatus] = field(default_factory=list)
    severity: list[Severity] = field(default_factory=list)
    type: list[str] = field(default_factory=list)
    owner: list[str] = field(default_factory=list)
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.query:
            body["query"] = self.query
        if self.status:
            body["status"] = [s.value for s in self.status]
        if self.severity:
            body["severity"] = [int(s) for s in self.severity]
        if self.type:
            body["type"] = list(self.type)
        if self.owner:
            body["owner"] = list(self.owner)
        if self.from_date is not None:
            body["fromDate"] = format_timestamp(self.from_date)
        if self.to_date is not None:
            body["toDate"] = format_timestamp(self.to_date)
        return body


@dataclass
class CreateIncidentRequest:
    name: str = ""
    type: str = ""
    severity: Severity = Severity.UNKNOWN
    owner: str = ""
    description: str = ""
    labels: list[Label] = field(default_factory=list)
    custom_fields: dict[str, Any] = field(default_factory=dict)
    create_date: Optional[datetime] = None

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("incident name is required")
        if not self.type:
            raise ValidationError("incident type is required")

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.severity:
            body["severity"] = int(self.severity)
        if self.owner:
            body["owner"] = self.owner
        if self.description:
            body["description"] = self.description
        if self.labels:
            body["labels"] = [label.to_wire() for label in self.labels]
        if self.custom_fields:
            body["CustomFields"] = dict(self.custom_fields)
        if self.create_date is not None:
            body["createDate"] = format_timestamp(self.create_date)
        return body


@dataclass
class UpdateIncidentRequest:
    """Partial update; only attributes that are not ``None`` are sent."""

    severity: Optional[Severity] = None
    owner: Optional[str] = None
    status: Optional[IncidentStatus] = None
    description: Optional[str] = None
    custom_fields: Optional[dict[str, Any]] = None

    def to_wire(self, incident_id: str) -> dict[str, Any]:
        # The update endpoint identifies the incident by the body, not the path.
        body: dict[str, Any] = {"id": incident_id}
        if self.severity is not None:
            body["severity"] = int(self.severity)
        if self.owner is not None:
            body["owner"] = self.owner
        if self.status is not None:
            body["status"] = self.status.value
        if self.description is not None:
            body["description"] = self.description
        if self.custom_fields is not None:
            body["CustomFields"] = dict(self.custom_fields)
        return body


@dataclass
class CloseIncidentRequest:
    reason: str = ""
    notes: str = ""
    close_date: Optional[datetime] = None

    def to_wire(self, incident_id: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "id": incident_id,
            "status": IncidentStatus.DONE.value,
            "closeReason": self.reason,
        }
        if self.notes:
            body["closeNotes"] = self.notes
        if self.close_date is not None:
            body["closeDate"] = format_timestamp(self.close_date)
        return body
