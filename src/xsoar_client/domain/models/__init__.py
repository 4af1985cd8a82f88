from xsoar_client.domain.models.incident import (
    CloseIncidentRequest,
    CreateIncidentRequest,
    Incident,
    IncidentFilter,
    IncidentStatus,
    Label,
    Severity,
    UpdateIncidentRequest,
)

__all__ = [
    "CloseIncidentRequest",
    "CreateIncidentRequest",
    "Incident",
    "IncidentFilter",
    "IncidentStatus",
    "Label",
    "Severity",
    "UpdateIncidentRequest",
]
