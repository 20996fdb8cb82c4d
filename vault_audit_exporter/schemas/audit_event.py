"""
Typed model for one Vault audit log line.

Only the fields needed for correlation and labelling are modelled; the rest
of the audit entry (auth, request/response bodies, headers ...) is ignored.
Keys are matched case-insensitively so ``{"Request": {"ID": ...}}`` and
``{"request": {"id": ...}}`` decode to the same event.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from vault_audit_exporter.constants import (
    AUDIT_EVENT_TYPE_REQUEST,
    AUDIT_EVENT_TYPE_RESPONSE,
)
from vault_audit_exporter.exceptions import DecodeError


class EventType(str, Enum):
    """Classification of an audit event."""

    REQUEST = "request"
    RESPONSE = "response"
    UNKNOWN = "unknown"


def _fold_keys(model: type[BaseModel], data: Any) -> Any:
    """
    Rename keys of ``data`` to the model's field names, ignoring case.

    Null values are dropped so the field keeps its default.
    """
    if not isinstance(data, dict):
        return data

    fields = {name.lower(): name for name in model.model_fields}
    folded: dict[str, Any] = {}
    for key, value in data.items():
        name = fields.get(str(key).lower())
        if name is not None and value is not None:
            folded[name] = value
    return folded


class _CaseInsensitiveModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _fold(cls, data: Any) -> Any:
        return _fold_keys(cls, data)


class AuditRequest(_CaseInsensitiveModel):
    """
    Request section of an audit entry.

    Attributes:
        id: Request identifier shared by the request and response entries.
        operation: Vault logical operation (read, update, list, ...).
        path: Request path, e.g. ``secret/data/app``.
    """

    id: str = ""
    operation: str = ""
    path: str = ""


class AuditEvent(_CaseInsensitiveModel):
    """
    One decoded audit log line.

    Attributes:
        type: Raw entry type, ``request`` or ``response`` for known events.
        time: RFC 3339 timestamp written by Vault.
        error: Error text, empty for successful operations.
        request: Request section carrying the correlation identifier.
    """

    type: str = ""
    time: str = ""
    error: str = ""
    request: AuditRequest = Field(default_factory=AuditRequest)

    @property
    def event_type(self) -> EventType:
        """Classify the event by its ``type`` field."""
        if self.type == AUDIT_EVENT_TYPE_REQUEST:
            return EventType.REQUEST
        if self.type == AUDIT_EVENT_TYPE_RESPONSE:
            return EventType.RESPONSE
        return EventType.UNKNOWN

    @property
    def request_id(self) -> str:
        return self.request.id

    @property
    def timestamp(self) -> str:
        return self.time

    def labels(self) -> dict[str, str]:
        """
        Prometheus label set for this event.

        The same mapping is used for the request counter, the response
        counter and the latency histogram.
        """
        return {
            "operation": self.request.operation,
            "path": self.request.path,
            "error": self.error,
        }


def classify(raw_line: bytes | str) -> AuditEvent:
    """
    Decode a single audit log line into an AuditEvent.

    Args:
        raw_line: One JSON document, without the trailing newline.

    Returns:
        The decoded event (possibly of type UNKNOWN).

    Raises:
        DecodeError: If the line is not a JSON object or a known field has
            the wrong type.
    """
    try:
        data = json.loads(raw_line)
    except (json.JSONDecodeError, UnicodeDecodeError) as ex:
        raise DecodeError(f"invalid JSON: {ex}") from ex

    if not isinstance(data, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(data).__name__}"
        )

    try:
        return AuditEvent.model_validate(data)
    except ValidationError as ex:
        raise DecodeError(
            f"invalid audit entry: {ex.error_count()} error(s), "
            f"first: {ex.errors()[0]['msg']}"
        ) from ex
