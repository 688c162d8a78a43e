"""Audit trail: field-level change entries plus view, deletion and registration events.

Staff interactions with a client (a call, a note) are logged here
too, and a client's history is read back from the same table.

Snapshots never include ssn_encrypted or bookkeeping columns, and row
changes store only the fields that changed.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from casework.core.config import settings
from casework.db.enums import AuditAction, InteractionType
from casework.db.models import AuditLog, Profile
from casework.schemas.history import ClientHistoryEntry


# Columns never copied into audit snapshots
EXCLUDED_AUDIT_COLUMNS = frozenset({"id", "ssn_encrypted", "created_at", "updated_at"})

# Entries on a client record that make up its history (views are left out)
CLIENT_HISTORY_ACTIONS = (
    AuditAction.INSERT,
    AuditAction.UPDATE,
    AuditAction.CLIENT_SELF_REGISTRATION,
    AuditAction.CLIENT_INTERACTION,
)


@dataclass
class AuditDiff:
    """Changed fields only: old_values[k] != new_values[k] for every key."""
    old_values: dict[str, Any] = field(default_factory=dict)
    new_values: dict[str, Any] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.new_values)


def to_audit_value(value: Any) -> Any:
    """Convert a column value into a JSON-safe value for comparison and storage."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_audit_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_audit_value(v) for v in value]
    return str(value)


def snapshot(row: Any, columns: Iterable[str] | None = None) -> dict[str, Any]:
    """
    Capture a JSON-safe field map of an ORM row.

    Without explicit columns, every mapped column except the excluded
    bookkeeping ones is captured.
    """
    if columns is None:
        columns = [
            c.key for c in row.__table__.columns if c.key not in EXCLUDED_AUDIT_COLUMNS
        ]
    return {name: to_audit_value(getattr(row, name)) for name in columns}


def diff_audit_values(
    previous: dict[str, Any] | None,
    current: dict[str, Any] | None,
) -> AuditDiff:
    """
    Compute a field-level diff between two plain field maps.

    Only keys of ``current`` whose value differs from ``previous`` are
    reported. A missing ``previous`` means the record was created: every
    field of ``current`` is reported and old_values stays empty.
    Comparison is by value.
    """
    diff = AuditDiff()
    if not current:
        return diff

    if previous is None:
        diff.new_values = {k: to_audit_value(v) for k, v in current.items()}
        return diff

    for key, value in current.items():
        new_value = to_audit_value(value)
        old_value = to_audit_value(previous.get(key))
        if old_value != new_value:
            diff.old_values[key] = old_value
            diff.new_values[key] = new_value
    return diff


def canonical_json(obj: dict | None) -> str:
    """Serialize object to canonical JSON (sorted keys, compact separators)."""
    return json.dumps(obj or {}, sort_keys=True, separators=(",", ":"), default=str)


def get_client_ip(request: Request | None) -> str | None:
    """Caller IP for the audit row; X-Forwarded-For is used only behind a trusted proxy."""
    if not request:
        return None

    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            # Left-most entry is the original client
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None


def get_user_agent(request: Request | None) -> str | None:
    """User-Agent header, cut to the column width."""
    if not request:
        return None
    ua = request.headers.get("user-agent", "")
    return ua[:500] if ua else None


def log_event(
    db: Session,
    action: AuditAction,
    actor_user_id: UUID | None,
    table_name: str | None,
    record_id: UUID | None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    request: Request | None = None,
) -> AuditLog:
    """
    Append an audit entry unconditionally.

    Args:
        db: Database session
        action: AuditAction for the entry
        actor_user_id: Profile that performed the action (None for system)
        table_name: Table the record lives in
        record_id: Affected record id
        old_values / new_values: Field maps (must be JSON-safe)
        request: Source of the IP and user agent, if any
    """
    entry = AuditLog(
        user_id=actor_user_id,
        action=action.value,
        table_name=table_name,
        record_id=record_id,
        old_values=old_values or None,
        new_values=new_values or None,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    db.add(entry)
    db.flush()
    return entry


def record_change(
    db: Session,
    action: AuditAction,
    actor_user_id: UUID | None,
    table_name: str,
    record_id: UUID,
    previous: dict[str, Any] | None,
    current: dict[str, Any] | None,
    request: Request | None = None,
) -> AuditLog | None:
    """Append an audit entry for a row change, only when something changed."""
    diff = diff_audit_values(previous, current)
    if not diff.changed:
        return None
    return log_event(
        db=db,
        action=action,
        actor_user_id=actor_user_id,
        table_name=table_name,
        record_id=record_id,
        old_values=diff.old_values,
        new_values=diff.new_values,
        request=request,
    )


def record_list_change(
    db: Session,
    actor_user_id: UUID | None,
    table_name: str,
    client_id: UUID,
    previous: list[dict[str, Any]],
    current: list[dict[str, Any]],
    request: Request | None = None,
) -> AuditLog | None:
    """
    Append one REPLACE entry for a list satellite when the list changed.

    The lists are compared as a whole; row order is ignored since stored
    rows share creation timestamps.
    """
    diff = diff_audit_values(
        {"rows": sorted(previous, key=canonical_json)},
        {"rows": sorted(current, key=canonical_json)},
    )
    if not diff.changed:
        return None
    return log_event(
        db=db,
        action=AuditAction.REPLACE,
        actor_user_id=actor_user_id,
        table_name=table_name,
        record_id=client_id,
        old_values=diff.old_values,
        new_values=diff.new_values,
        request=request,
    )


def log_client_view(
    db: Session,
    actor_user_id: UUID,
    client_id: UUID,
    request: Request | None = None,
) -> AuditLog:
    """Record that a profile opened a client's record."""
    return log_event(
        db=db,
        action=AuditAction.VIEW_CLIENT_PROFILE,
        actor_user_id=actor_user_id,
        table_name="clients",
        record_id=client_id,
        new_values={"viewed_at": datetime.now(timezone.utc).isoformat()},
        request=request,
    )


def list_entries_for_record(
    db: Session,
    table_name: str,
    record_id: UUID,
) -> list[AuditLog]:
    """Audit entries for one record, oldest first."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.table_name == table_name, AuditLog.record_id == record_id)
        .order_by(AuditLog.created_at.asc())
        .all()
    )


# =============================================================================
# Client history
# =============================================================================


def log_client_interaction(
    db: Session,
    actor_user_id: UUID,
    client_id: UUID,
    interaction_type: InteractionType,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    request: Request | None = None,
) -> AuditLog:
    """Record a staff interaction with a client. Flushes only."""
    return log_event(
        db=db,
        action=AuditAction.CLIENT_INTERACTION,
        actor_user_id=actor_user_id,
        table_name="clients",
        record_id=client_id,
        new_values={
            "interaction_type": interaction_type.value,
            "title": title,
            "description": description,
            "metadata": metadata or {},
        },
        request=request,
    )


def to_history_entry(entry: AuditLog, actor: Profile | None) -> ClientHistoryEntry:
    values = entry.new_values or {}
    if entry.action == AuditAction.CLIENT_INTERACTION.value:
        return ClientHistoryEntry(
            id=entry.id,
            action=entry.action,
            actor_id=entry.user_id,
            actor_name=actor.full_name if actor else None,
            interaction_type=values.get("interaction_type"),
            title=values.get("title"),
            description=values.get("description"),
            metadata=values.get("metadata") or {},
            created_at=entry.created_at,
        )
    return ClientHistoryEntry(
        id=entry.id,
        action=entry.action,
        actor_id=entry.user_id,
        actor_name=actor.full_name if actor else None,
        changes=values,
        created_at=entry.created_at,
    )


def get_client_history(db: Session, client_id: UUID) -> list[ClientHistoryEntry]:
    """
    A client's history, newest first.

    Logged interactions plus creation and edits of the client row, each
    with the acting profile's name (None once that profile is deleted).
    """
    rows = (
        db.query(AuditLog, Profile)
        .outerjoin(Profile, Profile.id == AuditLog.user_id)
        .filter(
            AuditLog.table_name == "clients",
            AuditLog.record_id == client_id,
            AuditLog.action.in_([action.value for action in CLIENT_HISTORY_ACTIONS]),
        )
        .order_by(AuditLog.created_at.desc())
        .all()
    )
    return [to_history_entry(entry, actor) for entry, actor in rows]
