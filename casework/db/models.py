"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casework.db.base import Base
from casework.db.enums import (
    DEFAULT_CLIENT_STATUS,
    DEFAULT_HOUSING_STATUS,
    Role,
    TaskPriority,
    TaskStatus,
)
from casework.db.types import EncryptedString, JSONList


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Profiles (staff and portal accounts)
# =============================================================================


class Profile(Base):
    """
    Login identity with a role.

    Staff roles work client caseloads; the client role is a portal account
    optionally linked to exactly one Client via Client.portal_user_id.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default=Role.STAFF.value)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# =============================================================================
# Clients and satellites
# =============================================================================


class Client(Base):
    """
    Client record, the anchor for every satellite table.

    Created on first intake save; updated in place afterwards.
    """

    __tablename__ = "clients"
    __table_args__ = (
        Index("idx_clients_created", "created_at"),
        Index("idx_clients_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Participant details
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferred_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    ssn_encrypted: Mapped[str | None] = mapped_column(EncryptedString, nullable=True)
    ssn_last_four: Mapped[str | None] = mapped_column(String(4), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    alternate_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Address
    street_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    apartment_unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    mailing_same_as_physical: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Status and portal
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_CLIENT_STATUS.value, nullable=False
    )
    has_portal_access: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    portal_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    intake_completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Metadata
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_case_manager: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow, nullable=False)

    portal_user: Mapped["Profile | None"] = relationship(foreign_keys=[portal_user_id])

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CaseManagement(Base):
    """One-to-one satellite holding housing, language and benefits data."""

    __tablename__ = "case_management"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    client_id_number: Mapped[str | None] = mapped_column(String(100), nullable=True)  # HMIS id
    housing_status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_HOUSING_STATUS.value, nullable=False
    )
    primary_language: Mapped[str] = mapped_column(String(50), default="English", nullable=False)
    secondary_language: Mapped[str | None] = mapped_column(String(50), nullable=True)
    needs_interpreter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    vi_spdat_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    health_insurance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    health_insurance_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    non_cash_benefits: Mapped[list] = mapped_column(JSONList, default=list, nullable=False)
    health_status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow, nullable=False)


class Demographics(Base):
    """One-to-one satellite holding demographic and income data."""

    __tablename__ = "demographics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ethnicity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    race: Mapped[list] = mapped_column(JSONList, default=list, nullable=False)
    marital_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    employment_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    monthly_income: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    income_source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    veteran_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    disability_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow, nullable=False)


class EmergencyContact(Base):
    """
    List satellite. Replaced wholesale on every intake save, so row ids are
    not stable across saves.
    """

    __tablename__ = "emergency_contacts"
    __table_args__ = (Index("idx_emergency_contacts_client", "client_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    relationship: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)


class HouseholdMember(Base):
    """List satellite with the same replace-on-save lifecycle as EmergencyContact."""

    __tablename__ = "household_members"
    __table_args__ = (Index("idx_household_members_client", "client_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    relationship: Mapped[str] = mapped_column(String(50), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)


# =============================================================================
# Tasks and alerts
# =============================================================================


class Task(Base):
    """To-do items, optionally linked to a client."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_client_status", "client_id", "status"),
        Index("idx_tasks_assigned", "assigned_to", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True
    )
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), default=TaskStatus.PENDING.value, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(20), default=TaskPriority.MEDIUM.value, nullable=False
    )
    due_date: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow, nullable=False)


class Alert(Base):
    """In-app alert shown to a profile (portal users see task assignments)."""

    __tablename__ = "alerts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True
    )
    task_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    alert_type: Mapped[str] = mapped_column(String(30), nullable=False)
    trigger_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_dismissed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)


# =============================================================================
# Audit
# =============================================================================


class AuditLog(Base):
    """
    Append-only audit trail.

    Row changes store only the changed fields in old_values/new_values.
    Business events (views, deletions, registrations) use new_values for
    their metadata.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("idx_audit_record", "table_name", "record_id", "created_at"),
        Index("idx_audit_actor", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)  # Actor
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    table_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    record_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    old_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    new_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
