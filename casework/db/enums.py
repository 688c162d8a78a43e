"""Enum definitions for application constants."""

from enum import Enum


# =============================================================================
# Auth
# =============================================================================

class Role(str, Enum):
    """
    Profile roles.

    - ADMIN: Full access, including deletions
    - CASE_MANAGER: Owns client caseloads
    - STAFF: Intake and day-to-day client work
    - VOLUNTEER: Read-mostly staff account
    - CLIENT: Portal (self-service) account linked to one client record
    """

    ADMIN = "admin"
    CASE_MANAGER = "case_manager"
    STAFF = "staff"
    VOLUNTEER = "volunteer"
    CLIENT = "client"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


STAFF_ROLES = frozenset({Role.ADMIN, Role.CASE_MANAGER, Role.STAFF, Role.VOLUNTEER})
ROLES_CAN_CREATE_CLIENTS = frozenset({Role.ADMIN, Role.CASE_MANAGER, Role.STAFF})
ROLES_CAN_EDIT_ANY_CLIENT = frozenset({Role.ADMIN, Role.CASE_MANAGER, Role.STAFF})
ROLES_CAN_DELETE = frozenset({Role.ADMIN})


# =============================================================================
# Clients
# =============================================================================

class ClientStatus(str, Enum):
    """Lifecycle status of a client record."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    ARCHIVED = "archived"


class HousingStatus(str, Enum):
    """Housing situation recorded on case management."""

    HOUSED = "housed"
    UNHOUSED = "unhoused"
    AT_RISK = "at_risk"
    TRANSITIONAL = "transitional"
    UNKNOWN = "unknown"


DEFAULT_CLIENT_STATUS = ClientStatus.PENDING
DEFAULT_HOUSING_STATUS = HousingStatus.UNKNOWN


# =============================================================================
# Tasks
# =============================================================================

class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AlertType(str, Enum):
    CUSTOM = "custom"
    TASK_DUE = "task_due"


class InteractionType(str, Enum):
    """Kinds of staff interaction logged on a client's history."""

    NOTE = "note"
    CALL = "call"
    MEETING = "meeting"
    EMAIL = "email"
    STATUS_CHANGE = "status_change"
    OTHER = "other"


# =============================================================================
# Audit
# =============================================================================

class AuditAction(str, Enum):
    """
    Audit log actions.

    Row-level changes use the upper-case verbs; business events keep the
    lower-case names already present in historical rows.
    """

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    REPLACE = "REPLACE"  # Whole-list replacement of a list satellite
    DELETE = "DELETE"
    VIEW_CLIENT_PROFILE = "VIEW_CLIENT_PROFILE"
    CLIENT_SELF_REGISTRATION = "client_self_registration"
    CLIENT_DELETED = "client_deleted"
    USER_DELETED = "user_deleted"
    USER_ARCHIVED = "user_archived"
    CLIENT_INTERACTION = "client_interaction"
