"""Pydantic schemas for API request/response models."""

from casework.schemas.alert import AlertRead
from casework.schemas.auth import TokenPayload, UserSession
from casework.schemas.client import (
    ClientPageResponse,
    ClientRead,
    ClientSummary,
    IntakeSaveResult,
    PortalClientResponse,
    SatelliteError,
)
from casework.schemas.history import ClientHistoryEntry, InteractionCreate
from casework.schemas.intake import (
    CaseManagementInput,
    ClientIntakeForm,
    DemographicsInput,
    EmergencyContactInput,
    HouseholdInput,
    HouseholdMemberInput,
    ParticipantDetails,
)
from casework.schemas.self_service import SelfServiceApplication, SelfServiceResult
from casework.schemas.task import TaskAssign, TaskCreate, TaskRead, TaskStatusUpdate
from casework.schemas.user import UserRead

__all__ = [
    # Alerts
    "AlertRead",
    # Auth
    "TokenPayload",
    "UserSession",
    # Clients
    "ClientPageResponse",
    "ClientRead",
    "ClientSummary",
    "IntakeSaveResult",
    "PortalClientResponse",
    "SatelliteError",
    # History
    "ClientHistoryEntry",
    "InteractionCreate",
    # Intake
    "CaseManagementInput",
    "ClientIntakeForm",
    "DemographicsInput",
    "EmergencyContactInput",
    "HouseholdInput",
    "HouseholdMemberInput",
    "ParticipantDetails",
    # Self-service
    "SelfServiceApplication",
    "SelfServiceResult",
    # Tasks
    "TaskCreate",
    "TaskRead",
    "TaskAssign",
    "TaskStatusUpdate",
    # Users
    "UserRead",
]
