"""Service layer modules."""

from casework.services.audit_service import diff_audit_values, log_client_view
from casework.services.intake_service import save_client_intake

# Import service modules (not individual functions) for cleaner access
from casework.services import audit_service
from casework.services import cache_service
from casework.services import task_service
from casework.services import intake_service
from casework.services import client_service
from casework.services import self_service
from casework.services import user_deletion_service
from casework.services import user_service
from casework.services import alert_service

__all__ = [
    # Audit
    "diff_audit_values",
    "log_client_view",
    # Intake
    "save_client_intake",
    # Service modules
    "audit_service",
    "cache_service",
    "task_service",
    "intake_service",
    "client_service",
    "self_service",
    "user_deletion_service",
    "user_service",
    "alert_service",
]
