"""Self-service router - public portal registration."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from casework.core.deps import get_db, require_csrf_header
from casework.schemas.self_service import SelfServiceApplication, SelfServiceResult
from casework.services import intake_service, self_service

router = APIRouter()


@router.post(
    "/applications",
    response_model=SelfServiceResult,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def submit_application(
    data: SelfServiceApplication,
    db: Session = Depends(get_db),
):
    """Register a new portal client (no session required)."""
    try:
        return self_service.submit_self_service_application(db, data)
    except (self_service.DuplicateAccountError, intake_service.StaffEmailConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
