from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.orm import Session

from lockerkeep.core.clock import Clock
from lockerkeep.infrastructure.csv_reader import decode_csv_upload
from lockerkeep.presentation.routers import get_clock, get_db
from lockerkeep.schemas.models import AssignmentImportOut, AssignmentImportRequest
from lockerkeep.services.lockerkeep_service import import_assignments_csv_service, import_assignments_service

router = APIRouter()


def _partial_status(result: AssignmentImportOut, response: Response) -> AssignmentImportOut:
    # 207 when at least one row was rejected
    response.status_code = 200 if result.success else 207
    return result


@router.post("/import/contracts", response_model=AssignmentImportOut)
def post_import_contracts(
    body: AssignmentImportRequest,
    response: Response,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AssignmentImportOut:
    """
    Bulk-assign lockers. Every row is applied or rejected on its own; the batch always runs to the end
    """
    rows = [row.model_dump() for row in body.data]
    return _partial_status(import_assignments_service(rows, db, clock), response)


@router.post("/import/contracts/csv", response_model=AssignmentImportOut)
def post_import_contracts_csv(
    response: Response,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AssignmentImportOut:
    content = decode_csv_upload(file.file.read())
    return _partial_status(import_assignments_csv_service(content, db, clock), response)
