from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from sqlalchemy.orm import Session

from lockerkeep.infrastructure.csv_reader import decode_csv_upload, employee_csv_template
from lockerkeep.presentation.routers import get_db
from lockerkeep.schemas.models import (
    EmployeeCreate,
    EmployeeDetail,
    EmployeeImportOut,
    EmployeeImportRequest,
    EmployeeLocker,
    EmployeeOut,
    EmployeeSummary,
    EmployeeUpdate,
)
from lockerkeep.services.lockerkeep_service import (
    create_employee_service,
    delete_employee_service,
    get_employee_service,
    import_employees_csv_service,
    import_employees_service,
    list_employees_service,
    lookup_employee_locker_service,
    update_employee_service,
)

router = APIRouter()


def _partial_status(result: EmployeeImportOut, response: Response) -> EmployeeImportOut:
    # duplicates are reported, not failed
    response.status_code = 207 if result.failed else 200
    return result


@router.get("/employees", response_model=list[EmployeeSummary])
def get_employees(
    search: str | None = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
) -> list[EmployeeSummary]:
    return list_employees_service(search, active_only, db)


@router.post("/employees", response_model=EmployeeOut, status_code=201)
def post_employees(body: EmployeeCreate, db: Session = Depends(get_db)) -> EmployeeOut:
    return create_employee_service(body, db)


@router.post("/employees/import", response_model=EmployeeImportOut)
def post_employees_import(
        body: EmployeeImportRequest, response: Response, db: Session = Depends(get_db)
) -> EmployeeImportOut:
    rows = [row.model_dump(by_alias=True) for row in body.employees]
    return _partial_status(import_employees_service(rows, db), response)


@router.post("/employees/import/csv", response_model=EmployeeImportOut)
def post_employees_import_csv(
        response: Response, file: UploadFile = File(...), db: Session = Depends(get_db)
) -> EmployeeImportOut:
    content = decode_csv_upload(file.file.read())
    return _partial_status(import_employees_csv_service(content, db), response)


@router.get("/employees/import/template")
def get_employees_import_template() -> Response:
    return Response(
        content=employee_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="employee_template.csv"'},
    )


@router.get("/employees/{employee_id}", response_model=EmployeeDetail)
def get_employees_employee_id(employee_id: str, db: Session = Depends(get_db)) -> EmployeeDetail:
    return get_employee_service(employee_id, db)


@router.patch("/employees/{employee_id}", response_model=EmployeeOut)
def patch_employees_employee_id(
    employee_id: str, body: EmployeeUpdate, db: Session = Depends(get_db)
) -> EmployeeOut:
    return update_employee_service(employee_id, body, db)


@router.delete("/employees/{employee_id}", status_code=204, response_model=None)
def delete_employees_employee_id(employee_id: str, db: Session = Depends(get_db)) -> Response:
    delete_employee_service(employee_id, db)
    return Response(status_code=204)


@router.get("/qr-lookup", response_model=EmployeeLocker)
def get_qr_lookup(nik: str = Query(..., min_length=1), db: Session = Depends(get_db)) -> EmployeeLocker:
    """
    Resolve a scanned employee badge (NIK) to their locker, contract and key possession
    """
    return lookup_employee_locker_service(nik, db)
