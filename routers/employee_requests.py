"""
Employee request API endpoints.
Advances, leave, arrears, permissions, violation objections and
resignations submitted by employees and answered by an administrator.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload

from constants import RequestStatus, business_now
from database import get_db
from models import Employee, EmployeeRequest
from schemas import EmployeeRequestCreate, EmployeeRequestRespond, EmployeeRequestResponse
from utils.response_builders import build_employee_request_response

router = APIRouter()
logger = logging.getLogger(__name__)

REQUEST_TYPES = ['advance', 'leave', 'arrears', 'permission', 'violation_objection', 'resignation']


@router.post("/employee-requests", response_model=EmployeeRequestResponse, status_code=201)
async def create_employee_request(
    request: EmployeeRequestCreate,
    db: Session = Depends(get_db)
):
    """
    Submit a request for an employee.

    The payload shape depends on payload.request_type and is validated
    before anything is stored.
    """
    employee = db.query(Employee).filter(Employee.id == request.employee_id).first()
    if not employee:
        raise HTTPException(status_code=404, detail=f"Employee {request.employee_id} not found")
    if employee.branch_id != request.branch_id:
        raise HTTPException(
            status_code=400,
            detail=f"Employee {request.employee_id} does not belong to branch {request.branch_id}"
        )

    employee_request = EmployeeRequest(
        branch_id=request.branch_id,
        employee_id=request.employee_id,
        request_type=request.payload.request_type,
        payload=request.payload.model_dump(mode='json'),
        status=RequestStatus.PENDING.value,
    )
    db.add(employee_request)
    db.commit()
    db.refresh(employee_request)

    logger.info(
        "Employee request %s (%s) created for employee %s",
        employee_request.id, employee_request.request_type, employee_request.employee_id,
    )
    return build_employee_request_response(employee_request)


@router.get("/employee-requests", response_model=List[EmployeeRequestResponse])
async def get_employee_requests(
    branch_id: Optional[int] = Query(None, gt=0, description="Filter by branch"),
    status: Optional[RequestStatus] = Query(None, description="Filter by status"),
    request_type: Optional[str] = Query(None, description="Filter by request type"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """
    List employee requests, newest first.
    """
    if request_type and request_type not in REQUEST_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown request type '{request_type}'. Valid types: {', '.join(REQUEST_TYPES)}"
        )

    query = db.query(EmployeeRequest).options(joinedload(EmployeeRequest.employee))

    if branch_id:
        query = query.filter(EmployeeRequest.branch_id == branch_id)
    if status:
        query = query.filter(EmployeeRequest.status == status.value)
    if request_type:
        query = query.filter(EmployeeRequest.request_type == request_type)

    requests = query.order_by(
        EmployeeRequest.created_at.desc(),
        EmployeeRequest.id.desc()
    ).offset(offset).limit(limit).all()

    return [build_employee_request_response(r) for r in requests]


@router.patch("/employee-requests/{request_id}/respond", response_model=EmployeeRequestResponse)
async def respond_to_employee_request(
    request_id: int,
    response: EmployeeRequestRespond,
    admin_id: int = Query(..., gt=0, description="ID of the admin responding"),
    db: Session = Depends(get_db)
):
    """
    Approve or reject a pending employee request.
    """
    employee_request = db.query(EmployeeRequest).filter(
        EmployeeRequest.id == request_id
    ).with_for_update().first()

    if not employee_request:
        raise HTTPException(status_code=404, detail=f"Employee request {request_id} not found")

    if employee_request.status != RequestStatus.PENDING.value:
        raise HTTPException(
            status_code=409,
            detail=f"Request is already {employee_request.status}"
        )

    employee_request.status = response.status
    employee_request.admin_response = response.admin_response
    employee_request.responded_by = admin_id
    employee_request.responded_at = business_now()

    db.commit()
    db.refresh(employee_request)

    logger.info("Employee request %s %s by %s", request_id, response.status, admin_id)
    return build_employee_request_response(employee_request)
