import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import catalog
from ..utils.dependencies import CurrentUser
from ..utils.error_handlers import ForbiddenError, get_error_message
from ..utils.roles import company_only
from ..utils.validation import validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Jobs"])


class JobCreate(BaseModel):
    title: str = Field(min_length=2, max_length=150)
    description: str | None = Field(default=None, max_length=5000)


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=2, max_length=150)
    description: str | None = Field(default=None, max_length=5000)


@router.post("/addjobs", status_code=201)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    title = validate_string_field(payload.title, "Title", min_length=2, max_length=150)
    description = validate_string_field(
        payload.description, "Description", min_length=0, max_length=5000, required=False
    )
    job = catalog.create_job(db, company_id=user.id, title=title, description=description or None)
    return {"success": True, "job": catalog.job_to_public(job)}


@router.put("/jobs/{job_id:int}")
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    job = catalog.get_owned_job(db, job_id=job_id, company_id=user.id)
    title = validate_string_field(payload.title, "Title", min_length=2, max_length=150, required=False)
    description = validate_string_field(
        payload.description, "Description", min_length=0, max_length=5000, required=False
    )
    job = catalog.update_job(db, job, title=title, description=description)
    return {"success": True, "job": catalog.job_to_public(job)}


@router.get("/jobs/{company_id:int}")
def list_jobs(
    company_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    if company_id != user.id:
        raise ForbiddenError(get_error_message("forbidden"))
    jobs = catalog.list_company_jobs(db, company_id=company_id)
    return {"success": True, "jobs": [catalog.job_to_public(j) for j in jobs]}


@router.get("/job/delete/{job_id:int}")
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    job = catalog.get_owned_job(db, job_id=job_id, company_id=user.id)
    removed_questions = catalog.delete_job(db, job)
    return {
        "success": True,
        "message": "Job deleted",
        "job_id": job_id,
        "deleted_questions": removed_questions,
    }
