import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import assessments, catalog
from ..services.assessments import SubmittedAnswer
from ..utils.dependencies import CurrentUser
from ..utils.error_handlers import ForbiddenError, get_error_message
from ..utils.roles import candidate_only, company_only
from ..utils.validation import validate_email, validate_id_list

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tests"])


class AssignCandidates(BaseModel):
    job_id: int
    emails: list[str] = Field(min_length=1)


class CandidateTestsQuery(BaseModel):
    email: str


class UnassignTests(BaseModel):
    ids: list[int]


class AnswerItem(BaseModel):
    question_id: int
    selected_options: list[str] = Field(default_factory=list)


class SubmitAnswers(BaseModel):
    test_id: int
    candidate_id: int | None = None  # must match the token when given
    answers: list[AnswerItem] = Field(min_length=1)


@router.post("/test", status_code=201)
def assign_candidates(
    payload: AssignCandidates,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    job = catalog.get_owned_job(db, job_id=payload.job_id, company_id=user.id)
    emails: list[str] = []
    for raw in payload.emails:
        email = validate_email(raw)
        if email not in emails:
            emails.append(email)

    counts = assessments.assign_candidates(db, job, emails)
    return {"success": True, "job_id": job.id, **counts}


@router.post("/test/candidate")
def list_candidate_tests(
    payload: CandidateTestsQuery,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(candidate_only),
):
    email = validate_email(payload.email)
    if email != (user.email or "").lower():
        raise ForbiddenError(get_error_message("forbidden"))
    return {"success": True, "tests": assessments.list_candidate_tests(db, email=email)}


@router.get("/getCandidatesForJob/{job_id:int}")
def list_job_attempts(
    job_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    catalog.get_owned_job(db, job_id=job_id, company_id=user.id)
    return {"success": True, "candidates": assessments.list_job_attempts(db, job_id=job_id)}


@router.post("/test/deleteCandidates")
def unassign_tests(
    payload: UnassignTests,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    ids = validate_id_list(payload.ids, "ids")
    deleted = assessments.unassign_tests(db, company_id=user.id, test_ids=ids)
    return {"success": True, "deleted": deleted}


@router.get("/test/start/{test_id:int}")
def start_test(
    test_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(candidate_only),
):
    test = assessments.get_candidate_test(db, test_id=test_id, candidate_id=user.id, email=user.email)
    test = assessments.start_test(db, test)
    return {"success": True, "test": assessments.attempt_to_public(test)}


@router.get("/test/end/{test_id:int}")
def end_test(
    test_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(candidate_only),
):
    test = assessments.get_candidate_test(db, test_id=test_id, candidate_id=user.id, email=user.email)
    test = assessments.end_test(db, test)
    return {"success": True, "test": assessments.attempt_to_public(test)}


@router.post("/submitanswers")
def submit_answers(
    payload: SubmitAnswers,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(candidate_only),
):
    if payload.candidate_id is not None and payload.candidate_id != user.id:
        raise ForbiddenError(get_error_message("forbidden"))

    test = assessments.get_candidate_test(db, test_id=payload.test_id, candidate_id=user.id, email=user.email)
    result = assessments.submit_answers(
        db,
        test,
        candidate_id=user.id,
        answers=[
            SubmittedAnswer(question_id=a.question_id, selected_options=list(a.selected_options))
            for a in payload.answers
        ],
    )
    return {"success": True, **result}
