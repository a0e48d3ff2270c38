import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.account import AccountRole
from ..models.assessment import Test
from ..models.job import Job
from ..services import catalog
from ..services.question_generation import generate_questions
from ..utils.dependencies import CurrentUser, get_current_user
from ..utils.error_handlers import ForbiddenError, NotFoundError, get_error_message
from ..utils.roles import company_only
from ..utils.validation import validate_choices, validate_id_list, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/question", tags=["Questions"])


class QuestionCreate(BaseModel):
    job_id: int
    question_text: str = Field(min_length=1, max_length=5000)
    question_type: str | None = Field(default="mcq", max_length=50)
    difficulty: str | None = Field(default=None, max_length=50)
    created_by: str | None = Field(default=None, max_length=255)
    options: list[str] = Field(min_length=2)
    answers: list[str] = Field(min_length=1)


class QuestionDelete(BaseModel):
    ids: list[int]


class QuestionGenerate(BaseModel):
    job_id: int
    count: int = Field(default=5, ge=1, le=20)
    difficulty: str | None = Field(default=None, max_length=50)


@router.post("", status_code=201)
def create_question(
    payload: QuestionCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    job = catalog.get_owned_job(db, job_id=payload.job_id, company_id=user.id)
    question_text = validate_string_field(payload.question_text, "Question text", max_length=5000)
    options = validate_choices(payload.options, "Options")
    answers = validate_choices(payload.answers, "Answers")
    unknown = [a for a in answers if a not in options]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Answers must be taken from options: {unknown}")

    question = catalog.create_question(
        db,
        job,
        question_text=question_text,
        question_type=payload.question_type,
        difficulty=payload.difficulty,
        created_by=payload.created_by or user.email,
        options=options,
        answers=answers,
    )
    return {"success": True, "question": catalog.question_to_public(question)}


@router.get("/{job_id:int}")
def list_questions(
    job_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Companies see their own job's questions in full. Candidates assigned to
    the job see them without the correct answers.
    """
    if user.role == AccountRole.COMPANY:
        catalog.get_owned_job(db, job_id=job_id, company_id=user.id)
        include_answers = True
    else:
        if not db.query(Job.id).filter(Job.id == job_id).first():
            raise NotFoundError(get_error_message("job_not_found"))
        assigned = (
            db.query(Test.id)
            .filter(Test.job_post_id == job_id)
            .filter((Test.candidate_id == user.id) | (Test.candidate_email == user.email))
            .first()
        )
        if not assigned:
            raise ForbiddenError(get_error_message("forbidden"))
        include_answers = False

    questions = []
    for q in catalog.list_questions(db, job_id=job_id):
        item = catalog.question_to_public(q)
        if not include_answers:
            item.pop("answers", None)
        questions.append(item)
    return {"success": True, "questions": questions}


@router.post("/delete")
def delete_questions(
    payload: QuestionDelete,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    ids = validate_id_list(payload.ids, "ids")
    deleted = catalog.delete_questions(db, company_id=user.id, question_ids=ids)
    return {"success": True, "deleted": deleted}


@router.post("/generate")
async def generate(
    payload: QuestionGenerate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(company_only),
):
    # The ORM lookup runs on the threadpool; only the Gemini call is awaited.
    job = await run_in_threadpool(catalog.get_owned_job, db, job_id=payload.job_id, company_id=user.id)
    result = await generate_questions(job=job, count=payload.count, difficulty=payload.difficulty)
    return {"success": True, "job_id": job.id, **result}
