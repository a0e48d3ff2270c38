"""
Company-owned job postings and their multiple-choice questions.
"""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..database import transaction
from ..models.job import Job
from ..models.question import Question
from ..utils.error_handlers import ForbiddenError, NotFoundError, get_error_message

logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


def job_to_public(job: Job) -> dict[str, Any]:
    return {
        "id": job.id,
        "title": job.title,
        "description": job.description,
        "company_id": job.company_id,
        "created_at": _iso(job.created_at),
    }


def question_to_public(question: Question) -> dict[str, Any]:
    return {
        "id": question.id,
        "job_id": question.job_id,
        "question_text": question.question_text,
        "question_type": question.question_type,
        "company_id": question.company_id,
        "difficulty": question.difficulty,
        "created_by": question.created_by,
        "options": list(question.options or []),
        "answers": list(question.answers or []),
        "created_at": _iso(question.created_at),
    }


def get_owned_job(db: Session, *, job_id: int, company_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError(get_error_message("job_not_found"))
    if job.company_id != company_id:
        raise ForbiddenError(get_error_message("forbidden"))
    return job


def create_job(db: Session, *, company_id: int, title: str, description: str | None) -> Job:
    job = Job(title=title, description=description, company_id=company_id)
    with transaction(db, "Creating job"):
        db.add(job)
    db.refresh(job)
    logger.info("Company %s created job %s", company_id, job.id)
    return job


def update_job(db: Session, job: Job, *, title: str | None, description: str | None) -> Job:
    with transaction(db, f"Updating job {job.id}"):
        if title is not None:
            job.title = title
        if description is not None:
            job.description = description
    db.refresh(job)
    return job


def list_company_jobs(db: Session, *, company_id: int) -> list[Job]:
    return (
        db.query(Job)
        .filter(Job.company_id == company_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )


def _delete_job_questions(db: Session, job_id: int) -> int:
    return db.execute(delete(Question).where(Question.job_id == job_id)).rowcount


def _delete_job_row(db: Session, job_id: int) -> int:
    return db.execute(delete(Job).where(Job.id == job_id)).rowcount


def delete_job(db: Session, job: Job) -> int:
    """
    Delete a job and its questions as one unit. If either delete fails both are
    rolled back. Returns the number of questions removed.
    """
    job_id = job.id
    with transaction(db, f"Deleting job {job_id}"):
        removed_questions = _delete_job_questions(db, job_id)
        _delete_job_row(db, job_id)
    logger.info("Deleted job %s with %s question(s)", job_id, removed_questions)
    return removed_questions


def create_question(
    db: Session,
    job: Job,
    *,
    question_text: str,
    question_type: str | None,
    difficulty: str | None,
    created_by: str | None,
    options: list[str],
    answers: list[str],
) -> Question:
    question = Question(
        job_id=job.id,
        company_id=job.company_id,
        question_text=question_text,
        question_type=question_type,
        difficulty=difficulty,
        created_by=created_by,
        options=options,
        answers=answers,
    )
    with transaction(db, "Creating question"):
        db.add(question)
    db.refresh(question)
    return question


def list_questions(db: Session, *, job_id: int) -> list[Question]:
    return db.query(Question).filter(Question.job_id == job_id).order_by(Question.id.asc()).all()


def delete_questions(db: Session, *, company_id: int, question_ids: list[int]) -> int:
    """Bulk delete by id; ids belonging to other companies' jobs are left alone."""
    owned_jobs = select(Job.id).where(Job.company_id == company_id)
    with transaction(db, "Deleting questions"):
        deleted = db.execute(
            delete(Question).where(Question.id.in_(question_ids), Question.job_id.in_(owned_jobs))
        ).rowcount
    return deleted
