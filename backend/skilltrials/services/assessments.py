"""
Test lifecycle: assignment, start/end, answer submission and grading.

    CREATED --start--> STARTED --end / submit--> ENDED / Submitted

Every multi-row write runs in the request's session and either commits as a
whole or is rolled back; conflicting assignments and repeated answers are
skipped by the database's unique keys rather than checked in Python.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..database import insert_ignore, transaction
from ..models.answer import Answer
from ..models.assessment import (
    STATUS_CREATED,
    STATUS_ENDED,
    STATUS_STARTED,
    STATUS_SUBMITTED,
    Test,
)
from ..models.candidate import Candidate
from ..models.company import Company
from ..models.job import Job
from ..models.question import Question
from ..utils.error_handlers import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    get_error_message,
)

logger = logging.getLogger(__name__)

FULL_SCORE = 100.0
NO_SCORE = 0.0


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: int
    selected_options: list[str]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


def grade_answer(selected: Sequence[str] | None, correct: Sequence[str] | None) -> float:
    """Exact, order-sensitive match scores 100; anything else scores 0."""
    selected = list(selected or [])
    correct = list(correct or [])
    if len(selected) != len(correct):
        return NO_SCORE
    return FULL_SCORE if all(s == c for s, c in zip(selected, correct)) else NO_SCORE


def attempt_to_public(test: Test) -> dict[str, Any]:
    return {
        "id": test.id,
        "job_post_id": test.job_post_id,
        "candidate_id": test.candidate_id,
        "candidate_email": test.candidate_email,
        "status": test.status,
        "score": test.score,
        "start_time": _iso(test.start_time),
        "end_time": _iso(test.end_time),
        "created_at": _iso(test.created_at),
    }


# -------------------- Assignment --------------------

def assign_candidates(db: Session, job: Job, emails: list[str]) -> dict[str, int]:
    """
    Create one Test per email for this job in a single transaction. Pairs that
    already exist are skipped, so re-assigning is a no-op.
    """
    created = 0
    with transaction(db, f"Assigning {len(emails)} candidate(s) to job {job.id}"):
        for email in emails:
            candidate_id = select(Candidate.id).where(Candidate.email == email).scalar_subquery()
            created += insert_ignore(
                db,
                Test,
                {
                    "job_post_id": job.id,
                    "candidate_email": email,
                    "candidate_id": candidate_id,
                    "status": STATUS_CREATED,
                },
                conflict_on=["job_post_id", "candidate_email"],
            )

    logger.info("Job %s: assigned %s new test(s), %s already present", job.id, created, len(emails) - created)
    return {"assigned": created, "skipped": len(emails) - created}


def unassign_tests(db: Session, *, company_id: int, test_ids: list[int]) -> int:
    """Bulk delete tests; only tests on the company's own jobs are touched."""
    owned_jobs = select(Job.id).where(Job.company_id == company_id)
    with transaction(db, "Deleting tests"):
        deleted = db.execute(
            delete(Test).where(Test.id.in_(test_ids), Test.job_post_id.in_(owned_jobs))
        ).rowcount
    return deleted


# -------------------- Listing --------------------

def list_candidate_tests(db: Session, *, email: str) -> list[dict[str, Any]]:
    rows = (
        db.query(Test, Job, Company)
        .join(Job, Job.id == Test.job_post_id)
        .join(Company, Company.id == Job.company_id)
        .filter(Test.candidate_email == email)
        .order_by(Test.created_at.desc(), Test.id.desc())
        .all()
    )
    items = []
    for test, job, company in rows:
        item = attempt_to_public(test)
        item.update(
            {
                "job_title": job.title,
                "job_description": job.description,
                "company_id": company.id,
                "company_name": company.company_name or company.name,
            }
        )
        items.append(item)
    return items


def list_job_attempts(db: Session, *, job_id: int) -> list[dict[str, Any]]:
    """All attempts for a job; unresolved candidates still appear by stored email."""
    rows = (
        db.query(Test, Candidate)
        .outerjoin(Candidate, Candidate.id == Test.candidate_id)
        .filter(Test.job_post_id == job_id)
        .order_by(Test.id.asc())
        .all()
    )
    items = []
    for test, candidate in rows:
        item = attempt_to_public(test)
        item.update(
            {
                "name": candidate.name if candidate else None,
                "email": candidate.email if candidate else test.candidate_email,
                "phone": candidate.phone if candidate else None,
                "skills": candidate.skills if candidate else None,
                "experience": candidate.experience if candidate else None,
                "location": candidate.location if candidate else None,
            }
        )
        items.append(item)
    return items


# -------------------- Lifecycle --------------------

def get_candidate_test(db: Session, *, test_id: int, candidate_id: int, email: str | None) -> Test:
    test = db.query(Test).filter(Test.id == test_id).first()
    if not test:
        raise NotFoundError(get_error_message("test_not_found"))
    if test.candidate_id != candidate_id and (not email or test.candidate_email != email):
        raise ForbiddenError(get_error_message("forbidden"))
    return test


def start_test(db: Session, test: Test) -> Test:
    if test.status in (STATUS_ENDED, STATUS_SUBMITTED):
        raise ConflictError(f"Test {test.id} has already finished")
    with transaction(db, f"Starting test {test.id}"):
        test.status = STATUS_STARTED
        test.start_time = _now()
    db.refresh(test)
    return test


def end_test(db: Session, test: Test) -> Test:
    if test.status == STATUS_SUBMITTED:
        raise ConflictError(get_error_message("test_already_submitted"))
    with transaction(db, f"Ending test {test.id}"):
        test.status = STATUS_ENDED
        test.end_time = _now()
    db.refresh(test)
    return test


def _record_answers(db: Session, test: Test, candidate_id: int, answers: list[SubmittedAnswer]) -> int:
    question_ids = [a.question_id for a in answers]
    correct_by_id = dict(
        db.execute(
            select(Question.id, Question.answers).where(
                Question.id.in_(question_ids), Question.job_id == test.job_post_id
            )
        ).all()
    )
    missing = [qid for qid in question_ids if qid not in correct_by_id]
    if missing:
        raise NotFoundError(get_error_message("question_not_found"), details={"question_ids": missing})

    recorded = 0
    for submitted in answers:
        recorded += insert_ignore(
            db,
            Answer,
            {
                "candidate_id": candidate_id,
                "question_id": submitted.question_id,
                "test_id": test.id,
                "answer_text": list(submitted.selected_options),
                "score": grade_answer(submitted.selected_options, correct_by_id[submitted.question_id]),
            },
            conflict_on=["test_id", "question_id", "candidate_id"],
        )
    return recorded


def _write_test_score(db: Session, test: Test, candidate_id: int) -> None:
    mean_score = db.execute(
        select(func.avg(Answer.score)).where(Answer.test_id == test.id, Answer.candidate_id == candidate_id)
    ).scalar()
    test.score = float(mean_score) if mean_score is not None else None
    test.status = STATUS_SUBMITTED
    test.end_time = _now()


def submit_answers(
    db: Session,
    test: Test,
    *,
    candidate_id: int,
    answers: list[SubmittedAnswer],
) -> dict[str, Any]:
    """
    Grade each answer against its question, record it (first submission per
    question wins), then write the mean score back to the test. All of it
    commits together or not at all.
    """
    with transaction(db, f"Submitting test {test.id}"):
        if test.candidate_id is None:
            test.candidate_id = candidate_id
        recorded = _record_answers(db, test, candidate_id, answers)
        _write_test_score(db, test, candidate_id)

    db.refresh(test)
    stored = (
        db.query(Answer.question_id, Answer.score)
        .filter(Answer.test_id == test.id, Answer.candidate_id == candidate_id)
        .order_by(Answer.question_id.asc())
        .all()
    )
    logger.info(
        "Test %s submitted by candidate %s: %s new answer(s), score=%s",
        test.id, candidate_id, recorded, test.score,
    )
    return {
        "test": attempt_to_public(test),
        "score": test.score,
        "recorded": recorded,
        "answers": [{"question_id": qid, "score": score} for qid, score in stored],
    }
