import pytest


@pytest.fixture()
def seeded(db_session):
    from backend.skilltrials.models.company import Company
    from backend.skilltrials.models.job import Job

    company = Company(name="Ada", email="hr@acme.example.com", password="x", company_name="Acme")
    db_session.add(company)
    db_session.flush()
    job = Job(title="Backend Engineer", description="APIs", company_id=company.id)
    db_session.add(job)
    db_session.commit()
    return company, job


def test_insert_ignore_skips_existing_unique_key(db_session, seeded):
    from backend.skilltrials.database import insert_ignore
    from backend.skilltrials.models import assessment

    _, job = seeded
    values = {"job_post_id": job.id, "candidate_email": "sam@example.com", "status": assessment.STATUS_CREATED}

    assert insert_ignore(db_session, assessment.Test, values, conflict_on=["job_post_id", "candidate_email"]) == 1
    assert insert_ignore(db_session, assessment.Test, values, conflict_on=["job_post_id", "candidate_email"]) == 0
    db_session.commit()
    assert db_session.query(assessment.Test).count() == 1


def test_transaction_rolls_back_and_wraps_unexpected_errors(db_session, seeded):
    from backend.skilltrials.database import transaction
    from backend.skilltrials.models.job import Job
    from backend.skilltrials.utils.error_handlers import DatabaseError

    company, _ = seeded
    with pytest.raises(DatabaseError):
        with transaction(db_session, "adding a job"):
            db_session.add(Job(title="Doomed", company_id=company.id))
            db_session.flush()
            raise RuntimeError("boom")

    assert db_session.query(Job).filter(Job.title == "Doomed").count() == 0


def test_transaction_passes_app_errors_through(db_session, seeded):
    from backend.skilltrials.database import transaction
    from backend.skilltrials.utils.error_handlers import NotFoundError

    with pytest.raises(NotFoundError):
        with transaction(db_session, "looking something up"):
            raise NotFoundError("gone")


def test_deleting_a_job_cascades_to_questions_in_the_database(db_session, seeded):
    from sqlalchemy import delete

    from backend.skilltrials.models.job import Job
    from backend.skilltrials.models.question import Question

    company, job = seeded
    db_session.add(Question(job_id=job.id, company_id=company.id, question_text="?", options=["a", "b"], answers=["a"]))
    db_session.commit()

    db_session.execute(delete(Job).where(Job.id == job.id))
    db_session.commit()
    assert db_session.query(Question).count() == 0


def test_normalize_database_url():
    from backend.skilltrials.database import _normalize_database_url

    assert _normalize_database_url("mysql://u:p@h/db") == "mysql+pymysql://u:p@h/db"
    assert _normalize_database_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"
    assert _normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_account_role_maps_to_model_and_user_type():
    from backend.skilltrials.models.account import AccountRole
    from backend.skilltrials.models.candidate import Candidate
    from backend.skilltrials.models.company import Company

    assert AccountRole("company").model is Company
    assert AccountRole.CANDIDATE.model is Candidate
    assert (AccountRole.COMPANY.user_type, AccountRole.CANDIDATE.user_type) == (1, 2)


def test_mysql_insert_does_not_ignore_all_errors():
    from sqlalchemy.dialects import mysql

    from backend.skilltrials.database import insert_ignore_statement
    from backend.skilltrials.models import assessment

    stmt = insert_ignore_statement(
        assessment.Test.__table__,
        "mysql",
        {"job_post_id": 1, "candidate_email": "sam@example.com", "status": assessment.STATUS_CREATED},
        ["job_post_id", "candidate_email"],
    )
    sql = str(stmt.compile(dialect=mysql.dialect()))
    assert sql.startswith("INSERT INTO tests")
    assert "IGNORE" not in sql


def test_only_mysql_duplicate_key_errors_are_skipped():
    from sqlalchemy.exc import IntegrityError

    from backend.skilltrials.database import is_duplicate_key_error

    duplicate = IntegrityError("INSERT ...", {}, Exception(1062, "Duplicate entry 'x' for key 'uq'"))
    foreign_key = IntegrityError("INSERT ...", {}, Exception(1452, "Cannot add or update a child row"))
    assert is_duplicate_key_error(duplicate)
    assert not is_duplicate_key_error(foreign_key)


def test_insert_ignore_rejects_unknown_dialects():
    from backend.skilltrials.database import insert_ignore_statement
    from backend.skilltrials.models import assessment

    with pytest.raises(NotImplementedError):
        insert_ignore_statement(assessment.Test.__table__, "oracle", {}, [])
