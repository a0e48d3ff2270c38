import logging
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import DATABASE_URL
from .utils.error_handlers import AppError, DatabaseError

logger = logging.getLogger(__name__)


def _normalize_database_url(url: str) -> str:
    # Allow simpler `.env` values like `mysql://...` / `postgres://...` and upgrade to the driver form.
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+pymysql://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


_db_url = _normalize_database_url((DATABASE_URL or "").strip())
_engine_kwargs = {"pool_pre_ping": True}
if _db_url.startswith("sqlite"):
    # Needed for SQLite when used with FastAPI/uvicorn (multiple threads).
    _engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}

engine = create_engine(_db_url, **_engine_kwargs)


def _set_sqlite_pragmas(dbapi_connection, connection_record):  # noqa: ANN001
    try:
        cursor = dbapi_connection.cursor()
        # Job deletion relies on questions cascading with their job.
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA busy_timeout=30000;")
        cursor.close()
    except Exception as e:
        logger.warning("Failed to set SQLite pragmas: %s", e)


def install_sqlite_pragmas(target_engine) -> None:  # noqa: ANN001
    if target_engine.dialect.name == "sqlite":
        event.listen(target_engine, "connect", _set_sqlite_pragmas)


install_sqlite_pragmas(engine)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# MySQL "Duplicate entry for key"; every other integrity error must propagate.
MYSQL_DUPLICATE_KEY = 1062


def is_duplicate_key_error(error: IntegrityError) -> bool:
    args = getattr(error.orig, "args", ())
    return bool(args) and args[0] == MYSQL_DUPLICATE_KEY


def insert_ignore_statement(table, dialect: str, values: dict[str, Any], conflict_on: list[str]):
    if dialect == "postgresql":
        return postgresql.insert(table).values(**values).on_conflict_do_nothing(index_elements=conflict_on)
    if dialect == "sqlite":
        return sqlite.insert(table).values(**values).on_conflict_do_nothing(index_elements=conflict_on)
    if dialect == "mysql":
        # Plain insert; insert_ignore() skips duplicate keys row by row under a savepoint.
        return mysql.insert(table).values(**values)
    raise NotImplementedError(f"insert_ignore is not supported on dialect {dialect!r}")


def insert_ignore(db: Session, model, values: dict[str, Any], *, conflict_on: list[str]) -> int:
    """
    Insert one row, silently skipping it if it collides with an existing unique key.

    Returns the number of rows actually inserted (0 or 1). Runs inside the
    caller's transaction; committing is the caller's job.
    """
    dialect = db.get_bind().dialect.name
    stmt = insert_ignore_statement(model.__table__, dialect, values, conflict_on)
    if dialect != "mysql":
        result = db.execute(stmt)
        return max(int(result.rowcount or 0), 0)

    try:
        with db.begin_nested():
            db.execute(stmt)
    except IntegrityError as e:
        if is_duplicate_key_error(e):
            return 0
        raise
    return 1


def init_db():
    # Import models so they register with SQLAlchemy metadata before create_all.
    from .models import answer, assessment, candidate, company, job, question, support_ticket  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def transaction(db: Session, operation: str):
    """
    Commit everything done inside the block, or roll all of it back.

    Application errors pass through unchanged; anything else is logged and
    reported as a generic DatabaseError.
    """
    try:
        yield db
        db.commit()
    except AppError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception("%s failed; rolled back", operation)
        raise DatabaseError() from e
