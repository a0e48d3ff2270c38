import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.skilltrials...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Config is read at import time; pin it before anything imports the package.
os.environ["DISABLE_DOTENV"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["SECRET_KEY"] = "test-secret"
# Ensure tests never call Gemini or an SMTP relay even if the developer machine has keys set.
os.environ["GEMINI_API_KEY"] = ""
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""

PASSWORD = "Testpass123!"


@pytest.fixture()
def app(tmp_path: Path) -> FastAPI:
    """
    FastAPI app wired to a fresh SQLite file per test.
    """
    from backend.skilltrials import database as db

    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'test.sqlite3'}",
        connect_args={"check_same_thread": False},
    )
    db.install_sqlite_pragmas(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    from backend.skilltrials.models import answer, assessment, candidate, company, job, question, support_ticket  # noqa: F401

    db.Base.metadata.create_all(bind=engine)

    from backend.skilltrials.main import create_app

    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.skilltrials.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _signup_and_login(client: TestClient, role: str, email: str, **profile) -> dict:
    """Create an account and return the login body (token + user)."""
    r = client.post(f"/auth/{role}/signup", json={"email": email, "password": PASSWORD, **profile})
    assert r.status_code == 200, r.text
    login = client.post(f"/auth/{role}/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200, login.text
    return login.json()


@pytest.fixture()
def company(client):
    return _signup_and_login(client, "company", "hr@acme.example.com", name="Ada", company_name="Acme")


@pytest.fixture()
def candidate(client):
    return _signup_and_login(client, "candidate", "sam@example.com", name="Sam", skills="Python, SQL")


@pytest.fixture()
def make_account(client):
    def _make(role: str, email: str, **profile) -> dict:
        return _signup_and_login(client, role, email, **profile)
    return _make
