def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _create_job(client, token: str, title: str = "Backend Engineer") -> dict:
    r = client.post(
        "/addjobs",
        headers=_auth_headers(token),
        json={"title": title, "description": "Python, FastAPI and SQL"},
    )
    assert r.status_code == 201, r.text
    return r.json()["job"]


def _create_question(client, token: str, job_id: int, text: str = "Pick the ORM", **overrides) -> dict:
    body = {
        "job_id": job_id,
        "question_text": text,
        "question_type": "mcq",
        "difficulty": "easy",
        "options": ["SQLAlchemy", "Flask", "NumPy", "pytest"],
        "answers": ["SQLAlchemy"],
    }
    body.update(overrides)
    r = client.post("/question", headers=_auth_headers(token), json=body)
    assert r.status_code == 201, r.text
    return r.json()["question"]


def test_company_creates_updates_and_lists_jobs(client, company):
    token = company["token"]
    company_id = company["user"]["id"]

    job = _create_job(client, token)
    assert job["company_id"] == company_id

    r = client.put(f"/jobs/{job['id']}", headers=_auth_headers(token), json={"title": "Senior Backend Engineer"})
    assert r.status_code == 200, r.text
    assert r.json()["job"]["title"] == "Senior Backend Engineer"
    assert r.json()["job"]["description"] == "Python, FastAPI and SQL"

    listing = client.get(f"/jobs/{company_id}", headers=_auth_headers(token))
    assert listing.status_code == 200, listing.text
    assert [j["id"] for j in listing.json()["jobs"]] == [job["id"]]


def test_job_title_is_required(client, company):
    r = client.post("/addjobs", headers=_auth_headers(company["token"]), json={"description": "no title"})
    assert r.status_code == 422


def test_other_company_cannot_touch_job(client, company, make_account):
    job = _create_job(client, company["token"])
    other = make_account("company", "other@rival.example.com")

    r = client.put(f"/jobs/{job['id']}", headers=_auth_headers(other["token"]), json={"title": "Hijacked"})
    assert r.status_code == 403
    r = client.get(f"/job/delete/{job['id']}", headers=_auth_headers(other["token"]))
    assert r.status_code == 403
    r = client.get(f"/jobs/{company['user']['id']}", headers=_auth_headers(other["token"]))
    assert r.status_code == 403


def test_unknown_job_is_404(client, company):
    r = client.put("/jobs/999", headers=_auth_headers(company["token"]), json={"title": "Ghost job"})
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_delete_job_removes_its_questions(client, company, db_session):
    from backend.skilltrials.models.question import Question

    token = company["token"]
    job = _create_job(client, token)
    keep = _create_job(client, token, title="Data Engineer")
    for i in range(3):
        _create_question(client, token, job["id"], text=f"Question {i}")
    _create_question(client, token, keep["id"])

    r = client.get(f"/job/delete/{job['id']}", headers=_auth_headers(token))
    assert r.status_code == 200, r.text
    assert r.json()["deleted_questions"] == 3

    assert db_session.query(Question).filter(Question.job_id == job["id"]).count() == 0
    assert db_session.query(Question).filter(Question.job_id == keep["id"]).count() == 1
    listing = client.get(f"/jobs/{company['user']['id']}", headers=_auth_headers(token)).json()["jobs"]
    assert [j["id"] for j in listing] == [keep["id"]]


def test_failed_job_delete_rolls_back_question_delete(client, company, db_session, monkeypatch):
    from backend.skilltrials.models.job import Job
    from backend.skilltrials.models.question import Question
    from backend.skilltrials.services import catalog

    token = company["token"]
    job = _create_job(client, token)
    _create_question(client, token, job["id"])
    _create_question(client, token, job["id"], text="Pick the test runner", answers=["pytest"])

    def boom(db, job_id):
        raise RuntimeError("disk full")

    monkeypatch.setattr(catalog, "_delete_job_row", boom)
    r = client.get(f"/job/delete/{job['id']}", headers=_auth_headers(token))
    assert r.status_code == 500
    assert r.json()["success"] is False

    assert db_session.query(Job).count() == 1
    assert db_session.query(Question).filter(Question.job_id == job["id"]).count() == 2


def test_question_answers_must_come_from_options(client, company):
    job = _create_job(client, company["token"])
    r = client.post(
        "/question",
        headers=_auth_headers(company["token"]),
        json={"job_id": job["id"], "question_text": "?", "options": ["a", "b"], "answers": ["c"]},
    )
    assert r.status_code == 400, r.text


def test_question_keeps_option_and_answer_order(client, company):
    token = company["token"]
    job = _create_job(client, token)
    created = _create_question(
        client, token, job["id"],
        text="Select the HTTP verbs that are idempotent",
        options=["PUT", "POST", "DELETE", "PATCH"],
        answers=["PUT", "DELETE"],
    )
    assert created["options"] == ["PUT", "POST", "DELETE", "PATCH"]
    assert created["answers"] == ["PUT", "DELETE"]
    assert created["created_by"] == "hr@acme.example.com"

    listed = client.get(f"/question/{job['id']}", headers=_auth_headers(token)).json()["questions"]
    assert listed[0]["answers"] == ["PUT", "DELETE"]


def test_bulk_delete_questions_only_touches_own(client, company, make_account):
    token = company["token"]
    job = _create_job(client, token)
    q1 = _create_question(client, token, job["id"], text="one")
    q2 = _create_question(client, token, job["id"], text="two")
    q3 = _create_question(client, token, job["id"], text="three")

    other = make_account("company", "other@rival.example.com")
    r = client.post("/question/delete", headers=_auth_headers(other["token"]), json={"ids": [q1["id"]]})
    assert r.status_code == 200
    assert r.json()["deleted"] == 0

    r = client.post("/question/delete", headers=_auth_headers(token), json={"ids": [q1["id"], q3["id"]]})
    assert r.status_code == 200, r.text
    assert r.json()["deleted"] == 2

    remaining = client.get(f"/question/{job['id']}", headers=_auth_headers(token)).json()["questions"]
    assert [q["id"] for q in remaining] == [q2["id"]]


def test_bulk_delete_rejects_empty_ids(client, company):
    r = client.post("/question/delete", headers=_auth_headers(company["token"]), json={"ids": []})
    assert r.status_code == 400


def test_assigned_candidate_sees_questions_without_answers(client, company, candidate):
    token = company["token"]
    job = _create_job(client, token)
    _create_question(client, token, job["id"])

    r = client.get(f"/question/{job['id']}", headers=_auth_headers(candidate["token"]))
    assert r.status_code == 403

    client.post("/test", headers=_auth_headers(token), json={"job_id": job["id"], "emails": ["sam@example.com"]})
    r = client.get(f"/question/{job['id']}", headers=_auth_headers(candidate["token"]))
    assert r.status_code == 200, r.text
    questions = r.json()["questions"]
    assert len(questions) == 1
    assert "answers" not in questions[0]
    assert questions[0]["options"] == ["SQLAlchemy", "Flask", "NumPy", "pytest"]
