"""
Tests for the assessment API router.

Drives the FastAPI app with TestClient against an in-memory SQLite database
and fresh session stores per test.
"""
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from microcredit.database import Base, get_db
from microcredit.main import app
from microcredit.models.assessment import LiteracyModule, Question, SessionKind
from microcredit.services.assessment.records import QuestionBankService
from microcredit.services.assessment.session_store import SessionStore


PHONE = "628123456789"


@pytest.fixture
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    seed = TestingSessionLocal()
    QuestionBankService(seed).save_module(
        LiteracyModule(
            week_number=1,
            module_name="Memisahkan Uang Usaha",
            questions=tuple(
                Question(f"Q{i}", ("A", "B", "C", "D"), i % 4, f"Exp{i}") for i in range(1, 6)
            ),
        )
    )
    seed.close()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.quiz_sessions = SessionStore(SessionKind.QUIZ)
    app.state.capacity_sessions = SessionStore(SessionKind.CAPACITY)
    app.state.quiz_rng = random.Random(42)

    yield TestClient(app)

    app.dependency_overrides.clear()
    engine.dispose()


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestQuizEndpoints:

    def test_full_quiz(self, client):
        started = client.post(f"/assessment/quiz/{PHONE}/start").json()
        assert started["status"] == "started"
        assert started["week_info"]["week_number"] == 1

        question = started["question"]
        result = None
        for _ in range(4):
            result = client.post(
                f"/assessment/quiz/{PHONE}/answer",
                json={"option_index": question["correct_index"]},
            ).json()
            question = result["next_question"]

        assert result["completed"] is True
        assert result["passed"] is True
        assert result["score"] == 100

        progress = client.get(f"/assessment/quiz/{PHONE}/progress").json()
        assert progress["total_completed"] == 1

    def test_answer_without_quiz(self, client):
        result = client.post(f"/assessment/quiz/{PHONE}/answer", json={"option_index": 0}).json()

        assert result["status"] == "no_active_session"

    def test_missing_week_content_is_server_error(self, client):
        # Pass week 1; week 2 has no questions
        question = client.post(f"/assessment/quiz/{PHONE}/start").json()["question"]
        for _ in range(4):
            result = client.post(
                f"/assessment/quiz/{PHONE}/answer",
                json={"option_index": question["correct_index"]},
            ).json()
            question = result["next_question"]

        response = client.post(f"/assessment/quiz/{PHONE}/start")
        assert response.status_code == 500
        assert "week 2" in response.json()["detail"]

    def test_stop_quiz(self, client):
        client.post(f"/assessment/quiz/{PHONE}/start")

        assert client.delete(f"/assessment/quiz/{PHONE}").json() == {"stopped": True}
        assert client.get(f"/assessment/sessions/{PHONE}").json()["quiz"] is False


class TestCapacityEndpoints:

    def test_questions(self, client):
        questions = client.get("/assessment/capacity/questions").json()["questions"]

        assert len(questions) == 5
        assert questions[0]["field_name"] == "daily_revenue"

    def test_dialogue(self, client):
        started = client.post(f"/assessment/capacity/{PHONE}/start").json()
        assert started["prompt"]
        assert client.get(f"/assessment/sessions/{PHONE}").json()["capacity"] is True

        retry = client.post(f"/assessment/capacity/{PHONE}/answer", json={"text": "entah"}).json()
        assert retry["retry"] is True
        assert retry["prompt"] == started["prompt"]

        result = None
        for text in ["500 ribu", "25 hari", "60%", "2 juta", "500 ribu"]:
            result = client.post(f"/assessment/capacity/{PHONE}/answer", json={"text": text}).json()

        assert result["completed"] is True
        assert result["rpc"]["max_installment"] == 750_000
        assert client.get(f"/assessment/sessions/{PHONE}").json()["capacity"] is False

    def test_rpc(self, client):
        body = client.post("/assessment/rpc", json={
            "daily_revenue": 500_000,
            "active_days": 25,
            "cogs_percentage": 60,
            "household_expenses": 2_000_000,
            "existing_obligations": 500_000,
        }).json()

        assert body["rpc"]["sustainable_disposable_cash"] == 2_500_000
        assert body["capacity_score"] == 74


class TestEngagementAndScore:

    def test_log_interaction(self, client):
        client.post(f"/assessment/engagement/{PHONE}/interactions", json={"activity_type": "quiz"})
        body = client.post(f"/assessment/engagement/{PHONE}/interactions", json={"activity_type": "menu"}).json()

        assert body["engagement"]["total_interactions"] == 2
        assert body["engagement"]["streak_days"] == 1
        assert body["engagement"]["activity_breakdown"] == {"quiz": 1, "menu": 1}

        stored = client.get(f"/assessment/engagement/{PHONE}").json()
        assert stored["engagement"]["total_interactions"] == 2
        assert stored["score"] == body["score"]

    def test_a_score(self, client):
        body = client.post("/assessment/a-score", json={
            "character": 80, "capacity": 70, "literacy": 90, "engagement": 60,
        }).json()

        assert body["score"] == 76
        assert body["zone"] == "A"

    def test_a_score_defaults(self, client):
        body = client.post("/assessment/a-score", json={}).json()

        assert body["score"] == 50
        assert body["zone"] == "C"
