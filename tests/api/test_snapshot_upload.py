"""Tests for PUT /v1/analytics/learners/{user_id} (admin snapshot upload)."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import learner_repo
from tests.conftest import mint_token


def _auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


def _body(**overrides: object) -> dict:
    now = datetime.now(UTC).isoformat()
    body: dict = {
        "enrolledCourses": [
            {
                "_id": "course-a",
                "title": "Intro to Python",
                "lessons": [
                    {"title": "Variables", "isCompleted": True},
                    {"title": "Loops", "isCompleted": False},
                ],
                "quizzes": [{"title": "Quiz 1", "completedAt": now, "score": 90}],
                "progress": 50,
                "topics": ["python"],
                "createdAt": now,
                "lastAccessed": now,
            }
        ],
        "courses": [{"id": "course-b", "title": "My Notes"}],
        "currentStreak": 2,
        "longestStreak": 4,
    }
    body.update(overrides)
    return body


_UPLOAD_CASES = [
    # (role, expected_status)
    ("admin", 200),
    ("user", 403),
    (None, 401),
]


@pytest.mark.parametrize("role,expected", _UPLOAD_CASES)
def test_upload_access_control(
    client: TestClient, role: str | None, expected: int
) -> None:
    token = mint_token(username="ops", roles=[role]) if role else None
    resp = client.put(
        "/v1/analytics/learners/learner-5", json=_body(), headers=_auth(token)
    )
    assert resp.status_code == expected


def test_upload_stores_snapshot(client: TestClient, admin_token: str) -> None:
    resp = client.put(
        "/v1/analytics/learners/learner-5", json=_body(), headers=_auth(admin_token)
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "data": {"userId": "learner-5", "totalCourses": 2},
    }

    stored = learner_repo.get("learner-5")
    assert stored is not None
    [enrolled] = stored.enrolled_courses
    assert enrolled.id == "course-a"
    assert enrolled.completed_lesson_count == 1
    assert len(enrolled.completed_quizzes) == 1
    assert stored.courses[0].id == "course-b"
    assert stored.current_streak == 2
    assert stored.longest_streak == 4


def test_uploaded_snapshot_feeds_dashboard(
    client: TestClient, admin_token: str
) -> None:
    client.put(
        "/v1/analytics/learners/learner-5", json=_body(), headers=_auth(admin_token)
    )
    resp = client.get(
        "/v1/analytics/overview", headers=_auth(mint_token(username="learner-5"))
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["totalCoursesEnrolled"] == 2
    assert data["totalLessonsCompleted"] == 1
    assert data["averageQuizScore"] == 90
    assert data["totalStudyTime"] == 45
    assert data["currentStreak"] == 3


def test_upload_replaces_previous_snapshot(
    client: TestClient, admin_token: str
) -> None:
    url = "/v1/analytics/learners/learner-5"
    client.put(url, json=_body(), headers=_auth(admin_token))
    resp = client.put(
        url, json={"courses": [{"id": "only"}]}, headers=_auth(admin_token)
    )
    assert resp.json()["data"]["totalCourses"] == 1

    stored = learner_repo.get("learner-5")
    assert stored is not None
    assert [c.id for c in stored.all_courses] == ["only"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"courses": [{"id": "c", "progress": 150}]},
        {"courses": [{"id": "c", "quizzes": [{"score": -1}]}]},
        {"courses": [{"title": "missing id"}]},
        {"currentStreak": -1},
    ],
)
def test_upload_rejects_invalid_body(
    client: TestClient, admin_token: str, overrides: dict
) -> None:
    resp = client.put(
        "/v1/analytics/learners/learner-5",
        json=_body(**overrides),
        headers=_auth(admin_token),
    )
    assert resp.status_code == 422
    assert learner_repo.get("learner-5") is None
