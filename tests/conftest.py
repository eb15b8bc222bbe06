from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import learner_repo
from app.main import app
from app.models.course import Course, Lesson, Quiz
from app.models.learner import LearnerSnapshot
from app.services import token_service

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Fixed clock for calculator tests: Wednesday 2025-11-19, mid-afternoon UTC.
NOW = datetime(2025, 11, 19, 15, 30, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_learner_repo() -> None:
    """Clear stored learner snapshots between tests."""
    learner_repo._store.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return NOW


def mint_token(
    username: str = "learner-1",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Snapshot builders
# ---------------------------------------------------------------------------


def make_course(
    course_id: str = "course-1",
    *,
    completed_lessons: int = 0,
    pending_lessons: int = 0,
    quiz_scores: tuple[float, ...] = (),
    progress: float | None = None,
    topics: tuple[str, ...] = (),
    created_at: datetime | None = None,
    last_accessed: datetime | None = None,
) -> Course:
    """Course with the given lesson mix and one completed quiz per score."""
    lessons = tuple(Lesson(is_completed=True) for _ in range(completed_lessons)) + tuple(
        Lesson(is_completed=False) for _ in range(pending_lessons)
    )
    quizzes = tuple(
        Quiz(completed_at=NOW - timedelta(days=1), score=score) for score in quiz_scores
    )
    return Course(
        id=course_id,
        title=f"Course {course_id}",
        lessons=lessons,
        quizzes=quizzes,
        progress=progress,
        topics=topics,
        created_at=created_at or NOW - timedelta(days=60),
        last_accessed=last_accessed,
    )


def make_snapshot(
    *,
    enrolled: tuple[Course, ...] = (),
    own: tuple[Course, ...] = (),
    user_id: str = "learner-1",
    current_streak: int = 0,
    longest_streak: int = 0,
    last_activity_date: datetime | None = None,
) -> LearnerSnapshot:
    return LearnerSnapshot(
        user_id=user_id,
        enrolled_courses=enrolled,
        courses=own,
        current_streak=current_streak,
        longest_streak=longest_streak,
        last_activity_date=last_activity_date,
    )
