"""Learner analytics dashboard endpoints.

Every GET computes the full dashboard for the caller (the token subject)
from their stored snapshot and returns the slice the endpoint names,
wrapped as {"success": true, "data": ...}. Field names are camelCase to
match the dashboard client.

  GET /v1/analytics                  full dashboard
  GET /v1/analytics/overview         overview
  GET /v1/analytics/courses          per-course progress
  GET /v1/analytics/activity         daily activity + weekly stats
  GET /v1/analytics/achievements     unlocked badges
  GET /v1/analytics/learning-stats   learning stats
  PUT /v1/analytics/learners/{id}    (admin) store a learner snapshot

FAILURES
--------
Individual calculators degrade to empty values on their own. If the
dashboard computation itself raises, the route raises
AnalyticsComputationError and analytics_error_handler turns it into a
500 with the endpoint's fixed message. The underlying detail is attached
outside prod only; it is always logged. A caller with no stored snapshot
gets 404 {"error": "User not found"} from learner_not_found_handler.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Annotated, Generic, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.api.dependencies import (
    get_learner_repo,
    require_learner_snapshot,
    require_role,
)
from app.core.config import SETTINGS
from app.core.metrics import (
    DASHBOARD_DURATION,
    DASHBOARD_REQUESTS,
    LEARNER_SNAPSHOTS_STORED,
)
from app.models.analytics import CourseStatus, DashboardPayload
from app.models.course import Course, Lesson, Quiz
from app.models.learner import LearnerSnapshot
from app.models.principal import Principal
from app.repos.learner_repo import LearnerNotFoundError, LearnerRepo
from app.services.analytics_service import compute_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])

T = TypeVar("T")


# 500 message per endpoint, as the dashboard client shows them.
_FAILURE_MESSAGES = {
    "dashboard": "Failed to fetch analytics",
    "overview": "Failed to fetch analytics overview",
    "courses": "Failed to fetch course analytics",
    "activity": "Failed to fetch activity analytics",
    "achievements": "Failed to fetch achievements",
    "learning-stats": "Failed to fetch learning stats",
}


class AnalyticsComputationError(Exception):
    """The dashboard could not be assembled for a learner."""

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(detail)
        self.endpoint = endpoint
        self.detail = detail

    @property
    def public_message(self) -> str:
        return _FAILURE_MESSAGES.get(self.endpoint, _FAILURE_MESSAGES["dashboard"])


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class OverviewOut(_CamelModel):
    total_courses_enrolled: int
    total_courses_completed: int
    total_lessons_completed: int
    average_quiz_score: int
    total_study_time: int
    current_streak: int
    longest_streak: int
    last_activity_date: str


class CourseProgressOut(_CamelModel):
    course_id: str
    course_title: str
    progress: float
    lessons_completed: int
    total_lessons: int
    quizzes_taken: int
    average_quiz_score: int
    time_spent: int
    enrolled_date: str
    last_accessed_date: str
    status: CourseStatus


class DailyActivityOut(_CamelModel):
    date: str
    lessons_completed: int
    quizzes_taken: int
    time_spent: int
    flashcards_reviewed: int


class WeeklyStatsOut(_CamelModel):
    week: str
    lessons_completed: int
    quizzes_taken: int
    total_time_spent: int
    average_quiz_score: int
    flashcards_reviewed: int


class AchievementOut(_CamelModel):
    id: str
    name: str
    description: str
    icon: str
    progress: float
    unlocked_date: str | None = None


class LearningStatsOut(_CamelModel):
    total_minutes_learned: int
    average_study_session: int
    preferred_study_time: str
    most_active_day: str
    topics_mastered: list[str]
    topics_in_progress: list[str]


class ActivityOut(_CamelModel):
    daily_activity: list[DailyActivityOut]
    weekly_stats: list[WeeklyStatsOut]


class DashboardOut(_CamelModel):
    overview: OverviewOut
    course_progress: list[CourseProgressOut]
    daily_activity: list[DailyActivityOut]
    weekly_stats: list[WeeklyStatsOut]
    achievements: list[AchievementOut]
    learning_stats: LearningStatsOut


# Snapshot upload. Course documents use "_id" in the store; accept both.


class LessonIn(_CamelModel):
    title: str = ""
    is_completed: bool = False


class QuizIn(_CamelModel):
    title: str = ""
    completed_at: datetime | None = None
    score: float | None = Field(default=None, ge=0, le=100)


class CourseIn(_CamelModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    lessons: list[LessonIn] = []
    quizzes: list[QuizIn] = []
    progress: float | None = Field(default=None, ge=0, le=100)
    topics: list[str] = []
    created_at: datetime | None = None
    last_accessed: datetime | None = None

    def to_domain(self) -> Course:
        return Course(
            id=self.id,
            title=self.title,
            lessons=tuple(
                Lesson(title=lesson.title, is_completed=lesson.is_completed)
                for lesson in self.lessons
            ),
            quizzes=tuple(
                Quiz(title=q.title, completed_at=q.completed_at, score=q.score)
                for q in self.quizzes
            ),
            progress=self.progress,
            topics=tuple(self.topics),
            created_at=self.created_at,
            last_accessed=self.last_accessed,
        )


class LearnerSnapshotIn(_CamelModel):
    enrolled_courses: list[CourseIn] = []
    courses: list[CourseIn] = []
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_activity_date: datetime | None = None

    def to_domain(self, user_id: str) -> LearnerSnapshot:
        return LearnerSnapshot(
            user_id=user_id,
            enrolled_courses=tuple(c.to_domain() for c in self.enrolled_courses),
            courses=tuple(c.to_domain() for c in self.courses),
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_activity_date=self.last_activity_date,
        )


class SnapshotStoredOut(_CamelModel):
    user_id: str
    total_courses: int


# ---------------------------------------------------------------------------
# Shared computation
# ---------------------------------------------------------------------------


def _dashboard(snapshot: LearnerSnapshot, endpoint: str) -> DashboardPayload:
    start = time.monotonic()
    try:
        payload = compute_dashboard(snapshot)
    except Exception as exc:
        DASHBOARD_REQUESTS.labels(endpoint=endpoint, result="error").inc()
        logger.exception(
            "Dashboard computation failed endpoint=%s user=%s",
            endpoint,
            snapshot.user_id,
            extra={"user_id": snapshot.user_id},
        )
        raise AnalyticsComputationError(endpoint, str(exc)) from exc
    finally:
        DASHBOARD_DURATION.labels(endpoint=endpoint).observe(time.monotonic() - start)

    DASHBOARD_REQUESTS.labels(endpoint=endpoint, result="ok").inc()
    logger.info(
        "Analytics calculated user=%s enrolled=%d lessons=%d avg_quiz=%d "
        "catalog_courses=%d own_courses=%d",
        snapshot.user_id,
        payload.overview.total_courses_enrolled,
        payload.overview.total_lessons_completed,
        payload.overview.average_quiz_score,
        len(snapshot.enrolled_courses),
        len(snapshot.courses),
        extra={"user_id": snapshot.user_id},
    )
    return payload


async def analytics_error_handler(
    _request: Request, exc: AnalyticsComputationError
) -> JSONResponse:
    body: dict[str, str] = {"error": exc.public_message}
    if SETTINGS.expose_error_details:
        body["details"] = exc.detail
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


async def learner_not_found_handler(
    _request: Request, exc: LearnerNotFoundError
) -> JSONResponse:
    logger.info("No learner snapshot for user=%s", exc.user_id)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content={"error": "User not found"}
    )


Snapshot = Annotated[LearnerSnapshot, Depends(require_learner_snapshot)]


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("", response_model=Envelope[DashboardOut])
def get_dashboard(snapshot: Snapshot) -> Envelope[DashboardOut]:
    payload = _dashboard(snapshot, "dashboard")
    return Envelope(data=DashboardOut.model_validate(payload))


@router.get("/overview", response_model=Envelope[OverviewOut])
def get_overview(snapshot: Snapshot) -> Envelope[OverviewOut]:
    payload = _dashboard(snapshot, "overview")
    return Envelope(data=OverviewOut.model_validate(payload.overview))


@router.get("/courses", response_model=Envelope[list[CourseProgressOut]])
def get_course_progress(snapshot: Snapshot) -> Envelope[list[CourseProgressOut]]:
    payload = _dashboard(snapshot, "courses")
    return Envelope(
        data=[CourseProgressOut.model_validate(e) for e in payload.course_progress]
    )


@router.get("/activity", response_model=Envelope[ActivityOut])
def get_activity(snapshot: Snapshot) -> Envelope[ActivityOut]:
    payload = _dashboard(snapshot, "activity")
    return Envelope(
        data=ActivityOut(
            daily_activity=[
                DailyActivityOut.model_validate(d) for d in payload.daily_activity
            ],
            weekly_stats=[
                WeeklyStatsOut.model_validate(w) for w in payload.weekly_stats
            ],
        )
    )


@router.get("/achievements", response_model=Envelope[list[AchievementOut]])
def get_achievements(snapshot: Snapshot) -> Envelope[list[AchievementOut]]:
    payload = _dashboard(snapshot, "achievements")
    return Envelope(
        data=[AchievementOut.model_validate(a) for a in payload.achievements]
    )


@router.get("/learning-stats", response_model=Envelope[LearningStatsOut])
def get_learning_stats(snapshot: Snapshot) -> Envelope[LearningStatsOut]:
    payload = _dashboard(snapshot, "learning-stats")
    return Envelope(data=LearningStatsOut.model_validate(payload.learning_stats))


@router.put(
    "/learners/{user_id}",
    response_model=Envelope[SnapshotStoredOut],
    status_code=status.HTTP_200_OK,
)
def put_learner_snapshot(
    user_id: str,
    body: LearnerSnapshotIn,
    principal: Annotated[Principal, Depends(require_role("admin"))],
    repo: Annotated[LearnerRepo, Depends(get_learner_repo)],
) -> Envelope[SnapshotStoredOut]:
    snapshot = body.to_domain(user_id)
    repo.put(snapshot)
    LEARNER_SNAPSHOTS_STORED.inc()
    logger.info(
        "Learner snapshot stored user=%s courses=%d by=%s",
        user_id,
        len(snapshot.all_courses),
        principal.user_id,
    )
    return Envelope(
        data=SnapshotStoredOut(
            user_id=user_id, total_courses=len(snapshot.all_courses)
        )
    )
