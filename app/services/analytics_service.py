"""Learning-progress dashboard calculations.

Every calculator is a pure function of a LearnerSnapshot (or a slice of
it) plus the current instant. ``now`` is injectable everywhere so tests
and callers control the clock; it defaults to the wall clock in UTC.

ERROR HANDLING
--------------
Each calculator catches its own failures, logs them, and falls back to
its zero/empty result, so one bad sub-metric degrades the dashboard
instead of failing it. compute_dashboard() does NOT catch: anything
escaping composition propagates to the caller.

TIME ESTIMATES
--------------
Course documents carry no measured durations. Study time is estimated
at LESSON_MINUTES per completed lesson and QUIZ_MINUTES per completed
quiz, and activity is attributed to the day a course was last accessed.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta

from app.models.analytics import (
    CourseProgressEntry,
    CourseStatus,
    DailyActivityBucket,
    DashboardPayload,
    LearningStats,
    Overview,
    WeeklyStatsBucket,
)
from app.models.course import Course
from app.models.learner import LearnerSnapshot
from app.services.achievements import evaluate_achievements
from app.services.temporal import (
    date_key,
    days_between,
    utc_date,
    week_label,
    weekday_name,
)

logger = logging.getLogger(__name__)

LESSON_MINUTES = 30
QUIZ_MINUTES = 15
ACTIVITY_WINDOW_DAYS = 30
MASTERED_TOPIC_COUNT = 3


def _round(value: float) -> int:
    # Half-up, like the dashboard clients (Python's round() is half-even).
    return math.floor(value + 0.5)


def _estimated_minutes(lessons: int, quizzes: int) -> int:
    return lessons * LESSON_MINUTES + quizzes * QUIZ_MINUTES


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


def calculate_overview(
    snapshot: LearnerSnapshot, *, now: datetime | None = None
) -> Overview:
    """Summary counts across every course plus the projected streak.

    The streak is projected from the stored value on every call: if the
    last activity was at most one day ago the result is stored + 1,
    otherwise 0. Nothing is written back, so two calls on the same day
    both report stored + 1.
    """
    now = _now(now)
    try:
        courses = snapshot.all_courses
        last_activity = snapshot.last_activity_date or now

        if not courses:
            return Overview(
                current_streak=snapshot.current_streak or 0,
                longest_streak=snapshot.longest_streak or 0,
                last_activity_date=date_key(last_activity),
            )

        courses_completed = 0
        lessons_completed = 0
        study_time = 0
        quiz_score_sum = 0.0
        quiz_count = 0

        for course in courses:
            if (course.progress or 0) >= 100:
                courses_completed += 1

            lessons = course.completed_lesson_count
            quizzes = course.completed_quizzes
            lessons_completed += lessons
            study_time += _estimated_minutes(lessons, len(quizzes))
            quiz_score_sum += sum(q.score or 0 for q in quizzes)
            quiz_count += len(quizzes)

        average_quiz_score = _round(quiz_score_sum / quiz_count) if quiz_count else 0

        if days_between(last_activity, now) <= 1:
            current_streak = (snapshot.current_streak or 0) + 1
        else:
            current_streak = 0
        longest_streak = max(current_streak, snapshot.longest_streak or 0)

        return Overview(
            total_courses_enrolled=len(courses),
            total_courses_completed=courses_completed,
            total_lessons_completed=lessons_completed,
            average_quiz_score=average_quiz_score,
            total_study_time=study_time,
            current_streak=current_streak,
            longest_streak=longest_streak,
            last_activity_date=date_key(last_activity),
        )
    except Exception:
        logger.exception("Overview calculation failed for user=%s", snapshot.user_id)
        return Overview(last_activity_date=date_key(now))


# ---------------------------------------------------------------------------
# Per-course progress
# ---------------------------------------------------------------------------


def _status_for(progress: float) -> CourseStatus:
    if progress >= 100:
        return CourseStatus.COMPLETED
    if progress > 0:
        return CourseStatus.IN_PROGRESS
    return CourseStatus.NOT_STARTED


def _course_progress_entry(course: Course, now: datetime) -> CourseProgressEntry:
    total_lessons = len(course.lessons)
    lessons_completed = course.completed_lesson_count

    if course.progress is not None:
        progress = course.progress
    elif total_lessons > 0:
        progress = _round(lessons_completed / total_lessons * 100)
    else:
        progress = 0

    quizzes = course.completed_quizzes
    average_quiz_score = (
        _round(sum(q.score or 0 for q in quizzes) / len(quizzes)) if quizzes else 0
    )

    return CourseProgressEntry(
        course_id=course.id,
        course_title=course.title,
        progress=progress,
        lessons_completed=lessons_completed,
        total_lessons=total_lessons,
        quizzes_taken=len(quizzes),
        average_quiz_score=average_quiz_score,
        time_spent=_estimated_minutes(lessons_completed, len(quizzes)),
        enrolled_date=date_key(course.created_at or now),
        last_accessed_date=date_key(course.last_accessed or now),
        status=_status_for(progress),
    )


def calculate_course_progress(
    courses: Iterable[Course], *, now: datetime | None = None
) -> list[CourseProgressEntry]:
    """One entry per course, highest progress first (stable on ties)."""
    now = _now(now)
    try:
        entries = [_course_progress_entry(course, now) for course in courses]
        return sorted(entries, key=lambda e: e.progress, reverse=True)
    except Exception:
        logger.exception("Course progress calculation failed")
        return []


# ---------------------------------------------------------------------------
# Daily / weekly activity
# ---------------------------------------------------------------------------


def calculate_daily_activity(
    courses: Iterable[Course], *, now: datetime | None = None
) -> list[DailyActivityBucket]:
    """Trailing 30-day activity, oldest day first, zero days included.

    Without per-lesson timestamps a course's whole completed activity is
    credited to the day it was last accessed. Courses never accessed, or
    last accessed outside the window, add nothing.
    """
    now = _now(now)
    try:
        today = utc_date(now)
        buckets: dict[str, DailyActivityBucket] = {}
        for offset in range(ACTIVITY_WINDOW_DAYS - 1, -1, -1):
            key = date_key(today - timedelta(days=offset))
            buckets[key] = DailyActivityBucket(date=key)

        for course in courses:
            if course.last_accessed is None:
                continue
            bucket = buckets.get(date_key(course.last_accessed))
            if bucket is None:
                continue

            lessons = course.completed_lesson_count
            quizzes = len(course.completed_quizzes)
            bucket.lessons_completed += lessons
            bucket.quizzes_taken += quizzes
            bucket.time_spent += _estimated_minutes(lessons, quizzes)

        return list(buckets.values())
    except Exception:
        logger.exception("Daily activity calculation failed")
        return []


def calculate_weekly_stats(
    daily_activity: Sequence[DailyActivityBucket],
) -> list[WeeklyStatsBucket]:
    """Roll daily buckets up by week label, in first-seen order.

    averageQuizScore stays 0: daily buckets carry no quiz scores.
    """
    try:
        weeks: dict[str, WeeklyStatsBucket] = {}
        for day in daily_activity:
            label = week_label(date.fromisoformat(day.date))
            week = weeks.get(label)
            if week is None:
                week = weeks[label] = WeeklyStatsBucket(week=label)
            week.lessons_completed += day.lessons_completed
            week.quizzes_taken += day.quizzes_taken
            week.total_time_spent += day.time_spent
            week.flashcards_reviewed += day.flashcards_reviewed
        return list(weeks.values())
    except Exception:
        logger.exception("Weekly stats calculation failed")
        return []


# ---------------------------------------------------------------------------
# Learning stats
# ---------------------------------------------------------------------------


def calculate_learning_stats(
    daily_activity: Sequence[DailyActivityBucket],
    courses: Iterable[Course],
) -> LearningStats:
    """Session length, busiest weekday and topic split.

    topicsMastered is simply the first three distinct topics seen across
    the courses; the rest are "in progress". There is no per-topic
    mastery signal in the course documents.
    """
    try:
        total_minutes = sum(day.time_spent for day in daily_activity)
        active_days = sum(1 for day in daily_activity if day.time_spent > 0)
        average_session = _round(total_minutes / active_days) if active_days else 0

        minutes_by_weekday: dict[str, int] = {}
        for day in daily_activity:
            name = weekday_name(date.fromisoformat(day.date))
            minutes_by_weekday[name] = minutes_by_weekday.get(name, 0) + day.time_spent

        most_active_day = "Monday"
        best = 0
        for name, minutes in minutes_by_weekday.items():
            if minutes > best:
                best = minutes
                most_active_day = name

        topics = list(
            dict.fromkeys(topic for course in courses for topic in course.topics)
        )

        return LearningStats(
            total_minutes_learned=total_minutes,
            average_study_session=average_session,
            preferred_study_time="Flexible",
            most_active_day=most_active_day,
            topics_mastered=topics[:MASTERED_TOPIC_COUNT],
            topics_in_progress=topics[MASTERED_TOPIC_COUNT:],
        )
    except Exception:
        logger.exception("Learning stats calculation failed")
        return LearningStats()


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


def compute_dashboard(
    snapshot: LearnerSnapshot, now: datetime | None = None
) -> DashboardPayload:
    """Assemble the full dashboard for one learner.

    Sub-calculators degrade on their own; errors raised here (e.g. a
    snapshot of the wrong shape entirely) are left to the caller.
    """
    now = _now(now)
    courses = snapshot.all_courses

    overview = calculate_overview(snapshot, now=now)
    course_progress = calculate_course_progress(courses, now=now)
    daily_activity = calculate_daily_activity(courses, now=now)
    weekly_stats = calculate_weekly_stats(daily_activity)
    achievements = evaluate_achievements(overview, course_progress, now=now)
    learning_stats = calculate_learning_stats(daily_activity, courses)

    logger.debug(
        "Dashboard computed user=%s courses=%d achievements=%d",
        snapshot.user_id,
        len(courses),
        len(achievements),
    )

    return DashboardPayload(
        overview=overview,
        course_progress=course_progress,
        daily_activity=daily_activity,
        weekly_stats=weekly_stats,
        achievements=achievements,
        learning_stats=learning_stats,
    )
