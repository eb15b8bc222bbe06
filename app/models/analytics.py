"""Derived dashboard entities.

Everything here is recomputed per request from a LearnerSnapshot and
thrown away after serialization. Nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CourseStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


@dataclass(frozen=True, slots=True)
class Overview:
    total_courses_enrolled: int = 0
    total_courses_completed: int = 0
    total_lessons_completed: int = 0
    average_quiz_score: int = 0
    total_study_time: int = 0  # minutes
    current_streak: int = 0  # projected, not persisted
    longest_streak: int = 0
    last_activity_date: str = ""  # YYYY-MM-DD


@dataclass(frozen=True, slots=True)
class CourseProgressEntry:
    course_id: str
    course_title: str
    progress: float
    lessons_completed: int
    total_lessons: int
    quizzes_taken: int
    average_quiz_score: int
    time_spent: int  # minutes
    enrolled_date: str
    last_accessed_date: str
    status: CourseStatus


@dataclass(slots=True)
class DailyActivityBucket:
    # Mutable while the calculator attributes courses into it.
    date: str
    lessons_completed: int = 0
    quizzes_taken: int = 0
    time_spent: int = 0
    flashcards_reviewed: int = 0


@dataclass(slots=True)
class WeeklyStatsBucket:
    week: str
    lessons_completed: int = 0
    quizzes_taken: int = 0
    total_time_spent: int = 0
    average_quiz_score: int = 0
    flashcards_reviewed: int = 0


@dataclass(frozen=True, slots=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    progress: float  # 0-100
    unlocked_date: str | None = None  # ISO-8601


@dataclass(frozen=True, slots=True)
class LearningStats:
    total_minutes_learned: int = 0
    average_study_session: int = 0
    preferred_study_time: str = "Flexible"
    most_active_day: str = "Monday"
    topics_mastered: list[str] = field(default_factory=list)
    topics_in_progress: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DashboardPayload:
    overview: Overview
    course_progress: list[CourseProgressEntry]
    daily_activity: list[DailyActivityBucket]
    weekly_stats: list[WeeklyStatsBucket]
    achievements: list[Achievement]
    learning_stats: LearningStats
