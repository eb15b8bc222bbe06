from __future__ import annotations

from typing import Protocol

from app.models.learner import LearnerSnapshot


class LearnerNotFoundError(LookupError):
    def __init__(self, user_id: str) -> None:
        super().__init__(user_id)
        self.user_id = user_id


class LearnerRepo(Protocol):
    def get(self, user_id: str) -> LearnerSnapshot | None: ...
    def put(self, snapshot: LearnerSnapshot) -> None: ...
    def delete(self, user_id: str) -> None: ...


class InMemoryLearnerRepo:
    """Process-local stand-in for the course document store.

    Holds one populated snapshot (learner + both course lists) per user.
    """

    def __init__(self) -> None:
        self._store: dict[str, LearnerSnapshot] = {}

    def get(self, user_id: str) -> LearnerSnapshot | None:
        return self._store.get(user_id)

    def put(self, snapshot: LearnerSnapshot) -> None:
        # Last write wins; snapshots are replaced whole, never merged.
        self._store[snapshot.user_id] = snapshot

    def delete(self, user_id: str) -> None:
        self._store.pop(user_id, None)


def require_snapshot(repo: LearnerRepo, user_id: str) -> LearnerSnapshot:
    snapshot = repo.get(user_id)
    if snapshot is None:
        raise LearnerNotFoundError(user_id)
    return snapshot
