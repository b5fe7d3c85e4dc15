"""Business logic shared by the HTTP routes: directory, questions, progress and rankings."""

from __future__ import annotations

import logging

from birthday_app.constants.storage_constants import DEFAULT_WRITE_RETRIES
from birthday_app.core.errors import ConcurrentUpdate
from birthday_app.core.models import (
    AssignmentResult,
    Guest,
    LeaderboardRow,
    PeerAnswer,
    ProgressRecord,
    Question,
)
from birthday_app.core.services.guest_directory import GuestDirectory
from birthday_app.core.services.icebreaker_matcher import IcebreakerMatcher, IndexPicker
from birthday_app.core.services.leaderboard import answers_about, compute_leaderboard
from birthday_app.core.services.progress_repository import ProgressRepository
from birthday_app.core.services.question_bank import QuestionBank
from birthday_app.core.storage import KeyValueStore

logger = logging.getLogger(__name__)


class IcebreakerManager:
    """Facade for icebreaker services: Directory, Question Bank, Progress, Matcher, Leaderboard.

    Nothing is cached between calls. Every operation reads fresh snapshots of
    the directory and question bank from the store, so each request sees the
    latest state and concurrent requests never share memory.
    """

    def __init__(
        self,
        store: KeyValueStore,
        pick_index: IndexPicker | None = None,
        optimistic_writes: bool = False,
        write_retries: int = DEFAULT_WRITE_RETRIES,
    ) -> None:
        self._directory = GuestDirectory(store)
        self._questions = QuestionBank(store)
        self._progress = ProgressRepository(store)
        self._matcher = IcebreakerMatcher(pick_index)
        self._optimistic_writes = optimistic_writes
        self._write_retries = max(1, write_retries)

    # --- Guest Directory Delegation ---

    def list_guests(self) -> list[str]:
        return self._directory.get_guest_names()

    def add_guest(self, name: str, password: str) -> Guest:
        return self._directory.add_guest(name, password)

    def add_guests(self, entries: list[tuple[str, str]]) -> list[Guest]:
        return self._directory.add_guests(entries)

    def update_guest_password(self, name: str, password: str) -> Guest:
        return self._directory.update_password(name, password)

    def remove_guest(self, name: str) -> None:
        self._directory.remove_guest(name)

    def has_guest(self, name: str) -> bool:
        return self._directory.has_guest(name)

    def verify_guest(self, name: str, password: str) -> bool:
        return self._directory.verify_credentials(name, password)

    # --- Question Bank Delegation ---

    def list_questions(self) -> list[Question]:
        return self._questions.get_questions()

    def add_question(self, question: Question) -> Question:
        return self._questions.add_question(question)

    def update_question(self, question: Question) -> Question:
        return self._questions.update_question(question)

    def delete_question(self, question_id: str) -> None:
        self._questions.delete_question(question_id)

    def seed_questions(self, questions: list[Question]) -> list[Question]:
        added = self._questions.merge_questions(questions)
        if added:
            logger.info("Seeded %d questions into the bank", len(added))
        return added

    # --- Icebreaker ---

    def set_seed(self, seed: int | None) -> None:
        """Make the default random pairing reproducible."""
        self._matcher.set_seed(seed)

    def get_assignment(self, guest: str) -> AssignmentResult:
        guest_names = self._directory.get_guest_names()
        questions = self._questions.get_question_map()
        for _ in range(self._write_retries):
            record, snapshot = self._progress.load_with_snapshot(guest)
            before = None if record is None else record.to_dict()
            record, result = self._matcher.get_assignment(guest, guest_names, questions, record)
            if record.to_dict() == before:
                return result
            if self._persist(record, snapshot):
                return result
        raise self._conflict(guest)

    def submit_answer(self, guest: str, answer_text: str) -> AssignmentResult:
        guest_names = self._directory.get_guest_names()
        questions = self._questions.get_question_map()
        for _ in range(self._write_retries):
            record, snapshot = self._progress.load_with_snapshot(guest)
            self._matcher.record_answer(record, answer_text, guest_names, list(questions))
            if self._persist(record, snapshot):
                return self._matcher.describe(record, questions)
        raise self._conflict(guest)

    def get_leaderboard(self) -> list[LeaderboardRow]:
        guest_names = self._directory.get_guest_names()
        return compute_leaderboard(guest_names, self._progress.load_many(guest_names))

    def get_answers_about(self, target: str) -> dict[str, list[PeerAnswer]]:
        guest_names = self._directory.get_guest_names()
        return answers_about(target, guest_names, self._progress.load_many(guest_names))

    def _persist(self, record: ProgressRecord, snapshot: bytes | None) -> bool:
        if not self._optimistic_writes:
            self._progress.save(record)
            return True
        if self._progress.save_if_unchanged(record, snapshot):
            return True
        logger.warning("Progress for %s changed concurrently; retrying", record.owner)
        return False

    def _conflict(self, guest: str) -> ConcurrentUpdate:
        logger.error("Giving up on progress update for %s after %d attempts", guest, self._write_retries)
        return ConcurrentUpdate(f"Progress for '{guest}' is being updated elsewhere. Try again.")
