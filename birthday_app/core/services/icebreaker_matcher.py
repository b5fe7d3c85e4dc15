"""Picks the next (peer, question) pair each guest should answer."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
import random

from birthday_app.core.errors import NoActiveAssignment, NoPeersAvailable, NoQuestionsAvailable
from birthday_app.core.models import AssignmentResult, ProgressRecord

logger = logging.getLogger(__name__)

# Returns an index uniformly distributed over range(n).
IndexPicker = Callable[[int], int]

COMPLETED_MESSAGE = "You have answered every question about every guest. Check back later!"


class IcebreakerMatcher:
    """State machine driving a single guest's progress record.

    A record moves between three states: no record yet, an active assignment,
    and exhausted (both assignment fields empty). Openness is re-checked on
    every fetch, so an exhausted record picks up new guests or questions as
    soon as they appear.
    """

    def __init__(self, pick_index: IndexPicker | None = None) -> None:
        self._rng = random.Random()
        self._pick_index: IndexPicker = pick_index or self._rng.randrange

    def get_assignment(
        self,
        guest: str,
        guest_names: list[str],
        questions: Mapping[str, str],
        record: ProgressRecord | None,
    ) -> tuple[ProgressRecord, AssignmentResult]:
        """Return the guest's record and current assignment, creating or advancing as needed."""
        if record is None:
            record = self.initialize(guest, guest_names, list(questions))
            return record, self.describe(record, questions)

        if record.has_assignment():
            return record, self.describe(record, questions)

        self.advance(guest, guest_names, list(questions), record)
        return record, self.describe(record, questions)

    def initialize(self, guest: str, guest_names: list[str], question_ids: list[str]) -> ProgressRecord:
        peers = _peers_of(guest, guest_names)
        if not peers:
            raise NoPeersAvailable("There are no other guests to ask about yet.")
        if not question_ids:
            raise NoQuestionsAvailable("There are no icebreaker questions yet.")

        record = ProgressRecord(
            owner=guest,
            current_guest=self._choose(peers),
            current_question=self._choose(question_ids),
        )
        logger.info("Initialized icebreaker progress for %s", guest)
        return record

    def advance(
        self,
        guest: str,
        guest_names: list[str],
        question_ids: list[str],
        record: ProgressRecord,
    ) -> bool:
        """Assign a fresh open pair. Returns False and clears the assignment when none is left."""
        peers = _peers_of(guest, guest_names)
        if not peers or not question_ids:
            record.clear_assignment()
            return False

        open_pairs: dict[str, list[str]] = {}
        for peer in peers:
            unanswered = [
                question_id for question_id in question_ids if not record.is_answered(peer, question_id)
            ]
            if unanswered:
                open_pairs[peer] = unanswered

        if not open_pairs:
            if record.has_assignment():
                logger.info("Guest %s has completed the icebreaker", guest)
            record.clear_assignment()
            return False

        peer = self._choose(list(open_pairs))
        record.current_guest = peer
        record.current_question = self._choose(open_pairs[peer])
        return True

    def record_answer(
        self,
        record: ProgressRecord | None,
        answer_text: str,
        guest_names: list[str],
        question_ids: list[str],
    ) -> bool:
        """Store an answer for the active pair and move on. Returns True if a new pair was assigned."""
        if record is None or not record.has_assignment():
            raise NoActiveAssignment("No active assignment to answer.")
        if not answer_text.strip():
            raise ValueError("Answer text must not be empty.")

        record.answers.setdefault(record.current_guest, {})[record.current_question] = answer_text
        return self.advance(record.owner, guest_names, question_ids, record)

    def set_seed(self, seed: int | None) -> None:
        self._rng.seed(seed)

    @staticmethod
    def describe(record: ProgressRecord, questions: Mapping[str, str]) -> AssignmentResult:
        if not record.has_assignment():
            return AssignmentResult(completed=True, message=COMPLETED_MESSAGE)
        return AssignmentResult(
            completed=False,
            current_question=record.current_question,
            current_question_text=questions.get(record.current_question),
            current_guest=record.current_guest,
        )

    def _choose(self, options: list[str]) -> str:
        return options[self._pick_index(len(options))]


def _peers_of(guest: str, guest_names: list[str]) -> list[str]:
    return [name for name in guest_names if name != guest]
