"""Domain models for the birthday site and the guest icebreaker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Guest:
    """Registered participant identified by display name."""

    name: str
    password_hash: str


@dataclass(slots=True)
class Question:
    """Prompt question guests answer about each other."""

    id: str
    text: str


@dataclass(slots=True)
class ProgressRecord:
    """Per-guest icebreaker state: the active assignment and every answer given."""

    owner: str
    current_question: str = ""
    current_guest: str = ""
    # peer name -> question id -> answer text
    answers: dict[str, dict[str, str]] = field(default_factory=dict)

    def has_assignment(self) -> bool:
        return bool(self.current_question) and bool(self.current_guest)

    def clear_assignment(self) -> None:
        self.current_question = ""
        self.current_guest = ""

    def is_answered(self, peer: str, question_id: str) -> bool:
        return question_id in self.answers.get(peer, {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentQuestion": self.current_question,
            "currentGuest": self.current_guest,
            "answers": {peer: dict(by_question) for peer, by_question in self.answers.items()},
        }

    @classmethod
    def from_dict(cls, owner: str, payload: dict[str, Any]) -> "ProgressRecord":
        raw_answers = payload.get("answers") or {}
        return cls(
            owner=owner,
            current_question=payload.get("currentQuestion") or "",
            current_guest=payload.get("currentGuest") or "",
            answers={peer: dict(by_question) for peer, by_question in raw_answers.items()},
        )


@dataclass(slots=True)
class AssignmentResult:
    """Outcome of an assignment fetch or answer submission."""

    completed: bool
    current_question: str | None = None
    current_question_text: str | None = None
    current_guest: str | None = None
    message: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"completed": self.completed}
        if self.current_question is not None:
            payload["currentQuestion"] = self.current_question
        if self.current_question_text is not None:
            payload["currentQuestionText"] = self.current_question_text
        if self.current_guest is not None:
            payload["currentGuest"] = self.current_guest
        if self.message is not None:
            payload["message"] = self.message
        return payload


@dataclass(slots=True)
class LeaderboardRow:
    """Immutable snapshot of one guest's icebreaker progress."""

    name: str
    guests_talked_to: int
    total_answered: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "guestsTalkedTo": self.guests_talked_to,
            "totalAnswered": self.total_answered,
        }


@dataclass(slots=True)
class PeerAnswer:
    """An answer one guest gave about another."""

    answered_by: str
    answer: str

    def to_payload(self) -> dict[str, str]:
        return {"answeredBy": self.answered_by, "answer": self.answer}
