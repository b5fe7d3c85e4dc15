"""Service for managing the collection of icebreaker questions."""

from __future__ import annotations

import logging

from birthday_app.constants.storage_constants import QUESTIONS_KEY
from birthday_app.core.models import Question
from birthday_app.core.storage import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)


class QuestionBank:
    """Question id -> text mapping stored under a single key."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_questions(self) -> list[Question]:
        return [Question(id=question_id, text=text) for question_id, text in self._load().items()]

    def get_question_map(self) -> dict[str, str]:
        """Return a snapshot of id -> text in insertion order."""
        return self._load()

    def get_question(self, question_id: str) -> Question:
        questions = self._load()
        if question_id not in questions:
            raise KeyError(question_id)
        return Question(id=question_id, text=questions[question_id])

    def add_question(self, question: Question) -> Question:
        prepared = self._prepare_question(question)
        questions = self._load()
        if prepared.id in questions:
            raise RuntimeError(f"Question '{prepared.id}' already exists.")
        questions[prepared.id] = prepared.text
        self._save(questions)
        logger.info("Added question %s", prepared.id)
        return prepared

    def update_question(self, question: Question) -> Question:
        prepared = self._prepare_question(question)
        questions = self._load()
        if prepared.id not in questions:
            raise KeyError(prepared.id)
        questions[prepared.id] = prepared.text
        self._save(questions)
        logger.info("Updated question %s", prepared.id)
        return prepared

    def delete_question(self, question_id: str) -> None:
        questions = self._load()
        if question_id not in questions:
            raise KeyError(question_id)
        del questions[question_id]
        self._save(questions)
        logger.info("Deleted question %s", question_id)

    def merge_questions(self, incoming: list[Question]) -> list[Question]:
        """Add every question whose id is not in the bank yet; existing ids are left alone."""
        questions = self._load()
        added: list[Question] = []
        for question in incoming:
            prepared = self._prepare_question(question)
            if prepared.id in questions:
                continue
            questions[prepared.id] = prepared.text
            added.append(prepared)
        if added:
            self._save(questions)
        return added

    def _load(self) -> dict[str, str]:
        return dict(read_json(self._store, QUESTIONS_KEY, default={}))

    def _save(self, questions: dict[str, str]) -> None:
        write_json(self._store, QUESTIONS_KEY, questions)

    @staticmethod
    def _prepare_question(question: Question) -> Question:
        """Validate and normalize a question before storage."""
        cleaned_id = question.id.strip()
        if not cleaned_id:
            raise ValueError("Question id must not be empty.")
        cleaned_text = question.text.strip()
        if not cleaned_text:
            raise ValueError("Question text must not be empty.")
        return Question(id=cleaned_id, text=cleaned_text)
