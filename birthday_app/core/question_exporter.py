"""Utilities for exporting the question bank to the plain-text import format."""

from __future__ import annotations

from pathlib import Path

from birthday_app.core.models import Question
from birthday_app.core.question_importer import CONTINUATION_INDENT


def save_questions_to_file(file_path: Path, questions: list[Question]) -> None:
    """Persist the provided questions to disk in the text import format."""

    if not questions:
        raise ValueError("Cannot export an empty question bank.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_questions(questions), encoding="utf-8")


def serialize_questions(questions: list[Question]) -> str:
    blocks = [_serialize_question(question) for question in questions]
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: Question) -> str:
    text_lines = question.text.splitlines() or [question.text]
    lines = [f"ID: {question.id}", f"Q: {text_lines[0]}"]
    lines.extend(CONTINUATION_INDENT + line for line in text_lines[1:])
    return "\n".join(lines)
