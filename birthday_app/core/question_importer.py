"""Utilities for importing icebreaker questions from a human-friendly text file.

File format (repeat blocks separated by blank lines or '---'):

    ID: unique-question-id
    Q: Question text. Indented lines after the Q: line are treated as
       part of the question, including indented blank lines, so a
       question may hold several paragraphs.

Up to four characters of indentation are removed from each continuation
line; anything beyond that is kept as part of the text.

Example:

    ID: film
    Q: What is their favourite film?

    ---

    ID: first-met
    Q: Where did you first meet them?
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from birthday_app.core.models import Question

CONTINUATION_INDENT = "    "


class QuestionImportError(Exception):
    """Raised when a question file cannot be parsed."""


@dataclass(slots=True)
class ImportedQuestionBank:
    """Container for imported questions and where they came from."""

    source_path: Path
    questions: list[Question]


def load_questions_from_file(file_path: Path) -> ImportedQuestionBank:
    text = file_path.read_text(encoding="utf-8")
    questions = parse_questions_text(text)
    if not questions:
        raise QuestionImportError("Question file did not contain any questions.")
    return ImportedQuestionBank(source_path=file_path, questions=questions)


def parse_questions_text(text: str) -> list[Question]:
    blocks: list[list[str]] = []
    current_block: list[str] = []
    pending_blank: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if current_block and raw_line[:1].isspace():
            # Indented blank lines only count once more indented text follows.
            if stripped:
                current_block.extend(pending_blank)
                current_block.append(raw_line)
                pending_blank = []
            else:
                pending_blank.append(raw_line)
            continue
        if pending_blank:
            blocks.append(current_block)
            current_block = []
            pending_blank = []
        if not stripped or stripped == "---":
            if current_block:
                blocks.append(current_block)
                current_block = []
            continue
        current_block.append(raw_line)
    if current_block:
        blocks.append(current_block)

    questions: list[Question] = []
    seen_ids: set[str] = set()
    for block in blocks:
        question = _parse_block(block)
        if question.id in seen_ids:
            raise QuestionImportError(f"Duplicate question id '{question.id}'.")
        seen_ids.add(question.id)
        questions.append(question)
    return questions


def _parse_block(block: list[str]) -> Question:
    question_id: str | None = None
    question_lines: list[str] = []
    in_question = False

    for raw_line in block:
        if in_question and raw_line[:1].isspace():
            question_lines.append(_strip_continuation_indent(raw_line))
            continue

        line = raw_line.strip()
        upper = line.upper()
        if upper.startswith("ID:"):
            question_id = line[3:].strip()
            in_question = False
            continue

        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            in_question = True
            continue

        if in_question:
            question_lines.append(line)
        else:
            raise QuestionImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    if not question_id:
        raise QuestionImportError("Question id missing (ID: ...)")
    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuestionImportError(f"Question text missing for '{question_id}' (Q: ...)")

    return Question(id=question_id, text=question_text)


def _strip_continuation_indent(raw_line: str) -> str:
    indent = len(raw_line) - len(raw_line.lstrip())
    return raw_line[min(indent, len(CONTINUATION_INDENT)):]
