from pathlib import Path

import pytest

from birthday_app.core.models import Question
from birthday_app.core.question_exporter import save_questions_to_file, serialize_questions
from birthday_app.core.question_importer import (
    QuestionImportError,
    load_questions_from_file,
    parse_questions_text,
)

SAMPLE = """
ID: film
Q: What is their favourite film?

---

ID: first-met
Q: Where did you first meet them?
   And who introduced you?
"""


def test_parse_blocks_with_multiline_text() -> None:
    questions = parse_questions_text(SAMPLE)

    assert [q.id for q in questions] == ["film", "first-met"]
    assert questions[1].text == "Where did you first meet them?\nAnd who introduced you?"


@pytest.mark.parametrize(
    "text",
    [
        "Q: No id here",
        "ID: lonely",
        "ID: q1\nstray text\nQ: Fine",
        "ID: q1\nQ: One\n\nID: q1\nQ: Again",
    ],
)
def test_parse_rejects_malformed_blocks(text: str) -> None:
    with pytest.raises(QuestionImportError):
        parse_questions_text(text)


def test_load_from_file(tmp_path: Path) -> None:
    path = tmp_path / "questions.txt"
    path.write_text(SAMPLE, encoding="utf-8")

    imported = load_questions_from_file(path)
    assert imported.source_path == path
    assert len(imported.questions) == 2


def test_load_empty_file_fails(tmp_path: Path) -> None:
    path = tmp_path / "empty.txt"
    path.write_text("\n\n---\n", encoding="utf-8")

    with pytest.raises(QuestionImportError):
        load_questions_from_file(path)


def test_export_writes_import_format(tmp_path: Path) -> None:
    questions = [Question(id="film", text="Favourite film?"), Question(id="pets", text="Pets?\nNames?")]
    path = tmp_path / "out" / "questions.txt"
    save_questions_to_file(path, questions)

    assert path.read_text(encoding="utf-8") == serialize_questions(questions)
    assert load_questions_from_file(path).questions == questions


def test_export_refuses_empty_bank(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        save_questions_to_file(tmp_path / "q.txt", [])


def test_export_keeps_paragraphs_and_marker_lines_inside_the_question() -> None:
    questions = [
        Question(id="story", text="Tell a story.\n\nKeep it short."),
        Question(id="markers", text="Read this aloud:\n---\nID: not-an-id\nQ: not a question\n  - nested item"),
        Question(id="film", text="Favourite film?"),
    ]

    exported = serialize_questions(questions)

    assert "ID: story\nQ: Tell a story.\n    \n    Keep it short." in exported
    assert parse_questions_text(exported) == questions


def test_indented_blank_line_without_following_text_ends_the_block() -> None:
    text = "ID: film\nQ: Favourite film?\n   \nID: pets\nQ: Any pets?\n"

    questions = parse_questions_text(text)

    assert [(q.id, q.text) for q in questions] == [("film", "Favourite film?"), ("pets", "Any pets?")]


def test_unindented_blank_line_still_separates_questions() -> None:
    with pytest.raises(QuestionImportError, match="outside of a known section"):
        parse_questions_text("ID: story\nQ: Tell a story.\n\nKeep it short.\n")
