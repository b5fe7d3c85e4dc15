from pathlib import Path

import app_main
from birthday_app.core.models import Question
from birthday_app.core.question_importer import load_questions_from_file
from birthday_app.core.storage import InMemoryKeyValueStore, JsonFileKeyValueStore
from birthday_app.utils.settings import Settings


def test_build_store_defaults_to_memory() -> None:
    assert isinstance(app_main.build_store(Settings(_env_file=None)), InMemoryKeyValueStore)


def test_build_manager_seeds_questions_into_file_store(tmp_path: Path) -> None:
    seed = tmp_path / "questions.txt"
    seed.write_text("ID: film\nQ: Favourite film?\n", encoding="utf-8")
    settings = Settings(_env_file=None, storage_path=tmp_path / "store.json", questions_seed_path=seed)

    assert isinstance(app_main.build_store(settings), JsonFileKeyValueStore)
    manager = app_main.build_manager(settings)
    assert [q.id for q in manager.list_questions()] == ["film"]

    reopened = app_main.build_manager(settings)
    assert [q.text for q in reopened.list_questions()] == ["Favourite film?"]


def test_random_seed_makes_pairings_reproducible() -> None:
    settings = Settings(_env_file=None, random_seed=7)

    def first_assignment() -> tuple[str | None, str | None]:
        manager = app_main.build_manager(settings)
        for name in ("Alice", "Bob", "Carol", "Dave", "Erin"):
            manager.add_guest(name, "pw")
        manager.seed_questions([Question(id=f"q{index}", text=f"Question {index}") for index in range(6)])
        result = manager.get_assignment("Alice")
        return result.current_guest, result.current_question

    assert first_assignment() == first_assignment()


def test_export_questions_writes_bank_to_configured_file(tmp_path: Path) -> None:
    target = tmp_path / "export" / "questions.txt"
    settings = Settings(_env_file=None, questions_export_path=target)
    manager = app_main.build_manager(settings)

    assert app_main.export_questions(manager, settings) is False
    assert not target.exists()

    manager.add_question(Question(id="story", text="Tell a story.\n\nKeep it short."))
    assert app_main.export_questions(manager, settings) is True
    assert load_questions_from_file(target).questions == manager.list_questions()


def test_export_questions_is_off_without_a_path() -> None:
    settings = Settings(_env_file=None)
    manager = app_main.build_manager(settings)
    manager.add_question(Question(id="film", text="Favourite film?"))

    assert app_main.export_questions(manager, settings) is False
