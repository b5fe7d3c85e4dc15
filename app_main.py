"""Application entry point for the birthday site."""

from __future__ import annotations

from birthday_app.core.icebreaker_manager import IcebreakerManager
from birthday_app.core.question_exporter import save_questions_to_file
from birthday_app.core.question_importer import load_questions_from_file
from birthday_app.core.storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from birthday_app.server.api_server import run_api_server
from birthday_app.utils.logging_config import configure_logging
from birthday_app.utils.settings import Settings, get_settings


def build_store(settings: Settings) -> KeyValueStore:
    if settings.storage_path is None:
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(settings.storage_path)


def build_manager(settings: Settings) -> IcebreakerManager:
    """Create the manager and seed the question bank from the configured file, if any."""
    manager = IcebreakerManager(
        build_store(settings),
        optimistic_writes=settings.optimistic_writes,
        write_retries=settings.write_retries,
    )
    if settings.random_seed is not None:
        manager.set_seed(settings.random_seed)
    if settings.questions_seed_path is not None:
        imported = load_questions_from_file(settings.questions_seed_path)
        manager.seed_questions(imported.questions)
    return manager


def export_questions(manager: IcebreakerManager, settings: Settings) -> bool:
    """Write the question bank to the configured export file. Returns False when nothing was written."""
    if settings.questions_export_path is None:
        return False
    questions = manager.list_questions()
    if not questions:
        return False
    save_questions_to_file(settings.questions_export_path, questions)
    return True


def main() -> None:
    """Initialize logging, build the store and serve the API."""
    settings = get_settings()
    logger = configure_logging(settings.log_level)
    logger.info("Starting birthday site…")
    if settings.storage_path is None:
        logger.warning("No storage path configured; guest progress is kept in memory only")
    if not settings.guests_password.get_secret_value():
        logger.warning("No shared guests password configured; the invitation page is open")

    manager = build_manager(settings)
    logger.info("Serving on http://%s:%d/", settings.host, settings.port)
    try:
        run_api_server(manager, settings)
    finally:
        if export_questions(manager, settings):
            logger.info("Exported question bank to %s", settings.questions_export_path)


if __name__ == "__main__":
    main()
