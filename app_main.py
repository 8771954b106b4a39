"""Application entry point for the NightTrivia service."""

from __future__ import annotations

import argparse
from datetime import timedelta
from pathlib import Path

from trivia_app.config import TriviaConfig
from trivia_app.constants.about import APP_NAME, APP_VERSION
from trivia_app.constants.trivia_constants import QUESTIONS_FILENAME
from trivia_app.core.question_importer import import_into_corpus
from trivia_app.core.services.round_scheduler import RoundScheduler
from trivia_app.core.trivia_manager import TriviaManager
from trivia_app.server.api_server import start_api_server
from trivia_app.utils.logging_config import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="nighttrivia", description=f"{APP_NAME} trivia service")
    parser.add_argument(
        "--import",
        dest="import_path",
        type=Path,
        help="Import questions from a text file into the corpus and exit.",
    )
    parser.add_argument("--no-scheduler", action="store_true", help="Only serve the API; open and close rounds manually.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, then either import questions or run the scheduler and API server."""
    args = _parse_args(argv)
    config = TriviaConfig.from_env()
    logger = configure_logging(config.log_level, config.log_dir)

    if args.import_path is not None:
        summary = import_into_corpus(args.import_path, config.data_dir / QUESTIONS_FILENAME)
        logger.info("Corpus now holds %d questions", summary.total)
        return

    logger.info("Starting %s v%s", APP_NAME, APP_VERSION)
    manager = TriviaManager.from_config(config)

    scheduler: RoundScheduler | None = None
    if config.scheduler_enabled and not args.no_scheduler:
        scheduler = RoundScheduler(
            manager,
            open_hours=config.open_hours,
            window=timedelta(hours=config.window_hours),
        )
        scheduler.start()

    if not config.admin_ids:
        logger.warning("TRIVIA_ADMIN_IDS is empty; admin routes will refuse every caller")

    server_thread = start_api_server(
        trivia_manager=manager,
        host=config.host,
        port=config.port,
        admin_ids=config.admin_ids,
        open_interval_hours=config.open_interval_hours,
    )
    logger.info("%s API listening on %s:%d", APP_NAME, config.host, config.port)
    try:
        server_thread.join()
    finally:
        if scheduler is not None:
            scheduler.stop()


if __name__ == "__main__":
    main()
