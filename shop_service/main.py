import os
import sys
import logging

from .config import Settings, load_settings
from .exceptions import DatabaseConnectionError
from .menu import MenuDispatcher
from .models import init_db

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Send every module's log lines to the configured log file"""
    log_dir = os.path.dirname(os.path.abspath(settings.log_file))
    os.makedirs(log_dir, exist_ok=True)
    logging.basicConfig(
        filename=settings.log_file,
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> int:
    settings = load_settings()
    try:
        configure_logging(settings)
    except OSError as e:
        print(f"Cannot open log file {settings.log_file}: {e}", file=sys.stderr)
        return 1
    logger.info("Shop console starting")

    try:
        if settings.create_schema:
            init_db(settings.role_url("admin"))
        MenuDispatcher(settings).run()
    except DatabaseConnectionError as e:
        logger.critical(f"Cannot continue without a database: {e}")
        print(f"Database unavailable: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    logger.info("Shop console stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
