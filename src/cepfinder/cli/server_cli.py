"""CLI entry point for running the lookup server."""
import logging
import sys
import uvicorn
from cepfinder.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """
    Configure root logging for the server process.

    Args:
        level: Log level name, e.g. "INFO"
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    logger.info(
        f"Starting {settings.APP_NAME} on http://{settings.HOST}:{settings.PORT} "
        f"(dispatch timeout {settings.DISPATCH_TIMEOUT_SECONDS}s)"
    )

    try:
        uvicorn.run(
            "cepfinder.main:app",
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
