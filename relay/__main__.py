"""
Process entry point: load settings, then serve the relay with uvicorn.

Configuration errors are fatal before the listener starts.
"""
import logging
import sys

from pydantic import ValidationError

logger = logging.getLogger("relay.main")


def main() -> None:
    try:
        from relay.core.config import settings
    except ValidationError as exc:
        logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
        logger.critical("invalid configuration: %s", exc)
        sys.exit(1)

    import uvicorn

    uvicorn.run(
        "relay.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        ws="websockets",
    )


if __name__ == "__main__":
    main()
