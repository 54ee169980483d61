"""Process-wide logging setup shared by the API and the CLI jobs."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: "Settings") -> None:
    """Configure the root logger from LOG_LEVEL (DEBUG forces debug output)."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logging.getLogger().setLevel(level)
    # Driver chatter is only useful when DEBUG is on
    if not settings.DEBUG:
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("multipart").setLevel(logging.WARNING)
