"""
CLI entrypoint for the expired token sweep. Run from cron, e.g.:

  python -m app.cleanup

Or hourly: 0 * * * * cd /path/to/keyhold && .venv/bin/python -m app.cleanup
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.core.logging import configure_logging
from app.services.token_cleanup import run_token_cleanup

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete expired password-reset and refresh tokens."""
    settings = get_settings()
    configure_logging(settings)
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        reset_deleted, refresh_deleted = run_token_cleanup(db, settings)
        logger.info(
            "Token cleanup completed: reset_tokens_deleted=%s refresh_tokens_deleted=%s",
            reset_deleted,
            refresh_deleted,
        )
        return 0
    except Exception as e:
        logger.exception("Token cleanup job failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
