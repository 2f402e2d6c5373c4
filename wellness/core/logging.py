import logging
from wellness.core.config import settings


def configure_logging(level: str = None):
    """Configure root logging once at startup."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # SQL echo is noisy; keep it behind DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level_name == "DEBUG" else logging.WARNING
    )
