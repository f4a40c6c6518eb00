# ============================================================================
# FILE: songshare/core/logging.py
# ============================================================================
import logging
import sys
from songshare.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

def setup_logging(level: str = None) -> None:
    """Configure root logging once for the whole application"""
    level_name = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()

    # uvicorn --reload imports the app twice; don't stack handlers
    if not any(getattr(h, "_songshare", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._songshare = True
        root.addHandler(handler)

    root.setLevel(getattr(logging, level_name, logging.INFO))

    # SQL echo is noisy even in debug
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
