# fitstudy/core/logging.py

import logging
from typing import Optional

from fitstudy.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and workers that embed the core."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
