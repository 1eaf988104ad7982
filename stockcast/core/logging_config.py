"""
Logging setup for scripts and hosts embedding the engine
"""
import logging
from typing import Optional

from stockcast.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging (defaults to settings.LOG_LEVEL)"""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT
    )
