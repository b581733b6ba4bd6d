import logging
from typing import Optional

from civicops.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None):
    """
    Configure root logging once for the service process.
    Uses LOG_LEVEL from settings unless an explicit level is given.
    """
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
