"""
Logging setup for hosts of the engine (CLI, web app, scripts).

The library itself only creates module level loggers (`logging.getLogger(__name__)`) and never configures
handlers on import.
"""

import logging
from typing import Optional

from chesscore.core.config import load_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str | int] = None) -> None:
    """Without an explicit level, the `log_level` of the settings file is used."""
    if level is None:
        level = load_settings().log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("chesscore").setLevel(level)
