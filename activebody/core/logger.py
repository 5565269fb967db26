from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``activebody`` logger once; ``ACTIVEBODY_LOG_LEVEL`` overrides ``level``."""
    env_level = os.getenv("ACTIVEBODY_LOG_LEVEL")
    level_name = (env_level or level or "INFO").upper()

    root = logging.getLogger("activebody")
    root.setLevel(getattr(logging, level_name, logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root
