from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level() -> int:
    level_name = os.getenv("PERKQ_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the first call attaches one stream handler to the perkq root."""
    global _HANDLER_ATTACHED

    level = _resolve_level()
    package_root = logging.getLogger("perkq")

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_root.addHandler(handler)
        _HANDLER_ATTACHED = True
    package_root.setLevel(level)

    return logging.getLogger(name)
