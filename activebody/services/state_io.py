from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def load_json(path: str | Path, default: T, validator: Callable[[Any], T] | None = None) -> T:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("could not read %s: %s", p, exc)
        return default
    if validator is None:
        return payload if payload is not None else default
    try:
        return validator(payload)
    except ValueError as exc:
        logger.warning("invalid content in %s: %s", p, exc)
        return default
