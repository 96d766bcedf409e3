# app/logger.py
from __future__ import annotations

import json
import logging

from app.config import settings


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def log_json(logger: logging.Logger, payload: dict) -> None:
    """Emite un evento de negocio como una sola línea JSON."""
    logger.info(json.dumps(payload, ensure_ascii=False, default=str))
