"""
core/logging.py
───────────────
Process-wide logging setup for the forecasting engine.

Every module owns a ``logging.getLogger(__name__)`` logger; this helper
only decides where records go and how they look.  Logging must not change
program behaviour.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: Log level name (``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``).
               Unknown names fall back to ``INFO``.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # TensorFlow and the Supabase HTTP client are chatty at INFO.
    logging.getLogger("tensorflow").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
