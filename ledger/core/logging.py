"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler once per process.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stdout handler."""
    root = logging.getLogger()
    if any(getattr(h, "_ledger_handler", False) for h in root.handlers):
        root.setLevel(level.upper())
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._ledger_handler = True
    root.addHandler(handler)
    root.setLevel(level.upper())

    # Motor/pymongo are chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
