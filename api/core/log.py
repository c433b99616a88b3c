"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; this only wires the root
handler once per process.
"""

from __future__ import annotations

import logging

from . import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure() -> None:
    root = logging.getLogger()
    if any(getattr(h, "_registration_api", False) for h in root.handlers):
        return None

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._registration_api = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(settings.log_level())
