from __future__ import annotations

import os


def log_level() -> str:
    v = (os.getenv("DADAR_LOG_LEVEL") or "INFO").strip().upper()
    return v or "INFO"


def log_format() -> str:
    # "console" for local dev, "json" for anything that ships logs somewhere.
    v = (os.getenv("DADAR_LOG_FORMAT") or "console").strip().lower()
    return v if v in {"console", "json"} else "console"
