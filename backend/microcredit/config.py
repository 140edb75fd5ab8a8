"""
Microcredit Assessment Core - Runtime Configuration

All settings come from environment variables so the same build runs in
development, tests and production without code changes.
"""
import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


# Inactive quiz / capacity sessions are dropped after this many minutes
SESSION_TIMEOUT_MINUTES = _int_env("SESSION_TIMEOUT_MINUTES", 30)

# Background sweep interval for expired sessions (memory hygiene only)
SESSION_SWEEP_INTERVAL_SECONDS = _int_env("SESSION_SWEEP_INTERVAL_SECONDS", 300)

# Percentage needed to pass a literacy week. 70 means 3 of 4 correct.
QUIZ_PASSING_SCORE = _int_env("QUIZ_PASSING_SCORE", 70)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
