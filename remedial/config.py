from __future__ import annotations

import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


MAPPING_SHEET = "QuestionsMapping"
RESULTS_SHEET = "StudentResults"

STRONG_THRESHOLD = 80.0
MODERATE_THRESHOLD = 70.0
WEAK_THRESHOLD = 50.0
REMEDIAL_CUTOFF = 70.0
TARGET_ACCURACY = 80.0
CLASSWIDE_WEAKEST_LIMIT = 3

LOG_LEVEL = os.getenv("REMEDIAL_LOG_LEVEL", "INFO").upper()
CLAMP_NEGATIVE_SCORES = _env_flag("REMEDIAL_CLAMP_NEGATIVE_SCORES", True)
DEMO_STUDENT_COUNT = _env_int("REMEDIAL_DEMO_STUDENTS", 25)
