"""Letter grades and pillar status labels."""
from __future__ import annotations

from aimapper.config.settings import settings


def determine_grade(total_score: int) -> tuple[str, str]:
    """Determine letter grade and label from total score."""
    scoring = settings.scoring
    if total_score >= scoring.grade_a_threshold:
        return "A", "excellent"
    elif total_score >= scoring.grade_b_threshold:
        return "B", "good"
    elif total_score >= scoring.grade_c_threshold:
        return "C", "fair"
    elif total_score >= scoring.grade_d_threshold:
        return "D", "poor"
    else:
        return "F", "critical"


def score_status(score: int) -> str:
    """Strong / Watch / Risk label for a 0-100 score."""
    if score >= settings.scoring.status_strong_threshold:
        return "Strong"
    if score >= settings.scoring.status_watch_threshold:
        return "Watch"
    return "Risk"


def is_failing(grade: str) -> bool:
    return grade in ("D", "F")
