"""
Sample feedback for children who have no logged home practice yet.

The records show a gradual improvement: completion becomes more likely and
feedback shifts from "struggled" towards "easy" as they approach today.
They are flagged ``is_synthetic`` and are never written to the database.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import numpy as np

from ..config import SAMPLE_DAYS
from ..schemas.feedback import SessionFeedback

FEEDBACK_OPTIONS = ["easy", "needs_practice", "struggled"]

# Probabilities over FEEDBACK_OPTIONS per progress band
EARLY_BAND = [0.2, 0.4, 0.4]
MIDDLE_BAND = [0.4, 0.3, 0.3]
LATE_BAND = [0.7, 0.2, 0.1]

SAMPLE_TASKS = [
    "Morning routine practice",
    "Picture naming game",
    "Turn-taking with a board game",
    "Feelings check-in",
    "Obstacle course",
    "Story time questions",
    "Calm-down breathing"
]


def _band_for(progress: float) -> List[float]:
    if progress > 0.7:
        return LATE_BAND
    if progress > 0.4:
        return MIDDLE_BAND
    return EARLY_BAND


def _sample_mood(feedback: str, rng: np.random.Generator) -> str:
    roll = rng.random()
    if feedback == "easy":
        return "happy" if roll < 0.8 else "neutral"
    if feedback == "needs_practice":
        if roll < 0.5:
            return "neutral"
        return "happy" if roll < 0.85 else "frustrated"
    return "frustrated" if roll < 0.6 else "neutral"


def generate_sample_feedback(
        child_id: str,
        days: int = SAMPLE_DAYS,
        today: Optional[datetime] = None,
        rng: Optional[np.random.Generator] = None
) -> List[SessionFeedback]:
    """One record per day for the last ``days`` days, oldest first"""
    if days < 1:
        raise ValueError("days must be at least 1")
    today = today or datetime.utcnow()
    rng = rng if rng is not None else np.random.default_rng()

    sessions = []
    for position in range(days):
        # 0 for the oldest record, approaching 1 for today's
        progress = position / days
        feedback = FEEDBACK_OPTIONS[rng.choice(len(FEEDBACK_OPTIONS), p=_band_for(progress))]
        completed = bool(rng.random() < 0.5 + progress * 0.4)

        sessions.append(SessionFeedback(
            id=f"session_{child_id}_{position}",
            child_id=child_id,
            task_description=SAMPLE_TASKS[position % len(SAMPLE_TASKS)],
            feedback=feedback,
            child_mood=_sample_mood(feedback, rng),
            notes="",
            completed=completed,
            completed_at=today - timedelta(days=days - 1 - position),
            is_synthetic=True
        ))

    return sessions


def feedback_or_sample(
        real: Sequence[SessionFeedback],
        child_id: str,
        days: int = SAMPLE_DAYS,
        today: Optional[datetime] = None,
        rng: Optional[np.random.Generator] = None
) -> List[SessionFeedback]:
    """Real records when there are any, generated sample data otherwise"""
    if real:
        return list(real)
    return generate_sample_feedback(child_id, days, today=today, rng=rng)
