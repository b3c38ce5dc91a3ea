"""
Skill progress estimate.

Feedback records carry no per-skill scores, so these curves are a smoothed
growth estimate per therapy type rather than measurements: each skill starts
from its own baseline, rises steadily with some jitter, is nudged by how often
practice was reported as easy, and is capped at 100. Present it as an estimate.
"""
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..schemas.feedback import SessionFeedback
from .schema_normalizer import normalize_therapy_type

SKILL_NAMES = {
    "speech": ["Articulation", "Vocabulary", "Sentence Formation", "Comprehension"],
    "behavior": ["Following Instructions", "Social Skills", "Self-Regulation", "Task Completion"],
    "emotional": ["Emotional Recognition", "Coping Skills", "Empathy", "Self-Awareness"],
    "motor": ["Fine Motor", "Gross Motor", "Coordination", "Balance"],
}

OBSERVATIONS = 8
BASELINE = 40
BASELINE_STEP = 5  # per skill index
GROWTH_PER_OBSERVATION = 6
JITTER = 5
MAX_FEEDBACK_SHIFT = 5


def _feedback_shift(sessions: Sequence[SessionFeedback]) -> float:
    """Between -5 and +5 depending on the share of 'easy' feedback"""
    if not sessions:
        return 0.0
    easy_share = sum(1 for s in sessions if s.feedback == "easy") / len(sessions)
    return (easy_share - 0.5) * 2 * MAX_FEEDBACK_SHIFT


def estimate_skill_progress(
        therapy_type: str,
        sessions: Sequence[SessionFeedback],
        rng: Optional[np.random.Generator] = None
) -> Dict[str, List[int]]:
    rng = rng if rng is not None else np.random.default_rng()
    shift = _feedback_shift(sessions)

    skills = {}
    for index, name in enumerate(SKILL_NAMES[normalize_therapy_type(therapy_type)]):
        start = BASELINE + index * BASELINE_STEP + shift
        steps = np.arange(OBSERVATIONS) * GROWTH_PER_OBSERVATION
        noise = rng.uniform(-JITTER, JITTER, size=OBSERVATIONS)
        curve = np.clip(np.round(start + steps + noise), 0, 100)
        skills[name] = [int(v) for v in curve]
    return skills
