from datetime import datetime

import numpy as np
import pytest

from mediminds.schemas import SessionFeedback
from mediminds.services.synthetic_data import feedback_or_sample, generate_sample_feedback

TODAY = datetime(2024, 3, 4, 12, 0, 0)


def test_one_record_per_day_oldest_first():
    sessions = generate_sample_feedback("child-1", days=14, today=TODAY, rng=np.random.default_rng(1))

    assert len(sessions) == 14
    assert sessions[0].completed_at < sessions[13].completed_at
    assert sessions[13].completed_at == TODAY
    assert all(s.is_synthetic for s in sessions)
    assert sessions[0].id == "session_child-1_0"


def test_recent_days_complete_more_often():
    rng = np.random.default_rng(42)
    early, late = 0, 0
    for _ in range(300):
        sessions = generate_sample_feedback("child-1", days=14, today=TODAY, rng=rng)
        early += sum(s.completed for s in sessions[:4])
        late += sum(s.completed for s in sessions[10:])

    assert late > early


def test_recent_days_get_easier_feedback():
    rng = np.random.default_rng(7)
    early, late = 0, 0
    for _ in range(300):
        sessions = generate_sample_feedback("child-1", days=14, today=TODAY, rng=rng)
        early += sum(s.feedback == "easy" for s in sessions[:4])
        late += sum(s.feedback == "easy" for s in sessions[10:])

    assert late > early


def test_same_seed_same_data():
    first = generate_sample_feedback("c", today=TODAY, rng=np.random.default_rng(9))
    second = generate_sample_feedback("c", today=TODAY, rng=np.random.default_rng(9))
    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]


def test_days_must_be_positive():
    with pytest.raises(ValueError):
        generate_sample_feedback("c", days=0)


def test_real_feedback_is_never_replaced():
    real = [SessionFeedback(
        id="real-1", child_id="c", task_description="Picture naming",
        feedback="easy", completed=True, completed_at=TODAY
    )]

    assert feedback_or_sample(real, "c") == real
    assert len(feedback_or_sample([], "c", days=5, today=TODAY)) == 5
