import logging
from datetime import datetime
from typing import Dict, Optional

import numpy as np
from sqlalchemy.orm import Session

from ..config import SAMPLE_DAYS
from ..schemas.progress import ProgressInsights, ProgressReport, SkillProgress
from ..utils.openai_utils import generate_progress_insights
from .child_registry import ChildRegistry
from .feedback_store import FeedbackStore
from .plan_store import PlanRepository
from .progress_tracker import ProgressTracker
from .schema_normalizer import DEFAULT_THERAPY_TYPE
from .skill_progress import estimate_skill_progress
from .synthetic_data import feedback_or_sample

logger = logging.getLogger(__name__)


class SessionAnalytics:
    def __init__(self, db: Session, rng: Optional[np.random.Generator] = None):
        self.db = db
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_progress_report(self, child_id: str, today: Optional[datetime] = None) -> ProgressReport:
        """
        Progress overview for a child. Children with no logged feedback get a
        generated sample so the views always have data; ``is_sample_data`` says so.
        """
        ChildRegistry(self.db).get(child_id)
        today = today or datetime.utcnow()

        real = FeedbackStore(self.db).list_for_child(child_id)
        sessions = feedback_or_sample(real, child_id, SAMPLE_DAYS, today=today, rng=self.rng)
        if not real:
            logger.info("No feedback for child %s, using %d sample sessions", child_id, len(sessions))

        plan = PlanRepository(self.db).find_current_plan(child_id)
        therapy_type = plan.therapy_type if plan else DEFAULT_THERAPY_TYPE

        trends = ProgressTracker(today).get_progress_trends(sessions)
        skills = estimate_skill_progress(therapy_type, sessions, rng=self.rng)

        return ProgressReport(
            child_id=child_id,
            therapy_type=therapy_type,
            is_sample_data=not real,
            stats=trends["stats"],
            weekly_summary=trends["weekly_summary"],
            trend=trends["trend"],
            practice_focus=trends["practice_focus"],
            skill_progress=SkillProgress(therapy_type=therapy_type, skills=skills)
        )

    async def get_insights(self, child_id: str, locale: str = "en") -> ProgressInsights:
        report = self.get_progress_report(child_id)
        insights = await generate_progress_insights(self._insight_input(report), locale)
        return ProgressInsights(
            child_id=child_id,
            is_sample_data=report.is_sample_data,
            insights=insights
        )

    def _insight_input(self, report: ProgressReport) -> Dict:
        return {
            "therapyType": report.therapy_type,
            "totalSessions": report.stats.total_sessions,
            "completionRate": report.stats.completion_rate,
            "feedbackSummary": report.stats.feedback_counts,
            "moodSummary": report.stats.mood_counts,
            "weeklyCompletion": [w.completion_rate for w in report.weekly_summary],
            "trend": report.trend,
            "practiceFocus": report.practice_focus
        }
