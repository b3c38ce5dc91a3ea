import math
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..schemas.feedback import SessionFeedback

FEEDBACK_CATEGORIES = ["easy", "struggled", "needs_practice"]
MOODS = ["happy", "neutral", "frustrated"]
TREND_WEEKS = 4


def percent(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up; 0 when there is nothing to divide by"""
    if whole <= 0:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


class ProgressTracker:
    def __init__(self, today: Optional[date] = None):
        if isinstance(today, datetime):
            today = today.date()
        self.today = today or datetime.utcnow().date()

    def get_progress_trends(self, sessions: Sequence[SessionFeedback]) -> Dict:
        """Overall stats, 4-week completion trend and practice focus for one child"""
        if not sessions:
            raise ValueError("Progress aggregation needs at least one session; substitute sample data first")

        data = self._to_frame(sessions)
        weekly = self._weekly_summary(data)

        return {
            "stats": self._overall_stats(data),
            "weekly_summary": weekly,
            "trend": self._calculate_trend(weekly),
            "practice_focus": self._identify_practice_focus(data)
        }

    def _to_frame(self, sessions: Sequence[SessionFeedback]) -> pd.DataFrame:
        data = pd.DataFrame([
            {
                "date": s.completed_at.date(),
                "completed": bool(s.completed),
                "feedback": s.feedback,
                "mood": s.child_mood,
                "task": s.task_description
            }
            for s in sessions
        ])
        data["date"] = pd.to_datetime(data["date"])
        return data

    def _overall_stats(self, data: pd.DataFrame) -> Dict:
        total = len(data)
        completed = int(data["completed"].sum())
        feedback_counts = data["feedback"].value_counts().reindex(FEEDBACK_CATEGORIES, fill_value=0)
        mood_counts = data["mood"].dropna().value_counts().reindex(MOODS, fill_value=0)

        return {
            "total_sessions": total,
            "completed_sessions": completed,
            "completion_rate": percent(completed, total),
            "feedback_counts": {k: int(v) for k, v in feedback_counts.items()},
            "mood_counts": {k: int(v) for k, v in mood_counts.items()}
        }

    def _weekly_summary(self, data: pd.DataFrame) -> List[Dict]:
        """Four 7-day windows ending today, oldest first, bounds inclusive"""
        weeks = []
        for weeks_back in range(TREND_WEEKS - 1, -1, -1):
            week_end = self.today - timedelta(days=7 * weeks_back)
            week_start = week_end - timedelta(days=6)
            in_week = data[
                (data["date"] >= pd.Timestamp(week_start)) &
                (data["date"] <= pd.Timestamp(week_end))
            ]

            completed = int(in_week["completed"].sum())
            total = len(in_week)
            weeks.append({
                "week_start": week_start,
                "week_end": week_end,
                "tasks_completed": completed,
                "total_tasks": total,
                "completion_rate": percent(completed, total),
                # Share of the week's days with any logged practice
                "engagement_rate": percent(in_week["date"].nunique(), 7)
            })
        return weeks

    def _calculate_trend(self, weekly: List[Dict]) -> str:
        """Compare the oldest and newest weeks that have any sessions"""
        active = [w for w in weekly if w["total_tasks"] > 0]
        if len(active) < 2:
            return "insufficient data"

        slope = (active[-1]["completion_rate"] - active[0]["completion_rate"]) / len(active)
        return "improving" if slope > 0 else "declining" if slope < 0 else "stable"

    def _identify_practice_focus(self, data: pd.DataFrame) -> List[str]:
        """Tasks most often reported as hard"""
        hard = data[data["feedback"].isin(["struggled", "needs_practice"])]
        if hard.empty:
            return []
        return hard["task"].value_counts().index.tolist()[:3]
