from pydantic import BaseModel
from typing import Dict, List
from datetime import date


class WeeklySummary(BaseModel):
    week_start: date
    week_end: date
    tasks_completed: int
    total_tasks: int
    completion_rate: int
    engagement_rate: int


class ProgressStats(BaseModel):
    total_sessions: int
    completed_sessions: int
    completion_rate: int
    feedback_counts: Dict[str, int]
    mood_counts: Dict[str, int]


class SkillProgress(BaseModel):
    """Estimated skill curves; not measured per-skill scores"""
    therapy_type: str
    is_estimate: bool = True
    skills: Dict[str, List[int]]


class ProgressReport(BaseModel):
    child_id: str
    therapy_type: str
    is_sample_data: bool
    stats: ProgressStats
    weekly_summary: List[WeeklySummary]
    trend: str
    practice_focus: List[str]
    skill_progress: SkillProgress


class ProgressInsights(BaseModel):
    child_id: str
    is_sample_data: bool
    insights: str
