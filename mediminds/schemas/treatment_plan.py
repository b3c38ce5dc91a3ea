from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

TherapyType = Literal["speech", "behavior", "emotional", "motor"]


class WeeklyGoal(BaseModel):
    goal: str
    category: Optional[TherapyType] = None


class DailyTask(BaseModel):
    id: str
    title: str
    description: str
    why_it_matters: str = ""
    weekly_goal_index: int = Field(..., ge=0, description="Index into the owning plan's weekly_goals")
    demo_video_url: Optional[str] = None
    demo_video_suggestion: Optional[str] = None
    editable: bool = True
    created_at: Optional[datetime] = None


class DailyTaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    why_it_matters: Optional[str] = None
    weekly_goal_index: Optional[int] = None


class TreatmentPlan(BaseModel):
    id: str
    child_id: str
    therapist_id: str
    voice_recording_url: Optional[str] = None
    document_url: str = ""
    transcript: str
    summary: str
    therapy_type: TherapyType = "behavior"
    locale: str = "en"
    weekly_goals: List[WeeklyGoal]
    daily_tasks: List[DailyTask]
    created_at: datetime
    updated_at: datetime


class PlanGenerationResult(BaseModel):
    """Outcome of a successful pipeline run; caveats list what was saved incomplete"""
    saved: bool = True
    plan: TreatmentPlan
    caveats: List[str] = []
