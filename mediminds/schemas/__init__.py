from .child import Child, ChildCreate
from .treatment_plan import (
    TherapyType,
    WeeklyGoal,
    DailyTask,
    DailyTaskUpdate,
    TreatmentPlan,
    PlanGenerationResult
)
from .feedback import FeedbackCategory, ChildMood, SessionFeedback, SessionFeedbackCreate, FeedbackInboxItem
from .progress import WeeklySummary, ProgressStats, SkillProgress, ProgressReport, ProgressInsights
from .chat import ChatMessage, ChatRequest, ChatResponse
