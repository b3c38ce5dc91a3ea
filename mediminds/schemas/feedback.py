from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime

FeedbackCategory = Literal["easy", "struggled", "needs_practice"]
ChildMood = Literal["happy", "neutral", "frustrated"]


class SessionFeedbackBase(BaseModel):
    task_description: str = Field(..., min_length=1, description="Home-practice task the feedback refers to")
    feedback: FeedbackCategory
    child_mood: Optional[ChildMood] = Field(None, description="How the child seemed during practice")
    notes: Optional[str] = Field(None, description="Free-text observations from the parent")


class SessionFeedbackCreate(SessionFeedbackBase):
    pass


class SessionFeedback(SessionFeedbackBase):
    id: str
    child_id: str
    parent_id: Optional[str] = None
    completed: bool = True
    completed_at: datetime
    is_synthetic: bool = False

    class Config:
        from_attributes = True


class FeedbackInboxItem(SessionFeedback):
    child_name: str
