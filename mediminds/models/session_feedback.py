from sqlalchemy import Column, String, Text, Boolean, DateTime
import uuid
from datetime import datetime

from mediminds.database import Base


class SessionFeedback(Base):
    __tablename__ = "session_feedback"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    child_id = Column(String(36), nullable=False, index=True)
    parent_id = Column(String(128))
    task_description = Column(Text, nullable=False)
    feedback = Column(String(20), nullable=False)  # 'easy', 'struggled', 'needs_practice'
    child_mood = Column(String(20))  # 'happy', 'neutral', 'frustrated'
    notes = Column(Text)
    completed = Column(Boolean, default=True)
    completed_at = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
