from sqlalchemy import Column, String, Text, DateTime, JSON
import uuid
from datetime import datetime

from mediminds.database import Base


class TreatmentPlan(Base):
    __tablename__ = "treatment_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    child_id = Column(String(36), nullable=False, index=True)
    therapist_id = Column(String(128), nullable=False)
    voice_recording_url = Column(String(500))
    document_url = Column(String(500), default="")
    transcript = Column(Text)
    summary = Column(Text)
    therapy_type = Column(String(20))
    locale = Column(String(10), default="en")
    # Stored as returned; may hold legacy string goals
    weekly_goals = Column(JSON, default=list)
    daily_tasks = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
