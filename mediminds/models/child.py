from sqlalchemy import Column, String, DateTime
import uuid
from datetime import datetime

from mediminds.database import Base


class Child(Base):
    __tablename__ = "children"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    national_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    parent_id = Column(String(128), index=True)  # empty until a parent claims the child
    therapist_id = Column(String(128), index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
