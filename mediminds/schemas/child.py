from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ChildBase(BaseModel):
    national_id: str = Field(..., min_length=1, description="Unique national identifier, fixed once assigned")
    name: str = Field(..., min_length=1)


class ChildCreate(ChildBase):
    pass


class Child(ChildBase):
    id: str
    parent_id: Optional[str] = None
    therapist_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
