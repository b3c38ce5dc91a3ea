from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Child, SessionFeedback as SessionFeedbackRow
from ..schemas.feedback import FeedbackInboxItem, SessionFeedback, SessionFeedbackCreate


class FeedbackStore:
    """Parent-logged home practice feedback; records are never modified after insert"""

    def __init__(self, db: Session):
        self.db = db

    def record(self, child_id: str, parent_id: Optional[str], entry: SessionFeedbackCreate) -> SessionFeedback:
        now = datetime.utcnow()
        row = SessionFeedbackRow(
            **entry.model_dump(),
            child_id=child_id,
            parent_id=parent_id,
            completed=True,
            completed_at=now,
            created_at=now
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return SessionFeedback.model_validate(row)

    def list_for_child(self, child_id: str) -> List[SessionFeedback]:
        rows = self.db.query(SessionFeedbackRow) \
            .filter(SessionFeedbackRow.child_id == child_id) \
            .all()
        feedback = [SessionFeedback.model_validate(row) for row in rows]
        feedback.sort(key=lambda f: f.completed_at)
        return feedback

    def list_for_therapist(self, therapist_id: str, feedback: Optional[str] = None) -> List[FeedbackInboxItem]:
        """Feedback for every child assigned to the therapist, newest first"""
        children = self.db.query(Child).filter(Child.therapist_id == therapist_id).all()

        items = []
        for child in children:
            for entry in self.list_for_child(child.id):
                if feedback and entry.feedback != feedback:
                    continue
                items.append(FeedbackInboxItem(**entry.model_dump(), child_name=child.name))

        items.sort(key=lambda f: f.completed_at, reverse=True)
        return items
