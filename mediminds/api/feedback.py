from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from .. import schemas
from ..database import get_db
from ..errors import NotFoundError
from ..services.child_registry import ChildRegistry
from ..services.feedback_store import FeedbackStore
from ..utils.auth import CurrentUser, get_current_user, require_therapist

router = APIRouter(tags=["feedback"])


@router.post("/children/{child_id}", response_model=schemas.SessionFeedback, status_code=201)
def submit_feedback(
        child_id: str,
        feedback: schemas.SessionFeedbackCreate,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    """
    Log how a home-practice task went:
    - Feedback category (easy / struggled / needs_practice)
    - Child's mood
    - Notes for the therapist
    """
    try:
        child = ChildRegistry(db).get_for_user(child_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if child.parent_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the child's parent can log feedback")

    return FeedbackStore(db).record(child.id, current_user.id, feedback)


@router.get("/children/{child_id}", response_model=List[schemas.SessionFeedback])
def get_child_feedback(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    try:
        ChildRegistry(db).get_for_user(child_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return FeedbackStore(db).list_for_child(child_id)


@router.get("/inbox", response_model=List[schemas.FeedbackInboxItem])
def get_therapist_inbox(
        feedback: Optional[schemas.FeedbackCategory] = None,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    """Feedback from the parents of all the therapist's patients, newest first"""
    require_therapist(current_user)
    return FeedbackStore(db).list_for_therapist(current_user.id, feedback=feedback)
