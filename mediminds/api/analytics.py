from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..errors import CapabilityUnavailableError, NotFoundError
from ..services.child_registry import ChildRegistry
from ..services.session_analytics import SessionAnalytics
from ..utils.auth import CurrentUser, get_current_user

router = APIRouter(tags=["analytics"])


def _check_access(db: Session, child_id: str, user: CurrentUser):
    try:
        ChildRegistry(db).get_for_user(child_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/children/{child_id}/progress", response_model=schemas.ProgressReport)
def get_child_progress(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    """
    Completion stats, 4-week trend and estimated skill curves.
    ``is_sample_data`` is true when the child has no logged feedback yet.
    """
    _check_access(db, child_id, current_user)
    return SessionAnalytics(db).get_progress_report(child_id)


@router.get("/children/{child_id}/insights", response_model=schemas.ProgressInsights)
async def get_progress_insights(
        child_id: str,
        locale: str = "en",
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    _check_access(db, child_id, current_user)
    try:
        return await SessionAnalytics(db).get_insights(child_id, locale)
    except CapabilityUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))
