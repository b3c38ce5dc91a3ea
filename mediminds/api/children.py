from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from .. import schemas
from ..database import get_db
from ..errors import LinkConflictError, NotFoundError
from ..services.child_registry import ChildRegistry
from ..utils.auth import CurrentUser, get_current_user, require_therapist

router = APIRouter()


@router.get("/", response_model=List[schemas.Child])
def list_children(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    registry = ChildRegistry(db)
    if current_user.role == "therapist":
        return registry.list_for_therapist(current_user.id)
    return registry.list_for_parent(current_user.id)


@router.post("/", response_model=schemas.Child)
def register_child(
        child: schemas.ChildCreate,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    """
    Add a child by national id. An existing record is linked to the caller
    instead of duplicated, unless it already belongs to someone else.
    """
    registry = ChildRegistry(db)
    try:
        if current_user.role == "therapist":
            return registry.register_for_therapist(child.national_id, child.name, current_user.id)
        return registry.register_for_parent(child.national_id, child.name, current_user.id)
    except LinkConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/search", response_model=schemas.Child)
def search_child(
        national_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    require_therapist(current_user)
    child = ChildRegistry(db).find_by_national_id(national_id)
    if not child:
        raise HTTPException(status_code=404, detail="No patient found with this National ID")
    return child


@router.get("/{child_id}", response_model=schemas.Child)
def get_child(child_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    try:
        return ChildRegistry(db).get_for_user(child_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{child_id}/assign-therapist", response_model=schemas.Child)
def assign_therapist(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    require_therapist(current_user)
    try:
        return ChildRegistry(db).assign_therapist(child_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
