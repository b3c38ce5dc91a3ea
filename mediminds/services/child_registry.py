import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..errors import LinkConflictError, NotFoundError
from ..models import Child

logger = logging.getLogger(__name__)


class ChildRegistry:
    """
    Children are keyed by national id. Either side may create the record first;
    the other side is merged in later. A link to a different parent or
    therapist is never overwritten.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, child_id: str) -> Child:
        child = self.db.query(Child).filter(Child.id == child_id).first()
        if not child:
            raise NotFoundError(f"Child {child_id} not found")
        return child

    def get_for_user(self, child_id: str, user_id: str) -> Child:
        """Child linked to the user as parent or therapist; others get NotFoundError"""
        child = self.get(child_id)
        if user_id not in (child.parent_id, child.therapist_id):
            raise NotFoundError(f"Child {child_id} not found")
        return child

    def find_by_national_id(self, national_id: str) -> Optional[Child]:
        return self.db.query(Child).filter(Child.national_id == national_id.strip()).first()

    def list_for_parent(self, parent_id: str) -> List[Child]:
        return self.db.query(Child).filter(Child.parent_id == parent_id).all()

    def list_for_therapist(self, therapist_id: str) -> List[Child]:
        return self.db.query(Child).filter(Child.therapist_id == therapist_id).all()

    def register_for_parent(self, national_id: str, name: str, parent_id: str) -> Child:
        return self._register(national_id, name, "parent_id", parent_id)

    def register_for_therapist(self, national_id: str, name: str, therapist_id: str) -> Child:
        return self._register(national_id, name, "therapist_id", therapist_id)

    def assign_therapist(self, child_id: str, therapist_id: str) -> Child:
        child = self.get(child_id)
        self._link(child, "therapist_id", therapist_id)
        self.db.commit()
        self.db.refresh(child)
        return child

    def rename(self, child_id: str, name: str) -> Child:
        child = self.get(child_id)
        child.name = name
        self.db.commit()
        self.db.refresh(child)
        return child

    def _register(self, national_id: str, name: str, field: str, actor_id: str) -> Child:
        child = self.find_by_national_id(national_id)
        if child is None:
            child = Child(national_id=national_id.strip(), name=name, **{field: actor_id})
            self.db.add(child)
            logger.info("Child created with %s=%s", field, actor_id)
        else:
            self._link(child, field, actor_id)
        self.db.commit()
        self.db.refresh(child)
        return child

    def _link(self, child: Child, field: str, actor_id: str) -> None:
        current = getattr(child, field)
        if current and current != actor_id:
            role = "parent" if field == "parent_id" else "therapist"
            raise LinkConflictError(f"This child is already linked to another {role} account")
        setattr(child, field, actor_id)
