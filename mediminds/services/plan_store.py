import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import TreatmentPlan as TreatmentPlanRow
from ..schemas.treatment_plan import DailyTask, DailyTaskUpdate, TreatmentPlan, WeeklyGoal
from .schema_normalizer import normalize_therapy_type, normalize_weekly_goals
from .summarization import check_goal_index, clamp_goal_index

logger = logging.getLogger(__name__)


def _plan_order(plan: TreatmentPlan):
    """Sort key for plans: created last comes last, ties go to the larger id"""
    return plan.created_at, plan.id


def select_current_plan(plans: Iterable[TreatmentPlan]) -> Optional[TreatmentPlan]:
    """The current plan is the one created last; ties go to the larger id"""
    plans = list(plans)
    if not plans:
        return None
    return max(plans, key=_plan_order)


class PlanRepository:
    def __init__(self, db: Session):
        self.db = db

    async def save(self, plan: TreatmentPlan) -> TreatmentPlan:
        """Insert a new plan row; existing plans for the child are left as they are"""
        row = TreatmentPlanRow(
            id=plan.id,
            child_id=plan.child_id,
            therapist_id=plan.therapist_id,
            voice_recording_url=plan.voice_recording_url,
            document_url=plan.document_url,
            transcript=plan.transcript,
            summary=plan.summary,
            therapy_type=plan.therapy_type,
            locale=plan.locale,
            weekly_goals=[g.model_dump() for g in plan.weekly_goals],
            daily_tasks=[t.model_dump(mode="json") for t in plan.daily_tasks],
            created_at=plan.created_at,
            updated_at=plan.updated_at
        )
        self.db.add(row)
        self.db.commit()
        return plan

    def list_for_child(self, child_id: str) -> List[TreatmentPlan]:
        rows = self.db.query(TreatmentPlanRow) \
            .filter(TreatmentPlanRow.child_id == child_id) \
            .all()
        plans = [self._to_schema(row) for row in rows]
        plans.sort(key=_plan_order, reverse=True)
        return plans

    def find_current_plan(self, child_id: str) -> Optional[TreatmentPlan]:
        return select_current_plan(self.list_for_child(child_id))

    def get_current_plan(self, child_id: str) -> TreatmentPlan:
        plan = self.find_current_plan(child_id)
        if plan is None:
            raise NotFoundError(f"No treatment plan found for child {child_id}")
        return plan

    def get_plan(self, plan_id: str) -> TreatmentPlan:
        return self._to_schema(self._get_row(plan_id))

    def update_task(self, plan_id: str, task_id: str, changes: DailyTaskUpdate) -> TreatmentPlan:
        """Apply a therapist's edit; the task id never changes"""
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)

        def apply(task: dict, goal_count: int) -> None:
            if "weekly_goal_index" in updates:
                raw_index = updates["weekly_goal_index"]
                try:
                    updates["weekly_goal_index"] = check_goal_index(raw_index, goal_count)
                except ValidationError as e:
                    updates["weekly_goal_index"] = clamp_goal_index(raw_index, goal_count)
                    logger.warning("Data quality: task %s edit: %s", task_id, e)
            task.update(updates)

        return self._modify_task(plan_id, task_id, apply)

    def attach_demo_video(self, plan_id: str, task_id: str, video_url: str) -> TreatmentPlan:
        def apply(task: dict, goal_count: int) -> None:
            task["demo_video_url"] = video_url

        return self._modify_task(plan_id, task_id, apply)

    def _modify_task(self, plan_id: str, task_id: str, apply) -> TreatmentPlan:
        row = self._get_row(plan_id)
        goal_count = len(normalize_weekly_goals(row.weekly_goals))
        # Copy so SQLAlchemy sees a new JSON value
        tasks = [dict(task) for task in (row.daily_tasks or [])]
        for task in tasks:
            if task.get("id") == task_id:
                apply(task, goal_count)
                break
        else:
            raise NotFoundError(f"Task {task_id} not found in plan {plan_id}")

        row.daily_tasks = tasks
        row.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(row)
        return self._to_schema(row)

    def _get_row(self, plan_id: str) -> TreatmentPlanRow:
        row = self.db.query(TreatmentPlanRow).filter(TreatmentPlanRow.id == plan_id).first()
        if not row:
            raise NotFoundError(f"Treatment plan {plan_id} not found")
        return row

    def _to_schema(self, row: TreatmentPlanRow) -> TreatmentPlan:
        goals = normalize_weekly_goals(row.weekly_goals)
        tasks = [
            DailyTask(**{**raw, "weekly_goal_index": clamp_goal_index(raw.get("weekly_goal_index"), len(goals))})
            for raw in row.daily_tasks or []
        ]

        return TreatmentPlan(
            id=row.id,
            child_id=row.child_id,
            therapist_id=row.therapist_id,
            voice_recording_url=row.voice_recording_url,
            document_url=row.document_url or "",
            transcript=row.transcript or "",
            summary=row.summary or "",
            therapy_type=normalize_therapy_type(row.therapy_type),
            locale=row.locale or "en",
            weekly_goals=[WeeklyGoal(**goal) for goal in goals],
            daily_tasks=tasks,
            created_at=row.created_at,
            updated_at=row.updated_at or row.created_at
        )
