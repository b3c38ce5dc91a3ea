from typing import Dict, List

from sqlalchemy.orm import Session

from ..utils.openai_utils import chat_with_assistant
from .child_registry import ChildRegistry
from .plan_store import PlanRepository


def build_user_context(db: Session, user_id: str, role: str, name: str = "") -> Dict:
    """Children of the user and their current plans, as context for the assistant"""
    registry = ChildRegistry(db)
    children = registry.list_for_therapist(user_id) if role == "therapist" else registry.list_for_parent(user_id)
    plans = PlanRepository(db)

    treatment_plans = []
    for child in children:
        plan = plans.find_current_plan(child.id)
        if plan is None:
            continue
        treatment_plans.append({
            "childId": child.id,
            "therapyType": plan.therapy_type,
            "weeklyGoals": [g.goal for g in plan.weekly_goals],
            "dailyTasks": [
                {"title": t.title, "description": t.description, "whyItMatters": t.why_it_matters}
                for t in plan.daily_tasks
            ]
        })

    return {
        "userName": name,
        "role": role,
        "children": [{"name": c.name, "id": c.id} for c in children],
        "treatmentPlans": treatment_plans
    }


async def answer(
        db: Session,
        user_id: str,
        role: str,
        messages: List[Dict[str, str]],
        locale: str = "en",
        name: str = ""
) -> str:
    context = build_user_context(db, user_id, role, name)
    return await chat_with_assistant(messages, context, locale)
