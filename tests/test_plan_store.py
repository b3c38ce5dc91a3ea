import asyncio
from datetime import datetime, timedelta

import pytest

from mediminds.errors import NotFoundError
from mediminds.models import TreatmentPlan as TreatmentPlanRow
from mediminds.schemas import DailyTask, DailyTaskUpdate, TreatmentPlan, WeeklyGoal
from mediminds.services.plan_store import PlanRepository, select_current_plan

NOW = datetime(2024, 3, 4, 9, 0, 0)


def _plan(plan_id, created_at, child_id="child-1"):
    return TreatmentPlan(
        id=plan_id,
        child_id=child_id,
        therapist_id="therapist-1",
        transcript="transcript",
        summary="summary",
        therapy_type="speech",
        weekly_goals=[WeeklyGoal(goal="g0", category="speech"), WeeklyGoal(goal="g1")],
        daily_tasks=[
            DailyTask(id="task_1_0", title="t0", description="d0", why_it_matters="w0", weekly_goal_index=0),
            DailyTask(id="task_1_1", title="t1", description="d1", why_it_matters="w1", weekly_goal_index=1)
        ],
        created_at=created_at,
        updated_at=created_at
    )


def test_select_current_plan_uses_latest_created_at():
    older = _plan("b", NOW - timedelta(days=3))
    newer = _plan("a", NOW)

    assert select_current_plan([newer, older]).id == "a"
    assert select_current_plan([older, newer]).id == "a"
    assert select_current_plan([]) is None


def test_select_current_plan_breaks_ties_by_id():
    assert select_current_plan([_plan("a", NOW), _plan("b", NOW)]).id == "b"


def test_current_plan_is_latest_and_older_plans_are_kept(db):
    plans = PlanRepository(db)
    asyncio.run(plans.save(_plan("old", NOW - timedelta(days=7))))
    asyncio.run(plans.save(_plan("new", NOW)))
    asyncio.run(plans.save(_plan("other-child", NOW + timedelta(days=1), child_id="child-2")))

    assert plans.get_current_plan("child-1").id == "new"
    assert [p.id for p in plans.list_for_child("child-1")] == ["new", "old"]


def test_missing_plan_raises_not_found(db):
    with pytest.raises(NotFoundError):
        PlanRepository(db).get_current_plan("nobody")


def test_legacy_rows_are_normalized_on_read(db):
    db.add(TreatmentPlanRow(
        id="legacy",
        child_id="child-1",
        therapist_id="therapist-1",
        transcript="t",
        summary="s",
        therapy_type=None,
        weekly_goals=["say hello", "wave goodbye"],
        daily_tasks=[{
            "id": "task_0_0", "title": "Greeting", "description": "Say hello",
            "why_it_matters": "Social opener", "weekly_goal_index": 5, "editable": True
        }],
        created_at=NOW,
        updated_at=NOW
    ))
    db.commit()

    plan = PlanRepository(db).get_current_plan("child-1")

    assert plan.therapy_type == "behavior"
    assert [g.category for g in plan.weekly_goals] == [None, None]
    assert plan.daily_tasks[0].weekly_goal_index == 1


def test_update_task_keeps_id_and_clamps_goal_index(db):
    plans = PlanRepository(db)
    asyncio.run(plans.save(_plan("p1", NOW)))

    updated = plans.update_task("p1", "task_1_0", DailyTaskUpdate(title="Renamed", weekly_goal_index=9))

    task = updated.daily_tasks[0]
    assert task.id == "task_1_0"
    assert task.title == "Renamed"
    assert task.weekly_goal_index == 1
    assert task.description == "d0"
    assert updated.updated_at > updated.created_at


def test_attach_demo_video_keeps_suggestion(db):
    plan = _plan("p1", NOW)
    plan.daily_tasks[1].demo_video_suggestion = "Show the parent modelling the word"
    plans = PlanRepository(db)
    asyncio.run(plans.save(plan))

    updated = plans.attach_demo_video("p1", "task_1_1", "/media/demo-videos/clip.mp4")

    task = updated.daily_tasks[1]
    assert task.demo_video_url == "/media/demo-videos/clip.mp4"
    assert task.demo_video_suggestion == "Show the parent modelling the word"


def test_unknown_task_raises_not_found(db):
    plans = PlanRepository(db)
    asyncio.run(plans.save(_plan("p1", NOW)))

    with pytest.raises(NotFoundError):
        plans.attach_demo_video("p1", "task_missing", "/media/x.mp4")


def test_plan_list_and_current_plan_agree_on_ties(db):
    plans = PlanRepository(db)
    for plan_id in ("a", "c", "b"):
        asyncio.run(plans.save(_plan(plan_id, NOW)))

    assert [p.id for p in plans.list_for_child("child-1")] == ["c", "b", "a"]
    assert plans.get_current_plan("child-1").id == "c"
