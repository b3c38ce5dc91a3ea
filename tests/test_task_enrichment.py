import asyncio
import re
from datetime import datetime

from mediminds.services.summarization import TaskDraft
from mediminds.services.task_enrichment import enrich_tasks


def _drafts(n):
    return [TaskDraft(f"Task {i}", f"description {i}", f"why {i}", 0) for i in range(n)]


def test_tasks_get_ids_suggestions_and_editable_flag():
    async def suggest(description, locale):
        return f"[{locale}] video for {description}"

    tasks, caveats = asyncio.run(enrich_tasks(_drafts(3), "en", suggest))

    assert caveats == []
    assert [t.title for t in tasks] == ["Task 0", "Task 1", "Task 2"]
    assert all(t.editable for t in tasks)
    assert tasks[2].demo_video_suggestion == "[en] video for description 2"
    for index, task in enumerate(tasks):
        assert re.fullmatch(rf"task_\d+_{index}", task.id)


def test_one_failed_suggestion_does_not_affect_the_others():
    async def suggest(description, locale):
        if description == "description 1":
            raise ConnectionError("timeout")
        return "clip"

    tasks, caveats = asyncio.run(enrich_tasks(_drafts(3), "en", suggest))

    assert len(tasks) == 3
    assert tasks[0].demo_video_suggestion == "clip"
    assert tasks[1].demo_video_suggestion is None
    assert tasks[2].demo_video_suggestion == "clip"
    assert caveats == [f"demo_video_suggestion_missing:{tasks[1].id}"]


def test_empty_suggestion_is_left_absent():
    async def suggest(description, locale):
        return "   "

    tasks, caveats = asyncio.run(enrich_tasks(_drafts(1), "en", suggest))

    assert tasks[0].demo_video_suggestion is None
    assert len(caveats) == 1


def test_suggestions_run_concurrently_within_the_limit():
    running = 0
    peak = 0

    async def suggest(description, locale):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return "clip"

    tasks, _ = asyncio.run(enrich_tasks(_drafts(6), "en", suggest, max_concurrency=3))

    assert len(tasks) == 6
    assert peak == 3


def test_no_tasks_yields_nothing():
    async def suggest(description, locale):
        raise AssertionError("should not be called")

    assert asyncio.run(enrich_tasks([], "en", suggest)) == ([], [])


def test_task_ids_follow_the_creation_time():
    async def suggest(description, locale):
        return "clip"

    now = datetime(2024, 3, 4, 9, 0, 0)
    tasks, _ = asyncio.run(enrich_tasks(_drafts(2), "en", suggest, now=now))

    assert [t.id for t in tasks] == ["task_1709542800000_0", "task_1709542800000_1"]
    assert all(t.created_at == now for t in tasks)
