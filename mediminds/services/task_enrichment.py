import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

from ..config import MAX_CONCURRENT_ENRICHMENTS
from ..schemas.treatment_plan import DailyTask
from .summarization import TaskDraft

logger = logging.getLogger(__name__)

SuggestFn = Callable[[str, str], Awaitable[str]]


def _epoch_ms(moment: datetime) -> int:
    """Milliseconds since the epoch; naive datetimes are taken as UTC"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def make_task_id(timestamp_ms: int, index: int) -> str:
    return f"task_{timestamp_ms}_{index}"


async def enrich_tasks(
        drafts: List[TaskDraft],
        locale: str,
        suggest: SuggestFn,
        now: Optional[datetime] = None,
        max_concurrency: int = MAX_CONCURRENT_ENRICHMENTS
) -> Tuple[List[DailyTask], List[str]]:
    """
    Attach a demo-video suggestion, a stable id and the editable flag to every task.

    Suggestions are requested concurrently. A failed or empty suggestion leaves
    ``demo_video_suggestion`` unset and is reported in the returned caveats;
    it never fails the other tasks.
    """
    now = now or datetime.utcnow()
    timestamp_ms = _epoch_ms(now)
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _suggest(draft: TaskDraft) -> str:
        async with semaphore:
            return await suggest(draft.description, locale)

    settled = await asyncio.gather(
        *(_suggest(draft) for draft in drafts),
        return_exceptions=True
    )

    tasks = []
    caveats = []
    for index, (draft, outcome) in enumerate(zip(drafts, settled)):
        task_id = make_task_id(timestamp_ms, index)
        suggestion = None
        if isinstance(outcome, BaseException):
            # Cancellation of the whole run still propagates
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            logger.warning("Demo video suggestion failed for %s: %s", task_id, outcome)
            caveats.append(f"demo_video_suggestion_missing:{task_id}")
        elif not isinstance(outcome, str) or not outcome.strip():
            logger.warning("Empty demo video suggestion for %s", task_id)
            caveats.append(f"demo_video_suggestion_missing:{task_id}")
        else:
            suggestion = outcome.strip()

        tasks.append(DailyTask(
            id=task_id,
            title=draft.title,
            description=draft.description,
            why_it_matters=draft.why_it_matters,
            weekly_goal_index=draft.weekly_goal_index,
            demo_video_suggestion=suggestion,
            editable=True,
            created_at=now
        ))

    return tasks, caveats
