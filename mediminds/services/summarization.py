"""
Summarization stage: turns the language model's JSON into a validated draft plan.

The capability itself is a black box returning JSON text. This module owns
decoding, required-field checks and the goal-index repair rules. Format
problems raise ``UpstreamFormatError`` (the therapist retries the whole
pipeline); bad goal indices are clamped and logged, since a human reviews the
plan before parents see it.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..errors import UpstreamFormatError, ValidationError
from .schema_normalizer import normalize_therapy_type, normalize_weekly_goals

logger = logging.getLogger(__name__)

SummarizeFn = Callable[[str, str], Awaitable[Union[str, Dict[str, Any]]]]


@dataclass
class TaskDraft:
    title: str
    description: str
    why_it_matters: str
    weekly_goal_index: int


@dataclass
class SummaryResult:
    summary: str
    therapy_type: str
    weekly_goals: List[Dict[str, Optional[str]]]
    daily_tasks: List[TaskDraft] = field(default_factory=list)
    # Human-readable notes about repaired fields
    warnings: List[str] = field(default_factory=list)


def _decode_payload(payload: Union[str, bytes, Dict[str, Any], None]) -> Dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    if payload is None:
        raise UpstreamFormatError("Summarization returned an empty response")
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")

    # Models sometimes wrap JSON in markdown fences
    cleaned = re.sub(r'^```(?:json)?\s*', '', payload.strip())
    cleaned = re.sub(r'\s*```$', '', cleaned)
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise UpstreamFormatError(f"Summarization response is not valid JSON: {e}") from e

    if not isinstance(decoded, dict):
        raise UpstreamFormatError("Summarization response is not a JSON object")
    return decoded


def check_goal_index(raw_index: Any, goal_count: int) -> int:
    """Return the index if it addresses an existing goal, else raise ValidationError"""
    if isinstance(raw_index, bool) or not isinstance(raw_index, (int, float)):
        raise ValidationError(f"weeklyGoalIndex {raw_index!r} is not an integer")
    if isinstance(raw_index, float) and not raw_index.is_integer():
        raise ValidationError(f"weeklyGoalIndex {raw_index!r} is not an integer")
    index = int(raw_index)
    if not 0 <= index < goal_count:
        raise ValidationError(f"weeklyGoalIndex {index} outside [0, {goal_count})")
    return index


def clamp_goal_index(raw_index: Any, goal_count: int) -> int:
    """Nearest valid goal index: too high goes to the last goal, anything else to 0"""
    try:
        index = int(raw_index)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(min(index, goal_count - 1), 0)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_summary_payload(payload: Union[str, bytes, Dict[str, Any], None]) -> SummaryResult:
    data = _decode_payload(payload)

    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise UpstreamFormatError("Summarization response is missing 'summary'")

    raw_tasks = data.get("dailyTasks")
    if not isinstance(raw_tasks, list):
        raise UpstreamFormatError("Summarization response is missing 'dailyTasks'")

    raw_goals = data.get("weeklyGoals")
    if raw_goals is not None and not isinstance(raw_goals, (list, str, dict)):
        raise UpstreamFormatError(f"'weeklyGoals' has unexpected type {type(raw_goals).__name__}")
    weekly_goals = normalize_weekly_goals(raw_goals)
    if raw_tasks and not weekly_goals:
        raise UpstreamFormatError("Summarization returned daily tasks but no weekly goals")

    result = SummaryResult(
        summary=summary.strip(),
        therapy_type=normalize_therapy_type(data.get("therapyType")),
        weekly_goals=weekly_goals
    )

    for position, raw_task in enumerate(raw_tasks):
        if not isinstance(raw_task, dict):
            raise UpstreamFormatError(f"dailyTasks[{position}] is not an object")

        raw_index = raw_task.get("weeklyGoalIndex")
        try:
            index = check_goal_index(raw_index, len(weekly_goals))
        except ValidationError as e:
            index = clamp_goal_index(raw_index, len(weekly_goals))
            message = f"dailyTasks[{position}]: {e}; clamped to {index}"
            logger.warning("Data quality: %s", message)
            result.warnings.append(message)

        result.daily_tasks.append(TaskDraft(
            title=_text(raw_task.get("title")),
            description=_text(raw_task.get("description")),
            why_it_matters=_text(raw_task.get("whyItMatters")),
            weekly_goal_index=index
        ))

    return result


async def summarize_transcript(transcript: str, locale: str, summarize: SummarizeFn) -> SummaryResult:
    """Run the summarization capability and validate what it returns"""
    payload = await summarize(transcript, locale)
    result = parse_summary_payload(payload)
    logger.info(
        "Summary parsed: therapy_type=%s, goals=%d, tasks=%d",
        result.therapy_type, len(result.weekly_goals), len(result.daily_tasks)
    )
    return result
