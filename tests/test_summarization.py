import asyncio
import json
import logging

import pytest

from mediminds.errors import UpstreamFormatError, ValidationError
from mediminds.services.summarization import (
    check_goal_index,
    clamp_goal_index,
    parse_summary_payload,
    summarize_transcript
)


def _payload(**overrides):
    data = {
        "summary": "Practice speech sounds at home.",
        "therapyType": "speech",
        "weeklyGoals": [
            {"goal": "produce /s/ in words", "category": "speech"},
            {"goal": "use three-word phrases", "category": "speech"}
        ],
        "dailyTasks": [
            {"title": "Snake sounds", "description": "Hiss like a snake", "whyItMatters": "Warms up /s/",
             "weeklyGoalIndex": 0},
            {"title": "Snack requests", "description": "Ask for snacks in 3 words", "whyItMatters": "Builds phrases",
             "weeklyGoalIndex": 1}
        ]
    }
    data.update(overrides)
    return data


def test_valid_payload_is_parsed():
    result = parse_summary_payload(json.dumps(_payload()))

    assert result.summary == "Practice speech sounds at home."
    assert result.therapy_type == "speech"
    assert len(result.weekly_goals) == 2
    assert [t.weekly_goal_index for t in result.daily_tasks] == [0, 1]
    assert result.daily_tasks[0].why_it_matters == "Warms up /s/"
    assert result.warnings == []


def test_markdown_fenced_json_is_accepted():
    text = "```json\n" + json.dumps(_payload()) + "\n```"
    assert parse_summary_payload(text).summary


def test_unparsable_payload_raises_upstream_format_error():
    with pytest.raises(UpstreamFormatError):
        parse_summary_payload("Sorry, I cannot help with that.")


def test_json_array_is_rejected():
    with pytest.raises(UpstreamFormatError):
        parse_summary_payload("[1, 2, 3]")


@pytest.mark.parametrize("field", ["summary", "dailyTasks"])
def test_missing_required_field_raises(field):
    data = _payload()
    del data[field]
    with pytest.raises(UpstreamFormatError):
        parse_summary_payload(data)


def test_blank_summary_raises():
    with pytest.raises(UpstreamFormatError):
        parse_summary_payload(_payload(summary="   "))


def test_tasks_without_goals_raise():
    with pytest.raises(UpstreamFormatError):
        parse_summary_payload(_payload(weeklyGoals=[]))


@pytest.mark.parametrize("goals", [5, True, 3.5])
def test_scalar_weekly_goals_raise_upstream_format_error(goals):
    with pytest.raises(UpstreamFormatError, match="weeklyGoals"):
        parse_summary_payload(_payload(weeklyGoals=goals, dailyTasks=[]))


def test_missing_therapy_type_defaults_to_behavior():
    data = _payload()
    del data["therapyType"]
    assert parse_summary_payload(data).therapy_type == "behavior"


def test_unrecognized_therapy_type_defaults_to_behavior():
    assert parse_summary_payload(_payload(therapyType="art")).therapy_type == "behavior"


def test_legacy_string_goals_are_normalized():
    result = parse_summary_payload(_payload(weeklyGoals=["produce /s/", "three-word phrases"]))
    assert result.weekly_goals == [
        {"goal": "produce /s/", "category": None},
        {"goal": "three-word phrases", "category": None}
    ]


def test_out_of_range_index_is_clamped_and_logged(caplog):
    data = _payload()
    data["dailyTasks"][1]["weeklyGoalIndex"] = 7

    with caplog.at_level(logging.WARNING, logger="mediminds.services.summarization"):
        result = parse_summary_payload(data)

    assert result.daily_tasks[1].weekly_goal_index == 1
    assert len(result.warnings) == 1
    assert "clamped to 1" in caplog.text


@pytest.mark.parametrize("raw", [-3, None, "first", 0.5])
def test_invalid_low_or_non_numeric_index_goes_to_first_goal(raw):
    data = _payload()
    data["dailyTasks"][0]["weeklyGoalIndex"] = raw
    assert parse_summary_payload(data).daily_tasks[0].weekly_goal_index == 0


def test_every_task_index_is_within_goal_range():
    data = _payload()
    data["dailyTasks"] = [
        {"title": f"t{i}", "description": "d", "whyItMatters": "w", "weeklyGoalIndex": i - 2}
        for i in range(6)
    ]
    result = parse_summary_payload(data)
    assert all(0 <= t.weekly_goal_index < len(result.weekly_goals) for t in result.daily_tasks)


def test_check_goal_index():
    assert check_goal_index(1, 2) == 1
    assert check_goal_index(1.0, 2) == 1
    with pytest.raises(ValidationError):
        check_goal_index(2, 2)
    with pytest.raises(ValidationError):
        check_goal_index(True, 2)


def test_clamp_goal_index():
    assert clamp_goal_index(7, 2) == 1
    assert clamp_goal_index(-1, 2) == 0
    assert clamp_goal_index("x", 2) == 0
    assert clamp_goal_index(3, 0) == 0


def test_summarize_transcript_passes_locale():
    seen = {}

    async def summarize(transcript, locale):
        seen["args"] = (transcript, locale)
        return json.dumps(_payload())

    result = asyncio.run(summarize_transcript("hello", "ar", summarize))

    assert seen["args"] == ("hello", "ar")
    assert result.therapy_type == "speech"
