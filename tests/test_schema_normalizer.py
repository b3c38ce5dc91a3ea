from mediminds.services.schema_normalizer import normalize_therapy_type, normalize_weekly_goals


def test_legacy_string_goals_get_null_category():
    goals = normalize_weekly_goals(["say 10 new words", "follow two-step instructions"])

    assert goals == [
        {"goal": "say 10 new words", "category": None},
        {"goal": "follow two-step instructions", "category": None}
    ]


def test_normalizing_twice_is_a_no_op():
    legacy = ["say 10 new words", "follow two-step instructions"]
    current = [{"goal": "improve balance", "category": "motor"}]

    for raw in (legacy, current):
        once = normalize_weekly_goals(raw)
        assert normalize_weekly_goals(once) == once


def test_mixed_shapes_keep_order():
    goals = normalize_weekly_goals([
        {"goal": "name emotions", "category": "emotional"},
        "sit for circle time",
        {"goal": "jump with both feet", "category": "MOTOR"}
    ])

    assert [g["goal"] for g in goals] == ["name emotions", "sit for circle time", "jump with both feet"]
    assert [g["category"] for g in goals] == ["emotional", None, "motor"]


def test_unknown_category_becomes_null():
    goals = normalize_weekly_goals([{"goal": "read a book", "category": "literacy"}])
    assert goals[0]["category"] is None


def test_missing_goals_normalize_to_empty_list():
    assert normalize_weekly_goals(None) == []
    assert normalize_weekly_goals([]) == []


def test_therapy_type_defaults_to_behavior():
    assert normalize_therapy_type("speech") == "speech"
    assert normalize_therapy_type(" Motor ") == "motor"
    assert normalize_therapy_type(None) == "behavior"
    assert normalize_therapy_type("music") == "behavior"


def test_stored_scalar_goal_reads_as_single_goal():
    assert normalize_weekly_goals(5) == [{"goal": "5", "category": None}]
