"""
Canonical shapes for plan fields whose stored form changed over time.

Weekly goals used to be saved as bare strings; current plans store
``{"goal": str, "category": therapy type | None}`` objects. Everything that
reads goals goes through ``normalize_weekly_goals`` first, so no other module
has to know about the old shape.
"""
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

THERAPY_TYPES = ("speech", "behavior", "emotional", "motor")
DEFAULT_THERAPY_TYPE = "behavior"


def _normalize_category(raw: Any) -> Optional[str]:
    if isinstance(raw, str) and raw.strip().lower() in THERAPY_TYPES:
        return raw.strip().lower()
    return None


def normalize_therapy_type(raw: Any, default: str = DEFAULT_THERAPY_TYPE) -> str:
    """Map any value onto the closed therapy-type set"""
    category = _normalize_category(raw)
    if category is None:
        if raw not in (None, ""):
            logger.warning("Unrecognized therapy type %r, using %r", raw, default)
        return default
    return category


def normalize_weekly_goals(raw: Any) -> List[Dict[str, Optional[str]]]:
    """
    Return weekly goals as an ordered list of ``{"goal", "category"}`` dicts.

    Accepts None, legacy string lists, current object lists or a mix of both.
    Unknown categories become None. A lone goal of any other shape is treated
    as a one-element list. Idempotent.
    """
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raw = [raw]

    goals = []
    for entry in raw:
        if entry is None:
            continue
        if isinstance(entry, dict):
            goals.append({
                "goal": str(entry.get("goal") or ""),
                "category": _normalize_category(entry.get("category"))
            })
        else:
            goals.append({"goal": str(entry), "category": None})
    return goals
