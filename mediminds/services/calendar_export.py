from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from ..schemas.treatment_plan import DailyTask

PRODID = "-//MediMinds//Therapy Tasks//EN"
UID_DOMAIN = "mediminds.com"


def format_ics_timestamp(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.strftime("%Y%m%dT%H%M%SZ")


def build_task_calendar(tasks: Iterable[DailyTask], now: Optional[datetime] = None) -> str:
    """
    One VEVENT per task: task N starts N days from now, lasts an hour
    and has a display alarm 30 minutes before.
    """
    now = now or datetime.utcnow()
    stamp = format_ics_timestamp(now)

    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}"]
    for index, task in enumerate(tasks):
        start = now + timedelta(days=index)
        end = start + timedelta(hours=1)
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:task-{task.id}@{UID_DOMAIN}",
            f"DTSTAMP:{stamp}",
            f"DTSTART:{format_ics_timestamp(start)}",
            f"DTEND:{format_ics_timestamp(end)}",
            f"SUMMARY:{task.title}",
            f"DESCRIPTION:{task.description}\\n\\nWhy it matters: {task.why_it_matters}",
            "BEGIN:VALARM",
            "TRIGGER:-PT30M",
            "ACTION:DISPLAY",
            f"DESCRIPTION:Reminder: {task.title}",
            "END:VALARM",
            "END:VEVENT"
        ])
    lines.append("END:VCALENDAR")
    return "\n".join(lines)
