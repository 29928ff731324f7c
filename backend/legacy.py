"""
Backward-compatibility pass from the old categorical attributes
(area / energy / location / type) onto flat vocabulary tags.

Not used on the live request path; run once per legacy record.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from models import Source, Task, TaskStatus

AREA_TO_TAGS = {
    "Professional": ["Work"],
    "Personal": ["Personal"],
    "Domestic": ["Personal", "Errand"],
    "Social": ["People", "Social"],
}

ENERGY_TO_TAGS = {
    "Low": ["Braindead"],
    "Medium": ["QuickWin"],
    "High": ["HeavyLift"],
}

LOCATION_TO_TAGS = {
    "Home": ["Offline"],
    "Office": ["Work", "Offline"],
    "Computer": ["Tech"],
    "Errands": ["Errand", "Offline"],
}

TYPE_TO_TAGS = {
    "Task": [],
    "Project": ["Multi-Session"],
    "Idea": ["Creative"],
}


class LegacyTask(BaseModel):
    id: str
    title: str
    is_completed: bool = False
    type: Optional[str] = None
    area: Optional[str] = None
    energy: Optional[str] = None
    time_estimate: Optional[str] = None
    location: Optional[str] = None
    due_date: Optional[date] = None
    is_urgent: Optional[bool] = None
    created_at: datetime
    occurred_date: Optional[date] = None
    participants: list[str] = Field(default_factory=list)
    context: Optional[str] = None
    source: Optional[Source] = None
    linked_tasks: list[str] = Field(default_factory=list)


def duration_tags(time_estimate: Optional[str]) -> list[str]:
    """Coarse duration tag from a free-form estimate like '45min' or '2 hours'."""
    if not time_estimate:
        return []
    lower = time_estimate.lower()
    if "min" in lower:
        return ["Minutes"]
    if "hr" in lower or "hour" in lower:
        return ["Hours"]
    return []


def legacy_tags(
    area: Optional[str] = None,
    energy: Optional[str] = None,
    location: Optional[str] = None,
    item_type: Optional[str] = None,
    time_estimate: Optional[str] = None,
) -> list[str]:
    tags = []
    tags += AREA_TO_TAGS.get(area, [])
    tags += ENERGY_TO_TAGS.get(energy, [])
    tags += LOCATION_TO_TAGS.get(location, [])
    tags += TYPE_TO_TAGS.get(item_type, [])
    tags += duration_tags(time_estimate)

    # Headspace inferred from the combination
    if area == "Professional" and energy == "High":
        tags.append("DeepFocus")
    elif energy == "Low":
        tags.append("Admin")

    return list(dict.fromkeys(tags))


def migrate_task(legacy: LegacyTask) -> Task:
    return Task(
        id=legacy.id,
        title=legacy.title,
        is_completed=legacy.is_completed,
        status=TaskStatus.ACTIVE,
        created_at=legacy.created_at,
        action_date=legacy.due_date,
        tags=legacy_tags(legacy.area, legacy.energy, legacy.location, legacy.type, legacy.time_estimate),
        time_estimate=legacy.time_estimate,
        context=legacy.context,
        participants=legacy.participants,
        occurred_date=legacy.occurred_date,
        source=legacy.source,
        linked_tasks=legacy.linked_tasks,
    )


def migrate_tasks(legacy_tasks: list[LegacyTask]) -> list[Task]:
    return [migrate_task(t) for t in legacy_tasks]
