"""
Command normalizer.

Turns the loosely shaped object returned by the language model into exactly
one command: CaptureTask, CaptureTaskBatch or ApplyView. Nothing in here
raises for malformed model output. Each step is a small repair that is total
over its input; repairs are logged, never reported as failures.

The screen the user was on (view context) is always passed in explicitly and
only ever fills gaps through CONTEXT_RULES.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Optional, Union

from config import config
from models import (
    ApplyView,
    CaptureTask,
    CaptureTaskBatch,
    DateRange,
    DateScope,
    FilterState,
    ScreenName,
    Source,
    TaskStatus,
)

logger = logging.getLogger(__name__)

CAPTURE_TASK = "CAPTURE_TASK"
GENERATE_VIEW = "GENERATE_VIEW"

# Keys are upper-cased with spaces and dashes turned into underscores
INTENT_SPELLINGS = {
    "CAPTURE_TASK": CAPTURE_TASK,
    "CAPTURE": CAPTURE_TASK,
    "CREATE": CAPTURE_TASK,
    "CREATE_TASK": CAPTURE_TASK,
    "ADD_TASK": CAPTURE_TASK,
    "GENERATE_VIEW": GENERATE_VIEW,
    "VIEW": GENERATE_VIEW,
    "APPLY_VIEW": GENERATE_VIEW,
    "FILTER": GENERATE_VIEW,
}

# canonical field -> alternate names, tried in order when the canonical is missing
TOP_LEVEL_ALIASES = {
    "intent": ("action", "operation"),
    "task": ("taskData", "task_data"),
    "tasks": ("items", "taskList", "task_list"),
    "view": ("viewData", "view_data"),
}

TASK_ALIASES = {
    "title": ("name",),
    "action_date": ("actionDate", "due_date", "dueDate", "due"),
    "time_estimate": ("timeEstimate",),
    "occurred_date": ("occurredDate",),
    "is_routine": ("isRoutine",),
}

VIEW_ALIASES = {
    "view_name": ("viewName", "name"),
    "filters": ("filter",),
}

FILTER_ALIASES = {
    "date_scope": ("dateScope",),
    "action_date_range": ("actionDateRange", "date_range", "dateRange"),
}

ENVELOPE_KEYS = ("response", "data")
MAX_ENVELOPE_DEPTH = 3

# Keys are lower-cased with separators removed
STATUS_ALIASES = {
    "active": TaskStatus.ACTIVE,
    "waitingon": TaskStatus.WAITING_ON,
    "waiting": TaskStatus.WAITING_ON,
    "somedaymaybe": TaskStatus.SOMEDAY_MAYBE,
    "someday": TaskStatus.SOMEDAY_MAYBE,
    "maybe": TaskStatus.SOMEDAY_MAYBE,
    "archived": TaskStatus.ARCHIVED,
    "archive": TaskStatus.ARCHIVED,
}

DATE_SCOPE_ALIASES = {
    "all": DateScope.ALL,
    "today": DateScope.TODAY,
    "thisweek": DateScope.THIS_WEEK,
    "week": DateScope.THIS_WEEK,
    "overdue": DateScope.OVERDUE,
}

SOURCE_ALIASES = {
    "text": "manual",
    "voice": "voice",
    "email": "email",
    "transcript": "transcript",
    "manual": "manual",
}

DEFAULT_TITLE = "New Task"
DEFAULT_VIEW_NAME = "Custom View"


@dataclass(frozen=True)
class ContextRules:
    """Gap-filling defaults tied to the screen the input came from."""
    action_date_today: bool = False
    routine_default: bool = False


NO_RULES = ContextRules()

CONTEXT_RULES = MappingProxyType({
    ScreenName.TODAY: ContextRules(action_date_today=True),
    ScreenName.ROUTINES: ContextRules(routine_default=True),
})


def rules_for(view_context: Union[ScreenName, str, None]) -> ContextRules:
    if view_context is None:
        return NO_RULES
    if isinstance(view_context, ScreenName):
        return CONTEXT_RULES.get(view_context, NO_RULES)
    try:
        screen = ScreenName(str(view_context).strip().lower())
    except ValueError:
        logger.info("Unknown view context %r; no context rules applied", view_context)
        return NO_RULES
    return CONTEXT_RULES.get(screen, NO_RULES)


# --- Scalar coercions ---

def _compact(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value: Any) -> str:
    """Trimmed string form of a scalar; anything else becomes ''."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def coerce_strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        if value is not None:
            logger.debug("Expected a list, got %s; using []", type(value).__name__)
        return []
    cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return list(dict.fromkeys(cleaned))


def coerce_status(value: Any) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    if isinstance(value, str):
        status = STATUS_ALIASES.get(_compact(value))
        if status is not None:
            return status
    if value is not None:
        logger.info("Unrecognized status %r; defaulting to Active", value)
    return TaskStatus.ACTIVE


def coerce_source(value: Any) -> Source:
    if isinstance(value, str):
        return Source(type=SOURCE_ALIASES.get(value.strip().lower(), "manual"))
    if isinstance(value, dict):
        raw_type = value.get("type")
        source_type = SOURCE_ALIASES.get(raw_type.strip().lower(), "manual") if isinstance(raw_type, str) else "manual"
        source_id = clean_text(value.get("id")) or None
        return Source(type=source_type, id=source_id)
    return Source()


def coerce_date(value: Any) -> Optional[date]:
    """ISO date (or the date part of an ISO datetime); anything else is None."""
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().split("T")[0].split(" ")[0]
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
    logger.info("Dropping unparseable date %r", value)
    return None


def coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
    return None


# --- Structural repair steps ---

def unwrap_envelope(raw: Any) -> dict:
    """Strip 'response' / 'data' wrappers some models put around the payload."""
    if isinstance(raw, list):
        logger.info("Model output is a bare list; treating it as the task list")
        return {"tasks": raw}
    if not isinstance(raw, dict):
        logger.info("Model output is %s, not an object; treating as empty", type(raw).__name__)
        return {}
    payload = raw
    for _ in range(MAX_ENVELOPE_DEPTH):
        inner = next((payload[key] for key in ENVELOPE_KEYS if isinstance(payload.get(key), dict)), None)
        if inner is None:
            break
        payload = inner
    return dict(payload)


def apply_aliases(obj: dict, aliases: dict) -> dict:
    """Copy of obj with alias values moved into missing canonical fields."""
    result = dict(obj)
    for canonical, alternates in aliases.items():
        if not _is_missing(result.get(canonical)):
            continue
        for alternate in alternates:
            if not _is_missing(result.get(alternate)):
                logger.debug("Using %r for missing %r", alternate, canonical)
                result[canonical] = result[alternate]
                break
    return result


def _has_task_shape(payload: dict) -> bool:
    return (
        isinstance(payload.get("task"), dict)
        or (isinstance(payload.get("tasks"), list) and bool(payload["tasks"]))
        or bool(clean_text(payload.get("title")))
    )


def resolve_intent(payload: dict) -> str:
    value = payload.get("intent")
    if isinstance(value, str) and value.strip():
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        if key in INTENT_SPELLINGS:
            return INTENT_SPELLINGS[key]
        logger.info("Unrecognized intent %r; inferring from shape", value)

    if _has_task_shape(payload):
        return CAPTURE_TASK
    if isinstance(payload.get("view"), dict):
        return GENERATE_VIEW
    return CAPTURE_TASK


def dedupe_items(items: Any) -> list[dict]:
    """Drop blank titles and case/whitespace duplicates; first occurrence wins."""
    if not isinstance(items, list):
        return []
    seen = set()
    unique = []
    for item in items:
        if not isinstance(item, dict):
            continue
        item = apply_aliases(item, TASK_ALIASES)
        title = clean_text(item.get("title"))
        if not title:
            continue
        key = title.casefold()
        if key in seen:
            logger.info("Dropping duplicate task %r", title)
            continue
        seen.add(key)
        unique.append(item)
    return unique


def fallback_title(free_text: str, position: Optional[int] = None) -> str:
    if position is not None:
        return f"Task {position + 1}"
    text = (free_text or "").strip()[:config["title_max_length"]].strip()
    return text or DEFAULT_TITLE


# --- Command builders ---

def normalize_item(
    item: dict,
    free_text: str,
    rules: ContextRules = NO_RULES,
    today: Optional[date] = None,
    position: Optional[int] = None,
) -> CaptureTask:
    """Normalize one task-shaped dict; position is set for batch members."""
    item = apply_aliases(item, TASK_ALIASES)

    title = clean_text(item.get("title"))
    if not title:
        title = fallback_title(free_text, position)
        logger.info("Task has no title; using %r", title)

    is_routine = coerce_bool(item.get("is_routine"))
    if is_routine is None:
        is_routine = rules.routine_default

    action_date = coerce_date(item.get("action_date"))
    if action_date is None and rules.action_date_today:
        action_date = today or date.today()

    return CaptureTask(
        title=title,
        tags=coerce_strings(item.get("tags")),
        status=coerce_status(item.get("status")),
        action_date=action_date,
        time_estimate=clean_text(item.get("time_estimate")) or None,
        context=clean_text(item.get("context")) or None,
        participants=coerce_strings(item.get("participants")),
        occurred_date=coerce_date(item.get("occurred_date")),
        source=coerce_source(item.get("source")),
        is_routine=is_routine,
    )


def normalize_capture(
    payload: dict,
    free_text: str,
    rules: ContextRules = NO_RULES,
    today: Optional[date] = None,
) -> Union[CaptureTask, CaptureTaskBatch]:
    items = dedupe_items(payload.get("tasks"))
    if len(items) > 1:
        return CaptureTaskBatch(items=[
            normalize_item(item, free_text, rules, today, position=index)
            for index, item in enumerate(items)
        ])
    if len(items) == 1:
        # A batch of one is a single task
        return normalize_item(items[0], free_text, rules, today)

    task = payload.get("task")
    if not isinstance(task, dict) and clean_text(payload.get("title")):
        task = payload
    if isinstance(task, dict):
        return normalize_item(task, free_text, rules, today)

    logger.info("No task payload in model output; capturing the raw text")
    return normalize_item({}, free_text, rules, today)


def normalize_filters(value: Any) -> FilterState:
    filters = apply_aliases(value, FILTER_ALIASES) if isinstance(value, dict) else {}

    statuses = []
    raw_statuses = filters.get("status")
    if isinstance(raw_statuses, list):
        for raw in raw_statuses:
            status = STATUS_ALIASES.get(_compact(raw)) if isinstance(raw, str) else None
            if status is None:
                logger.info("Dropping unknown status filter %r", raw)
            elif status not in statuses:
                statuses.append(status)

    date_scope = DateScope.ALL
    raw_scope = filters.get("date_scope")
    if isinstance(raw_scope, str):
        date_scope = DATE_SCOPE_ALIASES.get(_compact(raw_scope), DateScope.ALL)

    date_range = None
    raw_range = filters.get("action_date_range")
    if isinstance(raw_range, dict):
        start = coerce_date(raw_range.get("start"))
        end = coerce_date(raw_range.get("end"))
        if start is not None or end is not None:
            date_range = DateRange(start=start, end=end)

    return FilterState(
        tags=coerce_strings(filters.get("tags")),
        status=statuses,
        date_scope=date_scope,
        action_date_range=date_range,
    )


def normalize_view(view: dict) -> ApplyView:
    view = apply_aliases(view, VIEW_ALIASES)
    return ApplyView(
        view_name=clean_text(view.get("view_name")) or DEFAULT_VIEW_NAME,
        description=clean_text(view.get("description")),
        filters=normalize_filters(view.get("filters")),
    )


def normalize(
    raw: Any,
    free_text: str,
    view_context: Union[ScreenName, str, None] = None,
    today: Optional[date] = None,
) -> Union[CaptureTask, CaptureTaskBatch, ApplyView]:
    """
    Normalize raw model output into a command.

    raw: whatever the model returned, parsed from JSON
    free_text: the user's original input, used to backfill a missing title
    view_context: screen the user was on; selects the CONTEXT_RULES entry
    today: date used by context rules (defaults to the local date)
    """
    rules = rules_for(view_context)
    payload = apply_aliases(unwrap_envelope(raw), TOP_LEVEL_ALIASES)

    if resolve_intent(payload) == GENERATE_VIEW:
        view = payload.get("view")
        if isinstance(view, dict):
            return normalize_view(view)
        logger.info("View intent without a view payload; falling back to task capture")

    return normalize_capture(payload, free_text, rules, today)
