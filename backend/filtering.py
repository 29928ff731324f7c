"""
Faceted filter & sort engine.

Every screen that renders a task list goes through filter_tasks(), so the
facet semantics live here and nowhere else:

- status: empty selection passes, otherwise task.status must be selected
- tags: empty selection passes, otherwise the task must carry ALL selected tags
- date scope: evaluated on action_date, falling back to created_at
- action date range: optional explicit window on action_date

Results are sorted incomplete-first, then by action_date/created_at, newest
first. The engine is pure: the only notion of "now" is the argument.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from models import DateRange, DateScope, FilterState, Task, TaskStatus

STATUS_PRIORITY = {
    TaskStatus.ACTIVE: 0,
    TaskStatus.WAITING_ON: 1,
    TaskStatus.SOMEDAY_MAYBE: 2,
    TaskStatus.ARCHIVED: 3,
}

WEEK = timedelta(days=7)
_NAIVE_EPOCH = datetime(1970, 1, 1)
_UTC_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ListOptions:
    """Per-screen variations on the same filter/sort pipeline."""
    search: Optional[str] = None  # Case-insensitive substring on title
    search_tags: bool = False  # Also match the search text against tags
    status_priority: bool = False  # Order by STATUS_PRIORITY after completion


DEFAULT_LIST = ListOptions()


def today_list_options(search: Optional[str] = None) -> ListOptions:
    return ListOptions(search=search, status_priority=True)


def library_list_options(search: Optional[str] = None) -> ListOptions:
    return ListOptions(search=search, search_tags=True)


def _align(moment: datetime, zone: Optional[tzinfo]) -> datetime:
    """Express moment in zone so it compares with other aligned values."""
    if zone is None:
        if moment.tzinfo is None:
            return moment
        # A naive now is read in the moment's own zone
        return moment.replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def effective_instant(task: Task, zone: Optional[tzinfo] = None) -> datetime:
    """action_date at midnight if set, otherwise created_at."""
    if task.action_date is not None:
        return datetime.combine(task.action_date, time.min, tzinfo=zone)
    return _align(task.created_at, zone)


def target_date(task: Task, zone: Optional[tzinfo] = None) -> date:
    return effective_instant(task, zone).date()


def matches_status(task: Task, statuses: list[TaskStatus]) -> bool:
    return not statuses or task.status in statuses


def matches_tags(task: Task, tags: list[str]) -> bool:
    return not tags or set(tags).issubset(task.tags)


def matches_date_scope(task: Task, scope: DateScope, now: datetime) -> bool:
    if scope == DateScope.ALL:
        return True

    zone = now.tzinfo
    today = now.date()

    if scope == DateScope.TODAY:
        return target_date(task, zone) == today
    if scope == DateScope.THIS_WEEK:
        today_start = datetime.combine(today, time.min, tzinfo=zone)
        return today_start <= effective_instant(task, zone) <= today_start + WEEK
    if scope == DateScope.OVERDUE:
        # Completed tasks are never overdue
        return not task.is_completed and target_date(task, zone) < today
    return True


def matches_date_range(task: Task, date_range: Optional[DateRange]) -> bool:
    if date_range is None:
        return True
    if task.action_date is None:
        return date_range.start is None
    if date_range.start is not None and task.action_date < date_range.start:
        return False
    if date_range.end is not None and task.action_date > date_range.end:
        return False
    return True


def matches_search(task: Task, search: Optional[str], search_tags: bool = False) -> bool:
    query = (search or "").strip().casefold()
    if not query:
        return True
    if query in task.title.casefold():
        return True
    return search_tags and any(query in tag.casefold() for tag in task.tags)


def matches(task: Task, state: FilterState, now: datetime, options: ListOptions = DEFAULT_LIST) -> bool:
    return (
        matches_search(task, options.search, options.search_tags)
        and matches_status(task, state.status)
        and matches_tags(task, state.tags)
        and matches_date_scope(task, state.date_scope, now)
        and matches_date_range(task, state.action_date_range)
    )


def sort_tasks(
    tasks: Iterable[Task],
    zone: Optional[tzinfo] = None,
    status_priority: bool = False,
) -> list[Task]:
    """Stable sort: incomplete first, optional status ladder, then newest effective time."""
    epoch = _NAIVE_EPOCH if zone is None else _UTC_EPOCH

    def sort_key(task: Task):
        priority = STATUS_PRIORITY.get(task.status, len(STATUS_PRIORITY)) if status_priority else 0
        age = effective_instant(task, zone) - epoch
        return (task.is_completed, priority, -age)

    return sorted(tasks, key=sort_key)


def filter_tasks(
    tasks: Iterable[Task],
    state: FilterState,
    now: datetime,
    options: ListOptions = DEFAULT_LIST,
) -> list[Task]:
    matching = [task for task in tasks if matches(task, state, now, options)]
    return sort_tasks(matching, now.tzinfo, options.status_priority)


def today_list(
    tasks: Iterable[Task],
    state: FilterState,
    now: datetime,
    search: Optional[str] = None,
) -> list[Task]:
    return filter_tasks(tasks, state, now, today_list_options(search))
