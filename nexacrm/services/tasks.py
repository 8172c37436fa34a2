"""Task ordering and completion rules."""

from datetime import date

from nexacrm.core.time import utc_now
from nexacrm.models.task import Task

PRIORITY_RANK = {"urgent": 1, "high": 2, "medium": 3, "low": 4}
TASK_STATUSES = ("todo", "in_progress", "done")


def sort_by_priority(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda t: PRIORITY_RANK.get(t.priority, PRIORITY_RANK["medium"]))


def apply_status(task: Task, new_status: str) -> None:
    """Set status, keeping completed_at populated exactly while the task is done."""
    if new_status == "done":
        if task.status != "done" or task.completed_at is None:
            task.completed_at = utc_now()
    else:
        task.completed_at = None
    task.status = new_status


def task_stats(tasks: list[Task], today: date) -> dict:
    total = len(tasks)
    done = sum(1 for t in tasks if t.status == "done")
    overdue = sum(1 for t in tasks if t.due_date and t.due_date < today and t.status != "done")
    return {
        "total": total,
        "done": done,
        "overdue": overdue,
        "by_status": [{"status": s, "count": sum(1 for t in tasks if t.status == s)} for s in TASK_STATUSES],
        "completion_rate": round(done / total * 100) if total else 0,
    }
