"""Activity log services for recording user actions."""

from nexacrm.models.activity_log import ActivityLog


def log_activity(db, user_id: int, action: str, entity_id: int | None, details: str, entity_type: str = "lead") -> ActivityLog:
    entry = ActivityLog(user_id=user_id, action=action, entity_type=entity_type, entity_id=entity_id, details=details)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry
