from portal.models import Notification, db

TYPES = (
    "application_submitted",
    "application_approved",
    "application_rejected",
    "application_feedback",
    "application_resubmitted",
    "job_application_status",
    "offer_letter_received",
    "offer_response_received",
    "evaluation_result",
    "intern_evaluation_submitted",
    "company_misconduct_report",
    "misconduct_update",
    "weekly_report_assigned",
    "weekly_report_submitted",
    "weekly_report_reviewed",
    "joining_report_submitted",
    "joining_report_verified",
    "internship_report_submitted",
    "internship_report_reviewed",
    "system_announcement",
)

PRIORITIES = ("low", "medium", "high", "urgent")


def notify(user_id, kind, title, message, entity=None, priority="medium"):
    """Queue a notification on the current session; the caller commits."""
    if kind not in TYPES:
        raise ValueError(f"Unknown notification type: {kind}")
    if priority not in PRIORITIES:
        raise ValueError(f"Unknown priority: {priority}")

    notification = Notification(
        user_id=user_id,
        type=kind,
        title=title,
        message=message,
        priority=priority,
    )
    if entity is not None:
        if entity.id is None:
            db.session.flush()
        notification.related_entity_type = entity.__class__.__name__
        notification.related_entity_id = entity.id
    db.session.add(notification)
    return notification
