"""Application status rules.

An application carries two tracks. ``overall_status`` follows the review
chain (supervisor first, then company); ``application_status`` follows the
company's interview and hiring decisions once the supervisor has approved.
"""
from portal.api import APIError, Conflict
from portal.models import Application

OVERALL_STATUSES = (
    "pending_supervisor",
    "supervisor_changes_requested",
    "resubmitted_to_supervisor",
    "pending_company",
    "approved",
    "rejected",
)

APPLICATION_STATUSES = ("pending", "interview_scheduled", "interview_done", "hired", "rejected")

SUPERVISOR_REVIEWABLE = ("pending_supervisor", "resubmitted_to_supervisor")

TRANSITIONS = {
    "pending": {"interview_scheduled", "hired", "rejected"},
    "interview_scheduled": {"interview_scheduled", "interview_done", "hired", "rejected"},
    "interview_done": {"hired", "rejected"},
    "hired": set(),
    "rejected": set(),
}


def is_active(application):
    """An application still blocks the student from applying elsewhere."""
    return (
        application.application_status != "rejected"
        and application.overall_status != "rejected"
    )


def ensure_supervisor_can_review(application):
    if application.overall_status not in SUPERVISOR_REVIEWABLE:
        raise Conflict(f"Application is not awaiting supervisor review ({application.overall_status})")


def ensure_supervisor_approved(application):
    if application.supervisor_status != "approved":
        raise APIError("Supervisor approval required before the company can act on this application")


def ensure_company_can_review(application):
    ensure_supervisor_approved(application)
    if application.overall_status != "pending_company":
        raise Conflict(f"Application is not awaiting company review ({application.overall_status})")


def ensure_transition(application, new_status):
    if new_status not in TRANSITIONS:
        raise APIError("Invalid status")
    current = application.application_status
    if new_status not in TRANSITIONS[current]:
        raise Conflict(f"Cannot move application from {current} to {new_status}")


def approved_application(student_id):
    """The student's supervisor-approved application that is still live."""
    return (
        Application.query.filter(
            Application.student_id == student_id,
            Application.supervisor_status == "approved",
            Application.overall_status != "rejected",
            Application.application_status != "rejected",
        )
        .order_by(Application.applied_at.desc())
        .first()
    )


def hired_application(student_id):
    return (
        Application.query.filter_by(student_id=student_id, application_status="hired")
        .order_by(Application.hiring_date.desc())
        .first()
    )


def close_if_full(job):
    """Close a job once its hire limit is reached. Returns True if it is full."""
    if job.hired_count < job.application_limit:
        return False
    job.status = "Closed"
    return True
