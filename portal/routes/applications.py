from datetime import datetime

from flask import Blueprint, current_app

from portal.api import APIError, Conflict, Forbidden, NotFound, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import (
    ApplicationForm, ApplicationStatusForm, InterviewForm, RequestChangesForm,
    ResubmitForm, ReviewForm,
)
from portal.models import Application, Job, User, db
from portal.notifications import notify
from portal.workflow import (
    close_if_full, ensure_company_can_review, ensure_supervisor_approved,
    ensure_supervisor_can_review, ensure_transition, is_active,
)

bp = Blueprint("applications", __name__, url_prefix="/api/applications")


def _listing(query):
    applications = query.order_by(Application.applied_at.desc(), Application.id.desc()).all()
    return respond([a.to_dict() for a in applications])


def _for_supervisor(application_id):
    application = Application.query.filter_by(
        id=application_id, supervisor_id=current_user().id
    ).first()
    if application is None:
        raise NotFound("Application not found")
    return application


def _for_company(application_id):
    application = get_or_404(Application, application_id, "Application not found")
    if application.company_id != current_user().id:
        raise Forbidden("Not authorized to update this application")
    return application


# ================= APPLY JOB =================
@bp.route("", methods=["POST"])
@auth_required("student")
def submit_application():
    form = validate(ApplicationForm())
    student = current_user()

    existing = Application.query.filter_by(student_id=student.id).all()
    if any(a.job_id == form.job_id.data for a in existing):
        raise APIError("You have already applied for this job")
    if any(is_active(a) for a in existing):
        raise APIError(
            "You already have an active job application. "
            "Please wait for a response before applying to another job."
        )

    job = get_or_404(Job, form.job_id.data, "Job not found")
    if job.status != "Active":
        raise APIError("This job is no longer accepting applications")
    if job.hired_count >= job.application_limit:
        raise APIError("This job has reached its maximum number of hired students")

    supervisor = db.session.get(User, form.supervisor_id.data)
    if supervisor is None or supervisor.role != "supervisor":
        raise NotFound("Supervisor not found")

    profile = student.student_profile
    profile.supervisor_id = supervisor.id

    application = Application(
        student_id=student.id,
        job_id=job.id,
        company_id=job.posted_by,
        supervisor_id=supervisor.id,
        cover_letter=form.cover_letter.data,
        student_profile=profile.snapshot(),
        revisions=[{"type": "initial", "payload": {}, "note": "", "at": datetime.utcnow().isoformat()}],
    )
    db.session.add(application)
    notify(
        supervisor.id, "application_submitted", "New Application for Review",
        f"{student.name} applied for {job.title} and selected you as supervisor.",
        entity=application,
    )
    db.session.commit()

    current_app.logger.info("Application %s submitted by student %s for job %s", application.id, student.id, job.id)
    return respond(application.to_dict(), "Application submitted successfully", 201)


# ================= LISTINGS =================
@bp.route("/student")
@auth_required("student")
def student_applications():
    return _listing(Application.query.filter_by(student_id=current_user().id))


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_applications():
    return _listing(Application.query.filter_by(supervisor_id=current_user().id))


@bp.route("/supervisor/pending")
@auth_required("supervisor")
def supervisor_pending():
    return _listing(Application.query.filter(
        Application.supervisor_id == current_user().id,
        Application.overall_status.in_(("pending_supervisor", "resubmitted_to_supervisor")),
    ))


@bp.route("/supervisor/hired")
@auth_required("supervisor")
def supervisor_hired():
    return _listing(Application.query.filter_by(
        supervisor_id=current_user().id, application_status="hired"
    ))


@bp.route("/company")
@auth_required("company")
def company_applications():
    return _listing(Application.query.filter_by(
        company_id=current_user().id, supervisor_status="approved"
    ))


@bp.route("/<int:application_id>")
@auth_required()
def get_application(application_id):
    application = get_or_404(Application, application_id, "Application not found")
    user = current_user()
    parties = {application.student_id, application.company_id, application.supervisor_id}
    if user.id not in parties and user.role != "admin":
        raise Forbidden("Not authorized to view this application")
    return respond(application.to_dict())


# ================= SUPERVISOR REVIEW =================
@bp.route("/<int:application_id>/supervisor-review", methods=["PUT"])
@auth_required("supervisor")
def supervisor_review(application_id):
    form = validate(ReviewForm())
    application = _for_supervisor(application_id)
    ensure_supervisor_can_review(application)

    approved = form.status.data == "approved"
    application.supervisor_status = form.status.data
    application.supervisor_comments = form.comments.data or ""
    application.supervisor_reviewed_at = datetime.utcnow()
    application.overall_status = "pending_company" if approved else "rejected"

    if approved:
        notify(
            application.student_id, "application_approved", "Application Approved by Supervisor",
            f"Your application for {application.job.title} was approved and forwarded to {application.company.display_name}.",
            entity=application,
        )
    else:
        notify(
            application.student_id, "application_rejected", "Application Rejected by Supervisor",
            f"Your application for {application.job.title} was rejected by your supervisor.",
            entity=application,
        )
    db.session.commit()
    return respond(application.to_dict(), f"Application {form.status.data} successfully")


@bp.route("/<int:application_id>/request-changes", methods=["PATCH"])
@auth_required("supervisor")
def request_changes(application_id):
    form = validate(RequestChangesForm())
    application = _for_supervisor(application_id)
    ensure_supervisor_can_review(application)

    application.supervisor_status = "rejected"
    application.overall_status = "supervisor_changes_requested"
    application.supervisor_reviewed_at = datetime.utcnow()
    application.rejection_feedback = {
        "reason": form.reason.data,
        "details": form.details.data,
        "requested_fixes": form.requested_fixes.data,
        "fields_to_edit": form.fields_to_edit.data,
        "by_supervisor_id": current_user().id,
        "at": datetime.utcnow().isoformat(),
    }
    notify(
        application.student_id, "application_feedback", "Changes Requested on Your Application",
        f"Your supervisor requested changes: {form.reason.data}",
        entity=application, priority="high",
    )
    db.session.commit()
    return respond(application.to_dict(), "Feedback sent to student")


@bp.route("/<int:application_id>/resubmit", methods=["PATCH"])
@auth_required("student")
def resubmit(application_id):
    form = validate(ResubmitForm())
    application = Application.query.filter_by(
        id=application_id, student_id=current_user().id
    ).first()
    if application is None:
        raise NotFound("Application not found")
    if application.overall_status != "supervisor_changes_requested":
        raise Conflict("Application is not in a state that allows resubmission")

    payload = {"student_profile_updated": True}
    if form.cover_letter.data:
        application.cover_letter = form.cover_letter.data
        payload["cover_letter"] = form.cover_letter.data
    application.student_profile = current_user().student_profile.snapshot()

    application.overall_status = "resubmitted_to_supervisor"
    application.supervisor_status = "pending"
    application.rejection_feedback = None
    # reassign so the JSON column is flagged dirty
    application.revisions = (application.revisions or []) + [{
        "type": "resubmission",
        "payload": payload,
        "note": form.note.data or "",
        "at": datetime.utcnow().isoformat(),
    }]
    notify(
        application.supervisor_id, "application_resubmitted", "Application Resubmitted",
        f"{application.student.name} resubmitted the application for {application.job.title}.",
        entity=application,
    )
    db.session.commit()
    return respond(application.to_dict(), "Application resubmitted successfully")


# ================= COMPANY REVIEW =================
@bp.route("/<int:application_id>/company-review", methods=["PUT"])
@auth_required("company")
def company_review(application_id):
    form = validate(ReviewForm())
    application = _for_company(application_id)
    ensure_company_can_review(application)
    rejected = form.status.data == "rejected"
    if rejected:
        ensure_transition(application, "rejected")

    application.company_status = form.status.data
    application.company_comments = form.comments.data or ""
    application.company_reviewed_at = datetime.utcnow()
    application.overall_status = "rejected" if rejected else "approved"
    if rejected:
        application.application_status = "rejected"

    notify(
        application.student_id, "job_application_status", "Application Update",
        f"{application.company.display_name} has {form.status.data} your application for {application.job.title}.",
        entity=application,
    )
    db.session.commit()
    return respond(application.to_dict(), f"Application {form.status.data} successfully")


@bp.route("/<int:application_id>/interview", methods=["PATCH"])
@auth_required("company")
def schedule_interview(application_id):
    form = validate(InterviewForm())
    application = _for_company(application_id)
    ensure_supervisor_approved(application)
    ensure_transition(application, "interview_scheduled")

    when = form.date.data
    remote = form.mode.data == "remote"
    application.interview_details = {
        "type": form.mode.data,
        "date": when.date().isoformat(),
        "time": when.strftime("%H:%M"),
        "location": "" if remote else (form.location.data or ""),
        "meeting_link": (form.location.data or "") if remote else "",
        "notes": form.notes.data or "",
    }
    application.application_status = "interview_scheduled"
    application.company_reviewed_at = datetime.utcnow()

    notify(
        application.student_id, "job_application_status", "Interview Scheduled",
        f"Your interview for {application.job.title} is scheduled on "
        f"{when.strftime('%B %d, %Y')} at {when.strftime('%H:%M')}.",
        entity=application, priority="high",
    )
    db.session.commit()
    return respond(application.to_dict(), "Interview scheduled successfully")


# ================= HIRE / REJECT =================
@bp.route("/<int:application_id>/status", methods=["PATCH"])
@auth_required("company")
def update_status(application_id):
    form = validate(ApplicationStatusForm())
    application = _for_company(application_id)
    ensure_supervisor_approved(application)
    status = form.status.data
    ensure_transition(application, status)

    application.application_status = status
    application.company_reviewed_at = datetime.utcnow()
    if form.company_comments.data:
        application.company_comments = form.company_comments.data

    if status == "rejected":
        application.overall_status = "rejected"
        application.company_status = "rejected"
        if form.rejection_note.data:
            application.company_rejection_note = form.rejection_note.data
    elif status == "hired":
        _hire(application)

    notify(
        application.student_id, "job_application_status", "Application Status Updated",
        f"Your application for {application.job.title} is now: {status.replace('_', ' ')}.",
        entity=application, priority="high" if status == "hired" else "medium",
    )
    db.session.commit()
    return respond(application.to_dict(), "Application status updated successfully")


def _hire(application):
    application.hiring_date = datetime.utcnow()
    application.is_currently_hired = True
    application.overall_status = "approved"
    application.company_status = "approved"

    job = application.job
    job.hired_count += 1
    if close_if_full(job):
        current_app.logger.info("Job %s closed: hired limit %s reached", job.id, job.application_limit)

    # One internship at a time
    others = Application.query.filter(
        Application.student_id == application.student_id,
        Application.id != application.id,
        ~Application.application_status.in_(("hired", "rejected")),
    ).all()
    for other in others:
        other.application_status = "rejected"
        other.overall_status = "rejected"
        other.company_comments = "Student hired for another position"

    current_app.logger.info("Student %s hired on application %s", application.student_id, application.id)
