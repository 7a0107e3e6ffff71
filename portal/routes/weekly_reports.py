from datetime import date, datetime, timedelta

from flask import Blueprint, current_app

from portal.api import APIError, Conflict, Forbidden, NotFound, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import WeeklyEventForm, WeeklyFeedbackForm, WeeklyReportForm
from portal.models import Application, WeeklyReport, WeeklyReportEvent, db
from portal.notifications import notify
from portal.uploads import SUPPORTING_EXTENSIONS, commit_with_uploads, store_files
from portal.workflow import approved_application

bp = Blueprint("weekly_reports", __name__, url_prefix="/api/weekly-reports")


def _supervised_student_ids(supervisor_id):
    rows = (
        db.session.query(Application.student_id)
        .filter(
            Application.supervisor_id == supervisor_id,
            Application.supervisor_status == "approved",
            Application.overall_status != "rejected",
        )
        .distinct()
        .all()
    )
    return [student_id for (student_id,) in rows]


def _reports(**filters):
    reports = (
        WeeklyReport.query.filter_by(**filters)
        .order_by(WeeklyReport.week_number, WeeklyReport.submitted_at.desc())
        .all()
    )
    return respond([r.to_dict() for r in reports])


# ================= EVENTS =================
@bp.route("/events", methods=["POST"])
@auth_required("supervisor")
def create_event():
    form = validate(WeeklyEventForm())
    supervisor = current_user()
    week = form.week_number.data

    if WeeklyReportEvent.query.filter_by(supervisor_id=supervisor.id, week_number=week).first():
        raise Conflict(f"Weekly report event for Week {week} already exists")

    event = WeeklyReportEvent(
        supervisor_id=supervisor.id,
        week_number=week,
        title=form.title.data or f"Weekly Report - Week {week}",
        instructions=form.instructions.data or "",
        due_date=form.due_date.data,
        week_start_date=form.due_date.data - timedelta(days=7),
    )
    db.session.add(event)

    students = _supervised_student_ids(supervisor.id)
    for student_id in students:
        notify(
            student_id, "weekly_report_assigned", f"Weekly Report Assigned: Week {week}",
            f"{supervisor.name} assigned {event.title}. Due {event.due_date.strftime('%B %d, %Y')}.",
            entity=event,
        )
    db.session.commit()

    current_app.logger.info("Supervisor %s created week %s event (%s students)", supervisor.id, week, len(students))
    return respond(
        event.to_dict(),
        f"Weekly report event created successfully. {len(students)} students notified.",
        201,
    )


@bp.route("/events")
@auth_required("supervisor", "student")
def list_events():
    user = current_user()
    if user.role == "supervisor":
        events = (
            WeeklyReportEvent.query.filter_by(supervisor_id=user.id)
            .order_by(WeeklyReportEvent.week_number)
            .all()
        )
        data = []
        for event in events:
            entry = event.to_dict()
            entry["submission_count"] = len(event.reports)
            data.append(entry)
        return respond(data)

    application = approved_application(user.id)
    if application is None:
        raise NotFound("No approved internship application found")

    events = (
        WeeklyReportEvent.query.filter_by(supervisor_id=application.supervisor_id)
        .order_by(WeeklyReportEvent.week_number)
        .all()
    )
    submitted = {
        r.event_id: r for r in WeeklyReport.query.filter_by(student_id=user.id).all()
    }
    data = []
    for event in events:
        entry = event.to_dict()
        report = submitted.get(event.id)
        entry["submission"] = report.to_dict() if report else None
        data.append(entry)
    return respond(data)


@bp.route("/events/<int:event_id>/submit", methods=["POST"])
@auth_required("student")
def submit_report(event_id):
    form = validate(WeeklyReportForm())
    student = current_user()

    event = get_or_404(WeeklyReportEvent, event_id, "Weekly report event not found")
    if event.status != "active":
        raise APIError("This report event is no longer active")
    if date.today() > event.due_date:
        raise APIError("The due date for this report has passed")

    application = approved_application(student.id)
    if application is None:
        raise NotFound("No approved internship application found")
    if application.supervisor_id != event.supervisor_id:
        raise Forbidden("You can only submit reports for events created by your assigned supervisor")
    if WeeklyReport.query.filter_by(event_id=event.id, student_id=student.id).first():
        raise Conflict("You have already submitted a report for this event")

    report = WeeklyReport(
        event_id=event.id,
        student_id=student.id,
        supervisor_id=event.supervisor_id,
        week_number=event.week_number,
        company_name=application.company.display_name,
        tasks_completed=form.tasks_completed.data,
        reflections=form.reflections.data,
        challenges_faced=form.challenges_faced.data or "",
        plans_for_next_week=form.plans_for_next_week.data or "",
    )
    report.files = store_files(form.supporting_files.data, SUPPORTING_EXTENSIONS)
    db.session.add(report)
    notify(
        event.supervisor_id, "weekly_report_submitted", f"Weekly Report Submitted: Week {event.week_number}",
        f"{student.name} submitted the report for week {event.week_number}.",
        entity=report,
    )
    commit_with_uploads([f.filename for f in report.files])

    current_app.logger.info("Student %s submitted week %s report %s", student.id, event.week_number, report.id)
    return respond(report.to_dict(), "Weekly report submitted successfully", 201)


# ================= REPORTS =================
@bp.route("/student")
@auth_required("student")
def student_reports():
    return _reports(student_id=current_user().id)


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_reports():
    return _reports(supervisor_id=current_user().id)


@bp.route("/<int:report_id>")
@auth_required()
def get_report(report_id):
    report = get_or_404(WeeklyReport, report_id, "Weekly report not found")
    user = current_user()
    if user.id not in (report.student_id, report.supervisor_id) and user.role != "admin":
        raise Forbidden("You are not authorized to view this report")
    return respond(report.to_dict())


@bp.route("/<int:report_id>/feedback", methods=["PATCH"])
@auth_required("supervisor")
def add_feedback(report_id):
    form = validate(WeeklyFeedbackForm())
    report = get_or_404(WeeklyReport, report_id, "Weekly report not found")
    if report.supervisor_id != current_user().id:
        raise Forbidden("You can only provide feedback for your students' reports")

    report.supervisor_feedback = form.feedback.data
    report.status = form.status.data
    if form.rating.data is not None:
        report.rating = form.rating.data
    report.reviewed_at = datetime.utcnow()

    notify(
        report.student_id, "weekly_report_reviewed", f"Week {report.week_number} Report Reviewed",
        f"Your supervisor reviewed your week {report.week_number} report ({report.status.replace('_', ' ')}).",
        entity=report,
    )
    db.session.commit()
    return respond(report.to_dict(), "Feedback added successfully")
