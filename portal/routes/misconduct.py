from datetime import datetime

from flask import Blueprint, current_app

from portal.api import Forbidden, NotFound, get_or_404, respond, text_attachment, validate
from portal.auth import auth_required, current_user
from portal.forms import MisconductReportForm, MisconductStatusForm
from portal.models import Application, MisconductReport, OfferLetter, User, db
from portal.notifications import notify

bp = Blueprint("misconduct", __name__, url_prefix="/api/misconduct-reports")

STUDENT_MESSAGES = {
    "Resolved": "Your misconduct report was resolved. No further action required.",
    "Warning Issued": (
        "Your misconduct report has been reviewed. Status: Warning Issued. "
        "Please meet your supervisor."
    ),
    "Internship Cancelled": "Your internship has been cancelled due to misconduct. Contact supervisor.",
}


def _listing(**filters):
    reports = (
        MisconductReport.query.filter_by(**filters)
        .order_by(MisconductReport.created_at.desc(), MisconductReport.id.desc())
        .all()
    )
    return respond([r.to_dict() for r in reports])


def _visible_report(report_id):
    report = get_or_404(MisconductReport, report_id, "Report not found")
    user = current_user()
    if user.id not in (report.student_id, report.company_id, report.supervisor_id) and user.role != "admin":
        raise Forbidden("Access denied")
    return report


# ================= FILE REPORT =================
@bp.route("", methods=["POST"])
@auth_required("company")
def create_report():
    form = validate(MisconductReportForm())
    company = current_user()

    application = Application.query.filter_by(
        company_id=company.id, student_id=form.student_id.data, application_status="hired"
    ).first()
    if application is None:
        raise NotFound("Student not found or not hired by this company")

    student = db.session.get(User, application.student_id)
    supervisor = application.supervisor
    profile = student.student_profile

    report = MisconductReport(
        student_id=student.id,
        student_name=student.name,
        roll_number=profile.roll_number if profile else None,
        company_id=company.id,
        company_name=company.display_name,
        supervisor_id=supervisor.id,
        supervisor_name=supervisor.name,
        issue_type=form.issue_type.data,
        incident_date=form.incident_date.data,
        description=form.description.data,
    )
    db.session.add(report)
    notify(
        supervisor.id, "company_misconduct_report", "New Company Misconduct Report",
        f"{company.display_name} has submitted a misconduct report for student "
        f"{student.name} regarding {report.issue_type}",
        entity=report, priority="high",
    )
    db.session.commit()

    current_app.logger.warning(
        "Misconduct report %s filed by company %s against student %s (%s)",
        report.id, company.id, student.id, report.issue_type,
    )
    return respond(report.to_dict(), "Misconduct report created successfully and sent to supervisor", 201)


@bp.route("/eligible-students")
@auth_required("company")
def eligible_students():
    letters = (
        OfferLetter.query.filter_by(company_id=current_user().id, response="accepted")
        .order_by(OfferLetter.responded_at.desc())
        .all()
    )
    students, seen = [], set()
    for letter in letters:
        if letter.student_id in seen:
            continue
        seen.add(letter.student_id)
        profile = db.session.get(User, letter.student_id).student_profile
        students.append({
            "id": letter.student_id,
            "name": letter.student_name,
            "email": letter.student_email,
            "roll_number": (profile.roll_number if profile else None) or "N/A",
            "job_title": letter.job_title,
        })
    return respond(students)


# ================= LISTINGS =================
@bp.route("/company")
@auth_required("company")
def company_reports():
    return _listing(company_id=current_user().id)


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_reports():
    return _listing(supervisor_id=current_user().id)


@bp.route("/student")
@auth_required("student")
def student_reports():
    return _listing(student_id=current_user().id)


@bp.route("/<int:report_id>")
@auth_required()
def get_report(report_id):
    return respond(_visible_report(report_id).to_dict())


@bp.route("/<int:report_id>/download")
@auth_required()
def download_report(report_id):
    report = _visible_report(report_id)
    body = "\n".join([
        "MISCONDUCT REPORT",
        "",
        f"Student: {report.student_name} ({report.roll_number or 'N/A'})",
        f"Company: {report.company_name}",
        f"Supervisor: {report.supervisor_name}",
        f"Issue type: {report.issue_type}",
        f"Incident date: {report.incident_date.isoformat()}",
        f"Status: {report.status}",
        "",
        "Description:",
        report.description,
        "",
        "Supervisor comments:",
        report.supervisor_comments or "-",
    ]) + "\n"
    return text_attachment(body, f"misconduct-report-{report.id}.txt")


# ================= SUPERVISOR DECISION =================
@bp.route("/<int:report_id>/status", methods=["PATCH"])
@auth_required("supervisor")
def update_status(report_id):
    form = validate(MisconductStatusForm())
    report = MisconductReport.query.filter_by(id=report_id, supervisor_id=current_user().id).first()
    if report is None:
        raise NotFound("Report not found")

    report.status = form.status.data
    report.supervisor_comments = form.supervisor_comments.data
    report.resolved_at = None if report.status == "Pending" else datetime.utcnow()

    if report.status in STUDENT_MESSAGES:
        notify(
            report.student_id, "misconduct_update", "Misconduct Report Update",
            STUDENT_MESSAGES[report.status], entity=report,
            priority="urgent" if report.status == "Internship Cancelled" else "high",
        )
    notify(
        report.company_id, "misconduct_update", "Misconduct Report Updated",
        f"Supervisor has updated the status of misconduct report for {report.student_name} to: {report.status}",
        entity=report,
    )
    db.session.commit()

    current_app.logger.info("Misconduct report %s set to %s", report.id, report.status)
    return respond(report.to_dict(), "Report status updated successfully")
