from datetime import datetime

from flask import Blueprint, current_app

from portal.api import APIError, Conflict, Forbidden, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import InternshipFeedbackForm, InternshipReportForm
from portal.models import InternshipReport, db
from portal.notifications import notify
from portal.uploads import DOCUMENT_EXTENSIONS, commit_with_uploads, store_files
from portal.workflow import hired_application

bp = Blueprint("internship_reports", __name__, url_prefix="/api/internship-reports")


# ================= COMPLETION REPORT =================
@bp.route("", methods=["POST"])
@auth_required("student")
def submit_report():
    form = validate(InternshipReportForm())
    student = current_user()

    if InternshipReport.query.filter_by(student_id=student.id).first():
        raise Conflict("You have already submitted an internship report")
    application = hired_application(student.id)
    if application is None:
        raise APIError("You must be hired by a company to submit an internship report")

    report = InternshipReport(
        student_id=student.id,
        supervisor_id=application.supervisor_id,
        company_id=application.company_id,
    )
    for section in InternshipReport.SECTIONS:
        setattr(report, section, getattr(form, section).data)
    report.appendices = store_files(form.appendices.data, DOCUMENT_EXTENSIONS)

    db.session.add(report)
    notify(
        application.supervisor_id, "internship_report_submitted", "Internship Report Submitted",
        f"{student.name} submitted the internship completion report.",
        entity=report,
    )
    commit_with_uploads([f.filename for f in report.appendices])

    current_app.logger.info("Internship report %s submitted by student %s", report.id, student.id)
    return respond(report.to_dict(), "Internship report submitted successfully", 201)


@bp.route("/student")
@auth_required("student")
def student_report():
    report = InternshipReport.query.filter_by(student_id=current_user().id).first()
    return respond(report.to_dict() if report else None)


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_reports():
    reports = (
        InternshipReport.query.filter_by(supervisor_id=current_user().id)
        .order_by(InternshipReport.submitted_at.desc())
        .all()
    )
    return respond([r.to_dict() for r in reports])


@bp.route("/<int:report_id>")
@auth_required()
def get_report(report_id):
    report = get_or_404(InternshipReport, report_id, "Internship report not found")
    user = current_user()
    if user.id not in (report.student_id, report.supervisor_id) and user.role != "admin":
        raise Forbidden("Not authorized to view this internship report")
    return respond(report.to_dict())


@bp.route("/<int:report_id>/feedback", methods=["PATCH"])
@auth_required("supervisor")
def add_feedback(report_id):
    form = validate(InternshipFeedbackForm())
    report = get_or_404(InternshipReport, report_id, "Internship report not found")
    if report.supervisor_id != current_user().id:
        raise Forbidden("You can only review reports of your own students")

    report.supervisor_feedback = form.feedback.data
    report.status = form.status.data
    if form.grade.data:
        report.grade = form.grade.data
    report.reviewed_at = datetime.utcnow()

    notify(
        report.student_id, "internship_report_reviewed", "Internship Report Reviewed",
        f"Your internship report has been {report.status}"
        + (f" with grade {report.grade}." if report.grade else "."),
        entity=report,
    )
    db.session.commit()
    return respond(report.to_dict(), "Feedback added successfully")
