from datetime import datetime

from flask import Blueprint, current_app

from portal.api import APIError, Forbidden, NotFound, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import JoiningReportForm
from portal.models import JoiningReport, OfferLetter, db
from portal.notifications import notify
from portal.workflow import hired_application

bp = Blueprint("joining_reports", __name__, url_prefix="/api/joining-reports")


def _internship_dates(application):
    letter = (
        OfferLetter.query.filter_by(student_id=application.student_id, job_id=application.job_id)
        .order_by(OfferLetter.sent_at.desc())
        .first()
    )
    if letter:
        return letter.start_date, letter.end_date
    return application.job.start_date, application.job.end_date


@bp.route("/eligibility")
@auth_required("student")
def eligibility():
    student_id = current_user().id
    hired = hired_application(student_id) is not None
    existing = JoiningReport.query.filter_by(student_id=student_id).first() is not None
    return respond({
        "canCreate": hired and not existing,
        "hasHiredApplication": hired,
        "hasExistingReport": existing,
    })


@bp.route("", methods=["POST"])
@auth_required("student")
def create_report():
    form = validate(JoiningReportForm())
    student = current_user()

    application = hired_application(student.id)
    if application is None:
        raise APIError("You must be hired by a company to create a joining report")
    if JoiningReport.query.filter_by(student_id=student.id).first():
        raise APIError("Joining report already submitted")

    profile = student.student_profile
    start, end = _internship_dates(application)
    report = JoiningReport(
        student_id=student.id,
        student_name=student.name,
        roll_number=profile.roll_number or "N/A",
        company_id=application.company_id,
        company_name=application.company.display_name,
        position=application.job.title,
        department=(application.student_profile or {}).get("department") or profile.department or "N/A",
        supervisor_id=application.supervisor_id,
        supervisor_name=application.supervisor.name,
        internship_start=start,
        internship_end=end,
        student_thoughts=form.student_thoughts.data,
        acknowledgment=form.acknowledgment.data,
    )
    db.session.add(report)
    notify(
        application.supervisor_id, "joining_report_submitted", "Joining Report Submitted",
        f"{student.name} joined {report.company_name} as {report.position}.",
        entity=report,
    )
    db.session.commit()

    current_app.logger.info("Joining report %s created by student %s", report.id, student.id)
    return respond(report.to_dict(), "Joining report created successfully", 201)


@bp.route("/student")
@auth_required("student")
def student_report():
    report = JoiningReport.query.filter_by(student_id=current_user().id).first()
    return respond(report.to_dict() if report else None)


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_reports():
    reports = (
        JoiningReport.query.filter_by(supervisor_id=current_user().id)
        .order_by(JoiningReport.report_date.desc())
        .all()
    )
    return respond([r.to_dict() for r in reports])


@bp.route("/<int:report_id>")
@auth_required()
def get_report(report_id):
    report = get_or_404(JoiningReport, report_id, "Joining report not found")
    user = current_user()
    if user.id not in (report.student_id, report.supervisor_id, report.company_id) and user.role != "admin":
        raise Forbidden("Not authorized to view this joining report")
    return respond(report.to_dict())


@bp.route("/<int:report_id>/verify", methods=["PATCH"])
@auth_required("supervisor")
def verify_report(report_id):
    report = JoiningReport.query.filter_by(id=report_id, supervisor_id=current_user().id).first()
    if report is None:
        raise NotFound("Joining report not found")

    report.status = "verified"
    report.verified_at = datetime.utcnow()
    notify(
        report.student_id, "joining_report_verified", "Joining Report Verified",
        "Your supervisor has verified your joining report.",
        entity=report,
    )
    db.session.commit()
    return respond(report.to_dict(), "Joining report verified successfully")
