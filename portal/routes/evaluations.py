from datetime import date, datetime

from flask import Blueprint, current_app

from portal.api import APIError, Conflict, Forbidden, NotFound, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import EvaluationStatusForm, SupervisorEvaluationForm
from portal.grading import CRITERIA, calculate_grade, total_marks
from portal.models import Application, OfferLetter, SupervisorEvaluation, User, db
from portal.notifications import notify

bp = Blueprint("evaluations", __name__, url_prefix="/api/supervisor-evaluations")

DEFAULT_START = date(2025, 1, 15)
DEFAULT_END = date(2025, 4, 15)
DEFAULT_DURATION = "3 Months"


def _internship_window(application):
    """Dates from the hired job's offer letter first, then the job, then a fixed term."""
    letter = (
        OfferLetter.query.filter(
            OfferLetter.student_id == application.student_id,
            OfferLetter.job_id == application.job_id,
            OfferLetter.status.in_(("sent", "accepted")),
        )
        .order_by(OfferLetter.sent_at.desc())
        .first()
    )
    if letter:
        return letter.start_date, letter.end_date
    job = application.job
    if job and job.start_date and job.end_date:
        return job.start_date, job.end_date
    return DEFAULT_START, DEFAULT_END


def _ordered(query):
    return query.order_by(SupervisorEvaluation.submitted_at.desc(), SupervisorEvaluation.id.desc()).all()


# ================= SUBMIT EVALUATION =================
@bp.route("", methods=["POST"])
@auth_required("supervisor")
def submit_evaluation():
    form = validate(SupervisorEvaluationForm())
    supervisor = current_user()

    student = db.session.get(User, form.student_id.data)
    if student is None or student.role != "student":
        raise NotFound("Student not found")

    if SupervisorEvaluation.query.filter_by(student_id=student.id, supervisor_id=supervisor.id).first():
        raise Conflict("Evaluation already submitted for this student")

    application = Application.query.filter_by(
        student_id=student.id, supervisor_id=supervisor.id, application_status="hired"
    ).first()
    if application is None:
        raise APIError("Student is not hired under your supervision")

    scores = {name: getattr(form, name).data for name in CRITERIA}
    total = total_marks(scores)
    start, end = _internship_window(application)
    profile = student.student_profile

    evaluation = SupervisorEvaluation(
        student_id=student.id,
        student_name=student.name,
        student_registration=(profile.roll_number if profile and profile.roll_number else "N/A"),
        supervisor_id=supervisor.id,
        supervisor_name=supervisor.name,
        internship_duration=application.job.duration or DEFAULT_DURATION,
        internship_start_date=start,
        internship_end_date=end,
        position=application.job.title,
        total_marks=total,
        grade=calculate_grade(total),
        **scores
    )
    db.session.add(evaluation)
    db.session.commit()

    current_app.logger.info(
        "Evaluation %s submitted for student %s: %s/60 (%s)",
        evaluation.id, student.id, total, evaluation.grade,
    )
    return respond(evaluation.to_dict(), "Evaluation submitted successfully", 201)


# ================= LISTINGS =================
@bp.route("")
@auth_required("supervisor")
def supervisor_evaluations():
    query = SupervisorEvaluation.query.filter_by(supervisor_id=current_user().id)
    return respond([e.to_dict() for e in _ordered(query)])


@bp.route("/all")
@auth_required("admin")
def all_evaluations():
    return respond([e.to_dict() for e in _ordered(SupervisorEvaluation.query)])


@bp.route("/student")
@auth_required("student")
def student_results():
    query = SupervisorEvaluation.query.filter_by(student_id=current_user().id, final_result_sent=True)
    return respond([e.to_dict() for e in _ordered(query)])


@bp.route("/<int:evaluation_id>")
@auth_required("supervisor", "admin", "student")
def get_evaluation(evaluation_id):
    evaluation = get_or_404(SupervisorEvaluation, evaluation_id, "Evaluation not found")
    user = current_user()
    if user.role == "supervisor" and evaluation.supervisor_id != user.id:
        raise Forbidden("Not authorized to view this evaluation")
    if user.role == "student" and (evaluation.student_id != user.id or not evaluation.final_result_sent):
        raise Forbidden("Not authorized to view this evaluation")
    return respond(evaluation.to_dict())


# ================= STATUS / FINAL RESULT =================
@bp.route("/<int:evaluation_id>/status", methods=["PATCH"])
@auth_required("supervisor", "admin")
def update_status(evaluation_id):
    form = validate(EvaluationStatusForm())
    evaluation = get_or_404(SupervisorEvaluation, evaluation_id, "Evaluation not found")
    user = current_user()
    if user.role == "supervisor" and evaluation.supervisor_id != user.id:
        raise Forbidden("Not authorized to update this evaluation")

    evaluation.status = form.status.data
    db.session.commit()
    return respond(evaluation.to_dict(), "Evaluation status updated successfully")


@bp.route("/<int:evaluation_id>/final-result", methods=["PATCH"])
@auth_required("admin")
def send_final_result(evaluation_id):
    evaluation = get_or_404(SupervisorEvaluation, evaluation_id, "Evaluation not found")
    if evaluation.final_result_sent:
        raise Conflict("Final result already sent")

    evaluation.final_result_sent = True
    evaluation.final_result_sent_at = datetime.utcnow()
    evaluation.final_result_sent_by = current_user().id
    notify(
        evaluation.student_id, "evaluation_result", "Final Evaluation Result",
        f"Your internship evaluation is available. Grade: {evaluation.grade} "
        f"({evaluation.total_marks}/60).",
        entity=evaluation, priority="high",
    )
    db.session.commit()

    current_app.logger.info("Final result for evaluation %s sent to student %s", evaluation.id, evaluation.student_id)
    return respond(evaluation.to_dict(), "Final result sent to student")
