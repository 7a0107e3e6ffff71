"""Company-side intern evaluations and the combined final result.

A company rates a hired intern on ten 1-4 criteria (out of 40). The final
result adds the supervisor scorecard (out of 60) to the company marks scaled
to 40.
"""
from flask import Blueprint, current_app

from portal.api import APIError, Conflict, Forbidden, NotFound, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import InternEvaluationForm
from portal.grading import COMPANY_CRITERIA, COMPANY_MAX_MARKS, company_total, final_result
from portal.models import Application, InternEvaluation, SupervisorEvaluation, User, db
from portal.notifications import notify

bp = Blueprint("intern_evaluations", __name__, url_prefix="/api/intern-evaluations")


def _ordered(query):
    return query.order_by(InternEvaluation.submitted_at.desc(), InternEvaluation.id.desc()).all()


def _released(student_id):
    return SupervisorEvaluation.query.filter_by(student_id=student_id, final_result_sent=True).first() is not None


# ================= SUBMIT =================
@bp.route("", methods=["POST"])
@auth_required("company")
def submit_evaluation():
    form = validate(InternEvaluationForm())
    company = current_user()

    application = get_or_404(Application, form.application_id.data, "Application not found")
    if application.company_id != company.id:
        raise Forbidden("You can only evaluate your own interns")
    if application.application_status != "hired":
        raise APIError("Only hired interns can be evaluated")
    if InternEvaluation.query.filter_by(application_id=application.id).first():
        raise Conflict("Evaluation already submitted for this intern")

    scores = {name: getattr(form, name).data for name in COMPANY_CRITERIA}
    evaluation = InternEvaluation(
        intern_id=application.student_id,
        company_id=company.id,
        application_id=application.id,
        total_marks=company_total(scores),
        max_marks=COMPANY_MAX_MARKS,
        comments=form.comments.data or "",
        **scores
    )
    db.session.add(evaluation)

    notify(
        application.student_id, "intern_evaluation_submitted", "Internship Evaluation Completed",
        f"{company.display_name} has completed your internship evaluation. "
        "Your supervisor will finalize the results soon.",
        entity=evaluation,
    )
    notify(
        application.supervisor_id, "intern_evaluation_submitted", "Company Evaluation Received",
        f"{company.display_name} evaluated {application.student.name}: "
        f"{evaluation.total_marks}/{evaluation.max_marks}.",
        entity=evaluation,
    )
    db.session.commit()

    current_app.logger.info(
        "Intern evaluation %s submitted by company %s for student %s: %s/%s",
        evaluation.id, company.id, application.student_id, evaluation.total_marks, evaluation.max_marks,
    )
    return respond(evaluation.to_dict(), "Evaluation submitted successfully", 201)


# ================= LISTINGS =================
@bp.route("")
@auth_required("company")
def company_evaluations():
    query = InternEvaluation.query.filter_by(company_id=current_user().id)
    return respond([e.to_dict() for e in _ordered(query)])


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_evaluations():
    query = InternEvaluation.query.join(Application, Application.id == InternEvaluation.application_id).filter(
        Application.supervisor_id == current_user().id
    )
    return respond([e.to_dict() for e in _ordered(query)])


@bp.route("/all")
@auth_required("admin")
def all_evaluations():
    return respond([e.to_dict() for e in _ordered(InternEvaluation.query)])


@bp.route("/intern/<int:student_id>")
@auth_required()
def intern_evaluation(student_id):
    user = current_user()
    if user.role == "student":
        if user.id != student_id:
            raise Forbidden("You can only view your own evaluation")
        if not _released(student_id):
            raise Forbidden("Evaluation results have not been released yet")

    evaluation = (
        InternEvaluation.query.filter_by(intern_id=student_id)
        .order_by(InternEvaluation.submitted_at.desc())
        .first()
    )
    if evaluation is None:
        raise NotFound("No evaluation found for this intern")
    if user.role == "company" and evaluation.company_id != user.id:
        raise Forbidden("Not authorized to view this evaluation")
    if user.role == "supervisor" and evaluation.application.supervisor_id != user.id:
        raise Forbidden("Not authorized to view this evaluation")
    return respond(evaluation.to_dict())


# ================= FINAL RESULT =================
@bp.route("/final/<int:student_id>")
@auth_required("supervisor", "admin")
def final_evaluation(student_id):
    student = db.session.get(User, student_id)
    if student is None or student.role != "student":
        raise NotFound("Student not found")

    query = SupervisorEvaluation.query.filter_by(student_id=student.id)
    if current_user().role == "supervisor":
        query = query.filter_by(supervisor_id=current_user().id)
    supervisor_eval = query.first()
    company_eval = (
        InternEvaluation.query.filter_by(intern_id=student.id)
        .order_by(InternEvaluation.submitted_at.desc())
        .first()
    )
    if supervisor_eval is None and company_eval is None:
        raise NotFound("No evaluations found for this student")
    if current_user().role == "supervisor" and supervisor_eval is None:
        raise Forbidden("Student is not evaluated under your supervision")

    result = final_result(
        supervisor_eval.total_marks if supervisor_eval else None,
        company_eval.total_marks if company_eval else None,
        company_eval.max_marks if company_eval else COMPANY_MAX_MARKS,
    )
    result.update({
        "student": student.brief(),
        "complete": supervisor_eval is not None and company_eval is not None,
        "supervisor_evaluation": supervisor_eval.to_dict() if supervisor_eval else None,
        "company_evaluation": company_eval.to_dict() if company_eval else None,
    })
    return respond(result)
