from datetime import datetime

from flask import Blueprint, current_app

from portal.api import Conflict, Forbidden, NotFound, get_or_404, respond, text_attachment, validate
from portal.auth import auth_required, current_user
from portal.forms import OfferLetterForm, OfferResponseForm
from portal.models import Application, Job, OfferLetter, User, db
from portal.notifications import notify

bp = Blueprint("offer_letters", __name__, url_prefix="/api/offer-letters")

OPTIONAL_DEFAULTS = {
    "organization_name": "Organization Name",
    "organization_address": "Organization Address",
    "representative_name": "Representative Name",
    "representative_position": "Representative Position",
    "supervisor_name": "Assigned Supervisor",
}


def _listing(**filters):
    letters = (
        OfferLetter.query.filter_by(**filters)
        .order_by(OfferLetter.sent_at.desc(), OfferLetter.id.desc())
        .all()
    )
    return respond([letter.to_dict() for letter in letters])


def _visible_letter(letter_id):
    letter = get_or_404(OfferLetter, letter_id, "Offer letter not found")
    user = current_user()
    if user.id not in (letter.student_id, letter.company_id, letter.supervisor_id) and user.role != "admin":
        raise Forbidden("Not authorized to view this offer letter")
    return letter


def render_offer_letter(letter):
    lines = [
        "INTERNSHIP OFFER LETTER",
        "",
        letter.organization_name,
        letter.organization_address,
        f"Date: {letter.sent_at.strftime('%B %d, %Y')}",
        "",
        f"To: {letter.student_name} <{letter.student_email}>",
        f"Position: {letter.job_title}",
        f"Internship period: {letter.start_date.isoformat()} to {letter.end_date.isoformat()}",
        f"Supervisor: {letter.supervisor_name}",
        "",
        letter.content,
    ]
    if letter.custom_message:
        lines += ["", letter.custom_message]
    lines += [
        "",
        "Sincerely,",
        letter.representative_name,
        letter.representative_position,
        "",
        f"Status: {letter.status}",
        f"Student response: {letter.response}",
    ]
    return "\n".join(lines) + "\n"


# ================= SEND OFFER =================
@bp.route("/send", methods=["POST"])
@auth_required("company")
def send_offer():
    form = validate(OfferLetterForm())
    company = current_user()

    student = db.session.get(User, form.student_id.data)
    if student is None or student.role != "student":
        raise NotFound("Student not found")
    supervisor = db.session.get(User, form.supervisor_id.data)
    if supervisor is None or supervisor.role != "supervisor":
        raise NotFound("Supervisor not found")
    job = get_or_404(Job, form.job_id.data, "Job not found")
    if job.posted_by != company.id:
        raise Forbidden("You can only send offer letters for your own jobs")

    if form.application_id.data:
        application = get_or_404(Application, form.application_id.data, "Application not found")
        if application.company_id != company.id or application.student_id != student.id:
            raise Forbidden("Application does not belong to this company and student")
    else:
        application = Application.query.filter_by(student_id=student.id, job_id=job.id).first()

    letter = OfferLetter(
        application_id=application.id if application else None,
        student_id=student.id,
        student_name=form.student_name.data,
        student_email=form.student_email.data,
        company_id=company.id,
        job_id=job.id,
        job_title=form.job_title.data,
        supervisor_id=supervisor.id,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        content=form.content.data,
        custom_message=form.custom_message.data or "",
    )
    for name, default in OPTIONAL_DEFAULTS.items():
        setattr(letter, name, getattr(form, name).data or default)

    db.session.add(letter)
    notify(
        student.id, "offer_letter_received", "New Offer Letter",
        f"{company.display_name} sent you an offer letter for {letter.job_title}.",
        entity=letter, priority="high",
    )
    db.session.commit()

    current_app.logger.info("Offer letter %s sent by company %s to student %s", letter.id, company.id, student.id)
    return respond(letter.to_dict(), "Offer letter sent successfully", 201)


# ================= LISTINGS =================
@bp.route("/company")
@auth_required("company")
def company_offers():
    return _listing(company_id=current_user().id)


@bp.route("/student")
@auth_required("student")
def student_offers():
    return _listing(student_id=current_user().id)


@bp.route("/supervisor")
@auth_required("supervisor")
def supervisor_offers():
    return _listing(supervisor_id=current_user().id)


@bp.route("/<int:letter_id>")
@auth_required()
def get_offer(letter_id):
    return respond(_visible_letter(letter_id).to_dict())


@bp.route("/<int:letter_id>/download")
@auth_required()
def download_offer(letter_id):
    letter = _visible_letter(letter_id)
    return text_attachment(render_offer_letter(letter), f"offer-letter-{letter.id}.txt")


# ================= STUDENT RESPONSE =================
@bp.route("/<int:letter_id>/respond", methods=["PATCH"])
@auth_required("student")
def respond_to_offer(letter_id):
    form = validate(OfferResponseForm())
    letter = get_or_404(OfferLetter, letter_id, "Offer letter not found")
    student = current_user()
    if letter.student_id != student.id:
        raise Forbidden("Not authorized to respond to this offer letter")
    if letter.response != "pending":
        raise Conflict(f"You have already {letter.response} this offer")

    letter.response = form.response.data
    letter.status = form.response.data
    letter.student_comments = form.student_comments.data or ""
    letter.responded_at = datetime.utcnow()

    notify(
        letter.company_id, "offer_response_received", "Offer Letter Response",
        f"{student.name} has {letter.response} your offer for {letter.job_title}.",
        entity=letter,
    )
    db.session.commit()

    current_app.logger.info("Student %s %s offer letter %s", student.id, letter.response, letter.id)
    return respond(letter.to_dict(), f"Offer {letter.response} successfully")
