"""Company and supervisor profiles. Student profiles live in ``students``."""
from flask import Blueprint

from portal.api import APIError, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import CompanyProfileForm, SupervisorProfileForm
from portal.models import Application, db

bp = Blueprint("profiles", __name__, url_prefix="/api")


def current_students(supervisor_id):
    return Application.query.filter_by(supervisor_id=supervisor_id, application_status="hired").count()


def _supervisor_data(user):
    data = user.to_dict(with_profile=True)
    data["current_students"] = current_students(user.id)
    return data


# ================= COMPANY PROFILE =================
@bp.route("/companies/profile")
@auth_required("company")
def get_company_profile():
    return respond(current_user().to_dict(with_profile=True))


@bp.route("/companies/profile", methods=["PUT"])
@auth_required("company")
def update_company_profile():
    form = validate(CompanyProfileForm())
    profile = current_user().company_profile

    for name in form.submitted():
        setattr(profile, name, getattr(form, name).data)
    db.session.commit()

    return respond(current_user().to_dict(with_profile=True), "Profile updated successfully")


# ================= SUPERVISOR PROFILE =================
@bp.route("/supervisors/profile")
@auth_required("supervisor")
def get_supervisor_profile():
    return respond(_supervisor_data(current_user()))


@bp.route("/supervisors/profile", methods=["PUT"])
@auth_required("supervisor")
def update_supervisor_profile():
    form = validate(SupervisorProfileForm())
    supervisor = current_user()

    assigned = current_students(supervisor.id)
    if form.max_students.data is not None and form.max_students.data < assigned:
        raise APIError(
            f"Cannot set student limit to {form.max_students.data}. You currently have "
            f"{assigned} assigned students. Please set a limit of at least {assigned}."
        )

    profile = supervisor.supervisor_profile
    for name in form.submitted():
        setattr(profile, name, getattr(form, name).data)
    db.session.commit()

    return respond(_supervisor_data(supervisor), "Profile updated successfully")
