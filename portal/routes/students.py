from datetime import datetime

from flask import Blueprint
from sqlalchemy import func

from portal.api import respond, validate
from portal.auth import auth_required, current_user
from portal.eligibility import check_eligibility
from portal.forms import CVUploadForm, StudentProfileForm
from portal.models import Application, SupervisorProfile, User, db
from portal.uploads import commit_with_uploads, save_upload

bp = Blueprint("students", __name__, url_prefix="/api")


@bp.route("/students/profile")
@auth_required("student")
def get_profile():
    return respond(current_user().to_dict(with_profile=True))


@bp.route("/students/profile", methods=["PUT"])
@auth_required("student")
def update_profile():
    form = validate(StudentProfileForm())
    profile = current_user().student_profile

    for name in form.submitted():
        setattr(profile, name, getattr(form, name).data)
    db.session.commit()

    return respond(current_user().to_dict(with_profile=True), "Profile updated successfully")


@bp.route("/students/cv", methods=["POST"])
@auth_required("student")
def upload_cv():
    form = validate(CVUploadForm())
    stored, _, _ = save_upload(form.cv.data)
    current_user().student_profile.cv = stored
    commit_with_uploads([stored])
    return respond({"cv": stored, "url": f"/upload/{stored}"}, "CV uploaded successfully")


# ================= ELIGIBILITY =================
@bp.route("/students/eligibility")
@auth_required("student")
def eligibility():
    profile = current_user().student_profile
    result = check_eligibility(profile)

    profile.is_eligible = result["eligible"]
    profile.eligibility_checked_at = datetime.utcnow()
    db.session.commit()

    return respond(result, "Eligibility checked successfully")


# ================= SUPERVISORS =================
@bp.route("/supervisors")
@auth_required()
def list_supervisors():
    hired = dict(
        db.session.query(Application.supervisor_id, func.count(Application.id))
        .filter(Application.application_status == "hired")
        .group_by(Application.supervisor_id)
        .all()
    )
    supervisors = (
        User.query.join(SupervisorProfile, SupervisorProfile.user_id == User.id)
        .filter(User.role == "supervisor", User.status == "active")
        .order_by(User.name)
        .all()
    )

    data = []
    for supervisor in supervisors:
        entry = supervisor.to_dict(with_profile=True)
        entry["current_students"] = hired.get(supervisor.id, 0)
        entry["available"] = entry["current_students"] < supervisor.supervisor_profile.max_students
        data.append(entry)
    return respond(data)
