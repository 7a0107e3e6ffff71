from flask import Blueprint, current_app

from portal.api import respond, validate
from portal.auth import auth_required, authenticate, create_user, current_user, issue_token
from portal.forms import LoginForm, SignupForm

bp = Blueprint("accounts", __name__, url_prefix="/api/auth")


# ================= SIGNUP =================
@bp.route("/register", methods=["POST"])
def register():
    form = validate(SignupForm())
    user = create_user(form.name.data, form.email.data, form.password.data, form.role.data)
    current_app.logger.info("Registered %s user %s", user.role, user.email)
    return respond(
        {"token": issue_token(user), "user": user.to_dict(with_profile=True)},
        "Account created successfully",
        201,
    )


# ================= LOGIN =================
@bp.route("/login", methods=["POST"])
def login():
    form = validate(LoginForm())
    user = authenticate(form.email.data, form.password.data)
    return respond(
        {"token": issue_token(user), "user": user.to_dict(with_profile=True)},
        "Login successful",
    )


@bp.route("/me")
@auth_required()
def me():
    return respond(current_user().to_dict(with_profile=True))
