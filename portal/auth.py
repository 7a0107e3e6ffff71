import os
from datetime import datetime
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import OperationalError
from werkzeug.security import check_password_hash, generate_password_hash

from portal.api import APIError, Conflict, Forbidden
from portal.models import (
    CompanyProfile, StudentProfile, SupervisorProfile, User, db,
)

TOKEN_SALT = "portal-auth-token"


class Unauthorized(APIError):
    status_code = 401


def _serializer():
    return URLSafeTimedSerializer(current_app.secret_key, salt=TOKEN_SALT)


def issue_token(user):
    return _serializer().dumps({"id": user.id, "role": user.role})


def load_token(token):
    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        raise Unauthorized("Token expired")
    except BadSignature:
        raise Unauthorized("Invalid token")

    user = db.session.get(User, payload.get("id"))
    if user is None:
        raise Unauthorized("Invalid token. User not found.")
    return user


def current_user():
    return g.get("user")


def auth_required(*roles):
    """Require a bearer token, and one of ``roles`` when any are given."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            scheme, _, token = header.partition(" ")
            if scheme.lower() != "bearer" or not token:
                raise Unauthorized("No token, authorization denied")

            user = load_token(token.strip())
            if user.status != "active":
                raise Forbidden("Account is not active")
            if roles and user.role not in roles:
                raise Forbidden(f"Access denied. Requires role: {', '.join(roles)}")

            g.user = user
            return view(*args, **kwargs)
        return wrapped
    return decorator


def create_user(name, email, password, role):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        raise Conflict("User already exists")

    user = User(
        name=name.strip(),
        email=email,
        password=generate_password_hash(password),
        role=role,
    )
    db.session.add(user)
    db.session.flush()

    # Every role gets an empty profile row
    if role == "student":
        db.session.add(StudentProfile(user_id=user.id))
    elif role == "company":
        db.session.add(CompanyProfile(user_id=user.id, company_name=user.name))
    elif role == "supervisor":
        db.session.add(SupervisorProfile(user_id=user.id))

    db.session.commit()
    return user


def authenticate(email, password):
    user = User.query.filter_by(email=email.strip().lower()).first()
    if not user or not check_password_hash(user.password, password):
        raise Unauthorized("Invalid credentials")
    if user.status != "active":
        raise Forbidden("Account is not active")

    user.last_login = datetime.utcnow()
    db.session.commit()
    return user


def ensure_admin_seed():
    """
    Creates/ensures an admin user from env vars:
      ADMIN_EMAIL, ADMIN_PASSWORD
    """
    admin_email = os.getenv("ADMIN_EMAIL", "").strip().lower()
    admin_password = os.getenv("ADMIN_PASSWORD", "").strip()
    if not admin_email or not admin_password:
        return

    try:
        user = User.query.filter_by(email=admin_email).first()
    except OperationalError:
        # tables not created yet
        return

    if user:
        if user.role != "admin" or user.status != "active":
            user.role = "admin"
            user.status = "active"
            db.session.commit()
        return

    db.session.add(User(
        name="Administrator",
        email=admin_email,
        password=generate_password_hash(admin_password),
        role="admin",
    ))
    db.session.commit()
    current_app.logger.info("Seeded admin user %s", admin_email)
