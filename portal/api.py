"""JSON envelope, error types and error handlers shared by every blueprint.

Every response carries ``success``. Failures add ``message`` and, for
validation problems, an ``errors`` list of ``"field: message"`` strings.
"""
from flask import current_app, jsonify, make_response
from werkzeug.exceptions import HTTPException

from portal.models import db


class APIError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors

    def to_dict(self):
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFound(APIError):
    status_code = 404


class Forbidden(APIError):
    status_code = 403


class Conflict(APIError):
    status_code = 409


def respond(data=None, message=None, status=200, **extra):
    body = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    body.update(extra)
    return jsonify(body), status


def text_attachment(body, filename):
    response = make_response(body)
    response.mimetype = "text/plain"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


def form_errors(form):
    return [
        f"{field}: {message}"
        for field, messages in form.errors.items()
        for message in messages
    ]


def validate(form):
    """Run a form's validators, raising APIError with per-field messages."""
    if not form.validate_on_submit():
        raise APIError("Validation failed", errors=form_errors(form))
    return form


def get_or_404(model, ident, message=None):
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFound(message or f"{model.__name__} not found")
    return obj


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify(success=False, message=error.description), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        current_app.logger.exception("Unhandled error: %s", error)
        return jsonify(success=False, message="Server error"), 500
