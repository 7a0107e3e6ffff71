from datetime import datetime

from flask import Blueprint, request

from portal.api import APIError, NotFound, respond
from portal.auth import auth_required, current_user
from portal.models import Notification, db

bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


def _own(notification_id):
    notification = Notification.query.filter_by(id=notification_id, user_id=current_user().id).first()
    if notification is None:
        raise NotFound("Notification not found")
    return notification


@bp.route("")
@auth_required()
def list_notifications():
    query = Notification.query.filter_by(user_id=current_user().id)
    status = request.args.get("status")
    if status:
        if status not in ("unread", "read"):
            raise APIError("Invalid status filter")
        query = query.filter_by(status=status)
    notifications = query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
    return respond([n.to_dict() for n in notifications])


@bp.route("/unread-count")
@auth_required()
def unread_count():
    count = Notification.query.filter_by(user_id=current_user().id, status="unread").count()
    return respond({"count": count})


@bp.route("/<int:notification_id>/read", methods=["PATCH"])
@auth_required()
def mark_read(notification_id):
    notification = _own(notification_id)
    if notification.status != "read":
        notification.status = "read"
        notification.read_at = datetime.utcnow()
        db.session.commit()
    return respond(notification.to_dict(), "Notification marked as read")


@bp.route("/read-all", methods=["PATCH"])
@auth_required()
def mark_all_read():
    updated = (
        Notification.query.filter_by(user_id=current_user().id, status="unread")
        .update({"status": "read", "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.session.commit()
    return respond({"updated": updated}, "All notifications marked as read")


@bp.route("/<int:notification_id>", methods=["DELETE"])
@auth_required()
def delete_notification(notification_id):
    db.session.delete(_own(notification_id))
    db.session.commit()
    return respond(message="Notification deleted")
