"""Supervisor and student chat.

Each (supervisor, student) pair shares one conversation. A student talks to
the supervisor recorded on their profile.
"""
from flask import Blueprint
from sqlalchemy import func

from portal.api import APIError, NotFound, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import MessageForm, ProgressUpdateForm
from portal.models import ChatMessage, StudentProfile, User, db

bp = Blueprint("chat", __name__, url_prefix="/api/chat")


def _history(supervisor_id, student_id):
    messages = (
        ChatMessage.query.filter_by(supervisor_id=supervisor_id, student_id=student_id)
        .order_by(ChatMessage.timestamp, ChatMessage.id)
        .all()
    )
    return [m.to_dict() for m in messages]


def _post(supervisor_id, student_id, sender, text):
    message = ChatMessage(
        supervisor_id=supervisor_id,
        student_id=student_id,
        sender_id=sender.id,
        sender_type=sender.role,
        message=text.strip(),
    )
    db.session.add(message)
    db.session.commit()
    return message


def _mark_read(supervisor_id, student_id, sender_type):
    updated = (
        ChatMessage.query.filter_by(
            supervisor_id=supervisor_id, student_id=student_id,
            sender_type=sender_type, is_read=False,
        )
        .update({"is_read": True}, synchronize_session=False)
    )
    db.session.commit()
    return updated


def _unread(supervisor_id, student_id, sender_type):
    return ChatMessage.query.filter_by(
        supervisor_id=supervisor_id, student_id=student_id,
        sender_type=sender_type, is_read=False,
    ).count()


def _supervised_student(student_id):
    profile = StudentProfile.query.filter_by(user_id=student_id, supervisor_id=current_user().id).first()
    if profile is None:
        raise NotFound("Student not found")
    return profile.user


def _assigned_supervisor():
    profile = current_user().student_profile
    if profile is None or profile.supervisor_id is None:
        return None
    return profile.supervisor


# ================= SUPERVISOR SIDE =================
@bp.route("/students")
@auth_required("supervisor")
def supervised_students():
    profiles = (
        StudentProfile.query.filter_by(supervisor_id=current_user().id)
        .join(User, User.id == StudentProfile.user_id)
        .order_by(User.name)
        .all()
    )
    return respond([
        {"id": p.user.id, "name": p.user.name, "email": p.user.email, "roll_number": p.roll_number}
        for p in profiles
    ])


@bp.route("/<int:student_id>")
@auth_required("supervisor")
def supervisor_history(student_id):
    student = _supervised_student(student_id)
    return respond({"student": student.brief(), "messages": _history(current_user().id, student.id)})


@bp.route("/<int:student_id>/messages", methods=["POST"])
@auth_required("supervisor")
def supervisor_send(student_id):
    form = validate(MessageForm())
    student = _supervised_student(student_id)
    message = _post(current_user().id, student.id, current_user(), form.message.data)
    return respond(message.to_dict(), "Message sent successfully", 201)


@bp.route("/<int:student_id>/progress", methods=["POST"])
@auth_required("supervisor")
def progress_update(student_id):
    form = validate(ProgressUpdateForm())
    student = _supervised_student(student_id)
    text = (
        f"Progress Update: {form.title.data.strip()}\n\n"
        f"{form.description.data.strip()}\n\n"
        f"Priority: {form.priority.data or 'Normal'}"
    )
    message = _post(current_user().id, student.id, current_user(), text)
    return respond(message.to_dict(), "Progress update sent successfully", 201)


@bp.route("/<int:student_id>/read", methods=["PUT"])
@auth_required("supervisor")
def supervisor_mark_read(student_id):
    student = _supervised_student(student_id)
    updated = _mark_read(current_user().id, student.id, "student")
    return respond({"updated": updated}, "Messages marked as read")


@bp.route("/unread-counts")
@auth_required("supervisor")
def unread_counts():
    rows = (
        db.session.query(ChatMessage.student_id, func.count(ChatMessage.id))
        .filter(
            ChatMessage.supervisor_id == current_user().id,
            ChatMessage.sender_type == "student",
            ChatMessage.is_read.is_(False),
        )
        .group_by(ChatMessage.student_id)
        .all()
    )
    counts = {str(student_id): count for student_id, count in rows}
    return respond({"counts": counts, "total": sum(counts.values())})


# ================= STUDENT SIDE =================
@bp.route("/supervisor")
@auth_required("student")
def student_history():
    supervisor = _assigned_supervisor()
    if supervisor is None:
        return respond({"supervisor": None, "messages": []}, "No supervisor assigned yet")
    return respond({
        "supervisor": supervisor.brief(),
        "messages": _history(supervisor.id, current_user().id),
    })


@bp.route("/supervisor/messages", methods=["POST"])
@auth_required("student")
def student_send():
    form = validate(MessageForm())
    supervisor = _assigned_supervisor()
    if supervisor is None:
        raise APIError("No supervisor assigned")
    message = _post(supervisor.id, current_user().id, current_user(), form.message.data)
    return respond(message.to_dict(), "Message sent successfully", 201)


@bp.route("/supervisor/read", methods=["PUT"])
@auth_required("student")
def student_mark_read():
    supervisor = _assigned_supervisor()
    if supervisor is None:
        raise APIError("No supervisor assigned")
    updated = _mark_read(supervisor.id, current_user().id, "supervisor")
    return respond({"updated": updated}, "Messages marked as read")


@bp.route("/supervisor/unread-count")
@auth_required("student")
def student_unread_count():
    supervisor = _assigned_supervisor()
    count = _unread(supervisor.id, current_user().id, "supervisor") if supervisor else 0
    return respond({"count": count})
