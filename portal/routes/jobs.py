from flask import Blueprint, current_app, request

from portal.api import APIError, Forbidden, get_or_404, respond, validate
from portal.auth import auth_required, current_user
from portal.forms import JobForm, JobUpdateForm
from portal.models import Job, db
from portal.workflow import close_if_full

bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


def _owned_job(job_id):
    job = get_or_404(Job, job_id, "Job not found")
    if job.posted_by != current_user().id:
        raise Forbidden("Not authorized to modify this job")
    return job


# ================= POST JOB =================
@bp.route("", methods=["POST"])
@auth_required("company")
def create_job():
    form = validate(JobForm())
    job = Job(posted_by=current_user().id)
    form.populate_obj(job)

    db.session.add(job)
    db.session.commit()

    current_app.logger.info("Job %s posted by company %s", job.id, job.posted_by)
    return respond(job.to_dict(), "Job posted successfully", 201)


@bp.route("")
@auth_required()
def list_jobs():
    query = Job.query.filter_by(status="Active")
    term = request.args.get("q", "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(Job.title.ilike(pattern) | Job.location.ilike(pattern))
    jobs = query.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return respond([job.to_dict() for job in jobs])


@bp.route("/company")
@auth_required("company")
def company_jobs():
    jobs = (
        Job.query.filter_by(posted_by=current_user().id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    return respond([job.to_dict() for job in jobs])


@bp.route("/<int:job_id>")
@auth_required()
def get_job(job_id):
    return respond(get_or_404(Job, job_id, "Job not found").to_dict())


@bp.route("/<int:job_id>", methods=["PUT"])
@auth_required("company")
def update_job(job_id):
    job = _owned_job(job_id)
    form = validate(JobUpdateForm())

    for name in form.submitted():
        setattr(job, name, getattr(form, name).data)
    if job.end_date <= job.start_date:
        raise APIError("End date must be after start date")
    if form.status.data == "Active" and job.hired_count >= job.application_limit:
        raise APIError("This job has reached its maximum number of hired students")
    if job.status != "Closed" and close_if_full(job):
        current_app.logger.info("Job %s closed: hired limit %s reached", job.id, job.application_limit)

    db.session.commit()
    return respond(job.to_dict(), "Job updated successfully")


@bp.route("/<int:job_id>", methods=["DELETE"])
@auth_required("company")
def delete_job(job_id):
    job = _owned_job(job_id)
    if job.applications:
        raise APIError("Cannot delete a job that has applications; close it instead")

    db.session.delete(job)
    db.session.commit()
    return respond(message="Job deleted successfully")
