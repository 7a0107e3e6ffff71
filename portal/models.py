from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

from portal.grading import COMPANY_CRITERIA, percentage_grade

db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="active")
    last_login = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student_profile = db.relationship(
        "StudentProfile", foreign_keys="StudentProfile.user_id",
        backref="user", uselist=False, lazy=True,
    )
    company_profile = db.relationship("CompanyProfile", backref="user", uselist=False, lazy=True)
    supervisor_profile = db.relationship("SupervisorProfile", backref="user", uselist=False, lazy=True)

    # Relationship: a company can post many jobs
    jobs_posted = db.relationship("Job", backref="company", lazy=True)

    @property
    def profile(self):
        return {
            "student": self.student_profile,
            "company": self.company_profile,
            "supervisor": self.supervisor_profile,
        }.get(self.role)

    @property
    def display_name(self):
        if self.role == "company" and self.company_profile and self.company_profile.company_name:
            return self.company_profile.company_name
        return self.name

    def to_dict(self, with_profile=False):
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "status": self.status,
            "last_login": _iso(self.last_login),
            "created_at": _iso(self.created_at),
        }
        if with_profile:
            data["profile"] = self.profile.to_dict() if self.profile else None
        return data

    def brief(self):
        return {"id": self.id, "name": self.display_name, "email": self.email}


class StudentProfile(db.Model):
    __tablename__ = "student_profile"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    roll_number = db.Column(db.String(50))
    department = db.Column(db.String(100))
    semester = db.Column(db.Integer)
    cgpa = db.Column(db.Float)
    attendance = db.Column(db.Float)
    backlogs = db.Column(db.Integer)
    phone_number = db.Column(db.String(30))
    code_of_conduct = db.Column(db.Boolean, default=False, nullable=False)
    cv = db.Column(db.String(255))
    is_eligible = db.Column(db.Boolean, default=False, nullable=False)
    eligibility_checked_at = db.Column(db.DateTime)
    # Supervisor picked on the most recent application
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"))

    supervisor = db.relationship("User", foreign_keys=[supervisor_id])

    def snapshot(self):
        """Copy of the fields an application keeps at submission time."""
        return {
            "roll_number": self.roll_number,
            "department": self.department,
            "semester": self.semester,
            "cgpa": self.cgpa,
            "attendance": self.attendance,
            "backlogs": self.backlogs,
            "phone_number": self.phone_number,
            "cv": self.cv,
        }

    def to_dict(self):
        data = self.snapshot()
        data.update({
            "code_of_conduct": self.code_of_conduct,
            "is_eligible": self.is_eligible,
            "eligibility_checked_at": _iso(self.eligibility_checked_at),
            "supervisor": self.supervisor.brief() if self.supervisor else None,
        })
        return data


class CompanyProfile(db.Model):
    __tablename__ = "company_profile"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    company_name = db.Column(db.String(200))
    industry = db.Column(db.String(100))
    website = db.Column(db.String(200))
    address = db.Column(db.String(255))
    about = db.Column(db.Text)

    def to_dict(self):
        return {
            "company_name": self.company_name,
            "industry": self.industry,
            "website": self.website,
            "address": self.address,
            "about": self.about,
        }


class SupervisorProfile(db.Model):
    __tablename__ = "supervisor_profile"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    department = db.Column(db.String(100))
    designation = db.Column(db.String(100))
    max_students = db.Column(db.Integer, default=10, nullable=False)
    expertise = db.Column(db.JSON, default=list)
    office = db.Column(db.String(100))
    office_hours = db.Column(db.String(100), default="Mon-Fri, 9AM-5PM")

    def to_dict(self):
        return {
            "department": self.department,
            "designation": self.designation,
            "max_students": self.max_students,
            "expertise": self.expertise or [],
            "office": self.office,
            "office_hours": self.office_hours,
        }


class Job(db.Model):
    __tablename__ = "job"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    location = db.Column(db.String(100), nullable=False)
    work_type = db.Column(db.String(20), nullable=False, default="On-site")
    duration = db.Column(db.String(50), nullable=False)
    salary = db.Column(db.String(50), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=False)
    requirements = db.Column(db.JSON, nullable=False, default=list)
    technology_stack = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(20), nullable=False, default="Active")
    application_limit = db.Column(db.Integer, nullable=False, default=50)
    hired_count = db.Column(db.Integer, nullable=False, default=0)
    application_deadline = db.Column(db.Date, nullable=False)
    posted_by = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationship: a job can have many applications
    applications = db.relationship("Application", backref="job", lazy=True)

    @property
    def duration_in_days(self):
        return (self.end_date - self.start_date).days

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "work_type": self.work_type,
            "duration": self.duration,
            "duration_in_days": self.duration_in_days,
            "salary": self.salary,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "description": self.description,
            "requirements": self.requirements,
            "technology_stack": self.technology_stack,
            "status": self.status,
            "application_limit": self.application_limit,
            "hired_count": self.hired_count,
            "application_deadline": _iso(self.application_deadline),
            "company": self.company.brief(),
            "created_at": _iso(self.created_at),
        }


class Application(db.Model):
    __tablename__ = "application"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    job_id = db.Column(db.Integer, db.ForeignKey("job.id"), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    cover_letter = db.Column(db.Text, nullable=False)
    student_profile = db.Column(db.JSON, default=dict)

    supervisor_status = db.Column(db.String(20), nullable=False, default="pending")
    company_status = db.Column(db.String(20), nullable=False, default="pending")
    overall_status = db.Column(db.String(40), nullable=False, default="pending_supervisor")
    application_status = db.Column(db.String(30), nullable=False, default="pending")

    rejection_feedback = db.Column(db.JSON)
    revisions = db.Column(db.JSON, default=list)
    interview_details = db.Column(db.JSON)

    supervisor_comments = db.Column(db.Text, default="")
    company_comments = db.Column(db.Text, default="")
    company_rejection_note = db.Column(db.Text, default="")

    hiring_date = db.Column(db.DateTime)
    is_currently_hired = db.Column(db.Boolean, default=False, nullable=False)

    applied_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    supervisor_reviewed_at = db.Column(db.DateTime)
    company_reviewed_at = db.Column(db.DateTime)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship("User", foreign_keys=[student_id])
    company = db.relationship("User", foreign_keys=[company_id])
    supervisor = db.relationship("User", foreign_keys=[supervisor_id])

    def to_dict(self):
        return {
            "id": self.id,
            "student": self.student.brief(),
            "student_profile": self.student_profile,
            "job": {"id": self.job.id, "title": self.job.title},
            "company": self.company.brief(),
            "supervisor": self.supervisor.brief(),
            "cover_letter": self.cover_letter,
            "supervisor_status": self.supervisor_status,
            "company_status": self.company_status,
            "overall_status": self.overall_status,
            "application_status": self.application_status,
            "rejection_feedback": self.rejection_feedback,
            "revisions": self.revisions or [],
            "interview_details": self.interview_details,
            "supervisor_comments": self.supervisor_comments,
            "company_comments": self.company_comments,
            "company_rejection_note": self.company_rejection_note,
            "hiring_date": _iso(self.hiring_date),
            "is_currently_hired": self.is_currently_hired,
            "applied_at": _iso(self.applied_at),
            "supervisor_reviewed_at": _iso(self.supervisor_reviewed_at),
            "company_reviewed_at": _iso(self.company_reviewed_at),
        }


class OfferLetter(db.Model):
    __tablename__ = "offer_letter"

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.Integer, db.ForeignKey("application.id"))
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    student_name = db.Column(db.String(150), nullable=False)
    student_email = db.Column(db.String(120), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    organization_name = db.Column(db.String(200), nullable=False, default="Organization Name")
    organization_address = db.Column(db.String(255), nullable=False, default="Organization Address")
    representative_name = db.Column(db.String(150), nullable=False, default="Representative Name")
    representative_position = db.Column(db.String(150), nullable=False, default="Representative Position")
    job_id = db.Column(db.Integer, db.ForeignKey("job.id"), nullable=False)
    job_title = db.Column(db.String(100), nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_name = db.Column(db.String(150), nullable=False, default="Assigned Supervisor")
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    custom_message = db.Column(db.Text, default="")
    content = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="sent")
    # Student response
    response = db.Column(db.String(20), nullable=False, default="pending")
    student_comments = db.Column(db.Text, default="")
    responded_at = db.Column(db.DateTime)
    sent_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "application_id": self.application_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "student_email": self.student_email,
            "company_id": self.company_id,
            "organization_name": self.organization_name,
            "organization_address": self.organization_address,
            "representative_name": self.representative_name,
            "representative_position": self.representative_position,
            "job_id": self.job_id,
            "job_title": self.job_title,
            "supervisor_id": self.supervisor_id,
            "supervisor_name": self.supervisor_name,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "custom_message": self.custom_message,
            "content": self.content,
            "status": self.status,
            "student_response": {
                "response": self.response,
                "student_comments": self.student_comments,
                "responded_at": _iso(self.responded_at),
            },
            "sent_at": _iso(self.sent_at),
        }


class SupervisorEvaluation(db.Model):
    __tablename__ = "supervisor_evaluation"
    __table_args__ = (db.UniqueConstraint("student_id", "supervisor_id"),)

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    student_name = db.Column(db.String(150), nullable=False)
    student_registration = db.Column(db.String(50), nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_name = db.Column(db.String(150), nullable=False)
    internship_duration = db.Column(db.String(50), nullable=False)
    internship_start_date = db.Column(db.Date, nullable=False)
    internship_end_date = db.Column(db.Date, nullable=False)
    position = db.Column(db.String(100), nullable=False)

    # Criteria, 1-10 each
    platform_activity = db.Column(db.Integer, nullable=False)
    completion_of_internship = db.Column(db.Integer, nullable=False)
    earnings_achieved = db.Column(db.Integer, nullable=False)
    skill_development = db.Column(db.Integer, nullable=False)
    client_rating = db.Column(db.Integer, nullable=False)
    professionalism = db.Column(db.Integer, nullable=False)

    total_marks = db.Column(db.Integer, nullable=False)
    grade = db.Column(db.String(2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="submitted")

    final_result_sent = db.Column(db.Boolean, default=False, nullable=False)
    final_result_sent_at = db.Column(db.DateTime)
    final_result_sent_by = db.Column(db.Integer, db.ForeignKey("user.id"))
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship("User", foreign_keys=[student_id])
    supervisor = db.relationship("User", foreign_keys=[supervisor_id])

    def to_dict(self):
        return {
            "id": self.id,
            "student": self.student.brief(),
            "student_name": self.student_name,
            "student_registration": self.student_registration,
            "supervisor": self.supervisor.brief(),
            "supervisor_name": self.supervisor_name,
            "internship_duration": self.internship_duration,
            "internship_start_date": _iso(self.internship_start_date),
            "internship_end_date": _iso(self.internship_end_date),
            "position": self.position,
            "platform_activity": self.platform_activity,
            "completion_of_internship": self.completion_of_internship,
            "earnings_achieved": self.earnings_achieved,
            "skill_development": self.skill_development,
            "client_rating": self.client_rating,
            "professionalism": self.professionalism,
            "total_marks": self.total_marks,
            "grade": self.grade,
            "status": self.status,
            "final_result_sent": self.final_result_sent,
            "final_result_sent_at": _iso(self.final_result_sent_at),
            "submitted_at": _iso(self.submitted_at),
        }


class InternEvaluation(db.Model):
    __tablename__ = "intern_evaluation"
    __table_args__ = (db.UniqueConstraint("application_id"),)

    id = db.Column(db.Integer, primary_key=True)
    intern_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    application_id = db.Column(db.Integer, db.ForeignKey("application.id"), nullable=False)

    # Criteria, 1-4 each
    punctuality_and_attendance = db.Column(db.Integer, nullable=False)
    theory_to_practice = db.Column(db.Integer, nullable=False)
    critical_thinking = db.Column(db.Integer, nullable=False)
    technical_knowledge = db.Column(db.Integer, nullable=False)
    creativity = db.Column(db.Integer, nullable=False)
    adaptability = db.Column(db.Integer, nullable=False)
    time_management = db.Column(db.Integer, nullable=False)
    professional_behaviour = db.Column(db.Integer, nullable=False)
    assignment_performance = db.Column(db.Integer, nullable=False)
    communication_skills = db.Column(db.Integer, nullable=False)

    total_marks = db.Column(db.Integer, nullable=False)
    max_marks = db.Column(db.Integer, nullable=False, default=40)
    comments = db.Column(db.Text, default="")
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    intern = db.relationship("User", foreign_keys=[intern_id])
    company = db.relationship("User", foreign_keys=[company_id])
    application = db.relationship("Application")

    @property
    def percentage(self):
        return round(self.total_marks / self.max_marks * 100, 2)

    def to_dict(self):
        return {
            "id": self.id,
            "intern": self.intern.brief(),
            "company": self.company.brief(),
            "application_id": self.application_id,
            "job_title": self.application.job.title,
            "total_marks": self.total_marks,
            "max_marks": self.max_marks,
            "percentage": self.percentage,
            "comments": self.comments,
            "grade": percentage_grade(self.percentage),
            "scores": {name: getattr(self, name) for name in COMPANY_CRITERIA},
            "submitted_at": _iso(self.submitted_at),
        }


class MisconductReport(db.Model):
    __tablename__ = "misconduct_report"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    student_name = db.Column(db.String(150), nullable=False)
    roll_number = db.Column(db.String(50))
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    company_name = db.Column(db.String(200), nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_name = db.Column(db.String(150), nullable=False)
    issue_type = db.Column(db.String(50), nullable=False)
    incident_date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(30), nullable=False, default="Pending")
    supervisor_comments = db.Column(db.Text, default="")
    resolved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "roll_number": self.roll_number,
            "company_id": self.company_id,
            "company_name": self.company_name,
            "supervisor_id": self.supervisor_id,
            "supervisor_name": self.supervisor_name,
            "issue_type": self.issue_type,
            "incident_date": _iso(self.incident_date),
            "description": self.description,
            "status": self.status,
            "supervisor_comments": self.supervisor_comments,
            "resolved_at": _iso(self.resolved_at),
            "created_at": _iso(self.created_at),
        }


class UploadedFile(db.Model):
    """A stored upload attached to a weekly or completion report."""

    __tablename__ = "uploaded_file"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    mimetype = db.Column(db.String(100))
    size = db.Column(db.Integer, nullable=False, default=0)
    weekly_report_id = db.Column(db.Integer, db.ForeignKey("weekly_report.id"))
    internship_report_id = db.Column(db.Integer, db.ForeignKey("internship_report.id"))
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "filename": self.filename,
            "original_name": self.original_name,
            "mimetype": self.mimetype,
            "size": self.size,
            "url": f"/upload/{self.filename}",
            "uploaded_at": _iso(self.uploaded_at),
        }


class WeeklyReportEvent(db.Model):
    __tablename__ = "weekly_report_event"
    __table_args__ = (db.UniqueConstraint("supervisor_id", "week_number"),)

    id = db.Column(db.Integer, primary_key=True)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    week_number = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    instructions = db.Column(db.Text, default="")
    week_start_date = db.Column(db.Date)
    due_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="active")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    supervisor = db.relationship("User")
    reports = db.relationship("WeeklyReport", backref="event", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "supervisor": self.supervisor.brief(),
            "week_number": self.week_number,
            "title": self.title,
            "instructions": self.instructions,
            "week_start_date": _iso(self.week_start_date),
            "due_date": _iso(self.due_date),
            "status": self.status,
            "created_at": _iso(self.created_at),
        }


class WeeklyReport(db.Model):
    __tablename__ = "weekly_report"
    __table_args__ = (db.UniqueConstraint("event_id", "student_id"),)

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("weekly_report_event.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    week_number = db.Column(db.Integer, nullable=False)
    company_name = db.Column(db.String(200), default="")
    tasks_completed = db.Column(db.Text, nullable=False)
    challenges_faced = db.Column(db.Text, default="")
    reflections = db.Column(db.Text, nullable=False)
    plans_for_next_week = db.Column(db.Text, default="")
    status = db.Column(db.String(30), nullable=False, default="submitted")
    supervisor_feedback = db.Column(db.Text, default="")
    rating = db.Column(db.Integer)
    reviewed_at = db.Column(db.DateTime)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship("User", foreign_keys=[student_id])
    files = db.relationship("UploadedFile", backref="weekly_report", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "student": self.student.brief(),
            "supervisor_id": self.supervisor_id,
            "week_number": self.week_number,
            "company_name": self.company_name,
            "tasks_completed": self.tasks_completed,
            "challenges_faced": self.challenges_faced,
            "reflections": self.reflections,
            "plans_for_next_week": self.plans_for_next_week,
            "supporting_files": [f.to_dict() for f in self.files],
            "status": self.status,
            "supervisor_feedback": self.supervisor_feedback,
            "rating": self.rating,
            "reviewed_at": _iso(self.reviewed_at),
            "submitted_at": _iso(self.submitted_at),
        }


class JoiningReport(db.Model):
    __tablename__ = "joining_report"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    student_name = db.Column(db.String(150), nullable=False)
    roll_number = db.Column(db.String(50), nullable=False, default="N/A")
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    company_name = db.Column(db.String(200), nullable=False)
    position = db.Column(db.String(100), nullable=False)
    department = db.Column(db.String(100), nullable=False, default="N/A")
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    supervisor_name = db.Column(db.String(150), nullable=False)
    internship_start = db.Column(db.Date)
    internship_end = db.Column(db.Date)
    student_thoughts = db.Column(db.Text, nullable=False)
    acknowledgment = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(20), nullable=False, default="submitted")
    verified_at = db.Column(db.DateTime)
    report_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "roll_number": self.roll_number,
            "company_id": self.company_id,
            "company_name": self.company_name,
            "position": self.position,
            "department": self.department,
            "supervisor_id": self.supervisor_id,
            "supervisor_name": self.supervisor_name,
            "internship_start": _iso(self.internship_start),
            "internship_end": _iso(self.internship_end),
            "student_thoughts": self.student_thoughts,
            "acknowledgment": self.acknowledgment,
            "status": self.status,
            "verified_at": _iso(self.verified_at),
            "report_date": _iso(self.report_date),
        }


class InternshipReport(db.Model):
    __tablename__ = "internship_report"

    SECTIONS = (
        "acknowledgement",
        "executive_summary",
        "project_requirements",
        "approach_and_tools",
        "outcomes_achieved",
        "knowledge_acquired",
        "skills_learned",
        "attitudes_and_values",
        "challenging_task",
        "challenges_and_solutions",
        "reflection_and_conclusion",
    )

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)

    acknowledgement = db.Column(db.Text, nullable=False)
    executive_summary = db.Column(db.Text, nullable=False)
    project_requirements = db.Column(db.Text, nullable=False)
    approach_and_tools = db.Column(db.Text, nullable=False)
    outcomes_achieved = db.Column(db.Text, nullable=False)
    knowledge_acquired = db.Column(db.Text, nullable=False)
    skills_learned = db.Column(db.Text, nullable=False)
    attitudes_and_values = db.Column(db.Text, nullable=False)
    challenging_task = db.Column(db.Text, nullable=False)
    challenges_and_solutions = db.Column(db.Text, nullable=False)
    reflection_and_conclusion = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="submitted")
    supervisor_feedback = db.Column(db.Text)
    grade = db.Column(db.String(2))
    reviewed_at = db.Column(db.DateTime)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship("User", foreign_keys=[student_id])
    appendices = db.relationship("UploadedFile", backref="internship_report", lazy=True)

    def to_dict(self):
        data = {section: getattr(self, section) for section in self.SECTIONS}
        data.update({
            "id": self.id,
            "student": self.student.brief(),
            "supervisor_id": self.supervisor_id,
            "company_id": self.company_id,
            "appendices": [f.to_dict() for f in self.appendices],
            "status": self.status,
            "supervisor_feedback": self.supervisor_feedback,
            "grade": self.grade,
            "reviewed_at": _iso(self.reviewed_at),
            "submitted_at": _iso(self.submitted_at),
        })
        return data


class ChatMessage(db.Model):
    __tablename__ = "chat_message"

    id = db.Column(db.Integer, primary_key=True)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    sender_type = db.Column(db.String(20), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "sender_type": self.sender_type,
            "message": self.message,
            "is_read": self.is_read,
            "timestamp": _iso(self.timestamp),
        }


class Notification(db.Model):
    __tablename__ = "notification"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    related_entity_type = db.Column(db.String(50))
    related_entity_id = db.Column(db.Integer)
    priority = db.Column(db.String(10), nullable=False, default="medium")
    status = db.Column(db.String(10), nullable=False, default="unread")
    read_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "related_entity_type": self.related_entity_type,
            "related_entity_id": self.related_entity_id,
            "priority": self.priority,
            "status": self.status,
            "read_at": _iso(self.read_at),
            "created_at": _iso(self.created_at),
        }
