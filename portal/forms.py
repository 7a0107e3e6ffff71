from datetime import date

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired, MultipleFileField
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import (
    BooleanField, DateField, DateTimeField, Field, FloatField, IntegerField,
    PasswordField, SelectField, StringField, TextAreaField,
)
from wtforms.validators import (
    AnyOf, DataRequired, Email, InputRequired, Length, NumberRange, Optional,
    URL, ValidationError,
)

from portal.grading import GRADES
from portal.uploads import DOCUMENT_EXTENSIONS, SUPPORTING_EXTENSIONS
from portal.workflow import APPLICATION_STATUSES

DATETIME_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"]
SCORE_MESSAGE = "All grades must be between 1 and 10"
COMPANY_SCORE_MESSAGE = "All ratings must be between 1 and 4"


class APIForm(FlaskForm):
    """Reads JSON or multipart bodies; bearer tokens replace CSRF tokens."""

    class Meta:
        csrf = False

        def wrap_formdata(self, form, formdata):
            formdata = super().wrap_formdata(form, formdata)
            if isinstance(formdata, ImmutableMultiDict):
                # a JSON null reads as an absent field
                formdata = ImmutableMultiDict(
                    [(key, value) for key, value in formdata.items(multi=True) if value is not None]
                )
            return formdata

    def submitted(self):
        """Names of the fields that were present in the request body."""
        return {field.name for field in self if field.raw_data}


class StringListField(Field):
    """A JSON array of strings, or one comma separated string from a form."""

    def process_formdata(self, valuelist):
        if len(valuelist) == 1 and isinstance(valuelist[0], str):
            valuelist = valuelist[0].split(",")
        self.data = [str(v).strip() for v in valuelist if str(v).strip()]


def choices(values):
    return [(v, v) for v in values]


# ================= ACCOUNTS =================

class SignupForm(APIForm):
    name = StringField("Name", validators=[DataRequired(), Length(min=2, max=150)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])
    role = SelectField(
        "Role",
        choices=[("student", "Student"), ("company", "Company"), ("supervisor", "Supervisor")],
        validators=[DataRequired()],
    )


class LoginForm(APIForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


# ================= PROFILES =================

class StudentProfileForm(APIForm):
    roll_number = StringField("Roll number", validators=[Optional(), Length(max=50)])
    department = StringField("Department", validators=[Optional(), Length(max=100)])
    semester = IntegerField("Semester", validators=[Optional(), NumberRange(min=1, max=8)])
    cgpa = FloatField("CGPA", validators=[Optional(), NumberRange(min=0, max=4.0)])
    attendance = FloatField("Attendance", validators=[Optional(), NumberRange(min=0, max=100)])
    backlogs = IntegerField("Backlogs", validators=[Optional(), NumberRange(min=0)])
    phone_number = StringField("Phone number", validators=[Optional(), Length(max=30)])
    code_of_conduct = BooleanField("Code of conduct")


class CVUploadForm(APIForm):
    cv = FileField("CV", validators=[FileRequired(), FileAllowed(DOCUMENT_EXTENSIONS)])


class CompanyProfileForm(APIForm):
    company_name = StringField("Company name", validators=[Optional(), Length(min=2, max=200)])
    industry = StringField("Industry", validators=[Optional(), Length(max=100)])
    website = StringField("Website", validators=[Optional(), URL(), Length(max=200)])
    address = StringField("Address", validators=[Optional(), Length(max=255)])
    about = TextAreaField("About", validators=[Optional(), Length(max=2000)])


class SupervisorProfileForm(APIForm):
    department = StringField("Department", validators=[Optional(), Length(max=100)])
    designation = StringField("Designation", validators=[Optional(), Length(max=100)])
    max_students = IntegerField("Max students", validators=[Optional(), NumberRange(min=1, max=50)])
    expertise = StringListField("Expertise")
    office = StringField("Office", validators=[Optional(), Length(max=100)])
    office_hours = StringField("Office hours", validators=[Optional(), Length(max=100)])



# ================= JOBS =================

class JobForm(APIForm):
    title = StringField("Job Title", validators=[DataRequired(), Length(max=100)])
    location = StringField("Location", validators=[DataRequired(), Length(max=100)])
    work_type = SelectField("Work type", choices=choices(("On-site", "Remote", "Hybrid")), default="On-site")
    duration = StringField("Duration", validators=[DataRequired(), Length(max=50)])
    salary = StringField("Salary", validators=[DataRequired(), Length(max=50)])
    start_date = DateField("Start date", validators=[DataRequired()])
    end_date = DateField("End date", validators=[DataRequired()])
    description = TextAreaField("Job Description", validators=[DataRequired(), Length(max=2000)])
    requirements = StringListField("Requirements", validators=[DataRequired("At least one requirement must be provided")])
    technology_stack = StringListField(
        "Technology stack", validators=[DataRequired("At least one technology must be provided")]
    )
    application_limit = IntegerField("Application limit", validators=[Optional(), NumberRange(min=1)], default=50)
    application_deadline = DateField("Application deadline", validators=[DataRequired()])

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data <= self.start_date.data:
            raise ValidationError("End date must be after start date")

    def validate_application_deadline(self, field):
        if field.data and field.data <= date.today():
            raise ValidationError("Application deadline must be in the future")


class JobUpdateForm(APIForm):
    title = StringField("Job Title", validators=[Optional(), Length(max=100)])
    location = StringField("Location", validators=[Optional(), Length(max=100)])
    work_type = StringField("Work type", validators=[Optional(), AnyOf(("On-site", "Remote", "Hybrid"))])
    duration = StringField("Duration", validators=[Optional(), Length(max=50)])
    salary = StringField("Salary", validators=[Optional(), Length(max=50)])
    start_date = DateField("Start date", validators=[Optional()])
    end_date = DateField("End date", validators=[Optional()])
    description = TextAreaField("Job Description", validators=[Optional(), Length(max=2000)])
    requirements = StringListField("Requirements")
    technology_stack = StringListField("Technology stack")
    application_limit = IntegerField("Application limit", validators=[Optional(), NumberRange(min=1)])
    application_deadline = DateField("Application deadline", validators=[Optional()])
    status = StringField("Status", validators=[Optional(), AnyOf(("Active", "Inactive", "Closed", "Draft"))])

    def validate_requirements(self, field):
        if field.raw_data and not field.data:
            raise ValidationError("At least one requirement must be provided")

    def validate_technology_stack(self, field):
        if field.raw_data and not field.data:
            raise ValidationError("At least one technology must be provided")


# ================= APPLICATIONS =================

class ApplicationForm(APIForm):
    job_id = IntegerField("Job", validators=[DataRequired()])
    supervisor_id = IntegerField("Supervisor", validators=[DataRequired()])
    cover_letter = TextAreaField("Cover letter", validators=[DataRequired()])


class ReviewForm(APIForm):
    status = SelectField("Status", choices=choices(("approved", "rejected")))
    comments = TextAreaField("Comments", validators=[Optional()])


class RequestChangesForm(APIForm):
    reason = StringField("Reason", validators=[DataRequired()])
    details = TextAreaField("Details", validators=[DataRequired()])
    requested_fixes = StringListField("Requested fixes")
    fields_to_edit = StringListField("Fields to edit")


class ResubmitForm(APIForm):
    cover_letter = TextAreaField("Cover letter", validators=[Optional()])
    note = StringField("Note", validators=[Optional()])


class InterviewForm(APIForm):
    date = DateTimeField("Interview date", format=DATETIME_FORMATS, validators=[DataRequired()])
    mode = SelectField("Mode", choices=choices(("remote", "in-person")), default="in-person")
    location = StringField("Location or meeting link", validators=[Optional()])
    notes = TextAreaField("Notes", validators=[Optional()])


class ApplicationStatusForm(APIForm):
    status = SelectField("Status", choices=choices(APPLICATION_STATUSES))
    rejection_note = TextAreaField("Rejection note", validators=[Optional()])
    company_comments = TextAreaField("Company comments", validators=[Optional()])


# ================= OFFER LETTERS =================

class OfferLetterForm(APIForm):
    student_id = IntegerField("Student", validators=[DataRequired()])
    job_id = IntegerField("Job", validators=[DataRequired()])
    supervisor_id = IntegerField("Supervisor", validators=[DataRequired()])
    application_id = IntegerField("Application", validators=[Optional()])
    content = TextAreaField("Offer letter content", validators=[DataRequired()])
    start_date = DateField("Start date", validators=[DataRequired()])
    end_date = DateField("End date", validators=[DataRequired()])
    student_name = StringField("Student name", validators=[DataRequired()])
    student_email = StringField("Student email", validators=[DataRequired(), Email()])
    job_title = StringField("Job title", validators=[DataRequired()])
    supervisor_name = StringField("Supervisor name", validators=[Optional()])
    organization_name = StringField("Organization name", validators=[Optional()])
    organization_address = StringField("Organization address", validators=[Optional()])
    representative_name = StringField("Representative name", validators=[Optional()])
    representative_position = StringField("Representative position", validators=[Optional()])
    custom_message = TextAreaField("Custom message", validators=[Optional()])

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError("End date must not be before start date")


class OfferResponseForm(APIForm):
    response = SelectField("Response", choices=choices(("accepted", "rejected")))
    student_comments = TextAreaField("Comments", validators=[Optional()])


# ================= EVALUATIONS =================

def _score(label):
    return IntegerField(label, validators=[
        InputRequired(SCORE_MESSAGE), NumberRange(min=1, max=10, message=SCORE_MESSAGE),
    ])


class SupervisorEvaluationForm(APIForm):
    student_id = IntegerField("Student", validators=[DataRequired("Student selection is required")])
    platform_activity = _score("Platform activity")
    completion_of_internship = _score("Completion of internship")
    earnings_achieved = _score("Earnings achieved")
    skill_development = _score("Skill development")
    client_rating = _score("Client rating")
    professionalism = _score("Professionalism")


class EvaluationStatusForm(APIForm):
    status = SelectField("Status", choices=choices(("submitted", "reviewed", "finalized")))


def _rating(label):
    return IntegerField(label, validators=[
        InputRequired(COMPANY_SCORE_MESSAGE), NumberRange(min=1, max=4, message=COMPANY_SCORE_MESSAGE),
    ])


class InternEvaluationForm(APIForm):
    application_id = IntegerField("Application", validators=[DataRequired("Application is required")])
    punctuality_and_attendance = _rating("Punctuality and attendance")
    theory_to_practice = _rating("Ability to link theory to practice")
    critical_thinking = _rating("Demonstrated critical thinking")
    technical_knowledge = _rating("Technical knowledge")
    creativity = _rating("Creativity and conceptual ability")
    adaptability = _rating("Ability to adapt to a variety of tasks")
    time_management = _rating("Time management and deadline compliance")
    professional_behaviour = _rating("Behaved in a professional manner")
    assignment_performance = _rating("Effectively performed assignments")
    communication_skills = _rating("Oral and written communication skills")
    comments = TextAreaField("Comments", validators=[Optional(), Length(max=1000)])


# ================= MISCONDUCT =================

ISSUE_TYPES = ("Absenteeism", "Unprofessional Behavior", "Misconduct")
MISCONDUCT_STATUSES = ("Pending", "Resolved", "Warning Issued", "Internship Cancelled")


class MisconductReportForm(APIForm):
    student_id = IntegerField("Student", validators=[DataRequired("Student ID is required")])
    issue_type = SelectField("Issue type", choices=choices(ISSUE_TYPES))
    incident_date = DateField("Incident date", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[
        DataRequired(), Length(min=200, message="Description must be at least 200 characters long"),
    ])

    def validate_incident_date(self, field):
        if field.data and field.data > date.today():
            raise ValidationError("Incident date cannot be in the future")


class MisconductStatusForm(APIForm):
    status = SelectField("Status", choices=choices(MISCONDUCT_STATUSES))
    supervisor_comments = TextAreaField("Supervisor comments", validators=[
        DataRequired("Supervisor comments are required"),
    ])


# ================= REPORTS =================

class WeeklyEventForm(APIForm):
    week_number = IntegerField("Week number", validators=[
        InputRequired(), NumberRange(min=1, max=12, message="Week number must be between 1 and 12"),
    ])
    due_date = DateField("Due date", validators=[DataRequired()])
    title = StringField("Title", validators=[Optional(), Length(max=200)])
    instructions = TextAreaField("Instructions", validators=[Optional()])


class WeeklyReportForm(APIForm):
    tasks_completed = TextAreaField("Weekly work summary", validators=[DataRequired()])
    reflections = TextAreaField("Reflections", validators=[DataRequired()])
    challenges_faced = TextAreaField("Challenges faced", validators=[Optional()])
    plans_for_next_week = TextAreaField("Plans for next week", validators=[Optional()])
    supporting_files = MultipleFileField("Supporting files", validators=[FileAllowed(SUPPORTING_EXTENSIONS)])


class WeeklyFeedbackForm(APIForm):
    feedback = TextAreaField("Feedback", validators=[DataRequired("Feedback is required")])
    status = SelectField("Status", choices=choices(("reviewed", "approved", "requires_revision")), default="reviewed")
    rating = IntegerField("Rating", validators=[Optional(), NumberRange(min=1, max=5)])


class JoiningReportForm(APIForm):
    student_thoughts = TextAreaField("Student thoughts", validators=[DataRequired()])
    acknowledgment = BooleanField("Acknowledgment", validators=[DataRequired("Acknowledgment is required")])


class InternshipReportForm(APIForm):
    acknowledgement = TextAreaField("Acknowledgement", validators=[DataRequired()])
    executive_summary = TextAreaField("Executive summary", validators=[DataRequired()])
    project_requirements = TextAreaField("Project requirements", validators=[DataRequired()])
    approach_and_tools = TextAreaField("Approach and tools", validators=[DataRequired()])
    outcomes_achieved = TextAreaField("Outcomes achieved", validators=[DataRequired()])
    knowledge_acquired = TextAreaField("Knowledge acquired", validators=[DataRequired()])
    skills_learned = TextAreaField("Skills learned", validators=[DataRequired()])
    attitudes_and_values = TextAreaField("Attitudes and values", validators=[DataRequired()])
    challenging_task = TextAreaField("Challenging task", validators=[DataRequired()])
    challenges_and_solutions = TextAreaField("Challenges and solutions", validators=[DataRequired()])
    reflection_and_conclusion = TextAreaField("Reflection and conclusion", validators=[DataRequired()])
    appendices = MultipleFileField("Appendices", validators=[FileAllowed(DOCUMENT_EXTENSIONS)])


class InternshipFeedbackForm(APIForm):
    feedback = TextAreaField("Feedback", validators=[DataRequired("Feedback is required")])
    grade = StringField("Grade", validators=[Optional(), AnyOf(GRADES)])
    status = SelectField("Status", choices=choices(("reviewed", "approved")), default="reviewed")


# ================= CHAT =================

class MessageForm(APIForm):
    message = TextAreaField("Message", validators=[DataRequired("Message is required")])


class ProgressUpdateForm(APIForm):
    title = StringField("Title", validators=[DataRequired()])
    description = TextAreaField("Description", validators=[DataRequired()])
    priority = StringField("Priority", validators=[Optional()], default="Normal")
