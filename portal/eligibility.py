MIN_CGPA = 2.5
MIN_SEMESTER = 5
MIN_ATTENDANCE = 75


def check_eligibility(profile):
    """Evaluate a student profile against the internship requirements.

    Returns a dict with ``eligible``, per-requirement ``{met, value}`` entries
    and the human readable list of ``unmetRequirements``. A missing value
    never counts as met.
    """
    requirements = {}
    unmet = []

    def check(name, value, passes, missing_message, failed_message):
        met = value is not None and passes(value)
        requirements[name] = {"met": met, "value": value}
        if value is None:
            unmet.append(missing_message)
        elif not met:
            unmet.append(failed_message)

    check("cgpa", profile.cgpa, lambda v: v >= MIN_CGPA,
          "CGPA is required", "CGPA must be 2.5 or higher")
    check("semester", profile.semester, lambda v: v >= MIN_SEMESTER,
          "Semester is required", "Must be in semester 5 or higher")
    check("backlogs", profile.backlogs, lambda v: v == 0,
          "Backlogs information is required", "Must have no active backlogs")
    check("attendance", profile.attendance, lambda v: v >= MIN_ATTENDANCE,
          "Attendance is required", "Attendance must be 75% or higher")

    acknowledged = bool(profile.code_of_conduct)
    requirements["codeOfConduct"] = {"met": acknowledged, "value": acknowledged}
    if not acknowledged:
        unmet.append("Must acknowledge Code of Conduct")

    return {
        "eligible": not unmet,
        "requirements": requirements,
        "unmetRequirements": unmet,
    }
