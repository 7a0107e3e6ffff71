GRADES = ("A+", "A", "B+", "B", "C+", "C", "D", "F")

CRITERIA = (
    "platform_activity",
    "completion_of_internship",
    "earnings_achieved",
    "skill_development",
    "client_rating",
    "professionalism",
)

# (minimum total, grade), out of 60 marks
GRADE_THRESHOLDS = (
    (54, "A+"),  # 90-100%
    (48, "A"),   # 80-89%
    (42, "B+"),  # 70-79%
    (36, "B"),   # 60-69%
    (30, "C+"),  # 50-59%
    (24, "C"),   # 40-49%
    (18, "D"),   # 30-39%
)


def calculate_grade(total_marks):
    for minimum, grade in GRADE_THRESHOLDS:
        if total_marks >= minimum:
            return grade
    return "F"


def total_marks(scores):
    return sum(int(scores[name]) for name in CRITERIA)


# ================= COMPANY EVALUATION =================

COMPANY_CRITERIA = (
    "punctuality_and_attendance",
    "theory_to_practice",
    "critical_thinking",
    "technical_knowledge",
    "creativity",
    "adaptability",
    "time_management",
    "professional_behaviour",
    "assignment_performance",
    "communication_skills",
)
COMPANY_MAX_SCORE = 4
COMPANY_MAX_MARKS = COMPANY_MAX_SCORE * len(COMPANY_CRITERIA)

# Final result: supervisor marks out of 60 plus company marks scaled to 40
COMPANY_WEIGHT = 40

# (minimum percentage, grade)
PERCENT_THRESHOLDS = (
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (40, "D"),
)


def percentage_grade(percentage):
    for minimum, grade in PERCENT_THRESHOLDS:
        if percentage >= minimum:
            return grade
    return "F"


def company_total(scores):
    return sum(int(scores[name]) for name in COMPANY_CRITERIA)


def final_result(supervisor_marks, company_marks, company_max=COMPANY_MAX_MARKS):
    """Combine both evaluations into marks out of 100. A missing part counts as 0."""
    supervisor_part = supervisor_marks or 0
    company_part = round((company_marks or 0) / company_max * COMPANY_WEIGHT)
    total = supervisor_part + company_part
    return {
        "supervisor_marks": supervisor_part,
        "company_marks": company_part,
        "total_marks": total,
        "grade": percentage_grade(total),
    }
