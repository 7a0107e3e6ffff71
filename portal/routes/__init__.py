from portal.routes import (
    accounts, applications, chat, evaluations, intern_evaluations, internship_reports,
    jobs, joining_reports, misconduct, notifications, offer_letters, profiles,
    students, weekly_reports,
)

BLUEPRINTS = (
    accounts.bp,
    students.bp,
    profiles.bp,
    jobs.bp,
    applications.bp,
    offer_letters.bp,
    evaluations.bp,
    intern_evaluations.bp,
    misconduct.bp,
    weekly_reports.bp,
    joining_reports.bp,
    internship_reports.bp,
    chat.bp,
    notifications.bp,
)


def register_blueprints(app):
    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
