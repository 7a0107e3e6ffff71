import os

from dotenv import load_dotenv
from flask import Flask, send_from_directory

from portal.api import register_error_handlers
from portal.auth import auth_required, ensure_admin_seed
from portal.models import db
from portal.routes import register_blueprints

load_dotenv()


def database_url():
    url = os.environ.get("DATABASE_URL")

    # Local fallback
    if not url:
        url = "sqlite:///internship_portal.db"

    # Fix postgres:// issue
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def create_app(config=None):
    # ================= APP =================
    app = Flask(__name__)

    # ================= SECRET KEY =================
    app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key")

    # ================= CONFIG =================
    app.config.update(
        SQLALCHEMY_DATABASE_URI=database_url(),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        UPLOAD_FOLDER=os.environ.get("UPLOAD_FOLDER", "upload"),
        MAX_CONTENT_LENGTH=int(os.environ.get("MAX_CONTENT_LENGTH", 10 * 1024 * 1024)),
        TOKEN_MAX_AGE=int(os.environ.get("TOKEN_MAX_AGE", 7 * 24 * 3600)),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )
    if config:
        app.config.update(config)
    app.config["UPLOAD_FOLDER"] = os.path.abspath(app.config["UPLOAD_FOLDER"])
    app.logger.setLevel(app.config["LOG_LEVEL"].upper())

    # ================= DATABASE =================
    db.init_app(app)
    register_error_handlers(app)
    register_blueprints(app)

    with app.app_context():
        db.create_all()
        ensure_admin_seed()

    # ================= UPLOADS =================
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    @app.route("/upload/<filename>")
    @auth_required()
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    return app


# ================= RUN =================
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port)
