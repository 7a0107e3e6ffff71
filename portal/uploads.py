import os
import uuid

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.utils import secure_filename

from portal.api import APIError
from portal.models import UploadedFile, db

DOCUMENT_EXTENSIONS = {"pdf", "doc", "docx"}
SUPPORTING_EXTENSIONS = DOCUMENT_EXTENSIONS | {"png", "jpg", "jpeg", "txt"}


def allowed_file(filename, extensions=DOCUMENT_EXTENSIONS):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in extensions


def save_upload(storage, extensions=DOCUMENT_EXTENSIONS):
    """Store an uploaded file and return ``(stored_name, original_name, size)``."""
    if not storage or not storage.filename:
        raise APIError("No file uploaded")
    if not allowed_file(storage.filename, extensions):
        raise APIError(f"Unsupported file type. Allowed: {', '.join(sorted(extensions))}")

    original = secure_filename(storage.filename)
    # stored names are unique per upload
    stored = f"{uuid.uuid4().hex[:12]}_{original}"
    path = os.path.join(current_app.config["UPLOAD_FOLDER"], stored)
    storage.save(path)
    return stored, storage.filename, os.path.getsize(path)


def remove_uploads(filenames):
    folder = current_app.config["UPLOAD_FOLDER"]
    for name in filenames:
        path = os.path.join(folder, name)
        if os.path.exists(path):
            os.remove(path)


def store_files(storages, extensions=DOCUMENT_EXTENSIONS):
    """Save every non-empty upload and return unsaved ``UploadedFile`` rows."""
    records = []
    try:
        for storage in storages or []:
            if not getattr(storage, "filename", None):
                continue
            stored, original, size = save_upload(storage, extensions)
            records.append(UploadedFile(
                filename=stored,
                original_name=original,
                mimetype=storage.mimetype,
                size=size,
            ))
    except APIError:
        remove_uploads(r.filename for r in records)
        raise
    return records


def commit_with_uploads(filenames):
    """Commit the session. If that fails, the files stored for it are deleted."""
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        remove_uploads(filenames)
        current_app.logger.warning("Commit failed, removed uploads: %s", ", ".join(filenames))
        raise
