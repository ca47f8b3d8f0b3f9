"""
Flask application for scholarship application intake.
Exposes bulk CSV upload for administrators and single application submission.
"""

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from intake.config import get_settings
from intake.errors import ErrorKind, PreflightError
from intake.runner import SubmissionRejected, process_csv_upload, submit_application
from intake.storage import get_store

settings = get_settings()

app = Flask(__name__)
app.logger.setLevel(logging.INFO)
app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes

CONFLICT_KINDS = {
    ErrorKind.DUPLICATE_IN_BATCH,
    ErrorKind.DUPLICATE_IN_DB,
    ErrorKind.CAPACITY_REACHED,
}


def rejection_status(kind: ErrorKind) -> int:
    """HTTP status for a rejected single submission."""
    if kind in CONFLICT_KINDS:
        return 409
    if kind == ErrorKind.DB_INSERT_FAILURE:
        return 500
    return 400


@app.errorhandler(RequestEntityTooLarge)
def upload_too_large(e):
    return jsonify({"success": False, "message": "Uploaded file is too large"}), 413


@app.route("/api/admin/applications/bulk-upload", methods=["POST"])
def bulk_upload_applications():
    """Bulk-insert applications from a CSV file (multipart field ``file``)."""
    upload = request.files.get("file")
    if upload is None or upload.filename == "":
        return jsonify({"success": False, "message": "No file uploaded"}), 400

    file_bytes = upload.read()
    scholarship_override = request.form.get("scholarship_id")

    try:
        summary = process_csv_upload(
            file_bytes,
            scholarship_override=scholarship_override,
            store=get_store(),
        )
    except PreflightError as e:
        app.logger.info(f"Bulk upload rejected: {e.message}")
        return jsonify({"success": False, "message": e.message}), 400

    app.logger.info(
        f"Bulk upload {upload.filename}: inserted={summary.inserted} "
        f"duplicates={summary.duplicates} errors={summary.errors}"
    )
    return jsonify({"success": True, "summary": summary.to_response()})


@app.route("/api/applications", methods=["POST"])
def create_application():
    """Submit one application from a web form or JSON body and return its suitability."""
    if request.is_json:
        form = request.get_json(silent=True) or {}
        if not isinstance(form, dict):
            return jsonify({"success": False, "message": "Request body must be a JSON object"}), 400
    else:
        form = request.form.to_dict(flat=True)
        documents = request.form.getlist("uploaded_documents")
        if len(documents) > 1:
            form["uploaded_documents"] = documents

    try:
        result = submit_application(form, store=get_store())
    except SubmissionRejected as e:
        return jsonify({
            "success": False,
            "message": e.error.message,
            "code": e.error.kind.value,
        }), rejection_status(e.error.kind)
    except Exception as e:
        app.logger.error(f"Error creating application: {e}", exc_info=True)
        return jsonify({"success": False, "message": "Error creating application"}), 500

    return jsonify({"success": True, "data": result.to_response()})


@app.route("/api/applications/<int:application_id>", methods=["GET"])
def get_application(application_id: int):
    record = get_store().get_application(application_id)
    if not record:
        return jsonify({"success": False, "message": "Application not found"}), 404
    return jsonify({"success": True, "data": record})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
