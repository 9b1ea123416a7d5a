"""Flask application for the Real Estate Investment Screening Tool."""

import json
import logging
from dataclasses import replace

from flask import Flask, render_template, request, jsonify

from config import PORT, DEBUG, SECRET_KEY, MAX_UPLOAD_MB
from errors import ComputationError, ValidationError
from models.assumptions import (
    DEFAULT_INPUTS, STRATEGIES, DealInputs, UploadedDocument, parse_deal_inputs,
)
from services.analysis_gateway import AnalysisGateway, NO_FILE_DATA, parse_request
from services.document import check_pdf_signature, check_upload, encode_document
from services.screening import screen_investment

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = SECRET_KEY
# base64 inflates the upload by a third, plus room for the JSON envelope
app.config["MAX_CONTENT_LENGTH"] = (MAX_UPLOAD_MB + MAX_UPLOAD_MB // 2 + 1) * 1024 * 1024

gateway = AnalysisGateway()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _cors(resp, status=200):
    resp.status_code = status
    resp.headers.update(CORS_HEADERS)
    return resp


def _json_body():
    """Decode the request body as JSON. Raises ValidationError."""
    raw = request.get_data(cache=True)
    if not raw or not raw.strip():
        raise ValidationError(NO_FILE_DATA)
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("Request body is not valid JSON")


def _parse_screen_form():
    """Parse the HTML form (and optional om_pdf upload) into DealInputs."""
    document = None
    upload = request.files.get("om_pdf")
    if upload and upload.filename:
        data = upload.read()
        check_upload(upload.filename, upload.mimetype, len(data))
        check_pdf_signature(data)
        document = UploadedDocument(name=upload.filename, file_data=encode_document(data))
        logger.info(f"Offering memorandum received: {upload.filename} ({len(data)} bytes)")
    return parse_deal_inputs(request.form, document=document)


def _parse_screen_json():
    """Same body shape as /api/analyze; the document travels inside the snapshot."""
    req = parse_request(_json_body())
    document = None
    if req.file_data or req.extracted_text:
        document = UploadedDocument(
            name=req.file_name or "",
            file_data=req.file_data,
            extracted_text=req.extracted_text,
        )
    return replace(req.inputs or DealInputs(), document=document)


# --- Routes ---

@app.route("/")
def index():
    return render_template("index.html", strategies=STRATEGIES, defaults=DEFAULT_INPUTS,
                           form={}, result=None, error=None)


@app.route("/screen", methods=["POST"])
def screen():
    """Screen Investment: compute returns, score them and fetch the narrative."""
    wants_json = request.is_json
    try:
        inputs = _parse_screen_json() if wants_json else _parse_screen_form()
        result = screen_investment(inputs, gateway=gateway)
    except ValidationError as e:
        return _screen_error(str(e), 400, wants_json)
    except ComputationError as e:
        logger.warning(f"Return computation rejected inputs: {e}")
        return _screen_error(f"Cannot compute returns: {e}", 422, wants_json)

    if wants_json:
        return jsonify(result.to_dict())
    return render_template("index.html", strategies=STRATEGIES, defaults=DEFAULT_INPUTS,
                           form=request.form, result=result.to_dict(), error=None)


def _screen_error(message, status, wants_json):
    if wants_json:
        return jsonify({"error": message}), status
    return render_template("index.html", strategies=STRATEGIES, defaults=DEFAULT_INPUTS,
                           form=request.form, result=None, error=message), status


@app.route("/api/analyze", methods=["POST", "OPTIONS"])
def analyze():
    """Gateway endpoint: {fileName?, fileData?, extractedText?, inputs?} -> {analysis}."""
    logger.info(f"Analyze invoked with method: {request.method}")
    if request.method == "OPTIONS":
        return _cors(app.response_class(""))

    try:
        body = _json_body()
    except ValidationError as e:
        return _cors(jsonify({"error": str(e)}), 400)

    status, payload = gateway.handle(body)
    return _cors(jsonify(payload), status)


@app.errorhandler(405)
def method_not_allowed(e):
    return _cors(jsonify({"error": "Method Not Allowed"}), 405)


@app.errorhandler(413)
def payload_too_large(e):
    return _cors(jsonify({"error": f"File is too large. Maximum size is {MAX_UPLOAD_MB} MB."}), 413)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=PORT, debug=DEBUG, use_reloader=False)
