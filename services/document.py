"""Offering memorandum handling: upload checks, base64 transcoding and PDF text extraction."""

import base64
import binascii
import io
import logging

from config import MAX_UPLOAD_MB
from errors import ValidationError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
PDF_SIGNATURE = b"%PDF-"
MAX_PROMPT_CHARS = 80000


def max_upload_bytes() -> int:
    return MAX_UPLOAD_MB * 1024 * 1024


def check_upload(filename: str, mimetype: str, size: int) -> None:
    """Reject anything that is not a PDF of at most MAX_UPLOAD_MB."""
    is_pdf = mimetype == PDF_MIME or (filename or "").lower().endswith(".pdf")
    if not is_pdf:
        raise ValidationError("Please upload a PDF file only.", field="fileData")
    if size > max_upload_bytes():
        raise ValidationError(
            f"File is too large. Maximum size is {MAX_UPLOAD_MB} MB.", field="fileData"
        )


def check_pdf_signature(data: bytes) -> None:
    """Reject bytes that do not open with the PDF header, whatever the file is called."""
    if not data.startswith(PDF_SIGNATURE):
        raise ValidationError("Please upload a PDF file only.", field="fileData")


def encode_document(data: bytes) -> str:
    """Base64-encode raw document bytes for transmission."""
    return base64.b64encode(data).decode("ascii")


def decode_document(file_data: str) -> bytes:
    """Decode a base64 PDF payload: strict base64, size limit, then the PDF header."""
    if not isinstance(file_data, str):
        raise ValidationError("fileData must be a base64 string", field="fileData")
    cleaned = "".join(file_data.split())
    if not cleaned:
        raise ValidationError("fileData is empty", field="fileData")
    try:
        data = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"fileData is not valid base64: {e}", field="fileData")
    if len(data) > max_upload_bytes():
        raise ValidationError(
            f"File is too large. Maximum size is {MAX_UPLOAD_MB} MB.", field="fileData"
        )
    check_pdf_signature(data)
    return data


def extract_text_from_pdf(data: bytes) -> str:
    """Extract text from PDF bytes using PyPDF2. Returns '' when nothing is readable."""
    try:
        from PyPDF2 import PdfReader
        reader = PdfReader(io.BytesIO(data))
        text_parts = []
        for page in reader.pages:
            text = page.extract_text()
            if text:
                text_parts.append(text)
        full_text = "\n".join(text_parts)
        logger.info(f"Extracted {len(full_text)} chars from {len(reader.pages)} pages")
        return full_text
    except Exception as e:
        logger.warning(f"PDF extraction failed: {e}")
        return ""


def truncate_for_prompt(text: str, max_chars: int = MAX_PROMPT_CHARS) -> str:
    if len(text) > max_chars:
        return text[:max_chars] + "\n...[TRUNCATED]..."
    return text
