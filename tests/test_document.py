import base64
import io

import pytest
from PyPDF2 import PdfWriter

from errors import ValidationError
from services.document import (
    check_upload, decode_document, encode_document, extract_text_from_pdf,
    max_upload_bytes, truncate_for_prompt,
)


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def test_base64_round_trip_preserves_every_byte():
    original = b"%PDF-1.7\r\n" + bytes(range(256)) * 64
    assert decode_document(encode_document(original)) == original


def test_decode_tolerates_line_wrapped_base64():
    original = _blank_pdf()
    wrapped = base64.encodebytes(original).decode("ascii")  # 76-char lines
    assert "\n" in wrapped
    assert decode_document(wrapped) == original


@pytest.mark.parametrize("payload", ["not base64!!", "QUJD=", "", "   ", 12345])
def test_decode_rejects_invalid_payloads(payload):
    with pytest.raises(ValidationError):
        decode_document(payload)


@pytest.mark.parametrize("data", [b"MZ\x90\x00not a pdf", b"PK\x03\x04", b" %PDF-1.4"])
def test_decode_rejects_bytes_without_pdf_header(data):
    with pytest.raises(ValidationError, match="PDF file only"):
        decode_document(encode_document(data))


def test_decode_rejects_oversize_payload(monkeypatch):
    monkeypatch.setattr("services.document.MAX_UPLOAD_MB", 0)
    with pytest.raises(ValidationError, match="too large"):
        decode_document(encode_document(b"x" * 10))


def test_check_upload_accepts_pdf_within_limit():
    check_upload("om.pdf", "application/pdf", 1024)
    check_upload("OM.PDF", "application/octet-stream", 1024)


def test_check_upload_rejects_non_pdf():
    with pytest.raises(ValidationError, match="PDF"):
        check_upload("rent_roll.xlsx", "application/vnd.ms-excel", 1024)


def test_check_upload_rejects_files_over_10mb():
    with pytest.raises(ValidationError, match="10 MB"):
        check_upload("om.pdf", "application/pdf", max_upload_bytes() + 1)


def test_extract_text_from_blank_pdf_is_empty():
    assert extract_text_from_pdf(_blank_pdf()) == ""


def test_extract_text_from_garbage_is_empty_not_an_exception():
    assert extract_text_from_pdf(b"definitely not a pdf") == ""


def test_truncate_for_prompt():
    assert truncate_for_prompt("abc", max_chars=5) == "abc"
    out = truncate_for_prompt("a" * 10, max_chars=4)
    assert out.startswith("aaaa\n")
    assert out.endswith("[TRUNCATED]...")
