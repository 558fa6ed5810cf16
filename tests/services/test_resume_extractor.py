"""
简历文本提取测试
"""
import io

import pytest
from docx import Document

from app.services.resume_extractor import (
    detect_file_type,
    detect_skills,
    extract_text_from_bytes,
    extract_email,
    extract_phone,
    extract_experience_years,
    name_from_filename,
)


def _docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.mark.parametrize("data, expected", [
    (b"%PDF-1.7 ...", "pdf"),
    (b"PK\x03\x04rest-of-zip", "docx"),
    (bytes.fromhex("d0cf11e0a1b11ae1") + b"\x00" * 20, "doc"),
    ("Plain résumé text\nwith lines".encode("utf-8"), "txt"),
    (b"\x00\x01\x02\x03" * 50, "unknown"),
    (b"", "unknown"),
])
def test_detect_file_type(data, expected):
    assert detect_file_type(data) == expected


def test_extract_txt():
    result = extract_text_from_bytes(b"  Jane Doe\nPython developer  ", "cv.txt")
    assert result.success
    assert result.file_type == "txt"
    assert result.text == "Jane Doe\nPython developer"


def test_extract_docx_paragraphs():
    result = extract_text_from_bytes(_docx_bytes("John Smith", "Go and Rust engineer"), "cv.docx")
    assert result.success
    assert result.file_type == "docx"
    assert "John Smith" in result.text
    assert "Rust" in result.text


def test_extract_unknown_binary_fails_without_raising():
    result = extract_text_from_bytes(b"\x00\x01\x02\x03" * 200, "photo.png")
    assert not result.success
    assert result.error


def test_extract_blank_text_is_failure():
    result = extract_text_from_bytes(b"   \n\n  ", "empty.txt")
    assert not result.success
    assert result.file_type == "txt"


def test_extract_legacy_doc_reports_failure():
    data = bytes.fromhex("d0cf11e0a1b11ae1") + b"\x00" * 512
    result = extract_text_from_bytes(data, "old.doc")
    assert not result.success
    assert result.file_type == "doc"


def test_contact_helpers():
    text = "Reach me at John.Smith@Example.COM or (555) 123-4567. 3 years experience, 7+ years of Python experience"
    assert extract_email(text) == "john.smith@example.com"
    assert extract_phone(text) == "(555) 123-4567"
    assert extract_experience_years(text) == 7
    assert extract_email("no address") is None
    assert extract_experience_years("fresh graduate") == 0


@pytest.mark.parametrize("file_name, expected", [
    ("john_doe-resume.pdf", ("John", "Doe")),
    ("Mary Ann Lee CV.docx", ("Mary", "Ann Lee")),
    ("resume.pdf", ("Unknown", "Candidate")),
    ("12345.txt", ("Unknown", "Candidate")),
])
def test_name_from_filename(file_name, expected):
    assert name_from_filename(file_name) == expected


def test_detect_skills_keeps_known_spelling():
    text = "Built services in python with FASTAPI on PostgreSQL"
    assert detect_skills(text, ["Python", "FastAPI", "SQL", "Go"]) == ["Python", "FastAPI", "SQL"]
    assert detect_skills("", ["Python"]) == []
