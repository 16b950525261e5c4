import io
import zipfile

import pytest

from resume import ContactExtractor, ResumeParser, UnsupportedResumeError
from resume.parser import extract_docx_text, extract_text
from models.schemas import ParsedResume


RESUME = """Jane Doe
Senior Frontend Engineer
jane.doe@example.com | (555) 123-4567

Experience
Acme Corp - React, Node.js
"""


def make_docx(paragraphs):
    ns = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
    body = "".join(f"<w:p><w:r><w:t>{p}</w:t></w:r></w:p>" for p in paragraphs)
    xml = f'<?xml version="1.0"?><w:document xmlns:w="{ns}"><w:body>{body}</w:body></w:document>'
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("word/document.xml", xml)
    return buffer.getvalue()


def test_extracts_contact_fields():
    parsed = ContactExtractor().extract(RESUME)
    assert parsed.name == "Jane Doe"
    assert parsed.email == "jane.doe@example.com"
    assert parsed.phone == "5551234567"
    assert parsed.content == RESUME


def test_name_label_takes_priority():
    parsed = ContactExtractor().extract("SUMMARY\nName: Sam Lee\nEmail: sam@example.com")
    assert parsed.name == "Sam Lee"


def test_all_caps_name():
    parsed = ContactExtractor().extract("JOHN SMITH\njohn@example.com\n")
    assert parsed.name == "JOHN SMITH"


def test_missing_fields_reported_in_order():
    validation = ContactExtractor.validate(ParsedResume(name="Jane Doe"))
    assert validation.is_valid is False
    assert validation.missing_fields == ["email", "phone"]

    validation = ContactExtractor.validate(ParsedResume(name="A B", email="a@b.co", phone="5551234567"))
    assert validation.is_valid is True
    assert validation.missing_fields == []


def test_parse_text_upload():
    parser = ResumeParser()
    parsed = parser.parse(b"Jane Doe\njane@example.com\n", "resume.txt")
    assert parsed.email == "jane@example.com"
    assert parser.validate(parsed).missing_fields == ["phone"]


def test_docx_text_extraction():
    data = make_docx(["Jane Doe", "jane@example.com"])
    text = extract_docx_text(data)
    assert "Jane Doe" in text
    assert "jane@example.com" in text
    assert ResumeParser().parse(data, "Resume.DOCX").name == "Jane Doe"


def test_corrupt_docx_decodes_raw_bytes():
    assert extract_docx_text(b"plain text, not a zip") == "plain text, not a zip"


def test_unsupported_extension():
    with pytest.raises(UnsupportedResumeError):
        extract_text(b"\x89PNG", "photo.png")
