"""
Resume document handling: text extraction for PDF, DOCX and plain text
uploads, then contact extraction and validation.
"""
import io
import re
import logging
import zipfile
from xml.etree import ElementTree

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from models.schemas import ParsedResume, ResumeValidation
from .extractors import contact_extractor

logger = logging.getLogger(__name__)


class UnsupportedResumeError(ValueError):
    """The upload is not a PDF, DOCX or text file."""


def _safe_decode(data: bytes) -> str:
    return data.decode("utf-8", errors="ignore")


def extract_docx_text(data: bytes) -> str:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            xml = zf.read("word/document.xml")
        root = ElementTree.fromstring(xml)
    except (zipfile.BadZipFile, KeyError, ElementTree.ParseError) as e:
        logger.warning(f"DOCX extraction failed, decoding raw bytes: {e}")
        return _safe_decode(data)

    out = []
    for element in root.iter():
        tag = element.tag.split('}')[-1]
        if tag == "t":
            out.append(element.text or "")
        elif tag in ("br", "p"):
            out.append("\n")
    text = "".join(out)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def extract_pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        logger.warning(f"PDF extraction failed, decoding raw bytes: {e}")
        return _safe_decode(data)
    return "\n".join(pages).strip()


def extract_text(data: bytes, filename: str) -> str:
    """
    Best-effort plain text for an uploaded resume.

    Raises:
        UnsupportedResumeError: the file extension is not supported
    """
    name = (filename or "").lower()
    if name.endswith(".pdf"):
        text = extract_pdf_text(data)
    elif name.endswith(".docx"):
        text = extract_docx_text(data)
    elif name.endswith(".txt"):
        text = _safe_decode(data)
    else:
        raise UnsupportedResumeError(
            f"Unsupported file type for {filename!r}. Please upload a PDF or DOCX file."
        )
    return text.strip()


class ResumeParser:
    """
    Turns an uploaded file into contact fields plus a missing-fields verdict.
    """

    def parse(self, data: bytes, filename: str) -> ParsedResume:
        text = extract_text(data, filename)
        logger.info(f"Extracted {len(text)} characters from {filename}")
        return contact_extractor.extract(text)

    def validate(self, parsed: ParsedResume) -> ResumeValidation:
        return contact_extractor.validate(parsed)


# Global instance
resume_parser = ResumeParser()
