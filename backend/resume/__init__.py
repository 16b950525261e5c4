# Resume intake module
from .parser import ResumeParser, UnsupportedResumeError, resume_parser
from .extractors import ContactExtractor, contact_extractor
