"""
Extraction module: resume text extraction and file preparation.
"""

from jobai.extraction.text import (
    ALLOWED_EXTENSIONS,
    InlineDocument,
    extract_text_from_file,
    guess_mime_type,
    load_inline_document,
    placeholder_text,
    save_upload,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "InlineDocument",
    "extract_text_from_file",
    "guess_mime_type",
    "load_inline_document",
    "placeholder_text",
    "save_upload",
]
