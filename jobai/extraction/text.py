"""
Resume file handling.

Extracts plain text from uploaded resumes and prepares files for
providers that accept documents inline:
- PDF via PyMuPDF (fitz), which keeps multi-column reading order
- DOCX/DOC via python-docx
- TXT read directly

Extraction never raises: a missing file, an unsupported type, or a parser
failure degrades to a placeholder string so the LLM call can still proceed.
"""

import base64
import logging
import mimetypes
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

import docx as python_docx
import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt"}

_MIME_OVERRIDES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}


def placeholder_text(path: str | Path) -> str:
    """Stand-in content used when a file cannot be parsed."""
    ext = Path(path).suffix.lower()
    return f"This text would be extracted from the {ext} file at {path}"


def extract_text_from_file(path: str | Path) -> str:
    """
    Extract plain text from a resume file.

    Args:
        path: Path to a PDF, DOCX/DOC or TXT file

    Returns:
        The extracted text, or a placeholder string if extraction failed
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()

    if not file_path.exists():
        logger.warning(f"Resume file not found: {path}")
        return placeholder_text(path)

    try:
        if suffix == ".pdf":
            text = _extract_pdf(file_path)
        elif suffix in (".docx", ".doc"):
            text = _extract_docx(file_path)
        elif suffix == ".txt":
            text = file_path.read_text(encoding="utf-8", errors="ignore")
        else:
            logger.warning(f"Unsupported resume file type: {suffix}")
            return placeholder_text(path)
    except Exception as e:
        logger.warning(f"Text extraction failed for {path}: {e}")
        return placeholder_text(path)

    if not text.strip():
        logger.warning(f"No text found in {path}")
        return placeholder_text(path)

    logger.info(f"Extracted {len(text)} chars from {file_path.name}")
    return text.strip()


def _extract_pdf(path: Path) -> str:
    with fitz.open(str(path)) as doc:
        return "\n".join(page.get_text("text") for page in doc)


def _extract_docx(path: Path) -> str:
    # python-docx cannot open legacy binary .doc files; those raise and degrade
    document = python_docx.Document(str(path))
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


@dataclass
class InlineDocument:
    """
    Raw file bytes prepared for inline upload to a provider.

    Attributes:
        filename: Original file name
        mime_type: MIME type guessed from the extension
        data: Raw file bytes
    """

    filename: str
    mime_type: str
    data: bytes

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"


def guess_mime_type(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix in _MIME_OVERRIDES:
        return _MIME_OVERRIDES[suffix]
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or "application/octet-stream"


def load_inline_document(path: str | Path) -> InlineDocument:
    """
    Read a file for inline upload.

    Raises:
        OSError: If the file cannot be read
    """
    file_path = Path(path)
    return InlineDocument(
        filename=file_path.name,
        mime_type=guess_mime_type(file_path),
        data=file_path.read_bytes(),
    )


def save_upload(content: bytes, original_name: str, upload_dir: str | Path) -> Path:
    """
    Store an uploaded resume under a unique name.

    Returns:
        Path of the stored file, named resume-<timestamp>-<random><ext>
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)

    suffix = Path(original_name).suffix.lower()
    file_path = directory / f"resume-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}{suffix}"
    file_path.write_bytes(content)

    logger.info(f"Stored upload {original_name} as {file_path.name} ({len(content)} bytes)")
    return file_path
