"""Read title/subject/author/keywords from PDF bytes (PyMuPDF, pdfplumber fallback)."""
import io
import logging
from typing import Optional

from capsule.models.metadata import ExtractedMetadata
from capsule.tools.date_check import parse_pdf_date


logger = logging.getLogger(__name__)


def extract_pdf_metadata(data: bytes) -> Optional[ExtractedMetadata]:
    """
    Extract descriptive metadata from a PDF document.

    Uses PyMuPDF as primary method, falls back to pdfplumber if needed.

    Returns:
        ExtractedMetadata, or None when neither library can open the file
    """
    info = _info_with_pymupdf(data)
    if info is None:
        info = _info_with_pdfplumber(data)
    if info is None:
        logger.warning("Failed to read PDF metadata with both PyMuPDF and pdfplumber")
        return None

    return ExtractedMetadata(
        title=_text(info.get("title")),
        description=_text(info.get("subject")),
        author=_text(info.get("author")),
        keywords=split_keywords(info.get("keywords")),
        created_at=parse_pdf_date(_text(info.get("creationdate"))),
    )


def split_keywords(value) -> list[str]:
    """Keywords as stored in the info dictionary: a comma-separated string."""
    if isinstance(value, (list, tuple)):
        return [_text(v) for v in value if _text(v)]
    text = _text(value)
    return [kw.strip() for kw in text.split(",") if kw.strip()]


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).strip()


def _info_with_pymupdf(data: bytes) -> Optional[dict]:
    """Info dictionary via PyMuPDF with lower-cased keys. Returns None on failure."""
    try:
        import pymupdf

        with pymupdf.open(stream=data, filetype="pdf") as doc:
            metadata = dict(doc.metadata or {})

        # PyMuPDF names it creationDate
        return {key.lower(): value for key, value in metadata.items()}
    except Exception as e:
        logger.debug("PyMuPDF could not read metadata: %s", e)
        return None


def _info_with_pdfplumber(data: bytes) -> Optional[dict]:
    """Info dictionary via pdfplumber with lower-cased keys. Returns None on failure."""
    try:
        import pdfplumber

        with pdfplumber.open(io.BytesIO(data)) as pdf:
            metadata = dict(pdf.metadata or {})

        return {key.lower(): value for key, value in metadata.items()}
    except Exception as e:
        logger.debug("pdfplumber could not read metadata: %s", e)
        return None
