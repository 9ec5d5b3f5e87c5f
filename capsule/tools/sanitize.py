"""Escaping of manifest field values and filename safety checks."""
import html
import logging


logger = logging.getLogger(__name__)

_TRAVERSAL_SEQUENCES = ("../", "..\\")


def sanitize_text(value) -> str:
    """
    HTML-escape a field value for display. Non-strings become ''.

    Already-escaped input is not escaped twice, so a value written into a
    manifest as ``&lt;b&gt;`` and one written as ``<b>`` sanitize to the
    same text.
    """
    if not isinstance(value, str):
        return ""
    # Text-node escaping: quotes are left as they are
    return html.escape(html.unescape(value), quote=False)


def unescape_text(value: str) -> str:
    """Reverse of sanitize_text."""
    return html.unescape(value)


def sanitize_filename(value) -> str:
    """
    Validate a filename taken from the manifest.

    Names containing a parent-directory traversal are rejected ('' is
    returned). Otherwise only CR/LF characters are removed; the original
    name, including non-Latin characters, is preserved.
    """
    if not isinstance(value, str):
        return ""

    if any(seq in value for seq in _TRAVERSAL_SEQUENCES):
        logger.warning("Rejected unsafe filename: %r", value)
        return ""

    return value.replace("\r", "").replace("\n", "")
