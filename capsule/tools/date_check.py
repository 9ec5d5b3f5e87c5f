"""Date shape checks for manifest dates and PDF info-dictionary dates."""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional


# Shape only: no calendar validation, "2024-13-45" is accepted.
# ASCII digits only.
DATE_PATTERNS = (
    re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII),  # YYYY-MM-DD
    re.compile(r"\d{4}/\d{2}/\d{2}", re.ASCII),  # YYYY/MM/DD
    re.compile(r"\d{2}\.\d{2}\.\d{4}", re.ASCII),  # DD.MM.YYYY
    re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", re.ASCII),  # YYYY-MM-DD HH:MM:SS
    re.compile(r"D:\d{14}", re.ASCII),  # D:YYYYMMDDHHMMSS
)

_PARSE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M:%S",
    "D:%Y%m%d%H%M%S",
)

_PDF_FULL = re.compile(
    r"^(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})([+-])(\d{2})'(\d{2})'?$",
    re.ASCII,
)
_PDF_UTC = re.compile(r"^(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})Z?$", re.ASCII)
_PDF_DAY = re.compile(r"^(\d{4})(\d{2})(\d{2})$", re.ASCII)


def is_valid_date(value) -> bool:
    """Return True if value has one of the five accepted manifest date shapes."""
    if not isinstance(value, str) or not value:
        return False
    return any(pattern.fullmatch(value) for pattern in DATE_PATTERNS)


def parse_manifest_date(value: str) -> Optional[datetime]:
    """
    Convert a manifest date into a naive datetime.

    Returns None when the value has the wrong shape or names a day that
    does not exist (e.g. month 13).
    """
    if not is_valid_date(value):
        return None

    for fmt in _PARSE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_pdf_date(value) -> Optional[datetime]:
    """
    Parse a PDF info-dictionary date such as ``D:20241020153000+03'00'``.

    Dates carrying an offset come back as aware UTC datetimes. A bare
    ``D:YYYYMMDD`` comes back as a naive midnight datetime.
    """
    if not isinstance(value, str) or not value:
        return None

    clean = value.strip()
    if clean.startswith("D:"):
        clean = clean[2:]

    try:
        match = _PDF_FULL.match(clean)
        if match:
            year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
            sign, tz_hour, tz_minute = match.group(7), int(match.group(8)), int(match.group(9))
            offset = timedelta(hours=tz_hour, minutes=tz_minute)
            local = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
            # Local time east of UTC is ahead, so subtract to get UTC
            return local - offset if sign == "+" else local + offset

        match = _PDF_UTC.match(clean)
        if match:
            parts = [int(g) for g in match.groups()]
            return datetime(*parts, tzinfo=timezone.utc)

        match = _PDF_DAY.match(clean)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return datetime(year, month, day)
    except ValueError:
        return None

    return None
