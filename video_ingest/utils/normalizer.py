"""Normalization of source-specific dates, durations and URLs"""

import re
from datetime import datetime, timedelta
from typing import Optional, Union
from urllib.parse import urljoin

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ..models import UNKNOWN_DATE, ZERO_DURATION, NO_DOWNLOAD

CANONICAL_DATE_FORMAT = "%d/%m/%Y"

# Checked in this order; the first keyword found in the text decides the unit
RELATIVE_UNITS = (
    ("hour", lambda n: timedelta(hours=n)),
    ("minute", lambda n: timedelta(minutes=n)),
    ("day", lambda n: timedelta(days=n)),
    ("week", lambda n: timedelta(weeks=n)),
    ("month", lambda n: relativedelta(months=n)),
)

_AMOUNT_PATTERN = re.compile(r"(\d+)")
_ARTICLE_PATTERN = re.compile(r"\ban?\b", re.IGNORECASE)
_FIRST_DEFAULT = datetime(2000, 1, 1)
_SECOND_DEFAULT = datetime(2001, 2, 2)


def normalize_date(
    raw: Optional[str],
    source_format: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Convert a source date into DD/MM/YYYY.

    Handles relative expressions ("3 days ago", "an hour ago") resolved
    against `now`, and absolute dates in `source_format` (strptime syntax)
    with ISO 8601 and then a day-first dateutil parse as fallbacks.

    Args:
        raw: Date text as extracted from the source
        source_format: Optional strptime format the source uses
        now: Reference time for relative expressions (defaults to datetime.now())

    Returns:
        Canonical date string, or "Unknown Date" if the input can't be parsed
    """
    if not raw or not isinstance(raw, str):
        return UNKNOWN_DATE

    text = raw.strip()
    if not text:
        return UNKNOWN_DATE

    if re.search(r"\bago\b", text, re.IGNORECASE):
        resolved = _resolve_relative(text, now or datetime.now())
    else:
        resolved = _parse_absolute(text, source_format)

    if resolved is None:
        return UNKNOWN_DATE
    return resolved.strftime(CANONICAL_DATE_FORMAT)


def _resolve_relative(text: str, now: datetime) -> Optional[datetime]:
    """Resolve "<n> <unit>(s) ago" against now"""
    lowered = text.lower()

    match = _AMOUNT_PATTERN.search(lowered)
    if match:
        amount = int(match.group(1))
    elif _ARTICLE_PATTERN.search(lowered):
        # "a day ago", "an hour ago"
        amount = 1
    else:
        return None

    for keyword, delta in RELATIVE_UNITS:
        if keyword in lowered:
            return now - delta(amount)
    return None


def _parse_absolute(text: str, source_format: Optional[str]) -> Optional[datetime]:
    """Parse an absolute date, trying the source's own format first"""
    if source_format:
        try:
            return datetime.strptime(text, source_format)
        except ValueError:
            pass

    # ISO first: a day-first parse would swap month and day in 2025-03-08
    try:
        return date_parser.isoparse(text)
    except (ValueError, OverflowError):
        pass

    # Parts missing from the text are taken from `default`; two different
    # defaults giving different results means the text is not a full date
    try:
        first = date_parser.parse(text, dayfirst=True, default=_FIRST_DEFAULT)
        second = date_parser.parse(text, dayfirst=True, default=_SECOND_DEFAULT)
    except (ValueError, OverflowError, TypeError):
        return None
    if first.date() != second.date():
        return None
    return first


def normalize_duration(raw: Optional[str]) -> str:
    """
    Convert "mm:ss" or "hh:mm:ss" into zero-padded HH:MM:SS.

    Anything else, including empty input, yields "00:00:00".
    """
    if not raw or not isinstance(raw, str):
        return ZERO_DURATION

    parts = raw.strip().split(":")
    if not all(part.strip().isdigit() for part in parts):
        return ZERO_DURATION

    parts = [part.strip().zfill(2) for part in parts]
    if len(parts) == 2:
        return f"00:{parts[0]}:{parts[1]}"
    if len(parts) == 3:
        return ":".join(parts)
    return ZERO_DURATION


def format_seconds(seconds: Union[int, float, str, None]) -> Optional[str]:
    """Render a duration given in seconds as hh:mm:ss (None if not a number)"""
    try:
        total = int(float(seconds))
    except (TypeError, ValueError):
        return None
    if total < 0:
        return None

    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def normalize_url(raw: Optional[str], base_url: Optional[str] = None) -> str:
    """
    Make an extracted download link absolute.

    Protocol-relative links get an https scheme, relative links are joined
    against the page they were found on.
    """
    if not raw or not isinstance(raw, str) or not raw.strip():
        return NO_DOWNLOAD

    url = raw.strip()
    if url == NO_DOWNLOAD:
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", url):
        return url
    if base_url:
        return urljoin(base_url, url)
    return url
