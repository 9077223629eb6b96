"""Date normalization for RSS (RFC822) and Atom (ISO8601/RFC3339) dates.

Every parser returns a canonical instant: a UTC ``pendulum.DateTime``
truncated to whole seconds, so that re-rendering with ``format_rfc822`` or
``format_iso8601`` and parsing again yields the same instant.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple, Union

import pendulum

RFC822_FORMATS = ("%a, %d %b %Y %H:%M:%S", "%d %b %Y %H:%M:%S")
ISO8601_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
ISO8601_OFFSET_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Zone names allowed by RFC822 section 5.1, in hours from UTC
RFC822_ZONES = {
    "UT": 0, "UTC": 0, "GMT": 0, "Z": 0,
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
}

_RE_RFC822_SPLIT = re.compile(r"^(.*?\d{1,2}:\d{2}:\d{2})\s*(.*)$")
_RE_NUMERIC_ZONE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")
_RE_OFFSET_COLON = re.compile(r"([+-]\d{2}):(\d{2})$")
_RE_ISO_FRACTION = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d+)(Z|[+-]\d{2}:?\d{2})$"
)

DateLike = Union[datetime, pendulum.DateTime]


class DateParseError(ValueError):
    """Raised when a feed date matches none of the accepted grammars."""


def _canonical(value: datetime) -> pendulum.DateTime:
    return pendulum.instance(value.astimezone(timezone.utc).replace(microsecond=0))


def _zone_offset(zone: str) -> Optional[timedelta]:
    """Offset for an RFC822 zone token; None when the name is unknown."""
    if not zone:
        return timedelta(0)
    match = _RE_NUMERIC_ZONE.match(zone)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        return -delta if sign == "-" else delta
    hours = RFC822_ZONES.get(zone.upper())
    if hours is None:
        return None
    return timedelta(hours=hours)


def parse_rfc822(value: str) -> pendulum.DateTime:
    """
    Parse an RSS ``pubDate``.

    Accepts ``"%a, %d %b %Y %H:%M:%S"`` followed by an optional zone.
    Numeric offsets and the RFC822 zone names are applied; a missing or
    unknown zone is read as UTC.
    """
    if value is None or not value.strip():
        raise DateParseError("Empty RFC822 date")

    text = value.strip()
    match = _RE_RFC822_SPLIT.match(text)
    if not match:
        raise DateParseError(f"Invalid RFC822 date: {value!r}")
    stamp, zone = match.groups()

    parsed = None
    for fmt in RFC822_FORMATS:
        try:
            parsed = datetime.strptime(stamp, fmt)
            break
        except ValueError:
            continue
    if parsed is None:
        raise DateParseError(f"Invalid RFC822 date: {value!r}")

    offset = _zone_offset(zone.strip())
    if offset is None:
        offset = timedelta(0)
    try:
        return _canonical(parsed.replace(tzinfo=timezone(offset)))
    except (ValueError, OverflowError) as e:
        raise DateParseError(f"Invalid RFC822 date: {value!r}") from e


def _iso_utc(text: str) -> datetime:
    return datetime.strptime(text, ISO8601_UTC_FORMAT).replace(tzinfo=timezone.utc)


def _iso_offset(text: str) -> datetime:
    # strptime's %z historically wants +HHMM
    compact = _RE_OFFSET_COLON.sub(r"\1\2", text)
    return datetime.strptime(compact, ISO8601_OFFSET_FORMAT)


def _iso_fraction(text: str) -> datetime:
    match = _RE_ISO_FRACTION.match(text)
    if not match:
        raise ValueError(f"no fractional seconds in {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction + "000000")[:6])
    offset = _zone_offset(zone)
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second), micro,
        tzinfo=timezone(offset),
    )


ISO8601_VARIANTS: Tuple[Callable[[str], datetime], ...] = (_iso_utc, _iso_offset, _iso_fraction)


def parse_iso8601(value: str) -> pendulum.DateTime:
    """
    Parse an Atom ``published``/``updated`` date.

    Variants are tried in order, each only when the previous fails:
    ``YYYY-MM-DDTHH:MM:SSZ``, then an explicit ``+HH:MM`` offset, then
    fractional seconds decomposed field by field.
    """
    if value is None or not value.strip():
        raise DateParseError("Empty ISO8601 date")

    text = value.strip()
    for variant in ISO8601_VARIANTS:
        try:
            return _canonical(variant(text))
        except (ValueError, OverflowError):
            continue
    raise DateParseError(f"Invalid ISO8601 date: {value!r}")


def format_rfc822(instant: DateLike) -> str:
    """Render as RFC822 in UTC, e.g. ``Fri, 01 Mar 2024 10:00:00 +0000``."""
    utc = pendulum.instance(instant).in_timezone("UTC")
    return utc.strftime("%a, %d %b %Y %H:%M:%S +0000")


def format_iso8601(instant: DateLike) -> str:
    """Render as ISO8601 in UTC, e.g. ``2024-03-01T10:00:00Z``."""
    utc = pendulum.instance(instant).in_timezone("UTC")
    return utc.strftime(ISO8601_UTC_FORMAT)


def format_local(instant: DateLike, date_format: str, tz: Optional[str] = None) -> str:
    """Render with a user strftime format in ``tz`` (local zone by default)."""
    zone = tz or pendulum.local_timezone()
    return pendulum.instance(instant).in_timezone(zone).strftime(date_format)
