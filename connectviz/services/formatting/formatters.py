"""Pure formatting helpers for interval buckets and values.

Date patterns use moment-style tokens (``YYYY-MM-DD HH:mm``), with
``[...]`` for literal text. Patterns containing ``%`` are handed to
``strftime`` unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import datetime, timezone as dt_timezone, tzinfo
from decimal import Decimal
from typing import Any

import pytz
from dateutil import parser as date_parser

from connectviz.errors import MalformedMetadata

_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|M|dddd|ddd|DD|D|HH|H|hh|h|mm|m|ss|s|A|a|ZZ|Z"
)

_CURRENCY_SYMBOLS = "$€£¥"


def identity(value: Any) -> Any:
    """Default value formatter."""
    return value


def parse_bucket(value: Any) -> datetime:
    """Parse an interval bucket into an aware datetime (naive values are UTC)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = date_parser.isoparse(value.strip())
    else:
        raise ValueError(f"Could not parse interval bucket '{value}'")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt_timezone.utc)
    return parsed


def get_timezone(name: str | None) -> tzinfo:
    """Return the tzinfo for an IANA name, UTC when no name is given."""
    if not name:
        return pytz.utc
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise MalformedMetadata(f"Unknown timezone '{name}'") from e


def resolve_interval_pattern(interval: str | None, formats: Mapping[str, str] | None) -> str:
    """Look up the date pattern for an interval granularity."""
    pattern = (formats or {}).get(interval) if interval else None
    if not pattern:
        raise MalformedMetadata(
            f"No date format configured for interval '{interval}'"
        )
    return pattern


def _offset(moment: datetime, separator: str) -> str:
    offset = moment.utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset else 0
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _render_token(token: str, moment: datetime) -> str:
    if token.startswith("["):
        return token[1:-1]
    hour12 = moment.hour % 12 or 12
    renderers: dict[str, Callable[[], str]] = {
        "YYYY": lambda: f"{moment.year:04d}",
        "YY": lambda: f"{moment.year % 100:02d}",
        "MMMM": lambda: moment.strftime("%B"),
        "MMM": lambda: moment.strftime("%b"),
        "MM": lambda: f"{moment.month:02d}",
        "M": lambda: str(moment.month),
        "dddd": lambda: moment.strftime("%A"),
        "ddd": lambda: moment.strftime("%a"),
        "DD": lambda: f"{moment.day:02d}",
        "D": lambda: str(moment.day),
        "HH": lambda: f"{moment.hour:02d}",
        "H": lambda: str(moment.hour),
        "hh": lambda: f"{hour12:02d}",
        "h": lambda: str(hour12),
        "mm": lambda: f"{moment.minute:02d}",
        "m": lambda: str(moment.minute),
        "ss": lambda: f"{moment.second:02d}",
        "s": lambda: str(moment.second),
        "A": lambda: "AM" if moment.hour < 12 else "PM",
        "a": lambda: "am" if moment.hour < 12 else "pm",
        "ZZ": lambda: _offset(moment, ""),
        "Z": lambda: _offset(moment, ":"),
    }
    return renderers[token]()


def format_date(
    value: Any,
    timezone: str | None = None,
    pattern: str | None = None,
    *,
    interval: str | None = None,
    formats: Mapping[str, str] | None = None,
) -> str:
    """Format an interval bucket in ``timezone``.

    Args:
        value: Bucket start (ISO string or datetime).
        timezone: IANA timezone name; UTC when omitted.
        pattern: Date pattern. When omitted it is looked up in ``formats``
            under ``interval``.
        interval: Granularity tag used for the pattern lookup.
        formats: Granularity -> pattern table.

    Raises:
        MalformedMetadata: no pattern for the interval, or unknown timezone.
    """
    if pattern is None:
        pattern = resolve_interval_pattern(interval, formats)
    moment = parse_bucket(value).astimezone(get_timezone(timezone))
    if "%" in pattern:
        return moment.strftime(pattern)
    return _TOKEN_RE.sub(lambda match: _render_token(match.group(0), moment), pattern)


def value_formatter(spec: str) -> Callable[[Any], Any]:
    """Build a number formatter from a format spec such as ``"$,.2f"``.

    Currency symbols at either end are kept as prefix/suffix; the rest is a
    Python format spec. Non-numeric values are returned unchanged.

    >>> value_formatter("$,.2f")(-1234.5)
    '-$1,234.50'
    """
    prefix = ""
    suffix = ""
    body = spec
    while body and body[0] in _CURRENCY_SYMBOLS:
        prefix += body[0]
        body = body[1:]
    while body and body[-1] in _CURRENCY_SYMBOLS:
        suffix = body[-1] + suffix
        body = body[:-1]
    # Fail at construction on a spec Python cannot format.
    format(0, body)

    def _format(value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return value
        sign = "-" if value < 0 else ""
        return f"{sign}{prefix}{format(abs(value), body)}{suffix}"

    return _format
