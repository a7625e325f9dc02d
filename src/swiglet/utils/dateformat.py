"""PHP-style date formatting for the ``date`` filter.

Each character of the format string is a code (``Y``, ``m``, ``d``...) or a
literal; ``\\`` escapes the next character. Codes read the offset-shifted
wall-clock view of the date except the UTC codes (``B``, ``c``, ``r``,
``U``).

Timezone offsets follow the ``Date.getTimezoneOffset`` convention: minutes
*west* of UTC, so UTC+02:00 is ``-120``.

Example:
    >>> format_date(datetime(2011, 9, 6, 14, 9, tzinfo=timezone.utc), "D, jS F Y g:ia")
    'Tue, 6th September 2011 2:09pm'
    >>> format_date(datetime(2011, 9, 6, 14, 9, tzinfo=timezone.utc), "H:i O", offset=-120)
    '16:09 +0200'

"""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any

DAYS_FULL = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS_FULL = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_datetime(value: Any) -> datetime:
    """Coerce a date-like value to an aware UTC datetime.

    Accepts ``datetime`` (naive values are taken as UTC), ``date``, epoch
    seconds and ISO-8601 strings.

    Raises:
        ValueError: If the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"Not a date: {value!r}")
    if isinstance(value, (int, float)):
        return _EPOCH + timedelta(seconds=value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return _EPOCH + timedelta(seconds=float(text))
        except ValueError:
            pass
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return to_datetime(datetime.fromisoformat(text))
    raise ValueError(f"Not a date: {value!r}")


class DateZ:
    """A UTC instant plus its wall-clock view at a fixed offset.

    ``utc`` and ``local`` always describe the same instant: every mutation
    through either view recomputes the other.

    Attributes:
        offset: Minutes west of UTC
        abbr: Timezone abbreviation for the ``T`` code, if known
    """

    __slots__ = ("_local", "_utc", "abbr", "offset")

    def __init__(self, value: Any, offset: float = 0, abbr: str | None = None):
        self._utc = to_datetime(value)
        self.offset = offset
        self.abbr = abbr
        self._local = self._shift(self._utc)

    @property
    def utc(self) -> datetime:
        return self._utc

    @property
    def local(self) -> datetime:
        """Naive wall-clock datetime at ``offset``."""
        return self._local

    def set_timezone_offset(self, offset: float, abbr: str | None = None) -> DateZ:
        self.offset = offset
        if abbr:
            self.abbr = abbr
        self._local = self._shift(self._utc)
        return self

    def replace_local(self, **fields: int) -> DateZ:
        """Change wall-clock fields (``hour=0``...), keeping the offset."""
        self._local = self._local.replace(**fields)
        self._utc = (self._local + timedelta(minutes=self.offset)).replace(tzinfo=timezone.utc)
        return self

    def replace_utc(self, **fields: int) -> DateZ:
        """Change UTC fields, keeping the offset."""
        self._utc = self._utc.replace(**fields)
        self._local = self._shift(self._utc)
        return self

    def add(self, delta: timedelta) -> DateZ:
        self._utc += delta
        self._local = self._shift(self._utc)
        return self

    def timestamp(self) -> float:
        return (self._utc - _EPOCH).total_seconds()

    def _shift(self, utc: datetime) -> datetime:
        return (utc - timedelta(minutes=self.offset)).replace(tzinfo=None)


# ─────────────────────────────────────────────────────────────────────────────
# Format codes
# ─────────────────────────────────────────────────────────────────────────────


def _suffix(day: int) -> str:
    if day % 10 == 1 and day != 11:
        return "st"
    if day % 10 == 2 and day != 12:
        return "nd"
    if day % 10 == 3 and day != 13:
        return "rd"
    return "th"


def _hour12(hour: int) -> int:
    return hour % 12 or 12


def _utc_offset(d: DateZ) -> str:
    minutes = -int(d.offset)
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{mins:02d}"


def _swatch_beat(d: DateZ) -> str:
    utc = d.utc
    seconds = ((utc.hour + 1) % 24) * 3600 + utc.minute * 60 + utc.second
    return f"{round(seconds / 86.4) % 1000:03d}"


def _iso_utc(d: DateZ) -> str:
    utc = d.utc
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"


def _rfc1123(d: DateZ) -> str:
    utc = d.utc
    return (
        f"{DAYS_FULL[utc.weekday()][:3]}, {utc.day:02d} {MONTHS_FULL[utc.month - 1][:3]} "
        f"{utc.year} {utc:%H:%M:%S} GMT"
    )


def _epoch(d: DateZ) -> str:
    seconds = d.timestamp()
    return str(int(seconds)) if seconds == int(seconds) else str(seconds)


FORMAT_CODES: dict[str, Callable[[DateZ], Any]] = {
    # Day
    "d": lambda d: f"{d.local.day:02d}",
    "D": lambda d: DAYS_FULL[d.local.weekday()][:3],
    "j": lambda d: d.local.day,
    "l": lambda d: DAYS_FULL[d.local.weekday()],
    "N": lambda d: d.local.isoweekday(),
    "S": lambda d: _suffix(d.local.day),
    "w": lambda d: d.local.isoweekday() % 7,
    "z": lambda d: d.local.timetuple().tm_yday - 1,
    # Week
    "W": lambda d: f"{d.local.isocalendar()[1]:02d}",
    # Month
    "F": lambda d: MONTHS_FULL[d.local.month - 1],
    "m": lambda d: f"{d.local.month:02d}",
    "M": lambda d: MONTHS_FULL[d.local.month - 1][:3],
    "n": lambda d: d.local.month,
    "t": lambda d: calendar.monthrange(d.local.year, d.local.month)[1],
    # Year
    "L": lambda d: "true" if calendar.isleap(d.local.year) else "false",
    "o": lambda d: d.local.isocalendar()[0],
    "Y": lambda d: d.local.year,
    "y": lambda d: f"{d.local.year % 100:02d}",
    # Time
    "a": lambda d: "am" if d.local.hour < 12 else "pm",
    "A": lambda d: "AM" if d.local.hour < 12 else "PM",
    "B": _swatch_beat,
    "g": lambda d: _hour12(d.local.hour),
    "G": lambda d: d.local.hour,
    "h": lambda d: f"{_hour12(d.local.hour):02d}",
    "H": lambda d: f"{d.local.hour:02d}",
    "i": lambda d: f"{d.local.minute:02d}",
    "s": lambda d: f"{d.local.second:02d}",
    # Timezone
    "O": _utc_offset,
    "Z": lambda d: int(-d.offset * 60),
    "T": lambda d: d.abbr or f"GMT{_utc_offset(d)}",
    # Full date/time
    "c": _iso_utc,
    "r": _rfc1123,
    "U": _epoch,
}


def format_date(
    value: Any,
    fmt: str,
    offset: float | None = None,
    abbr: str | None = None,
) -> str:
    """Format ``value`` with PHP ``date()`` codes.

    Args:
        value: datetime, date, epoch seconds or ISO-8601 string
        fmt: Format string
        offset: Minutes west of UTC (None or 0 formats in UTC)
        abbr: Timezone abbreviation for ``T``

    Raises:
        ValueError: If ``value`` is not a date.
    """
    d = DateZ(value, offset or 0, abbr)
    out: list[str] = []
    chars = iter(fmt)
    for char in chars:
        if char == "\\":
            out.append(next(chars, ""))
            continue
        code = FORMAT_CODES.get(char)
        out.append(str(code(d)) if code else char)
    return "".join(out)
