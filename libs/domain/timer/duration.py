"""Duration <-> wire text.

Wire grammar: an optional leading ``-`` followed by one to three
``:``-separated decimal segments, e.g. ``1.50``, ``01:05``, ``02:01:01``,
``-0.001``. Formatting picks the shortest canonical form so that
``format_duration(parse_duration(s)) == s`` for every canonical ``s``.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from shared.errors import DurationParseError

_SEGMENT = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")
_MICROSECOND = timedelta(microseconds=1)


def format_duration(value: timedelta) -> str:
    """Render ``value`` with centisecond, or where needed millisecond, precision.

    Under a minute the result is plain seconds (``"12.34"``); otherwise
    ``HH:MM:SS[.ss]`` with a leading ``00:`` dropped. A zero fraction is
    omitted and negative values get a leading ``-``.
    """
    micros = abs(value) // _MICROSECOND
    millis = (micros + 500) // 1000
    whole, frac_ms = divmod(millis, 1000)

    if frac_ms == 0:
        fraction = ""
    elif frac_ms % 10 == 0:
        fraction = f".{frac_ms // 10:02d}"
    else:
        fraction = f".{frac_ms:03d}"

    if whole < 60:
        text = f"{whole}{fraction}"
    else:
        minutes, seconds = divmod(whole, 60)
        hours, minutes = divmod(minutes, 60)
        text = f"{hours:02d}:{minutes:02d}:{seconds:02d}{fraction}"
        text = text.removeprefix("00:")

    if value < timedelta(0) and millis:
        return f"-{text}"
    return text


def parse_duration(text: str) -> timedelta:
    """Parse wire text into a ``timedelta``; raises ``DurationParseError``."""
    body = text.strip()
    negative = body.startswith("-")
    if negative:
        body = body[1:]

    segments = body.split(":")
    total = Decimal(0)
    for i, segment in enumerate(segments):
        if not _SEGMENT.fullmatch(segment):
            raise DurationParseError(text, f"invalid segment {segment!r}")
        try:
            value = Decimal(segment)
        except InvalidOperation as exc:
            raise DurationParseError(text) from exc
        total += value * 60 ** (len(segments) - 1 - i)

    micros = int((total * 1_000_000).to_integral_value(rounding=ROUND_HALF_EVEN))
    try:
        result = timedelta(microseconds=micros)
    except OverflowError as exc:
        raise DurationParseError(text, "duration out of range") from exc
    return -result if negative else result
