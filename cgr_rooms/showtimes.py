"""Decoding of the showtime keys and labels returned by the booking API."""

from dataclasses import dataclass
from typing import Any, List

KEY_SEPARATOR = "/"
LABEL_SEPARATOR = " - "


@dataclass(frozen=True)
class ShowtimeKey:
    ts: int = 0  # unix seconds, 0 when the key carries no usable timestamp
    version: str = ""
    showtime_id: str = ""


@dataclass(frozen=True)
class ShowtimeLabel:
    time: str = ""
    version: str = ""
    audio: str = ""


def _segments(value: Any, separator: str) -> List[str]:
    if value is None:
        return []
    return str(value).split(separator)


def _segment(parts: List[str], index: int) -> str:
    return parts[index].strip() if index < len(parts) else ""


def _timestamp(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        try:
            return int(float(raw))
        except (ValueError, OverflowError):
            return 0


def parse_showtime_key(key: Any) -> ShowtimeKey:
    """
    Decode "<timestamp>/<version>/<internal id>".

    e.g. "1724606400/VF/543210" -> ShowtimeKey(1724606400, "VF", "543210")
    Missing segments decode to "" and a bad timestamp to 0.
    """
    parts = _segments(key, KEY_SEPARATOR)
    return ShowtimeKey(
        ts=_timestamp(_segment(parts, 0)),
        version=_segment(parts, 1),
        showtime_id=_segment(parts, 2),
    )


def parse_showtime_label(label: Any) -> ShowtimeLabel:
    """
    Decode "<time> - <version> - <audio>".

    e.g. "20h10 - VF - 7.1" -> ShowtimeLabel("20h10", "VF", "7.1")
    """
    parts = _segments(label, LABEL_SEPARATOR)
    return ShowtimeLabel(
        time=_segment(parts, 0),
        version=_segment(parts, 1),
        audio=_segment(parts, 2),
    )
