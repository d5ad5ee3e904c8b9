"""Sorting and CSV export of the collected screenings."""

import logging
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd

from cgr_rooms.models import ScreeningRow

logger = logging.getLogger(__name__)

COLUMNS = [
    "cinema",
    "room",
    "room_label",
    "film_id",
    "film_title",
    "date",
    "time",
    "version",
    "audio",
    "showtime_id",
    "ts",
    "reservation_url",
]


def sort_key(row: ScreeningRow) -> tuple:
    return (row.room or "", row.date or "", row.time or "")


def sort_rows(rows: Iterable[ScreeningRow]) -> List[ScreeningRow]:
    """Room, then date, then time - all plain string order"""
    return sorted(rows, key=sort_key)


def to_dataframe(rows: Iterable[ScreeningRow]) -> pd.DataFrame:
    """Convert screenings to DataFrame"""
    records = [row.model_dump() for row in rows]
    return pd.DataFrame(records, columns=COLUMNS)


def write_csv(rows: Iterable[ScreeningRow], path: Union[str, Path]) -> Path:
    """
    Save sorted screenings to CSV.

    Comma-delimited, UTF-8, header always written. Fields containing a
    comma, a quote or a newline are quoted, quotes doubled.
    """
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    ordered = sort_rows(rows)
    df = to_dataframe(ordered)
    df.to_csv(filepath, index=False, encoding="utf-8", lineterminator="\n")
    logger.info(f"💾 Saved {len(ordered)} screenings to {filepath}")
    return filepath


def read_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Load a report back, every cell as a string"""
    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
