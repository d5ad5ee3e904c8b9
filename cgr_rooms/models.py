"""Data models for CGR screenings."""

from pydantic import BaseModel, ConfigDict


class Film(BaseModel):
    """Film offered in the booking form."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str


class RoomInfo(BaseModel):
    """Screening room revealed by the booking step."""

    model_config = ConfigDict(frozen=True)

    number: str = ""  # "06", "10", "ICE" or "" when unknown
    label: str = ""

    @property
    def is_known(self) -> bool:
        return bool(self.number)


class ScreeningRow(BaseModel):
    """One screening, as written to the report."""

    model_config = ConfigDict(frozen=True)

    cinema: str
    room: str = ""
    room_label: str = ""
    film_id: str
    film_title: str
    date: str
    time: str = ""
    version: str = ""
    audio: str = ""
    showtime_id: str = ""
    ts: int = 0
    reservation_url: str = ""
