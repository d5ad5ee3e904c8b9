"""Base scraper interface."""

from abc import ABC, abstractmethod
from typing import List

from cgr_rooms.models import Film, ScreeningRow


class BaseScraper(ABC):
    """Abstract base class for cinema scrapers."""

    @property
    @abstractmethod
    def cinema_chain(self) -> str:
        """Name of the cinema chain."""
        ...

    @abstractmethod
    def get_films(self) -> List[Film]:
        """Get list of films currently bookable."""
        ...

    @abstractmethod
    def get_screenings(self, films: List[Film]) -> List[ScreeningRow]:
        """Walk the booking flow of each film and collect its screenings."""
        ...
