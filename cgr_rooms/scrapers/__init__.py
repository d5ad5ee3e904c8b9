from cgr_rooms.scrapers.base import BaseScraper

__all__ = ["BaseScraper"]
