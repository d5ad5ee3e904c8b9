"""Screening room scraper for CGR cinemas."""

__version__ = "0.1.0"
