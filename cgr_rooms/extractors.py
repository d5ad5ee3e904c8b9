"""
HTML extraction for the CGR booking pages.
===========================================

Structure observed on achat.cgrcinemas.fr:
- Booking entry page: <select id="modresa_film" name="modresa_film">
  with one <option value="<film id>"> per film
- Booking step response: room shown as a tag image, either
  /img/tags/sal_06.png, class "tag tag-SAL06", or the ICE room
  class "tag tag-ICEBYCGR"
- Booking step response: seat selection form <form id="ffselplace" action="...">

Room markers are inconsistent between room types, so room rules are tried
in a fixed order: numeric markers first, then the special room class.
"""

import re
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from cgr_rooms.models import Film, RoomInfo

FILM_SELECTORS = [
    "#modresa_film",
    "select[name=modresa_film]",
]

ROOM_IMAGE_SELECTOR = ", ".join([
    'img[src*="/img/tags/sal_"]',
    'img[class*="tag-SAL"]',
    'img[class="tag tag-ICEBYCGR"]',
])

# (attribute, pattern) - group 1 is the room number
NUMERIC_ROOM_RULES: List[Tuple[str, re.Pattern]] = [
    ("src", re.compile(r"sal_(\d{1,2})\.png", re.IGNORECASE)),
    ("class", re.compile(r"tag-SAL(\d{1,2})", re.IGNORECASE)),
    ("alt", re.compile(r"salle\s*(\d{1,2})", re.IGNORECASE)),
    ("title", re.compile(r"salle\s*(\d{1,2})", re.IGNORECASE)),
]

ICE_ROOM = RoomInfo(number="ICE", label="Room ICE")

RESERVATION_FORM_SELECTOR = "#ffselplace"

UNKNOWN_ROOM = RoomInfo()


def _soup(markup: Optional[str]) -> BeautifulSoup:
    return BeautifulSoup(markup or "", "html.parser")


def _attr(el: Tag, name: str) -> str:
    """Attribute as a string; multi-valued attributes (class) are space-joined"""
    value = el.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def extract_films(markup: Optional[str]) -> List[Film]:
    """Films listed in the booking form, in document order"""
    soup = _soup(markup)

    control = None
    for selector in FILM_SELECTORS:
        control = soup.select_one(selector)
        if control is not None:
            break

    if control is None:
        return []

    films = []
    for option in control.select("option"):
        value = _attr(option, "value").strip()
        if not value:
            continue
        films.append(Film(id=value, title=option.get_text().strip()))
    return films


def _numeric_room(img: Tag) -> Optional[RoomInfo]:
    for attribute, pattern in NUMERIC_ROOM_RULES:
        match = pattern.search(_attr(img, attribute))
        if match:
            number = match.group(1).zfill(2)
            return RoomInfo(number=number, label=f"Room {int(number)}")
    return None


def _ice_room(img: Tag) -> Optional[RoomInfo]:
    if _attr(img, "class") == "tag tag-ICEBYCGR":
        return ICE_ROOM
    return None


# Evaluated in order, first non-None result wins
ROOM_RULES: List[Callable[[Tag], Optional[RoomInfo]]] = [
    _numeric_room,
    _ice_room,
]


def extract_room(markup: Optional[str]) -> RoomInfo:
    """
    Room revealed by a booking step response.

    Returns an empty RoomInfo when no room tag is present or none of the
    rules recognise it.
    """
    img = _soup(markup).select_one(ROOM_IMAGE_SELECTOR)
    if img is None:
        return UNKNOWN_ROOM

    for rule in ROOM_RULES:
        room = rule(img)
        if room is not None:
            return room
    return UNKNOWN_ROOM


def extract_reservation_link(markup: Optional[str]) -> str:
    form = _soup(markup).select_one(RESERVATION_FORM_SELECTOR)
    if form is None:
        return ""
    return _attr(form, "action")
