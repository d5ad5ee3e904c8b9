#!/usr/bin/env python3
"""
CGR Cinemas Room Scraper
========================

Walks the public booking flow of a CGR cinema (achat.cgrcinemas.fr) to find
out which room every screening is played in. The site never lists rooms
directly; the room tag only shows up once a showtime has been chosen in the
booking form.

Booking flow (one session, cookies replayed on every request):
- GET  /<cinema>/reserver/                                    -> HTML, film <select>
- GET  /<cinema>/reserver/ajax/?modresa_film=<id>             -> JSON {day: ...}
- GET  /<cinema>/reserver/ajax/?modresa_film=<id>&modresa_jour=<day>
                                                              -> JSON {key: label}
- POST /<cinema>/reserver/  modresa_film, modresa_jour, modresa_seance
                                                              -> HTML, room tag + seat form

Requests are strictly sequential with a fixed delay before each one.
"""

import argparse
import logging
import os
import sys
import time
from http.cookiejar import DefaultCookiePolicy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urljoin

import requests

from cgr_rooms.extractors import extract_films, extract_reservation_link, extract_room
from cgr_rooms.models import Film, ScreeningRow
from cgr_rooms.report import write_csv
from cgr_rooms.scrapers.base import BaseScraper
from cgr_rooms.session import SessionState
from cgr_rooms.showtimes import parse_showtime_key, parse_showtime_label

logger = logging.getLogger(__name__)


# Collected while reading the environment at import time, logged by main()
# once logging is configured.
CONFIG_WARNINGS: List[str] = []


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        CONFIG_WARNINGS.append(f"Invalid {name}={raw!r}, using default={default}")
        return default


def _env_choice(name: str, default: str, choices: Sequence[str], upper: bool = False) -> str:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    value = raw.upper() if upper else raw.lower()
    if value not in choices:
        CONFIG_WARNINGS.append(f"Invalid {name}={raw!r}, expected one of {', '.join(choices)}, using default={default}")
        return default
    return value


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# What the reveal step posts as modresa_seance: the raw "<ts>/<version>/<id>"
# key, or only the decoded internal id.
SEANCE_FIELD_MODES = ("key", "id")

# Configuration
CINEMA_SLUG = os.environ.get("CINEMA_SLUG", "lefrancais")  # e.g. "villenave", "lefrancais"
BASE_URL = os.environ.get("CGR_BASE_URL", "https://achat.cgrcinemas.fr").rstrip("/")
OUTPUT_CSV = os.environ.get("OUTPUT_CSV", "")
LOG_LEVEL = _env_choice("LOG_LEVEL", "INFO", LOG_LEVELS, upper=True)

DELAY_SECONDS = _env_float("DELAY_SECONDS", 0.25)
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 15)

SEANCE_FIELD = _env_choice("SEANCE_FIELD", "key", SEANCE_FIELD_MODES)

# Redirect hops followed per request; each hop gets the session cookies
MAX_REDIRECTS = 10

HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0 Safari/537.36',
    'Accept': '*/*',
    'Accept-Language': 'fr-FR,fr;q=0.9,en;q=0.8',
}

ACCEPT_HTML = "text/html"
ACCEPT_JSON = "application/json"


class CrawlError(Exception):
    """Fatal crawl failure: transport error or nothing to crawl"""


def default_output(cinema_slug: str) -> str:
    return f"cgr_{cinema_slug}_programme.csv"


def select_films(
    films: Sequence[Film],
    film_ids: Optional[Iterable[str]] = None,
    film_index: Optional[int] = None,
) -> List[Film]:
    """
    Pick the films to crawl.

    - film_index: only the film at that position (negative counts from the end)
    - film_ids: only those ids, kept in booking-form order
    - neither: every film
    """
    if film_index is not None:
        if -len(films) <= film_index < len(films):
            return [films[film_index]]
        return []

    if film_ids:
        wanted = set(film_ids)
        return [film for film in films if film.id in wanted]

    return list(films)


class CgrScraper(BaseScraper):
    """Sequential booking-flow crawler for one CGR cinema"""

    def __init__(
        self,
        cinema_slug: str = CINEMA_SLUG,
        base_url: str = BASE_URL,
        delay: float = DELAY_SECONDS,
        timeout: float = REQUEST_TIMEOUT,
        seance_field: str = SEANCE_FIELD,
        session: Optional[requests.Session] = None,
    ):
        if seance_field not in SEANCE_FIELD_MODES:
            raise ValueError(
                f"seance_field must be one of {', '.join(SEANCE_FIELD_MODES)}, got {seance_field!r}"
            )

        self.cinema_slug = cinema_slug
        self.base_url = f"{base_url.rstrip('/')}/{cinema_slug}"
        self.delay = max(delay, 0.0)
        self.timeout = timeout
        self.seance_field = seance_field

        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)
        # Cookies are replayed from self.state only
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

        self.state = SessionState()
        self.rows: List[ScreeningRow] = []
        self.stats = {
            "requests": 0,
            "films": 0,
            "days": 0,
            "showtimes": 0,
            "rooms": 0,
            "unknown_rooms": 0,
            "errors": 0,
        }

    @property
    def cinema_chain(self) -> str:
        return "CGR"

    @property
    def reserver_url(self) -> str:
        return f"{self.base_url}/reserver/"

    @property
    def ajax_url(self) -> str:
        return f"{self.base_url}/reserver/ajax/"

    def _delay(self):
        if self.delay:
            time.sleep(self.delay)

    def _send(
        self,
        method: str,
        url: str,
        accept: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """One hop: cookies attached before, recorded after"""
        headers = {"Referer": self.reserver_url, "Accept": accept}
        self.state.attach(headers)

        logger.debug(f"{method} {url} params={params} data={data}")
        response = self.session.request(
            method,
            url,
            params=params,
            data=data,
            headers=headers,
            timeout=self.timeout,
            allow_redirects=False,
        )
        self.state.record_response(response)
        return response

    def _request(
        self,
        method: str,
        url: str,
        accept: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        Paced request with the session cookies attached and recorded.

        Redirects are followed here rather than by requests, which would
        drop the Cookie header on every hop. As in browsers, a 301/302/303
        turns a POST into a body-less GET; 307/308 repeat the request.
        """
        self._delay()

        self.stats["requests"] += 1
        try:
            response = self._send(method, url, accept, params=params, data=data)
            hops = 0
            while response.is_redirect:
                hops += 1
                if hops > MAX_REDIRECTS:
                    raise requests.TooManyRedirects(f"Exceeded {MAX_REDIRECTS} redirects")

                url = urljoin(response.url or url, response.headers["Location"])
                if response.status_code in (301, 302, 303) and method != "HEAD":
                    method, data = "GET", None
                response = self._send(method, url, accept, data=data)

            response.raise_for_status()
        except requests.RequestException as e:
            self.stats["errors"] += 1
            raise CrawlError(f"{method} {url} failed: {e}") from e

        return response

    def _json_object(self, response: requests.Response, what: str) -> Dict[str, Any]:
        """JSON object payload, or {} when the server sent anything else"""
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            logger.warning(f"Expected JSON for {what}, got {content_type or 'no content type'}")
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON for {what}: {e}")
            return {}

        # PHP encodes an empty map as []
        if not isinstance(payload, dict):
            if payload:
                logger.warning(f"Unexpected JSON {type(payload).__name__} for {what}")
            return {}
        return payload

    def get_films(self) -> List[Film]:
        """Load the booking page: seeds the session and lists the films"""
        logger.info(f"→ Loading films from {self.reserver_url}")
        response = self._request("GET", self.reserver_url, accept=ACCEPT_HTML)
        films = extract_films(response.text)
        self.stats["films"] = len(films)
        return films

    def get_days(self, film: Film) -> List[str]:
        response = self._request(
            "GET",
            self.ajax_url,
            accept=ACCEPT_JSON,
            params={"modresa_film": film.id},
        )
        days = list(self._json_object(response, f"days of film {film.id}"))
        self.stats["days"] += len(days)
        return days

    def get_showtimes(self, film: Film, day: str) -> Dict[str, Any]:
        response = self._request(
            "GET",
            self.ajax_url,
            accept=ACCEPT_JSON,
            params={"modresa_film": film.id, "modresa_jour": day},
        )
        showtimes = self._json_object(response, f"showtimes of film {film.id} on {day}")
        self.stats["showtimes"] += len(showtimes)
        return showtimes

    def reveal(self, film: Film, day: str, key: str, label: Any) -> ScreeningRow:
        """Submit the booking step for one showtime and read its room"""
        decoded_key = parse_showtime_key(key)
        decoded_label = parse_showtime_label(label)
        version = decoded_label.version or decoded_key.version

        logger.info(f"      ⏰ Showtime: {decoded_label.time} ({version}, {decoded_label.audio or 'VO/FR'})")

        seance = key if self.seance_field == "key" else decoded_key.showtime_id
        response = self._request(
            "POST",
            self.reserver_url,
            accept=ACCEPT_HTML,
            data={
                "modresa_film": film.id,
                "modresa_jour": day,
                "modresa_seance": seance,
            },
        )

        room = extract_room(response.text)
        reservation_url = extract_reservation_link(response.text)
        if room.is_known:
            self.stats["rooms"] += 1
        else:
            self.stats["unknown_rooms"] += 1
        logger.info(
            f"         🎟️ Room: {room.label or '??'} | Reservation: {'OK' if reservation_url else '❌'}"
        )

        return ScreeningRow(
            cinema=self.cinema_slug,
            room=room.number,
            room_label=room.label,
            film_id=film.id,
            film_title=film.title,
            date=day,
            time=decoded_label.time,
            version=version,
            audio=decoded_label.audio,
            showtime_id=decoded_key.showtime_id,
            ts=decoded_key.ts,
            reservation_url=reservation_url,
        )

    def scrape_film(self, film: Film) -> List[ScreeningRow]:
        """All screenings of one film, in server order"""
        rows = []

        days = self.get_days(film)
        logger.info(f"   → {len(days)} day(s) found")
        if not days:
            return rows

        for day in days:
            logger.info(f"   📅 Day: {day}")
            showtimes = self.get_showtimes(film, day)
            logger.info(f"      → {len(showtimes)} showtime(s) found")
            if not showtimes:
                continue

            for key, label in showtimes.items():
                row = self.reveal(film, day, key, label)
                self.rows.append(row)
                rows.append(row)

        return rows

    def get_screenings(self, films: List[Film]) -> List[ScreeningRow]:
        for i, film in enumerate(films, 1):
            logger.info(f"[{i}/{len(films)}] 🎬 Film: {film.title} ({film.id})")
            self.scrape_film(film)
        return list(self.rows)

    def run(
        self,
        film_ids: Optional[Iterable[str]] = None,
        film_index: Optional[int] = None,
    ) -> List[ScreeningRow]:
        """Full crawl; raises CrawlError when there is nothing to crawl"""
        films = self.get_films()
        if not films:
            raise CrawlError(f"No films found on {self.reserver_url}")
        logger.info(f"✓ Found {len(films)} films")

        selected = select_films(films, film_ids=film_ids, film_index=film_index)
        if not selected:
            raise CrawlError("No film matches the requested selection")
        if len(selected) != len(films):
            logger.info(f"✓ Crawling {len(selected)} of {len(films)} films")

        return self.get_screenings(selected)

    def print_stats(self):
        print(f"\n{'='*50}")
        print(f"📊 CGR {self.cinema_slug.upper()} SCRAPER STATISTICS")
        print(f"{'='*50}")
        print(f"   Requests made:     {self.stats['requests']}")
        print(f"   Films found:       {self.stats['films']}")
        print(f"   Days found:        {self.stats['days']}")
        print(f"   Showtimes found:   {self.stats['showtimes']}")
        print(f"   Rooms revealed:    {self.stats['rooms']}")
        print(f"   Unknown rooms:     {self.stats['unknown_rooms']}")
        print(f"   Errors:            {self.stats['errors']}")
        print(f"{'='*50}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='CGR Cinemas screening room scraper')
    parser.add_argument('--cinema', default=CINEMA_SLUG, help=f'Cinema slug in the booking URL (default: {CINEMA_SLUG})')
    parser.add_argument('--base-url', default=BASE_URL, help='Booking site root')
    parser.add_argument('--delay', type=float, default=DELAY_SECONDS, help='Seconds to wait before each request')
    parser.add_argument('--timeout', type=float, default=REQUEST_TIMEOUT, help='Request timeout in seconds')
    parser.add_argument('--output', '-o', default=OUTPUT_CSV or None, help='CSV file to write (default: cgr_<cinema>_programme.csv)')
    parser.add_argument('--seance-field', choices=SEANCE_FIELD_MODES, default=SEANCE_FIELD,
                        help='Send the raw showtime key or its internal id in the booking step')
    parser.add_argument('--film', action='append', dest='film_ids', metavar='FILM_ID',
                        help='Only crawl this film id (repeatable)')
    parser.add_argument('--film-index', type=int, help='Only crawl the film at this position of the film list')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%H:%M:%S'
    )
    for message in CONFIG_WARNINGS:
        logger.warning(message)

    print("""
    ╔═══════════════════════════════════════════════════════╗
    ║     🎬 CGR Cinemas Room Scraper 🎬                    ║
    ╚═══════════════════════════════════════════════════════╝
    """)

    output = Path(args.output or default_output(args.cinema))
    scraper = CgrScraper(
        cinema_slug=args.cinema,
        base_url=args.base_url,
        delay=args.delay,
        timeout=args.timeout,
        seance_field=args.seance_field,
    )

    try:
        scraper.run(film_ids=args.film_ids, film_index=args.film_index)
    except CrawlError as e:
        logger.error(f"❌ {e}")
        if scraper.rows:
            path = write_csv(scraper.rows, output)
            logger.warning(f"Partial results written → {path} ({len(scraper.rows)} lines)")
        scraper.print_stats()
        return 1

    path = write_csv(scraper.rows, output)
    scraper.print_stats()
    logger.info(f"✓ CSV written → {path} ({len(scraper.rows)} lines)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
