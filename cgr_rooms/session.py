"""Session cookie state carried through one crawl run."""

import logging
from typing import Dict, Iterable, List, MutableMapping

import requests

logger = logging.getLogger(__name__)


class SessionState:
    """
    Flat cookie jar for the booking flow.

    Every Set-Cookie directive overwrites the stored value of its name.
    Expiry, path and domain attributes are ignored: the jar only lives
    for a single run against a single host.
    """

    def __init__(self):
        self.cookies: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self.cookies)

    def record(self, set_cookie_headers: Iterable[str]) -> None:
        """Store the leading name=value pair of each Set-Cookie directive"""
        for directive in set_cookie_headers:
            if not directive:
                continue
            first = directive.split(";", 1)[0]
            if "=" not in first:
                continue
            name, value = first.split("=", 1)
            name = name.strip()
            if not name:
                continue
            self.cookies[name] = value.strip()
            logger.debug(f"Cookie set: {name}")

    def record_response(self, response: requests.Response) -> None:
        self.record(set_cookie_headers(response))

    def header_value(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())

    def attach(self, headers: MutableMapping[str, str]) -> None:
        """Inject the Cookie header, unless nothing has been recorded yet"""
        value = self.header_value()
        if value:
            headers["Cookie"] = value


def set_cookie_headers(response: requests.Response) -> List[str]:
    """
    Return every Set-Cookie header of a response.

    requests folds repeated headers into one comma-joined string, which
    cannot be split safely (Expires dates contain commas), so the raw
    urllib3 headers are read when available.
    """
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))

    value = response.headers.get("Set-Cookie")
    return [value] if value else []
