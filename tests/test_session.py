import unittest
from types import SimpleNamespace

import requests

from cgr_rooms.session import SessionState, set_cookie_headers


class FakeRawHeaders:
    def __init__(self, set_cookies):
        self.set_cookies = list(set_cookies)

    def getlist(self, name):
        return self.set_cookies if name.lower() == "set-cookie" else []


class SessionStateTests(unittest.TestCase):
    def test_record_keeps_leading_pair_only(self) -> None:
        state = SessionState()
        state.record(["PHPSESSID=abc123; path=/; HttpOnly; Secure"])
        self.assertEqual(state.cookies, {"PHPSESSID": "abc123"})

    def test_record_last_write_wins(self) -> None:
        state = SessionState()
        state.record(["a=1", "b=2"])
        state.record(["a=3; expires=Wed, 21 Oct 2026 07:28:00 GMT"])
        self.assertEqual(state.cookies, {"a": "3", "b": "2"})

    def test_record_skips_directives_without_pair(self) -> None:
        state = SessionState()
        state.record(["", "garbage; path=/", "=nameless", " token = x=y ; path=/"])
        self.assertEqual(state.cookies, {"token": "x=y"})

    def test_attach_serializes_all_cookies(self) -> None:
        state = SessionState()
        state.record(["a=1", "b=2"])
        headers = {"Accept": "text/html"}
        state.attach(headers)
        self.assertEqual(headers["Cookie"], "a=1; b=2")

    def test_attach_without_cookies_is_noop(self) -> None:
        headers = {}
        SessionState().attach(headers)
        self.assertNotIn("Cookie", headers)


class SetCookieHeadersTests(unittest.TestCase):
    def test_reads_repeated_raw_headers(self) -> None:
        response = requests.Response()
        response.raw = SimpleNamespace(headers=FakeRawHeaders(["a=1; path=/", "b=2"]))
        self.assertEqual(set_cookie_headers(response), ["a=1; path=/", "b=2"])

    def test_falls_back_to_folded_header(self) -> None:
        response = requests.Response()
        response.headers["Set-Cookie"] = "a=1; path=/"
        self.assertEqual(set_cookie_headers(response), ["a=1; path=/"])

    def test_no_cookies(self) -> None:
        self.assertEqual(set_cookie_headers(requests.Response()), [])

    def test_record_response(self) -> None:
        response = requests.Response()
        response.raw = SimpleNamespace(headers=FakeRawHeaders(["sid=42; HttpOnly"]))
        state = SessionState()
        state.record_response(response)
        self.assertEqual(state.cookies, {"sid": "42"})
        self.assertEqual(len(state), 1)


if __name__ == "__main__":
    unittest.main()
