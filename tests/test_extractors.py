import unittest

from cgr_rooms.extractors import extract_films, extract_reservation_link, extract_room
from cgr_rooms.models import Film, RoomInfo

BOOKING_PAGE = """
<html><body>
<form id="modresa">
  <select id="modresa_film" name="modresa_film">
    <option value="">Choisissez un film</option>
    <option value=" 12345 "> Jurassic World : Renaissance </option>
    <option value="67890">Elio</option>
    <option value="   ">Blank</option>
  </select>
</form>
</body></html>
"""


class ExtractFilmsTests(unittest.TestCase):
    def test_options_with_value_in_document_order(self) -> None:
        films = extract_films(BOOKING_PAGE)
        self.assertEqual(
            films,
            [
                Film(id="12345", title="Jurassic World : Renaissance"),
                Film(id="67890", title="Elio"),
            ],
        )

    def test_select_found_by_name(self) -> None:
        html = '<select name="modresa_film"><option value="1">A</option><option value="2">B</option></select>'
        self.assertEqual([f.id for f in extract_films(html)], ["1", "2"])

    def test_id_selector_wins_over_name(self) -> None:
        html = (
            '<select name="modresa_film"><option value="by-name">Name</option></select>'
            '<div id="modresa_film"><option value="by-id">Id</option></div>'
        )
        self.assertEqual([f.id for f in extract_films(html)], ["by-id"])

    def test_missing_control(self) -> None:
        self.assertEqual(extract_films("<html><body><p>Maintenance</p></body></html>"), [])
        self.assertEqual(extract_films(""), [])
        self.assertEqual(extract_films(None), [])


class ExtractRoomTests(unittest.TestCase):
    def test_room_from_image_filename(self) -> None:
        html = '<div class="tags"><img src="/img/tags/sal_06.png" alt=""></div>'
        self.assertEqual(extract_room(html), RoomInfo(number="06", label="Room 6"))

    def test_room_from_class(self) -> None:
        html = '<img class="tag tag-SAL10" src="/img/tags/blank.png">'
        self.assertEqual(extract_room(html), RoomInfo(number="10", label="Room 10"))

    def test_single_digit_is_padded(self) -> None:
        html = '<img src="https://achat.cgrcinemas.fr/img/tags/sal_3.png">'
        self.assertEqual(extract_room(html), RoomInfo(number="03", label="Room 3"))

    def test_room_from_alt_text(self) -> None:
        html = '<img class="tag tag-SALX" alt="Salle 7">'
        self.assertEqual(extract_room(html), RoomInfo(number="07", label="Room 7"))

    def test_room_from_title_text(self) -> None:
        html = '<img class="tag tag-SALX" title="salle12">'
        self.assertEqual(extract_room(html), RoomInfo(number="12", label="Room 12"))

    def test_ice_room(self) -> None:
        html = '<img class="tag tag-ICEBYCGR" src="/img/tags/ice.png">'
        room = extract_room(html)
        self.assertEqual(room, RoomInfo(number="ICE", label="Room ICE"))
        self.assertFalse(room.number.isdigit())

    def test_first_tag_image_is_inspected(self) -> None:
        html = '<img class="tag tag-ICEBYCGR"><img src="/img/tags/sal_04.png">'
        self.assertEqual(extract_room(html).number, "ICE")

    def test_numeric_rules_run_before_ice_rule(self) -> None:
        html = '<img class="tag tag-ICEBYCGR" alt="Salle 4">'
        self.assertEqual(extract_room(html), RoomInfo(number="04", label="Room 4"))

    def test_filename_checked_before_class(self) -> None:
        html = '<img src="/img/tags/sal_02.png" class="tag tag-SAL09">'
        self.assertEqual(extract_room(html).number, "02")

    def test_unknown_room(self) -> None:
        for html in ("", "<p>Salle 5</p>", '<img src="/img/tags/vf.png">', '<img class="tag tag-3D">'):
            with self.subTest(html=html):
                room = extract_room(html)
                self.assertEqual(room, RoomInfo(number="", label=""))
                self.assertFalse(room.is_known)


class ExtractReservationLinkTests(unittest.TestCase):
    def test_form_action(self) -> None:
        html = '<form id="ffselplace" method="post" action="https://achat.cgrcinemas.fr/lefrancais/reserver/F123/S456/">'
        self.assertEqual(
            extract_reservation_link(html),
            "https://achat.cgrcinemas.fr/lefrancais/reserver/F123/S456/",
        )

    def test_missing_form(self) -> None:
        self.assertEqual(extract_reservation_link('<form id="other" action="/x"></form>'), "")

    def test_form_without_action(self) -> None:
        self.assertEqual(extract_reservation_link('<form id="ffselplace"></form>'), "")


if __name__ == "__main__":
    unittest.main()
