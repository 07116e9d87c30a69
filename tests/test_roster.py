import pytest

from fomcert.schemas.roster import RosterRecord
from fomcert.services.roster_parser import RosterFormatError, RosterParser

LEGACY = """
1. Jane Doe • USA • Shandong University • Computer Science
2. John Mensah • Ghana • University of Jinan • Civil Engineering
"""


def test_parse_legacy_lines():
    records = RosterParser.parse(LEGACY)

    assert records == [
        RosterRecord(name="Jane Doe", country="USA", university="Shandong University", major="Computer Science"),
        RosterRecord(name="John Mensah", country="Ghana", university="University of Jinan", major="Civil Engineering"),
    ]


def test_legacy_lines_out_of_format_are_skipped():
    records = RosterParser.parse("Graduates:\n1. Jane Doe • USA • SDU • CS\nthanks everyone")

    assert [r.name for r in records] == ["Jane Doe"]


def test_parse_json_with_header_aliases():
    records = RosterParser.parse(
        '[{"\ufeffFull Name": " Jane Doe ", "Nationality": "USA", "School": "SDU", '
        '"Academic Major": "CS", "Position(s) held at JICF": "Usher", "Number of Pictures": "2"}]'
    )

    assert records == [RosterRecord(
        name="Jane Doe", country="USA", university="SDU", major="CS", position="Usher", picture_count=2,
    )]


def test_parse_list_of_dicts():
    records = RosterParser.parse([{"name": "Jane", "pictures": "lots"}, {"NAME": "John", "picture count": -3}])

    assert [(r.name, r.picture_count) for r in records] == [("Jane", 0), ("John", 0)]


def test_first_alias_wins_and_unknown_keys_are_ignored():
    record = RosterParser.normalize_record({"Name": "Jane", "Graduate": "Other", "Shoe Size": "9"})

    assert record.name == "Jane"


@pytest.mark.parametrize("data", [None, "", "   ", "[]", []])
def test_empty_inputs(data):
    assert RosterParser.parse(data) == []


@pytest.mark.parametrize("data", ["[{not json", '["Jane"]', {"name": "Jane"}, [1, 2]])
def test_malformed_json_raises(data):
    with pytest.raises(RosterFormatError):
        RosterParser.parse(data)


def test_display_falls_back_to_na():
    record = RosterRecord(name="Jane", country="  ")

    assert record.display("name") == "Jane"
    assert record.display("country") == "N/A"
    assert record.display("email") == "N/A"
