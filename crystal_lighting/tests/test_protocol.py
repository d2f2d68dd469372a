import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crystal_lighting.errors import ProtocolError
from crystal_lighting.model import PuzzleInstance
from crystal_lighting.protocol import (
    Placement,
    format_request,
    format_response,
    parse_count,
    parse_item,
    parse_request,
    read_response,
)


def make_instance() -> PuzzleInstance:
    return PuzzleInstance.from_rows(
        ["..", "1X"],
        cost_lantern=1,
        cost_mirror=3,
        cost_obstacle=2,
        max_mirrors=4,
        max_obstacles=0,
    )


def line_reader(text: str):
    stream = io.StringIO(text)

    def readline():
        line = stream.readline()
        return line or None

    return readline


def test_format_request_layout():
    assert format_request(make_instance()) == "2\n..\n1X\n1\n3\n2\n4\n0\n"


def test_parse_request_reads_what_format_request_writes():
    text = format_request(make_instance())

    instance = parse_request(io.StringIO(text))

    assert instance.rows == ["..", "1X"]
    assert instance.costs.mirror == 3
    assert instance.max_mirrors == 4


def test_parse_request_reports_truncated_input():
    with pytest.raises(ProtocolError, match="ended unexpectedly"):
        parse_request(["2", "..", "1X", "1"])


def test_parse_request_rejects_bad_rows():
    with pytest.raises(ProtocolError, match="Malformed board"):
        parse_request(["2", "..", "1", "1", "3", "2", "0", "0"])


def test_format_response_writes_count_first():
    assert format_response(["0 0 1", "1 1 /"]) == "2\n0 0 1\n1 1 /\n"
    assert format_response([]) == "0\n"


def test_parse_item():
    assert parse_item(0, "3 4 \\\n") == Placement(row=3, col=4, glyph="\\")
    assert parse_item(1, "-1 +2 X") == Placement(row=-1, col=2, glyph="X")


@pytest.mark.parametrize(
    "line, message",
    [
        ("1 2", 'Item 5: Each element of your return must be formatted as "ROW COL TYPE"'),
        ("1  2 1", 'Item 5: Each element of your return must be formatted as "ROW COL TYPE"'),
        ("1 2 1 ", 'Item 5: Each element of your return must be formatted as "ROW COL TYPE"'),
        ("a 2 1", "Item 5: R and C in each element of your return must be integers."),
        ("1 2.5 1", "Item 5: R and C in each element of your return must be integers."),
        ("1_0 0 1", "Item 5: R and C in each element of your return must be integers."),
        ("\t1 0 1", "Item 5: R and C in each element of your return must be integers."),
        ("\u0661 0 1", "Item 5: R and C in each element of your return must be integers."),
        ("1 2 12", "Item 5: Invalid item type: 12. Item type must be a single character."),
    ],
)
def test_parse_item_errors(line, message):
    with pytest.raises(ProtocolError) as excinfo:
        parse_item(5, line)

    assert str(excinfo.value) == message


@pytest.mark.parametrize("line", [None, "", "two", "-1", "1_0", " 2", "2 ", "\u0663"])
def test_parse_count_rejects_invalid_numbers(line):
    with pytest.raises(ProtocolError, match="invalid number of elements"):
        parse_count(line, 4)


def test_parse_count_enforces_board_area():
    assert parse_count("4\n", 4) == 4
    with pytest.raises(ProtocolError, match="more than 4 elements"):
        parse_count("5", 4)


def test_read_response_collects_item_lines():
    readline = line_reader("2\n0 0 1\r\n1 1 /\nextra\n")

    assert read_response(readline, 4) == ["0 0 1", "1 1 /"]


def test_read_response_fails_on_missing_lines():
    readline = line_reader("3\n0 0 1\n")

    with pytest.raises(ProtocolError, match="Item 1"):
        read_response(readline, 4)
