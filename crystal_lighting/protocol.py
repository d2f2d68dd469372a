"""Line protocol spoken with candidate programs.

Request::

    H
    <H board rows>
    costLantern
    costMirror
    costObstacle
    maxMirrors
    maxObstacles

Response: a line with the item count ``N`` followed by ``N`` lines formatted
as ``"ROW COL TYPE"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from .errors import ProtocolError
from .model import PuzzleInstance

# Plain ASCII integers only: no underscores, padding or non-ASCII digits.
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Placement:
    """One raw item line from a response; the glyph is validated later."""

    row: int
    col: int
    glyph: str


def format_request(instance: PuzzleInstance) -> str:
    lines: List[str] = [str(instance.height)]
    lines.extend(instance.rows)
    lines.extend(
        str(value)
        for value in (
            instance.costs.lantern,
            instance.costs.mirror,
            instance.costs.obstacle,
            instance.max_mirrors,
            instance.max_obstacles,
        )
    )
    return "\n".join(lines) + "\n"


def parse_request(lines: Iterable[str]) -> PuzzleInstance:
    """Inverse of :func:`format_request`, used by candidate programs."""

    iterator = iter(lines)

    def next_line() -> str:
        try:
            return next(iterator).strip()
        except StopIteration:
            raise ProtocolError("Request ended unexpectedly.") from None

    def next_int(name: str) -> int:
        value = next_line()
        try:
            return int(value)
        except ValueError:
            raise ProtocolError(f"Request field {name} must be an integer, got {value!r}.") from None

    height = next_int("H")
    if height <= 0:
        raise ProtocolError(f"Board height must be positive, got {height}.")
    rows = [next_line() for _ in range(height)]
    cost_lantern = next_int("costLantern")
    cost_mirror = next_int("costMirror")
    cost_obstacle = next_int("costObstacle")
    max_mirrors = next_int("maxMirrors")
    max_obstacles = next_int("maxObstacles")
    try:
        return PuzzleInstance.from_rows(
            rows,
            cost_lantern=cost_lantern,
            cost_mirror=cost_mirror,
            cost_obstacle=cost_obstacle,
            max_mirrors=max_mirrors,
            max_obstacles=max_obstacles,
        )
    except ValueError as exc:
        raise ProtocolError(f"Malformed board in request: {exc}") from exc


def format_response(lines: Sequence[str]) -> str:
    return "\n".join([str(len(lines)), *lines]) + "\n"


def parse_count(line: Optional[str], limit: int) -> int:
    if line is None:
        raise ProtocolError("Your return contained invalid number of elements.")
    text = line.rstrip("\r\n")
    if not _INTEGER.fullmatch(text):
        raise ProtocolError("Your return contained invalid number of elements.")
    count = int(text)
    if count < 0:
        raise ProtocolError("Your return contained invalid number of elements.")
    if count > limit:
        raise ProtocolError(f"Your return contained more than {limit} elements.")
    return count


def parse_item(index: int, line: str) -> Placement:
    parts = line.rstrip("\r\n").split(" ")
    if len(parts) != 3:
        raise ProtocolError(
            f'Item {index}: Each element of your return must be formatted as "ROW COL TYPE"'
        )
    if not (_INTEGER.fullmatch(parts[0]) and _INTEGER.fullmatch(parts[1])):
        raise ProtocolError(
            f"Item {index}: R and C in each element of your return must be integers."
        )
    row = int(parts[0])
    col = int(parts[1])
    if len(parts[2]) != 1:
        raise ProtocolError(
            f"Item {index}: Invalid item type: {parts[2]}. Item type must be a single character."
        )
    return Placement(row=row, col=col, glyph=parts[2])


def parse_items(lines: Sequence[str]) -> List[Placement]:
    return [parse_item(index, line) for index, line in enumerate(lines)]


def read_response(readline: Callable[[], Optional[str]], limit: int) -> List[str]:
    """Read a count line and that many item lines.

    ``readline`` returns ``None`` at end of stream.
    """

    count = parse_count(readline(), limit)
    lines: List[str] = []
    for index in range(count):
        line = readline()
        if line is None:
            raise ProtocolError(f"Item {index}: response ended after {index} of {count} items.")
        lines.append(line.rstrip("\r\n"))
    return lines


__all__ = [
    "Placement",
    "format_request",
    "format_response",
    "parse_count",
    "parse_item",
    "parse_items",
    "parse_request",
    "read_response",
]
