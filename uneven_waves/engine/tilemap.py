"""
Tile map coordinates and adjacency.
The grid is unbounded; a cell is identified by an (x, y) pair of ints.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

Coord = tuple[int, int]


class Direction(str, Enum):
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


# Clockwise, starting north
CLOCKWISE = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)

_OFFSETS = {
    Direction.NORTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, -1),
    Direction.WEST: (-1, 0),
}


class TileState(str, Enum):
    TEMPORARY_RESISTANCE = "temporary_resistance"  # held until its timer runs out
    RESISTANCE = "resistance"
    SUPPRESSED = "suppressed"


def neighbor_of(coord: Coord, direction: Direction) -> Coord:
    """Get the neighbor of coord in the given direction."""
    x, y = coord
    dx, dy = _OFFSETS[direction]
    return (x + dx, y + dy)


def neighbors_of(coord: Coord) -> list[Coord]:
    """Get all four neighbors of coord in clockwise order (N, E, S, W)."""
    return [neighbor_of(coord, direction) for direction in CLOCKWISE]


def to_coord(value: Any) -> Coord:
    """
    Coerce a 2-item sequence into a Coord.
    Raises ValueError for anything that is not exactly two integers (bools rejected).
    """
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Coordinate must be a pair of integers, got {value!r}")
    x, y = value
    if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, int) or not isinstance(y, int):
        raise ValueError(f"Coordinate must be a pair of integers, got {value!r}")
    return (x, y)


@dataclass
class Tile:
    """A single grid cell and who holds it."""
    coord: Coord
    state: TileState

    def neighbors(self) -> list[Coord]:
        return neighbors_of(self.coord)

    def neighbor(self, direction: Direction) -> Coord:
        return neighbor_of(self.coord, direction)

    def to_dict(self) -> dict[str, Any]:
        return {"coord": list(self.coord), "state": self.state.value}
