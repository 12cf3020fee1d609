"""
Action definitions for the game.
Actions are immutable, deterministic instructions - one per side per round.
The two shapes share no fields; `Action` is only the union used as a type bound.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Union

from uneven_waves.engine.tilemap import Coord, to_coord


@dataclass(frozen=True)
class ResistanceAction:
    """A claim attempt for one round."""
    public_coord: Coord  # the cell openly claimed this round
    # Undisclosed second cell. Kept in equality/history/serialization only;
    # no rule reads it yet.
    private_coord: Coord

    def __post_init__(self):
        object.__setattr__(self, "public_coord", to_coord(self.public_coord))
        object.__setattr__(self, "private_coord", to_coord(self.private_coord))

    def to_dict(self) -> dict[str, Any]:
        return {
            "public_coord": list(self.public_coord),
            "private_coord": list(self.private_coord),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResistanceAction":
        if not isinstance(data, dict):
            raise ValueError("Resistance action must be an object")
        public = to_coord(data.get("public_coord"))
        private = data.get("private_coord")
        return cls(
            public_coord=public,
            private_coord=to_coord(private) if private is not None else public,
        )


@dataclass(frozen=True)
class SuppressionAction:
    """A denial attempt for one round. Only membership of the zone matters."""
    suppression_zone: frozenset[Coord] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable of coords; normalize so order and duplicates never affect equality
        object.__setattr__(
            self, "suppression_zone", frozenset(to_coord(c) for c in self.suppression_zone)
        )

    def covers(self, coord: Coord) -> bool:
        return coord in self.suppression_zone

    def to_dict(self) -> dict[str, Any]:
        return {"suppression_zone": [list(c) for c in sorted(self.suppression_zone)]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuppressionAction":
        if not isinstance(data, dict):
            raise ValueError("Suppression action must be an object")
        zone = data.get("suppression_zone") or []
        if not isinstance(zone, list):
            raise ValueError("suppression_zone must be a list of coordinates")
        return cls(suppression_zone=frozenset(to_coord(c) for c in zone))


Action = Union[ResistanceAction, SuppressionAction]


def claim(public_coord: Coord, private_coord: Coord | None = None) -> ResistanceAction:
    """
    Resistance claims public_coord this round.
    private_coord defaults to public_coord when the player does not bluff.
    Example: claim((0, 0), (3, -1))
    """
    public = to_coord(public_coord)
    private = to_coord(private_coord) if private_coord is not None else public
    return ResistanceAction(public_coord=public, private_coord=private)


def suppress(zone: Iterable[Coord]) -> SuppressionAction:
    """
    Suppression covers every coordinate in zone this round.
    Example: suppress([(1, 0), (1, 1)])
    """
    return SuppressionAction(suppression_zone=frozenset(to_coord(c) for c in zone))
