"""Data models for the contention engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class Side(str, Enum):
    """Winning side of a game, and the side a member picked."""

    HOME = "home"
    AWAY = "away"


@dataclass(frozen=True)
class Member:
    """A pool member. Only ``member_id`` matters to the engine."""

    member_id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> "Member":
        """Build from ``{"id": ...}`` or ``{"member_id": ...}``.

        Raises:
            ValueError: If neither key holds an id.
        """
        member_id = data.get("id", data.get("member_id"))
        if member_id is None:
            raise ValueError(f"Member has no 'id' or 'member_id': {data!r}")
        return cls(member_id=member_id, name=data.get("name") or "")


@dataclass(frozen=True)
class Pick:
    """One member's pick on one game."""

    member_id: str
    side: Side


@dataclass(frozen=True)
class RemainingGame:
    """A game whose winner is not yet known, with the picks made on it."""

    game_key: str
    picks: Tuple[Pick, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict) -> "RemainingGame":
        """Build from ``{"game_key": ..., "picks": [{"member_id", "side"}]}``.

        Raises:
            ValueError: If a pick's side is not ``home`` or ``away``.
        """
        picks = tuple(
            Pick(member_id=p["member_id"], side=Side(p["side"]))
            for p in data.get("picks", [])
        )
        return cls(game_key=data["game_key"], picks=picks)


@dataclass
class ContenderStatus:
    """Contention result for a single member."""

    member_id: str
    current_wins: int
    max_possible_wins: int  # current wins + remaining games with a pick
    is_alive: bool
