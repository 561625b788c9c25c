"""Build contention-engine inputs from cleaned page data.

Turns the cleaned members/games/picks tables into exactly what the engine
consumes:
- The roster, in listing order
- Current wins, counted from picks on games that are already final
- The remaining games, each reduced to its key and picks
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from src.contention_engine.models import Member, Pick, RemainingGame, Side
from src.pool_data.config import FINAL_STATUS

logger = logging.getLogger(__name__)

# Keys expected in the cleaned data dict passed to transform()
_REQUIRED_KEYS = {"members", "games", "picks"}


@dataclass
class ContentionInputs:
    """Everything the engine needs for one week."""

    members: List[Member] = field(default_factory=list)
    current_wins: Dict[str, int] = field(default_factory=dict)
    remaining_games: List[RemainingGame] = field(default_factory=list)


class ContentionInputBuilder:
    """Derives engine inputs from cleaned pool tables."""

    def build_members(self, members_df: pd.DataFrame) -> List[Member]:
        """Roster as :class:`Member` objects, in listing order."""
        ordered = members_df.sort_values("order", kind="stable")
        return [
            Member(member_id=row["member_id"], name=row["name"])
            for _, row in ordered.iterrows()
        ]

    def compute_current_wins(
        self,
        members_df: pd.DataFrame,
        games_df: pd.DataFrame,
        picks_df: pd.DataFrame,
    ) -> Dict[str, int]:
        """Count correct picks on final games for every roster member.

        A final game without a winner (e.g. a tie) awards nothing. Members
        with no correct picks are listed with 0.
        """
        decided = games_df[
            (games_df["status"] == FINAL_STATUS) & games_df["winner"].notna()
        ][["game_key", "winner"]]

        scored = picks_df.merge(decided, on="game_key", how="inner")
        correct = scored[scored["side"] == scored["winner"]]
        counts = correct.groupby("member_id").size()

        return {
            member_id: int(counts.get(member_id, 0))
            for member_id in members_df["member_id"]
        }

    def build_remaining_games(
        self,
        games_df: pd.DataFrame,
        picks_df: pd.DataFrame,
    ) -> List[RemainingGame]:
        """Every game not yet final, carrying only its key and picks."""
        open_games = games_df[games_df["status"] != FINAL_STATUS].sort_values(
            "order", kind="stable"
        )
        ordered_picks = picks_df.sort_values("order", kind="stable")
        picks_by_game = {
            game_key: group for game_key, group in ordered_picks.groupby("game_key", sort=False)
        }

        remaining = []
        for game_key in open_games["game_key"]:
            group = picks_by_game.get(game_key)
            picks = () if group is None else tuple(
                Pick(member_id=row["member_id"], side=Side(row["side"]))
                for _, row in group.iterrows()
            )
            remaining.append(RemainingGame(game_key=game_key, picks=picks))
        return remaining

    def transform(self, cleaned: Dict[str, pd.DataFrame]) -> ContentionInputs:
        """Run the full transformation.

        Raises:
            ValueError: If *cleaned* is missing one of the required tables.
        """
        missing = _REQUIRED_KEYS - set(cleaned.keys())
        if missing:
            raise ValueError(f"Cleaned data missing required tables: {sorted(missing)}")

        members_df = cleaned["members"]
        games_df = cleaned["games"]
        picks_df = cleaned["picks"]

        inputs = ContentionInputs(
            members=self.build_members(members_df),
            current_wins=self.compute_current_wins(members_df, games_df, picks_df),
            remaining_games=self.build_remaining_games(games_df, picks_df),
        )
        logger.info(
            "Built contention inputs: %d members, %d remaining games",
            len(inputs.members), len(inputs.remaining_games),
        )
        return inputs
