"""Data cleaning for pool page data.

Standardizes the DataFrames produced by ``PageDataIngester``:
- Normalize pick sides and game winners to ``home`` / ``away``
- Normalize game status strings
- Drop rows with blank identifiers
- Resolve duplicate picks (last listed pick for a member on a game wins)
"""

import logging
from typing import Dict, Optional

import pandas as pd

from src.pool_data.config import DEFAULT_GAME_STATUS, SIDE_ALIASES, VALID_SIDES

logger = logging.getLogger(__name__)


class PickCleaner:
    """Cleans and standardizes pool members, games and picks."""

    # ------------------------------------------------------------------
    # Value helpers
    # ------------------------------------------------------------------
    @staticmethod
    def normalize_side(value) -> Optional[str]:
        """Normalize a side string.

        Examples:
            "home"   -> "home"
            " AWAY " -> "away"
            "h"      -> "home"
            "draw"   -> None
        """
        if value is None or pd.isna(value):
            return None
        side = str(value).strip().lower()
        side = SIDE_ALIASES.get(side, side)
        return side if side in VALID_SIDES else None

    @staticmethod
    def normalize_id(value) -> Optional[str]:
        """Strip an identifier; blank or missing becomes None."""
        if value is None or pd.isna(value):
            return None
        text = str(value).strip()
        return text or None

    # ------------------------------------------------------------------
    # Per-table cleaning
    # ------------------------------------------------------------------
    def clean_members(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop members without an id and keep the first of any repeats."""
        out = df.copy()
        out["member_id"] = out["member_id"].map(self.normalize_id)
        out = out.dropna(subset=["member_id"])

        dupes = out["member_id"].duplicated(keep="first")
        if dupes.any():
            logger.warning(
                "Dropping %d repeated roster entries: %s",
                dupes.sum(), out.loc[dupes, "member_id"].tolist(),
            )
            out = out[~dupes]

        out["name"] = out["name"].fillna("").astype(str).str.strip()
        return out.reset_index(drop=True)

    def clean_games(self, df: pd.DataFrame) -> pd.DataFrame:
        """Normalize status and winner; drop games without a key."""
        out = df.copy()
        out["game_key"] = out["game_key"].map(self.normalize_id)
        out = out.dropna(subset=["game_key"])
        out = out.drop_duplicates(subset=["game_key"], keep="first")

        out["status"] = (
            out["status"].fillna(DEFAULT_GAME_STATUS).astype(str).str.strip().str.lower()
        )
        out["winner"] = out["winner"].map(self.normalize_side)
        return out.reset_index(drop=True)

    def clean_picks(self, df: pd.DataFrame) -> pd.DataFrame:
        """Normalize sides, drop unusable picks and resolve duplicates."""
        out = df.copy()
        out["game_key"] = out["game_key"].map(self.normalize_id)
        out["member_id"] = out["member_id"].map(self.normalize_id)
        out = out.dropna(subset=["game_key", "member_id"])

        raw_sides = out["side"]
        out["side"] = raw_sides.map(self.normalize_side)
        invalid = out["side"].isna()
        if invalid.any():
            # Label nulls before astype(str): pandas 3 leaves NaN as a float
            labels = raw_sides[invalid].fillna("<missing>").astype(str)
            logger.warning(
                "Dropping %d picks with unrecognized side: %s",
                invalid.sum(), sorted(set(labels)),
            )
            out = out[~invalid]

        out = out.sort_values("order", kind="stable")
        dupes = out.duplicated(subset=["game_key", "member_id"], keep="last")
        if dupes.any():
            logger.warning(
                "Resolved %d duplicate picks (last listed pick kept)", dupes.sum()
            )
            out = out[~dupes]

        return out.reset_index(drop=True)

    # ------------------------------------------------------------------
    # Full cleaning pass
    # ------------------------------------------------------------------
    def clean_all(self, raw: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
        """Clean the ``members``, ``games`` and ``picks`` tables."""
        return {
            "members": self.clean_members(raw["members"]),
            "games": self.clean_games(raw["games"]),
            "picks": self.clean_picks(raw["picks"]),
        }
