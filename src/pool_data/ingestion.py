"""Page-data ingestion for a single pool week.

Reads the JSON payload served for one season week (season, active week,
members, games with their picks) and flattens it into DataFrames:
- Accepts both the API's camelCase keys and snake_case keys
- Keeps listing order so downstream steps stay deterministic
- Drops presentation-only game fields (venue, channel, team names, scores)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd

from src.pool_data.config import (
    ACTIVE_WEEK_KEYS,
    GAME_KEY_KEYS,
    MEMBER_ID_KEYS,
    PICK_MEMBER_KEYS,
    PICK_SIDE_KEYS,
)

logger = logging.getLogger(__name__)

MEMBER_COLUMNS = ["member_id", "name", "order"]
GAME_COLUMNS = ["game_key", "status", "winner", "kickoff", "order"]
PICK_COLUMNS = ["game_key", "member_id", "side", "order"]


class IngestionError(Exception):
    """Raised when page data cannot be read."""


def _first_key(record: Dict, keys: Iterable[str], default=None):
    """Return the value of the first key in *keys* present in *record*."""
    for key in keys:
        if key in record:
            return record[key]
    return default


class PageDataIngester:
    """Reads one week's page data from a JSON file."""

    def __init__(self, page_data_path: Path):
        self.page_data_path = Path(page_data_path)

    def read_raw(self) -> Dict:
        """Load and sanity-check the JSON payload.

        Raises:
            FileNotFoundError: If the file does not exist.
            IngestionError: If the file is not valid JSON or lacks the
                ``members`` / ``games`` lists.
        """
        if not self.page_data_path.exists():
            raise FileNotFoundError(f"Expected file not found: {self.page_data_path}")

        try:
            with open(self.page_data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise IngestionError(
                f"Page data file {self.page_data_path} is not valid JSON: {e}"
            ) from e

        if not isinstance(data, dict):
            raise IngestionError(
                f"Page data file {self.page_data_path} must contain a JSON object"
            )
        for key in ("members", "games"):
            if not isinstance(data.get(key), list):
                raise IngestionError(
                    f"Page data file {self.page_data_path} is missing a '{key}' list"
                )

        logger.info("Reading page data: %s", self.page_data_path.name)
        return data

    def read_context(self, data: Optional[Dict] = None) -> Dict:
        """Season id and week number the page data belongs to."""
        data = data if data is not None else self.read_raw()
        season = data.get("season") or {}
        week = _first_key(data, ACTIVE_WEEK_KEYS) or {}
        return {
            "season_id": season.get("id"),
            "week_number": week.get("number"),
        }

    def read_all(self, data: Optional[Dict] = None) -> Dict[str, pd.DataFrame]:
        """Flatten the payload into ``members``, ``games`` and ``picks``."""
        data = data if data is not None else self.read_raw()

        members = pd.DataFrame(
            [
                {
                    "member_id": _first_key(m, MEMBER_ID_KEYS),
                    "name": m.get("name"),
                    "order": i,
                }
                for i, m in enumerate(data["members"])
            ],
            columns=MEMBER_COLUMNS,
        )

        game_rows = []
        pick_rows = []
        for i, game in enumerate(data["games"]):
            game_key = _first_key(game, GAME_KEY_KEYS)
            game_rows.append({
                "game_key": game_key,
                "status": game.get("status"),
                "winner": game.get("winner"),
                "kickoff": game.get("kickoff"),
                "order": i,
            })
            for pick in game.get("picks") or []:
                pick_rows.append({
                    "game_key": game_key,
                    "member_id": _first_key(pick, PICK_MEMBER_KEYS),
                    "side": _first_key(pick, PICK_SIDE_KEYS),
                    "order": len(pick_rows),
                })

        games = pd.DataFrame(game_rows, columns=GAME_COLUMNS)
        picks = pd.DataFrame(pick_rows, columns=PICK_COLUMNS)

        logger.info(
            "Loaded: %d members, %d games, %d picks",
            len(members), len(games), len(picks),
        )
        return {"members": members, "games": games, "picks": picks}
