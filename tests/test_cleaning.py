"""Tests for the pool data cleaning module.

Fixtures ``cleaner`` and ``cleaned_data`` are provided by conftest.py.
"""

import pandas as pd

from src.pool_data.ingestion import GAME_COLUMNS, MEMBER_COLUMNS, PICK_COLUMNS


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _picks(*rows):
    """Build a picks frame from ``(game_key, member_id, side)`` rows."""
    return pd.DataFrame(
        [
            {"game_key": g, "member_id": m, "side": s, "order": i}
            for i, (g, m, s) in enumerate(rows)
        ],
        columns=PICK_COLUMNS,
    )


# ---------------------------------------------------------------------------
# Side normalization
# ---------------------------------------------------------------------------

class TestNormalizeSide:
    def test_home(self, cleaner):
        assert cleaner.normalize_side("home") == "home"

    def test_case_and_whitespace(self, cleaner):
        assert cleaner.normalize_side("  AWAY ") == "away"

    def test_aliases(self, cleaner):
        assert cleaner.normalize_side("H") == "home"
        assert cleaner.normalize_side("a") == "away"

    def test_none_input(self, cleaner):
        assert cleaner.normalize_side(None) is None

    def test_nan_input(self, cleaner):
        assert cleaner.normalize_side(float("nan")) is None

    def test_invalid(self, cleaner):
        assert cleaner.normalize_side("push") is None


class TestNormalizeId:
    def test_strips(self, cleaner):
        assert cleaner.normalize_id("  member-mom ") == "member-mom"

    def test_blank(self, cleaner):
        assert cleaner.normalize_id("   ") is None

    def test_non_string(self, cleaner):
        assert cleaner.normalize_id(42) == "42"


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class TestCleanMembers:
    def test_drops_blank_and_repeated_ids(self, cleaner):
        df = pd.DataFrame(
            [
                {"member_id": "a", "name": "Alpha", "order": 0},
                {"member_id": " ", "name": "Blank", "order": 1},
                {"member_id": "a", "name": "Alpha again", "order": 2},
                {"member_id": "b", "name": None, "order": 3},
            ],
            columns=MEMBER_COLUMNS,
        )
        out = cleaner.clean_members(df)
        assert out["member_id"].tolist() == ["a", "b"]
        assert out["name"].tolist() == ["Alpha", ""]


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------

class TestCleanGames:
    def test_status_and_winner_normalized(self, cleaner):
        df = pd.DataFrame(
            [
                {"game_key": "g1", "status": " FINAL ", "winner": "Home", "kickoff": None, "order": 0},
                {"game_key": "g2", "status": None, "winner": None, "kickoff": None, "order": 1},
            ],
            columns=GAME_COLUMNS,
        )
        out = cleaner.clean_games(df)
        assert out["status"].tolist() == ["final", "scheduled"]
        assert out.loc[0, "winner"] == "home"
        assert pd.isna(out.loc[1, "winner"])

    def test_duplicate_game_keys_keep_first(self, cleaner):
        df = pd.DataFrame(
            [
                {"game_key": "g1", "status": "final", "winner": "home", "kickoff": None, "order": 0},
                {"game_key": "g1", "status": "scheduled", "winner": None, "kickoff": None, "order": 1},
            ],
            columns=GAME_COLUMNS,
        )
        out = cleaner.clean_games(df)
        assert len(out) == 1
        assert out.loc[0, "status"] == "final"


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------

class TestCleanPicks:
    def test_invalid_sides_dropped(self, cleaner, caplog):
        df = _picks(("g1", "a", "home"), ("g1", "b", "push"), ("g1", "c", None))
        with caplog.at_level("WARNING"):
            out = cleaner.clean_picks(df)
        assert out["member_id"].tolist() == ["a"]
        assert "unrecognized side" in caplog.text

    def test_null_and_bad_side_labels_logged(self, cleaner, caplog):
        df = _picks(("g1", "b", None), ("g1", "c", "push"), ("g2", "d", float("nan")))
        with caplog.at_level("WARNING"):
            out = cleaner.clean_picks(df)
        assert out.empty
        assert "Dropping 3 picks" in caplog.text
        assert "<missing>" in caplog.text
        assert "push" in caplog.text

    def test_duplicate_pick_last_listed_kept(self, cleaner):
        df = _picks(
            ("g1", "a", "home"),
            ("g1", "b", "away"),
            ("g1", "a", "away"),
        )
        out = cleaner.clean_picks(df)
        a_pick = out[out["member_id"] == "a"]
        assert len(a_pick) == 1
        assert a_pick.iloc[0]["side"] == "away"

    def test_same_member_different_games_kept(self, cleaner):
        df = _picks(("g1", "a", "home"), ("g2", "a", "home"))
        assert len(cleaner.clean_picks(df)) == 2

    def test_missing_member_dropped(self, cleaner):
        df = _picks(("g1", None, "home"), ("g1", "b", "away"))
        assert cleaner.clean_picks(df)["member_id"].tolist() == ["b"]

    def test_empty_picks(self, cleaner):
        out = cleaner.clean_picks(_picks())
        assert out.empty


# ---------------------------------------------------------------------------
# Full pass over the sample week
# ---------------------------------------------------------------------------

class TestCleanAll:
    def test_tables_present(self, cleaned_data):
        assert set(cleaned_data) == {"members", "games", "picks"}

    def test_duplicate_sample_pick_resolved(self, cleaned_data):
        picks = cleaned_data["picks"]
        brad = picks[(picks["game_key"] == "202510503") & (picks["member_id"] == "member-brad")]
        assert brad["side"].tolist() == ["home"]

    def test_unknown_member_pick_survives_cleaning(self, cleaned_data):
        # Roster membership is the engine's concern, not the cleaner's
        assert "member-guest" in cleaned_data["picks"]["member_id"].tolist()

    def test_statuses(self, cleaned_data):
        assert cleaned_data["games"]["status"].tolist() == [
            "final", "final", "scheduled", "in-progress",
        ]
