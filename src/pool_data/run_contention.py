"""Compute the contention report for one pool week.

Usage:
    python -m src.pool_data.run_contention PAGE_DATA_JSON [options]

A bare file name that does not exist as given is looked up in
``data/weeks/``.

Examples:
    python -m src.pool_data.run_contention 2025REG_week5.json
    python -m src.pool_data.run_contention data/weeks/2025REG_week5.json --strict-ties --output-dir /tmp
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from src.contention_engine.config import DEFAULT_ALLOW_TIES
from src.contention_engine.contenders import ContentionCalculator
from src.contention_engine.models import ContenderStatus, Member
from src.logging_config import setup_logging
from src.pool_data.cleaning import PickCleaner
from src.pool_data.config import REPORTS_DIR, WEEKS_DATA_DIR
from src.pool_data.ingestion import PageDataIngester
from src.pool_data.transformation import ContentionInputBuilder

logger = logging.getLogger(__name__)


def build_contention_table(
    members: List[Member],
    statuses: Dict[str, ContenderStatus],
) -> pd.DataFrame:
    """Tabulate statuses, leaders first.

    Sorted by current wins, then best case, both descending; roster order
    breaks remaining ties.
    """
    rows = [
        {
            "member_id": member.member_id,
            "name": member.name,
            "current_wins": statuses[member.member_id].current_wins,
            "max_possible_wins": statuses[member.member_id].max_possible_wins,
            "is_alive": statuses[member.member_id].is_alive,
            "roster_order": i,
        }
        for i, member in enumerate(members)
    ]
    table = pd.DataFrame(
        rows,
        columns=[
            "member_id", "name", "current_wins",
            "max_possible_wins", "is_alive", "roster_order",
        ],
    )
    table = table.sort_values(
        ["current_wins", "max_possible_wins", "roster_order"],
        ascending=[False, False, True],
        kind="stable",
    )
    return table.drop(columns=["roster_order"]).reset_index(drop=True)


def _member_to_dict(row: pd.Series) -> dict:
    """Convert a single table row to the output JSON structure."""
    return {
        "member_id": row["member_id"],
        "name": row["name"],
        "current_wins": int(row["current_wins"]),
        "max_possible_wins": int(row["max_possible_wins"]),
        "is_alive": bool(row["is_alive"]),
    }


def resolve_page_data_path(page_data_path: Path) -> Path:
    """Find a bare page-data file name under ``data/weeks/``.

    Paths that exist as given, or that include a directory, are returned
    unchanged.
    """
    page_data_path = Path(page_data_path)
    if page_data_path.exists() or page_data_path.parent != Path("."):
        return page_data_path
    candidate = WEEKS_DATA_DIR / page_data_path
    return candidate if candidate.exists() else page_data_path


def run_contention(
    page_data_path: Path,
    allow_ties: bool = DEFAULT_ALLOW_TIES,
    output_dir: Optional[Path] = None,
) -> Path:
    """Run ingest, clean, transform and the contention engine for one week.

    Args:
        page_data_path: JSON page data for the week. A bare file name
            not found as given is looked up in ``data/weeks/``.
        allow_ties: Whether a shared lead counts as still alive.
        output_dir: Directory for the JSON report.
            Defaults to ``data/reports/``.

    Returns:
        Path to the generated JSON report.

    Raises:
        FileNotFoundError: If the page data file doesn't exist.
        IngestionError: If the page data is malformed.
        ContentionCapacityError: If too many games remain to search.
    """
    if output_dir is None:
        output_dir = REPORTS_DIR
    page_data_path = resolve_page_data_path(page_data_path)

    logger.info("Starting contention run (data: %s, allow_ties=%s)", page_data_path, allow_ties)

    # 1. Ingest
    logger.info("Step 1/4: Reading page data...")
    ingester = PageDataIngester(page_data_path)
    payload = ingester.read_raw()
    context = ingester.read_context(payload)
    raw = ingester.read_all(payload)

    # 2. Clean
    logger.info("Step 2/4: Cleaning picks...")
    cleaned = PickCleaner().clean_all(raw)

    # 3. Transform
    logger.info("Step 3/4: Building engine inputs...")
    inputs = ContentionInputBuilder().transform(cleaned)

    # 4. Contention
    logger.info("Step 4/4: Computing contention...")
    calculator = ContentionCalculator(allow_ties=allow_ties)
    statuses = calculator.calculate_statuses(
        inputs.members, inputs.current_wins, inputs.remaining_games
    )
    table = build_contention_table(inputs.members, statuses)
    members_list = [_member_to_dict(row) for _, row in table.iterrows()]

    alive_count = sum(1 for m in members_list if m["is_alive"])
    output_data = {
        "metadata": {
            "version": "1.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "season": context["season_id"],
            "week": context["week_number"],
            "allow_ties": allow_ties,
            "remaining_games": len(inputs.remaining_games),
            "total_members": len(members_list),
            "alive_members": alive_count,
        },
        "members": members_list,
    }

    output_dir.mkdir(parents=True, exist_ok=True)
    season_label = context["season_id"] or "season"
    week_label = context["week_number"] if context["week_number"] is not None else "x"
    output_file = output_dir / f"contention_{season_label}_week{week_label}.json"

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(output_data, f, indent=2)

    logger.info("Contention complete! Output: %s", output_file)
    logger.info(
        "  Alive: %d/%d (%s)",
        alive_count,
        len(members_list),
        ", ".join(m["member_id"] for m in members_list if m["is_alive"]) or "none",
    )

    return output_file


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report which pool members can still win the week."
    )
    parser.add_argument("page_data", type=Path, help="Path to the week's page-data JSON")
    parser.add_argument(
        "--strict-ties",
        action="store_true",
        help="Only a sole leader counts as alive (ties are eliminations)",
    )
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args(sys.argv[1:])
    setup_logging(args.log_level)

    try:
        output = run_contention(
            args.page_data,
            allow_ties=not args.strict_ties,
            output_dir=args.output_dir,
        )
        print(f"Contention report: {output}")
    except Exception:
        logger.exception("Contention run failed")
        sys.exit(1)
