"""Contention engine: which pool members can still finish on top.

Given each member's locked-in win total and the games still to be decided
(with the picks already submitted on them), a member is *alive* when at
least one assignment of winners to the remaining games leaves them as the
leader. With ``allow_ties`` a share of the top total is enough; without it
the member must be the unique leader.

Two search strategies are available:

* ``"exhaustive"`` walks all ``2**R`` outcomes literally.
* ``"pruned"`` (default) collapses games with the same pick pattern into
  one multi-way branch, skips subtrees where no undecided member can still
  catch every rival, and never revisits an equivalent node.

Both return identical results; the exhaustive walk exists as a reference.
"""

import itertools
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from src.contention_engine.config import (
    DEFAULT_ALLOW_TIES,
    DEFAULT_STRATEGY,
    EXHAUSTIVE_MAX_REMAINING_GAMES,
    MAX_REMAINING_GAMES,
    VALID_STRATEGIES,
)
from src.contention_engine.models import ContenderStatus, Member, RemainingGame, Side

logger = logging.getLogger(__name__)

# (side A member indexes, side B member indexes, number of games)
PickGroup = Tuple[Tuple[int, ...], Tuple[int, ...], int]


class ContentionCapacityError(ValueError):
    """Raised when there are too many remaining games to search."""

    def __init__(self, remaining_games: int, limit: int):
        super().__init__(
            f"Cannot compute contention for {remaining_games} remaining games "
            f"(limit is {limit})"
        )
        self.remaining_games = remaining_games
        self.limit = limit


class ContentionCalculator:
    """Determine which members can still mathematically lead the pool.

    The calculator is stateless: every call builds its own tallies and
    never mutates its inputs.
    """

    def __init__(
        self,
        allow_ties: bool = DEFAULT_ALLOW_TIES,
        strategy: str = DEFAULT_STRATEGY,
        max_remaining_games: Optional[int] = None,
    ):
        if strategy not in VALID_STRATEGIES:
            raise ValueError(
                f"Invalid strategy: {strategy!r}. "
                f"Must be one of: {', '.join(VALID_STRATEGIES)}."
            )
        if max_remaining_games is None:
            max_remaining_games = (
                EXHAUSTIVE_MAX_REMAINING_GAMES
                if strategy == "exhaustive"
                else MAX_REMAINING_GAMES
            )
        if max_remaining_games < 0:
            raise ValueError(
                f"max_remaining_games must be non-negative, got {max_remaining_games}"
            )
        self.allow_ties = allow_ties
        self.strategy = strategy
        self.max_remaining_games = max_remaining_games

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        members: Sequence,
        current_wins: Optional[Mapping[str, int]],
        remaining_games: Sequence,
    ) -> Dict[str, bool]:
        """Compute aliveness for every member of the roster.

        Args:
            members: :class:`Member` objects or dicts with an ``id`` key.
            current_wins: Confirmed wins by member id. Missing members
                count as zero.
            remaining_games: :class:`RemainingGame` objects or dicts with
                ``game_key`` and ``picks``.

        Returns:
            Dict mapping every roster member id to ``True`` if some outcome
            of the remaining games makes them a leader.

        Raises:
            ContentionCapacityError: If there are more remaining games than
                ``max_remaining_games``.
        """
        member_ids, totals, game_picks = self._prepare(
            members, current_wins, remaining_games
        )
        alive = self._evaluate(totals, game_picks)
        return {member_id: alive[i] for i, member_id in enumerate(member_ids)}

    def calculate_statuses(
        self,
        members: Sequence,
        current_wins: Optional[Mapping[str, int]],
        remaining_games: Sequence,
    ) -> Dict[str, ContenderStatus]:
        """Like :meth:`calculate`, with win totals attached.

        Returns:
            Dict mapping member id to :class:`ContenderStatus`.
        """
        member_ids, totals, game_picks = self._prepare(
            members, current_wins, remaining_games
        )
        alive = self._evaluate(totals, game_picks)

        open_picks = [0] * len(member_ids)
        for picks in game_picks:
            for idx in picks:
                open_picks[idx] += 1

        return {
            member_id: ContenderStatus(
                member_id=member_id,
                current_wins=totals[i],
                max_possible_wins=totals[i] + open_picks[i],
                is_alive=alive[i],
            )
            for i, member_id in enumerate(member_ids)
        }

    # ------------------------------------------------------------------
    # Input preparation
    # ------------------------------------------------------------------

    def _prepare(
        self,
        members: Sequence,
        current_wins: Optional[Mapping[str, int]],
        remaining_games: Sequence,
    ) -> Tuple[List[str], List[int], List[Dict[int, Side]]]:
        """Index the roster, seed totals and resolve picks per game."""
        if len(remaining_games) > self.max_remaining_games:
            raise ContentionCapacityError(len(remaining_games), self.max_remaining_games)

        current_wins = current_wins or {}
        member_ids: List[str] = []
        index_by_id: Dict[str, int] = {}
        for member in members:
            if isinstance(member, dict):
                member = Member.from_dict(member)
            if member.member_id in index_by_id:
                continue
            index_by_id[member.member_id] = len(member_ids)
            member_ids.append(member.member_id)

        totals = [current_wins.get(member_id, 0) for member_id in member_ids]

        game_picks = []
        for game in remaining_games:
            if isinstance(game, dict):
                game = RemainingGame.from_dict(game)
            game_picks.append(self._resolve_picks(game, index_by_id))

        return member_ids, totals, game_picks

    @staticmethod
    def _resolve_picks(
        game: RemainingGame,
        index_by_id: Mapping[str, int],
    ) -> Dict[int, Side]:
        """Map member index to picked side for one game.

        Picks from members outside the roster are ignored. When a member
        has more than one pick on the same game, the last one listed wins.
        """
        resolved: Dict[int, Side] = {}
        for pick in game.picks:
            idx = index_by_id.get(pick.member_id)
            if idx is None:
                logger.debug(
                    "Ignoring pick by unknown member %s on game %s",
                    pick.member_id, game.game_key,
                )
                continue
            resolved[idx] = Side(pick.side)
        return resolved

    def _evaluate(
        self,
        totals: List[int],
        game_picks: List[Dict[int, Side]],
    ) -> List[bool]:
        """Aliveness per member index with the configured strategy."""
        if not totals:
            return []
        if self.strategy == "exhaustive":
            return self._search_exhaustive(totals, game_picks)
        return self._search_pruned(totals, game_picks)

    # ------------------------------------------------------------------
    # Exhaustive search
    # ------------------------------------------------------------------

    def _search_exhaustive(
        self,
        initial: List[int],
        game_picks: List[Dict[int, Side]],
    ) -> List[bool]:
        """Evaluate every one of the ``2**R`` outcomes."""
        alive = [False] * len(initial)
        for outcome in itertools.product((Side.HOME, Side.AWAY), repeat=len(game_picks)):
            totals = list(initial)
            for winner, picks in zip(outcome, game_picks):
                for idx, side in picks.items():
                    if side is winner:
                        totals[idx] += 1
            self._mark_leaders(totals, alive)
        return alive

    # ------------------------------------------------------------------
    # Pruned search
    # ------------------------------------------------------------------

    def _search_pruned(
        self,
        initial: List[int],
        game_picks: List[Dict[int, Side]],
    ) -> List[bool]:
        """Branch-and-bound search over collapsed pick-pattern groups."""
        groups = self._group_games(game_picks)
        advantage = self._suffix_advantage(groups, len(initial))

        alive = [False] * len(initial)
        root = tuple(initial)
        pending = set(self._possible_leaders(root, advantage[0], range(len(root))))

        stack = [(0, root)]
        seen = set()
        expanded = pruned = 0

        while stack and pending:
            depth, totals = stack.pop()

            floor = min(totals)
            key = (depth, tuple(t - floor for t in totals))
            if key in seen:
                continue
            seen.add(key)

            if not self._possible_leaders(totals, advantage[depth], pending):
                pruned += 1
                continue

            if depth == len(groups):
                self._mark_leaders(totals, alive)
                pending = {idx for idx in pending if not alive[idx]}
                continue

            expanded += 1
            side_a, side_b, count = groups[depth]
            for k in range(count + 1):
                child = list(totals)
                for idx in side_a:
                    child[idx] += k
                for idx in side_b:
                    child[idx] += count - k
                stack.append((depth + 1, tuple(child)))

        logger.debug(
            "Contention search: %d games in %d groups, %d nodes expanded, %d pruned",
            len(game_picks), len(groups), expanded, pruned,
        )
        return alive

    @staticmethod
    def _group_games(game_picks: List[Dict[int, Side]]) -> List[PickGroup]:
        """Collapse games that split the roster the same way.

        A game is reduced to the unordered pair of member sets that picked
        each side. Games nobody picked are dropped since they cannot move
        any total. Groups keep the order in which they first appear.
        """
        counts: Dict[Tuple[Tuple[int, ...], Tuple[int, ...]], int] = {}
        for picks in game_picks:
            home = tuple(sorted(i for i, side in picks.items() if side is Side.HOME))
            away = tuple(sorted(i for i, side in picks.items() if side is Side.AWAY))
            if not home and not away:
                continue
            pattern = (min(home, away), max(home, away))
            counts[pattern] = counts.get(pattern, 0) + 1
        return [(side_a, side_b, n) for (side_a, side_b), n in counts.items()]

    @staticmethod
    def _suffix_advantage(
        groups: List[PickGroup],
        size: int,
    ) -> List[Tuple[Tuple[int, ...], ...]]:
        """Most ground each member can still gain on each rival.

        ``advantage[depth][i][j]`` is the largest amount by which member
        ``i`` can close on member ``j`` over groups ``depth..end``. A group
        of ``n`` games contributes ``n`` when ``i`` picked it and ``j`` did
        not pick the same side, and nothing otherwise: ``i`` cannot pull
        away from a rival who wins every time ``i`` does.
        """
        advantage = [tuple(tuple([0] * size) for _ in range(size))]
        for side_a, side_b, count in reversed(groups):
            rows = [list(row) for row in advantage[0]]
            for side in (side_a, side_b):
                same_side = set(side)
                for idx in side:
                    row = rows[idx]
                    for rival in range(size):
                        if rival not in same_side:
                            row[rival] += count
            advantage.insert(0, tuple(tuple(row) for row in rows))
        return advantage

    def _possible_leaders(
        self,
        totals: Tuple[int, ...],
        advantage: Tuple[Tuple[int, ...], ...],
        candidates: Iterable[int],
    ) -> List[int]:
        """Candidates who could still lead somewhere below this node.

        A candidate is out for the whole subtree as soon as one rival stays
        ahead of them (or, without ties, level with them) even after they
        gain all the ground they can on that rival.
        """
        leaders = []
        for idx in candidates:
            total = totals[idx]
            gains = advantage[idx]
            for rival, rival_total in enumerate(totals):
                if rival == idx:
                    continue
                margin = total + gains[rival] - rival_total
                if margin < 0 or (margin == 0 and not self.allow_ties):
                    break
            else:
                leaders.append(idx)
        return leaders

    # ------------------------------------------------------------------
    # Leaf evaluation
    # ------------------------------------------------------------------

    def _mark_leaders(self, totals: Sequence[int], alive: List[bool]) -> None:
        """Flag the leaders of one complete outcome under the tie policy."""
        top = max(totals)
        leaders = [idx for idx, total in enumerate(totals) if total == top]
        if self.allow_ties:
            for idx in leaders:
                alive[idx] = True
        elif len(leaders) == 1:
            alive[leaders[0]] = True


def compute_contention(
    members: Sequence,
    current_wins: Optional[Mapping[str, int]],
    remaining_games: Sequence,
    allow_ties: bool = DEFAULT_ALLOW_TIES,
) -> Dict[str, bool]:
    """Return ``{member_id: still_alive}`` for every roster member.

    Convenience wrapper around :class:`ContentionCalculator` with the
    default strategy and game limit.
    """
    return ContentionCalculator(allow_ties=allow_ties).calculate(
        members, current_wins, remaining_games
    )
