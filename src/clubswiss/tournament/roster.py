"""Roster administration for a tournament's standings.

These helpers cover the administrative actions around the engine: seeding
standings for a roster, pre-assigning half-point byes, withdrawing players
and discarding bye rounds scheduled past the current round. Each returns
new standings and leaves its input untouched.
"""

# Club Swiss
# Copyright (C) 2025  Club Swiss developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from clubswiss.exceptions import (
    DuplicatePlayerError,
    PlayerNotFoundError,
    TournamentStateError,
)
from clubswiss.tournament.models import Standing
from clubswiss.type_hints import RosterEntry, StandingsView
from clubswiss.utils import setup_logger, utc_now

logger = setup_logger(__name__)


def create_standings(
    tournament_id: str,
    players: Iterable[RosterEntry],
    bye_rounds: Optional[Dict[str, Iterable[int]]] = None,
) -> List[Standing]:
    """Build zeroed standings for a tournament roster.

    Args:
        tournament_id: The tournament the standings belong to
        players: ``(player_id, player_name)`` pairs in seeding order
        bye_rounds: Optional pre-scheduled bye rounds per player id

    Returns:
        One standing per player, in the given order

    Raises:
        DuplicatePlayerError: If a player id appears twice
        PlayerNotFoundError: If ``bye_rounds`` names a player not on the roster
    """
    bye_rounds = bye_rounds or {}
    standings: List[Standing] = []
    seen = set()
    for player_id, player_name in players:
        if player_id in seen:
            raise DuplicatePlayerError(
                f"Player {player_id} already in tournament {tournament_id}"
            )
        seen.add(player_id)
        standings.append(
            Standing(
                tournament_id=tournament_id,
                player_id=player_id,
                player_name=player_name,
                bye_rounds=set(bye_rounds.get(player_id, ())),
            )
        )

    unknown = set(bye_rounds) - seen
    if unknown:
        raise PlayerNotFoundError(
            f"Bye rounds given for unknown players: {sorted(unknown)}"
        )

    logger.info(
        f"Created standings for {len(standings)} players in tournament {tournament_id}"
    )
    return standings


def add_players(
    standings: StandingsView,
    players: Iterable[RosterEntry],
    bye_rounds: Optional[Dict[str, Iterable[int]]] = None,
) -> List[Standing]:
    """Return the standings with late entrants appended.

    Raises:
        DuplicatePlayerError: If a new player already has a standing
        TournamentStateError: If ``standings`` is empty (no tournament id)
    """
    if not standings:
        raise TournamentStateError("Cannot add players without existing standings")
    tournament_id = standings[0].tournament_id
    existing = {s.player_id for s in standings}
    new_players = list(players)
    for player_id, _ in new_players:
        if player_id in existing:
            raise DuplicatePlayerError(
                f"Player {player_id} already in tournament {tournament_id}"
            )
    added = create_standings(tournament_id, new_players, bye_rounds)
    return [s.copy() for s in standings] + added


def _index_by_id(
    standings: StandingsView, player_ids: Iterable[str]
) -> Dict[str, int]:
    positions = {s.player_id: i for i, s in enumerate(standings)}
    missing = [pid for pid in player_ids if pid not in positions]
    if missing:
        raise PlayerNotFoundError(f"Players not in tournament: {missing}")
    return positions


def assign_half_point_byes(
    standings: StandingsView, player_ids: Iterable[str], round_number: int
) -> List[Standing]:
    """Record a half-point bye for the given players in a future round.

    Only the bye round is written; the half point is credited when the
    round's results are applied.

    Raises:
        PlayerNotFoundError: If a player id has no standing
        TournamentStateError: If a player is withdrawn or the round is invalid
    """
    if round_number < 1:
        raise TournamentStateError(f"Invalid round number: {round_number}")
    player_ids = list(player_ids)
    positions = _index_by_id(standings, player_ids)

    updated = [s.copy() for s in standings]
    for player_id in player_ids:
        standing = updated[positions[player_id]]
        if standing.withdrawn:
            raise TournamentStateError(
                f"Cannot assign a bye to withdrawn player {player_id}"
            )
        standing.bye_rounds.add(round_number)

    logger.info(f"Assigned half-point byes for round {round_number} to {player_ids}")
    return updated


def withdraw_players(
    standings: StandingsView,
    player_ids: Iterable[str],
    now: Optional[datetime] = None,
) -> List[Standing]:
    """Mark players withdrawn, keeping their history for display.

    Raises:
        PlayerNotFoundError: If a player id has no standing
    """
    player_ids = list(player_ids)
    positions = _index_by_id(standings, player_ids)
    stamp = now or utc_now()

    updated = [s.copy() for s in standings]
    for player_id in player_ids:
        standing = updated[positions[player_id]]
        if standing.withdrawn:
            logger.debug(f"Player {player_id} already withdrawn")
            continue
        standing.withdrawn = True
        standing.withdrawn_at = stamp

    logger.info(f"Withdrew players {player_ids}")
    return updated


def cleanup_invalid_bye_rounds(
    standings: StandingsView, current_round: int
) -> List[Standing]:
    """Drop bye rounds scheduled after ``current_round``."""
    updated = [s.copy() for s in standings]
    for standing in updated:
        valid = {r for r in standing.bye_rounds if r <= current_round}
        if valid != standing.bye_rounds:
            logger.debug(
                f"Removing bye rounds {sorted(standing.bye_rounds - valid)} "
                f"from {standing.player_id}"
            )
            standing.bye_rounds = valid
    return updated


def players_with_half_point_byes(
    standings: StandingsView, round_number: int
) -> List[Standing]:
    """Players holding a bye for ``round_number``, withdrawn ones included."""
    return [s for s in standings if round_number in s.bye_rounds]
