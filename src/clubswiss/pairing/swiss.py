"""Swiss-system pairing generation.

Players are ordered by points and Buchholz, pre-assigned half-point byes
are honoured, an odd pool gives its lowest-ranked eligible player a forced
bye, and the rest are paired down the list two at a time while avoiding
rematches where a rematch-free partner exists.

Pairing is global over the whole sorted list rather than within score
groups.
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
from typing import List, Optional, Tuple

from clubswiss.exceptions import EmptyStandingsError, InvalidPairingError
from clubswiss.pairing.bye_selector import select_forced_bye
from clubswiss.tournament.models import Pairing, RoundPairings, Standing
from clubswiss.tournament.standings import sort_standings
from clubswiss.type_hints import StandingsView
from clubswiss.utils import setup_logger, utc_now

logger = setup_logger(__name__)


def have_played(player1: Standing, player2: Standing) -> bool:
    """Check if two players have met earlier in the tournament."""
    return player1.has_faced(player2.player_id) or player2.has_faced(
        player1.player_id
    )


def generate_pairings(
    standings: StandingsView,
    round_number: int,
    tournament_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RoundPairings:
    """Create the pairings and byes for one round.

    Args:
        standings: Current standings of every player in the tournament
        round_number: The 1-based round to pair
        tournament_id: Tournament id for the pairings; defaults to the id
            on the first standing
        now: Creation timestamp for the pairings (defaults to current time)

    Returns:
        RoundPairings in which every active player appears exactly once,
        in a pairing, in ``forced_byes`` or in ``half_point_byes``; a
        withdrawn player holding a bye for the round stays in
        ``half_point_byes``

    Raises:
        EmptyStandingsError: If ``standings`` is empty
        InvalidPairingError: If ``round_number`` is not a positive integer
    """
    if not standings:
        raise EmptyStandingsError(f"No players to pair for round {round_number}")
    if round_number < 1:
        raise InvalidPairingError(f"Invalid round number: {round_number}")

    tournament_id = tournament_id or standings[0].tournament_id
    created_at = now or utc_now()
    ordered = sort_standings(standings)

    # Half-point byes are assigned before pairing; a later withdrawal keeps them
    half_point_byes = [s.player_id for s in ordered if round_number in s.bye_rounds]
    pool = [s for s in ordered if s.is_active and round_number not in s.bye_rounds]

    round_pairings = RoundPairings(
        tournament_id=tournament_id,
        round=round_number,
        half_point_byes=half_point_byes,
    )

    if not pool:
        logger.info(
            f"Round {round_number}: no players left to pair "
            f"({len(half_point_byes)} half-point byes)"
        )
        return round_pairings

    if len(pool) % 2 == 1:
        bye_player = select_forced_bye(pool, round_number)
        pool = [s for s in pool if s is not bye_player]
        round_pairings.forced_byes.append(bye_player.player_id)

    matches, displaced = _pair_sequentially(pool, round_number)
    round_pairings.pairings = [
        Pairing.create(tournament_id, round_number, first, second, created_at)
        for first, second in matches
    ]
    round_pairings.forced_byes.extend(s.player_id for s in displaced)

    logger.info(
        f"Round {round_number}: {len(round_pairings.pairings)} pairings, "
        f"{len(round_pairings.forced_byes)} forced byes, "
        f"{len(round_pairings.half_point_byes)} half-point byes"
    )
    return round_pairings


def _find_unplayed(
    player: Standing, candidates: List[Standing], start: int = 0
) -> Optional[int]:
    """Index of the first candidate from ``start`` that ``player`` has not met."""
    for index in range(start, len(candidates)):
        if not have_played(player, candidates[index]):
            return index
    return None


def _pair_sequentially(
    pool: List[Standing], round_number: int
) -> Tuple[List[Tuple[Standing, Standing]], List[Standing]]:
    """Pair an even, sorted pool from the top down.

    Paired players are removed from the working list, so the front of the
    list is always the highest-ranked unpaired player.

    Returns:
        Tuple of (pairs, players left without a partner)
    """
    remaining = list(pool)
    matches: List[Tuple[Standing, Standing]] = []
    unpaired: List[Standing] = []

    while len(remaining) >= 2:
        first, second = remaining[0], remaining[1]

        if not have_played(first, second):
            matches.append((first, second))
            del remaining[:2]
            continue

        alternative = _find_unplayed(first, remaining, start=2)
        if alternative is None:
            logger.warning(
                f"Round {round_number}: no rematch-free opponent for "
                f"{first.player_name}, "
                f"repeating {first.player_name} vs {second.player_name}"
            )
            matches.append((first, second))
            del remaining[:2]
            continue

        # first takes the alternative; second is displaced
        matches.append((first, remaining[alternative]))
        del remaining[alternative]
        del remaining[:2]

        partner = _find_unplayed(second, remaining)
        if partner is None:
            logger.warning(
                f"Round {round_number}: displaced player {second.player_name} has no "
                "rematch-free partner, assigning an extra forced bye"
            )
            unpaired.append(second)
        else:
            matches.append((second, remaining.pop(partner)))

    if remaining:
        # Odd leftover after a displacement bye
        leftover = remaining.pop()
        logger.warning(
            f"Round {round_number}: {leftover.player_name} left without a partner, "
            "assigning an extra forced bye"
        )
        unpaired.append(leftover)

    return matches, unpaired
