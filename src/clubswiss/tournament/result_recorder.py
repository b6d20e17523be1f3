"""Folding a round's results back into the standings.

This module applies a batch of round outcomes to a standings snapshot:
win/loss/draw accounting, bye bookkeeping, Buchholz recomputation and
rank assignment. A batch is validated in full before anything changes.
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
from typing import Dict, List, Optional, Set, Tuple

from clubswiss.constants import (
    DRAW_SCORE,
    FORCED_BYE_SCORE,
    HALF_POINT_BYE_SCORE,
    LOSS_SCORE,
    WIN_SCORE,
)
from clubswiss.exceptions import (
    DuplicateResultError,
    InconsistentOutcomeError,
    UnknownPairingError,
)
from clubswiss.tournament.models import (
    Outcome,
    Pairing,
    RoundPairings,
    RoundResult,
    Standing,
)
from clubswiss.tournament.standings import assign_ranks
from clubswiss.tournament.tiebreak_calculator import refresh_buchholz
from clubswiss.type_hints import RoundResults, StandingsById, StandingsView
from clubswiss.utils import setup_logger, utc_now

logger = setup_logger(__name__)


def apply_round_results(
    standings: StandingsView,
    results: RoundResults,
    round_pairings: RoundPairings,
    now: Optional[datetime] = None,
) -> List[Standing]:
    """Apply one round's outcomes and return the re-ranked standings.

    The input standings are left untouched; the returned list holds updated
    copies sorted by points then Buchholz, with ranks and ``last_updated``
    set.

    Args:
        standings: Standings before the round
        results: One result per pairing that was played or converted to a bye
        round_pairings: The round's pairings and byes as generated
        now: Timestamp for ``last_updated`` (defaults to current time)

    Returns:
        The new standings, in rank order

    Raises:
        UnknownPairingError: If a result references a pairing not in the round
        InconsistentOutcomeError: If a result names the wrong player, or a
            pairing or bye refers to a player missing from the standings
        DuplicateResultError: If a pairing has more than one result
    """
    updated: StandingsById = {s.player_id: s.copy() for s in standings}
    resolved = _validate_batch(updated, results, round_pairings)

    round_number = round_pairings.round
    for pairing, result in resolved:
        _apply_outcome(updated, pairing, result.outcome)

    for player_id in round_pairings.forced_byes:
        standing = updated[player_id]
        standing.points += FORCED_BYE_SCORE
        standing.bye_rounds.add(round_number)
        logger.debug(f"Round {round_number}: forced bye recorded for {player_id}")

    for player_id in round_pairings.half_point_byes:
        standing = updated[player_id]
        standing.points += HALF_POINT_BYE_SCORE
        standing.bye_rounds.add(round_number)
        logger.debug(f"Round {round_number}: half-point bye credited to {player_id}")

    # Buchholz must see every post-round score before anything is sorted
    refresh_buchholz(list(updated.values()))
    ranked = assign_ranks(list(updated.values()))

    stamp = now or utc_now()
    for standing in ranked:
        standing.last_updated = stamp
        standing.validate()

    logger.info(
        f"Round {round_number}: applied {len(resolved)} results "
        f"to {len(ranked)} standings"
    )
    return ranked


def _validate_batch(
    standings: StandingsById,
    results: RoundResults,
    round_pairings: RoundPairings,
) -> List[Tuple[Pairing, RoundResult]]:
    """Resolve every result to its pairing, rejecting the batch on any error."""
    seen: Set[str] = set()
    resolved = []

    for result in results:
        pairing = round_pairings.find_pairing(result.pairing_id)
        if pairing is None:
            raise UnknownPairingError(
                f"Round {round_pairings.round}: unknown pairing {result.pairing_id}"
            )
        if result.pairing_id in seen:
            raise DuplicateResultError(
                f"Round {round_pairings.round}: pairing {result.pairing_id} "
                "has more than one result"
            )
        seen.add(result.pairing_id)

        for player_id in pairing.player_ids:
            if player_id not in standings:
                raise InconsistentOutcomeError(
                    f"Pairing {pairing.id}: player {player_id} has no standing"
                )

        if result.player_id is not None:
            if not pairing.involves(result.player_id):
                raise InconsistentOutcomeError(
                    f"Pairing {pairing.id}: player {result.player_id} "
                    "is not part of this pairing"
                )
            credited = result.credited_player_id(pairing)
            if credited is not None and credited != result.player_id:
                raise InconsistentOutcomeError(
                    f"Pairing {pairing.id}: outcome {result.outcome.value} "
                    f"credits {credited}, not {result.player_id}"
                )

        resolved.append((pairing, result))

    for player_id in round_pairings.forced_byes + round_pairings.half_point_byes:
        if player_id not in standings:
            raise InconsistentOutcomeError(
                f"Round {round_pairings.round}: bye player {player_id} has no standing"
            )

    unscored = [p.id for p in round_pairings.pairings if p.id not in seen]
    if unscored:
        logger.warning(
            f"Round {round_pairings.round}: no result entered for pairings {unscored}"
        )

    return resolved


def _apply_outcome(
    standings: Dict[str, Standing], pairing: Pairing, outcome: Outcome
) -> None:
    """Update both players of one pairing for its outcome."""
    player1 = standings[pairing.player1_id]
    player2 = standings[pairing.player2_id]

    if outcome.is_half_bye:
        # A bye is not a game: no counters and no opponent history
        recipient = player1 if outcome is Outcome.HALF_BYE_P1 else player2
        recipient.points += HALF_POINT_BYE_SCORE
        recipient.bye_rounds.add(pairing.round)
        logger.debug(
            f"Pairing {pairing.id}: half-point bye for {recipient.player_name}"
        )
        return

    if outcome is Outcome.DRAW:
        for player in (player1, player2):
            player.draws += 1
            player.points += DRAW_SCORE
    else:
        winner, loser = (
            (player1, player2) if outcome is Outcome.PLAYER1_WIN else (player2, player1)
        )
        winner.wins += 1
        winner.points += WIN_SCORE
        loser.losses += 1
        loser.points += LOSS_SCORE

    player1.games_played += 1
    player2.games_played += 1
    player1.opponents_faced.append(player2.player_id)
    player2.opponents_faced.append(player1.player_id)

    logger.debug(
        f"Pairing {pairing.id}: {player1.player_name} vs "
        f"{player2.player_name} -> {outcome.value}"
    )
