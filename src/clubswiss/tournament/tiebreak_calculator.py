"""Tiebreak calculation for tournament standings.

Buchholz is the only tiebreak the engine ranks by: the sum of the current
points of every opponent a player has met. It is always recomputed from the
full standings set, never patched incrementally.
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

from typing import Dict, Iterable, List

from clubswiss.tournament.models import Standing
from clubswiss.type_hints import StandingsView
from clubswiss.utils import setup_logger

logger = setup_logger(__name__)


def _points_by_id(standings: Iterable[Standing]) -> Dict[str, float]:
    return {standing.player_id: standing.points for standing in standings}


def compute_buchholz(player_id: str, standings: StandingsView) -> float:
    """Calculate the Buchholz score of one player.

    Args:
        player_id: The player to calculate for
        standings: Full current standings of the tournament

    Returns:
        Sum of the points of every opponent in the player's
        ``opponents_faced``. Opponents missing from ``standings`` count 0,
        and an unknown player or one without games scores 0.
    """
    points = _points_by_id(standings)
    for standing in standings:
        if standing.player_id == player_id:
            return _sum_opponent_points(standing, points)
    return 0.0


def _sum_opponent_points(standing: Standing, points: Dict[str, float]) -> float:
    # A repeat opponent is counted once per game played against them
    return float(sum(points.get(opp_id, 0.0) for opp_id in standing.opponents_faced))


def refresh_buchholz(standings: StandingsView) -> List[Standing]:
    """Recompute ``buchholz_score`` for every standing in place.

    Uses the points currently stored on ``standings``; call it after all of
    a round's points have been applied.

    Returns:
        The same standings, for chaining
    """
    points = _points_by_id(standings)
    for standing in standings:
        standing.buchholz_score = _sum_opponent_points(standing, points)
    logger.debug(f"Refreshed Buchholz scores for {len(standings)} players")
    return list(standings)
