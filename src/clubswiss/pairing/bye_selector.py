"""Forced bye selection for an odd pairing pool."""

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

from clubswiss.exceptions import EmptyStandingsError
from clubswiss.tournament.models import Standing
from clubswiss.type_hints import StandingsView
from clubswiss.utils import setup_logger

logger = setup_logger(__name__)


def select_forced_bye(pool: StandingsView, round_number: int) -> Standing:
    """Choose the player who sits out this round.

    Prefers the lowest-ranked player (last in ``pool``) who has never had
    any bye; when everyone has had one, falls back to the lowest-ranked
    player overall. ``pool`` must already be in pairing order.

    Args:
        pool: Sorted players still to be paired
        round_number: Round being paired (for logging)

    Returns:
        The standing of the player receiving the forced bye

    Raises:
        EmptyStandingsError: If ``pool`` is empty
    """
    if not pool:
        raise EmptyStandingsError(
            f"No players to choose a bye from in round {round_number}"
        )

    for standing in reversed(pool):
        if not standing.bye_rounds:
            logger.debug(
                f"Round {round_number}: forced bye for {standing.player_name} "
                "(no previous bye)"
            )
            return standing

    fallback = pool[-1]
    logger.warning(
        f"Round {round_number}: every player has had a bye, "
        f"repeating bye for {fallback.player_name}"
    )
    return fallback
