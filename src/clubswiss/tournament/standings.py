"""Ordering and ranking of standings."""

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

from typing import Tuple

from clubswiss.tournament.models import Standing
from clubswiss.type_hints import Standings, StandingsView


def standing_sort_key(standing: Standing) -> Tuple[float, float]:
    """Sort key: points descending, then Buchholz descending."""
    return (-standing.points, -standing.buchholz_score)


def sort_standings(standings: StandingsView) -> Standings:
    """Return a new list ordered by points, then Buchholz.

    The sort is stable, so tied players keep their prior relative order.
    """
    return sorted(standings, key=standing_sort_key)


def assign_ranks(standings: StandingsView) -> Standings:
    """Sort the standings and set ``rank = position + 1`` on each.

    Applying it again to its own output changes nothing.
    """
    ordered = sort_standings(standings)
    for position, standing in enumerate(ordered):
        standing.rank = position + 1
    return ordered
