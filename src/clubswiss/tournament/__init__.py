"""Tournament standings management for Club Swiss.

This package holds the data model and the pure standings procedures:
tiebreak calculation, ordering, result application and roster
administration, plus the storage interface they are persisted through.
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

from clubswiss.tournament.models import (
    Outcome,
    Pairing,
    RoundPairings,
    RoundResult,
    Standing,
    TournamentConfig,
)
from clubswiss.tournament.result_recorder import apply_round_results
from clubswiss.tournament.standings import assign_ranks, sort_standings
from clubswiss.tournament.storage import InMemoryTournamentStore, TournamentStore
from clubswiss.tournament.tiebreak_calculator import compute_buchholz, refresh_buchholz

__all__ = [
    "Standing",
    "Pairing",
    "RoundPairings",
    "RoundResult",
    "Outcome",
    "TournamentConfig",
    "apply_round_results",
    "assign_ranks",
    "sort_standings",
    "compute_buchholz",
    "refresh_buchholz",
    "TournamentStore",
    "InMemoryTournamentStore",
]
