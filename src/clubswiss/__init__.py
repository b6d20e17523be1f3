"""Club Swiss: Swiss-system pairing and standings engine for club tournaments."""

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

# tournament must be imported before pairing and controllers
from clubswiss.tournament import (
    InMemoryTournamentStore,
    Outcome,
    Pairing,
    RoundPairings,
    RoundResult,
    Standing,
    TournamentConfig,
    TournamentStore,
    apply_round_results,
    assign_ranks,
    compute_buchholz,
    sort_standings,
)
from clubswiss.pairing import generate_pairings, select_forced_bye
from clubswiss.controllers.tournament import RoundManager, TournamentLocks

__version__ = "0.1.0"

__all__ = [
    "Standing",
    "Pairing",
    "RoundPairings",
    "RoundResult",
    "Outcome",
    "TournamentConfig",
    "TournamentStore",
    "InMemoryTournamentStore",
    "compute_buchholz",
    "sort_standings",
    "assign_ranks",
    "apply_round_results",
    "generate_pairings",
    "select_forced_bye",
    "RoundManager",
    "TournamentLocks",
]
