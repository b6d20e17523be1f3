"""Storage collaborators for tournament state.

The engine never talks to a database itself. ``TournamentStore`` is the
interface a persistence layer implements; ``InMemoryTournamentStore`` keeps
everything in process and is used by the simulator and the tests.
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

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from clubswiss.exceptions import (
    ConcurrentModificationError,
    TournamentNotFoundError,
)
from clubswiss.tournament.models import RoundPairings, Standing, TournamentConfig
from clubswiss.type_hints import StandingsView
from clubswiss.utils import setup_logger

logger = setup_logger(__name__)


class TournamentStore(ABC):
    """Persistence interface for tournament configuration, standings and rounds.

    Standings are replaced as a whole set per save, never written partially.
    Every save bumps a per-tournament version so writers can detect that the
    standings changed since they were loaded.
    """

    @abstractmethod
    def load_config(self, tournament_id: str) -> TournamentConfig:
        """Load a tournament's configuration.

        Raises:
            TournamentNotFoundError: If the tournament does not exist
        """

    @abstractmethod
    def save_config(self, config: TournamentConfig) -> None:
        """Create or replace a tournament's configuration."""

    @abstractmethod
    def load_standings(self, tournament_id: str) -> Tuple[List[Standing], int]:
        """Load every standing of a tournament with the current version."""

    @abstractmethod
    def save_standings(
        self,
        tournament_id: str,
        standings: StandingsView,
        expected_version: Optional[int] = None,
    ) -> int:
        """Atomically replace the standings set and return the new version.

        Raises:
            ConcurrentModificationError: If ``expected_version`` is stale
        """

    @abstractmethod
    def load_round(
        self, tournament_id: str, round_number: int
    ) -> Optional[RoundPairings]:
        """Load the pairings stored for ``(tournament_id, round_number)``."""

    @abstractmethod
    def save_round(self, round_pairings: RoundPairings) -> None:
        """Store a round's pairings keyed by tournament and round."""


class InMemoryTournamentStore(TournamentStore):
    """Thread-safe in-process store.

    Values are kept in serialized form, so callers always get independent
    copies back.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._standings: Dict[str, List[Dict[str, Any]]] = {}
        self._versions: Dict[str, int] = {}
        self._rounds: Dict[Tuple[str, int], Dict[str, Any]] = {}

    def load_config(self, tournament_id: str) -> TournamentConfig:
        with self._lock:
            data = self._configs.get(tournament_id)
        if data is None:
            raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
        return TournamentConfig.from_dict(data)

    def save_config(self, config: TournamentConfig) -> None:
        with self._lock:
            self._configs[config.tournament_id] = config.to_dict()

    def load_standings(self, tournament_id: str) -> Tuple[List[Standing], int]:
        with self._lock:
            if tournament_id not in self._configs:
                raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
            rows = list(self._standings.get(tournament_id, []))
            version = self._versions.get(tournament_id, 0)
        return [Standing.from_dict(row) for row in rows], version

    def save_standings(
        self,
        tournament_id: str,
        standings: StandingsView,
        expected_version: Optional[int] = None,
    ) -> int:
        rows = [standing.to_dict() for standing in standings]
        with self._lock:
            current = self._versions.get(tournament_id, 0)
            if expected_version is not None and expected_version != current:
                raise ConcurrentModificationError(
                    f"Tournament {tournament_id}: standings version is {current}, "
                    f"expected {expected_version}"
                )
            self._standings[tournament_id] = rows
            self._versions[tournament_id] = current + 1
            logger.debug(
                f"Saved {len(rows)} standings for {tournament_id} "
                f"(version {current + 1})"
            )
            return current + 1

    def load_round(
        self, tournament_id: str, round_number: int
    ) -> Optional[RoundPairings]:
        with self._lock:
            data = self._rounds.get((tournament_id, round_number))
        return RoundPairings.from_dict(data) if data is not None else None

    def save_round(self, round_pairings: RoundPairings) -> None:
        key = (round_pairings.tournament_id, round_pairings.round)
        with self._lock:
            self._rounds[key] = round_pairings.to_dict()
