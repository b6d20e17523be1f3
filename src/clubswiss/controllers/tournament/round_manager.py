"""Round management for tournaments.

This module drives a tournament through its rounds against a
``TournamentStore``: generating and persisting pairings, applying results,
administrative bye and withdrawal changes, and status transitions. Every
mutating call for a tournament holds that tournament's lock, so concurrent
callers cannot interleave their read-modify-write cycles; different
tournaments proceed in parallel.
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
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from clubswiss.constants import (
    PAIRABLE_STATUSES,
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_UPCOMING,
)
from clubswiss.exceptions import (
    DuplicateResultError,
    InvalidPairingError,
    RoundNotFoundError,
    TournamentNotFoundError,
    TournamentStateError,
)
from clubswiss.pairing import generate_pairings
from clubswiss.tournament import roster
from clubswiss.tournament.models import (
    RoundPairings,
    RoundResult,
    Standing,
    TournamentConfig,
)
from clubswiss.tournament.result_recorder import apply_round_results
from clubswiss.tournament.standings import sort_standings
from clubswiss.tournament.storage import TournamentStore
from clubswiss.type_hints import RosterEntry
from clubswiss.utils import setup_logger
from clubswiss.validation import RoundReport, RoundValidator, create_round_validator

logger = setup_logger(__name__)


class TournamentLocks:
    """Registry of one re-entrant lock per tournament id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def lock_for(self, tournament_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[tournament_id] = lock
            return lock

    @contextmanager
    def hold(self, tournament_id: str) -> Iterator[None]:
        """Hold the tournament's lock for the duration of the block."""
        with self.lock_for(tournament_id):
            yield


class RoundManager:
    """Manages round progression for tournaments kept in a store.

    This class is responsible for:
    - Serializing pairing generation and result application per tournament
    - Enforcing the round lifecycle (paired, results applied, next round)
    - Persisting pairings and the full standings set after each change
    - Surfacing rematches and extra byes as logged warnings
    """

    def __init__(
        self,
        store: TournamentStore,
        locks: Optional[TournamentLocks] = None,
        validator: Optional[RoundValidator] = None,
    ):
        """Initialize the round manager.

        Args:
            store: Persistence for configuration, standings and rounds
            locks: Lock registry, shared between managers over the same store
            validator: Round validator used on every generated round
        """
        self.store = store
        self.locks = locks or TournamentLocks()
        self.validator = validator or create_round_validator()
        self._reports: Dict[str, RoundReport] = {}

    # ----- tournament lifecycle -----

    def create_tournament(
        self,
        config: TournamentConfig,
        players: Iterable[RosterEntry],
        bye_rounds: Optional[Dict[str, Iterable[int]]] = None,
    ) -> List[Standing]:
        """Register a tournament and seed its standings from the roster.

        Raises:
            TournamentStateError: If the tournament already exists
            DuplicatePlayerError: If the roster lists a player twice
        """
        with self.locks.hold(config.tournament_id):
            try:
                self.store.load_config(config.tournament_id)
            except TournamentNotFoundError:
                pass
            else:
                raise TournamentStateError(
                    f"Tournament {config.tournament_id} already exists"
                )

            standings = roster.create_standings(
                config.tournament_id, players, bye_rounds
            )
            self.store.save_config(config)
            self.store.save_standings(config.tournament_id, standings)
            logger.info(
                f"Created tournament {config.tournament_id} "
                f"({config.total_rounds} rounds, {len(standings)} players)"
            )
            return standings

    def cancel_tournament(self, tournament_id: str) -> TournamentConfig:
        """Mark a tournament cancelled.

        Raises:
            TournamentStateError: If the tournament is already completed
        """
        with self.locks.hold(tournament_id):
            config = self.store.load_config(tournament_id)
            if config.status == STATUS_COMPLETED:
                raise TournamentStateError(
                    f"Tournament {tournament_id} is completed and cannot be cancelled"
                )
            config.status = STATUS_CANCELLED
            self.store.save_config(config)
            logger.info(f"Tournament {tournament_id} cancelled")
            return config

    # ----- queries -----

    def get_standings(self, tournament_id: str) -> List[Standing]:
        """Current standings in ranking order."""
        standings, _ = self.store.load_standings(tournament_id)
        return sort_standings(standings)

    def get_round(self, tournament_id: str, round_number: int) -> RoundPairings:
        """Stored pairings for a round.

        Raises:
            RoundNotFoundError: If the round has not been paired
        """
        round_pairings = self.store.load_round(tournament_id, round_number)
        if round_pairings is None:
            raise RoundNotFoundError(
                f"Tournament {tournament_id}: round {round_number} has no pairings"
            )
        return round_pairings

    def last_report(self, tournament_id: str) -> Optional[RoundReport]:
        """Validation report of the most recently generated round, if any."""
        with self.locks.hold(tournament_id):
            return self._reports.get(tournament_id)

    # ----- rounds -----

    def generate_round(self, tournament_id: str, round_number: int) -> RoundPairings:
        """Generate, validate and persist the pairings for a round.

        Regenerating a round whose results have not been applied replaces
        its pairings (e.g. after a late half-point bye).

        Args:
            tournament_id: The tournament to pair
            round_number: The 1-based round to pair

        Returns:
            The stored RoundPairings

        Raises:
            TournamentStateError: If the tournament is not pairable, the round
                is out of range, already completed, or the previous round
                still awaits results
            EmptyStandingsError: If the tournament has no standings
        """
        with self.locks.hold(tournament_id):
            config = self.store.load_config(tournament_id)
            self._check_pairable(config, round_number)

            standings, _ = self.store.load_standings(tournament_id)
            round_pairings = generate_pairings(standings, round_number, tournament_id)

            report = self.validator.validate(round_pairings, standings)
            self._reports[tournament_id] = report
            if not report.is_valid:
                raise InvalidPairingError(report.summary)

            self.store.save_round(round_pairings)
            if config.status == STATUS_UPCOMING:
                config.status = STATUS_ACTIVE
            config.current_round = round_number
            self.store.save_config(config)

            logger.info(
                f"Tournament {tournament_id} round {round_number} paired: "
                f"{report.summary}"
            )
            return round_pairings

    def record_results(
        self,
        tournament_id: str,
        round_number: int,
        results: Iterable[RoundResult],
    ) -> List[Standing]:
        """Apply a round's results and persist the new standings.

        The whole batch is applied or none of it is. The tournament is
        marked completed once its final round has been scored.

        Returns:
            The updated standings in rank order

        Raises:
            RoundNotFoundError: If the round was never paired
            DuplicateResultError: If the round's results were already applied
            TournamentStateError: If the tournament is not active
            ConcurrentModificationError: If the stored standings changed
                while the results were being applied
        """
        with self.locks.hold(tournament_id):
            config = self.store.load_config(tournament_id)
            if config.status != STATUS_ACTIVE:
                raise TournamentStateError(
                    f"Tournament {tournament_id} is {config.status}, "
                    "results can only be entered while active"
                )
            round_pairings = self.get_round(tournament_id, round_number)
            if round_pairings.is_completed:
                raise DuplicateResultError(
                    f"Tournament {tournament_id}: round {round_number} "
                    "results already applied"
                )

            standings, version = self.store.load_standings(tournament_id)
            updated = apply_round_results(standings, list(results), round_pairings)
            self.store.save_standings(tournament_id, updated, expected_version=version)

            round_pairings.is_completed = True
            self.store.save_round(round_pairings)

            if round_number >= config.total_rounds:
                config.status = STATUS_COMPLETED
                self.store.save_config(config)
                logger.info(f"Tournament {tournament_id} completed")

            logger.info(
                f"Tournament {tournament_id} round {round_number} results recorded"
            )
            return updated

    # ----- administration -----

    def assign_half_point_byes(
        self, tournament_id: str, round_number: int, player_ids: Iterable[str]
    ) -> List[Standing]:
        """Pre-assign half-point byes for a round that is not yet scored.

        If the round is already paired its pairings must be regenerated for
        the bye to take effect; a warning is logged.
        """
        with self.locks.hold(tournament_id):
            config = self.store.load_config(tournament_id)
            if config.status not in PAIRABLE_STATUSES:
                raise TournamentStateError(
                    f"Tournament {tournament_id} is {config.status}"
                )
            if not 1 <= round_number <= config.total_rounds:
                raise TournamentStateError(
                    f"Round {round_number} outside 1..{config.total_rounds}"
                )
            existing = self.store.load_round(tournament_id, round_number)
            if existing is not None and existing.is_completed:
                raise TournamentStateError(
                    f"Round {round_number} is already completed"
                )

            standings, version = self.store.load_standings(tournament_id)
            updated = roster.assign_half_point_byes(
                standings, player_ids, round_number
            )
            self.store.save_standings(tournament_id, updated, expected_version=version)
            if existing is not None:
                logger.warning(
                    f"Tournament {tournament_id} round {round_number} already paired; "
                    "regenerate the pairings to apply the new byes"
                )
            return updated

    def withdraw_players(
        self, tournament_id: str, player_ids: Iterable[str]
    ) -> List[Standing]:
        """Withdraw players from future rounds."""
        with self.locks.hold(tournament_id):
            standings, version = self.store.load_standings(tournament_id)
            updated = roster.withdraw_players(standings, player_ids)
            self.store.save_standings(tournament_id, updated, expected_version=version)
            return updated

    def _check_pairable(self, config: TournamentConfig, round_number: int) -> None:
        if config.status not in PAIRABLE_STATUSES:
            raise TournamentStateError(
                f"Cannot generate pairings for {config.status} tournament "
                f"{config.tournament_id}"
            )
        if not 1 <= round_number <= config.total_rounds:
            raise TournamentStateError(
                f"Round {round_number} outside 1..{config.total_rounds}"
            )

        existing = self.store.load_round(config.tournament_id, round_number)
        if existing is not None and existing.is_completed:
            raise TournamentStateError(f"Round {round_number} is already completed")

        if round_number > 1:
            previous = self.store.load_round(config.tournament_id, round_number - 1)
            if previous is None or not previous.is_completed:
                raise TournamentStateError(
                    f"Round {round_number - 1} results must be recorded "
                    f"before pairing round {round_number}"
                )
