"""Random Tournament Generator (RTG) - internal testing system for the engine.

This module plays complete seeded tournaments through ``RoundManager`` with
simulated results, optional half-point byes and withdrawals, and validates
every generated round.
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

import argparse
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from clubswiss.constants import APP_NAME
from clubswiss.controllers.tournament import RoundManager
from clubswiss.tournament.models import (
    Outcome,
    Pairing,
    RoundPairings,
    RoundResult,
    Standing,
    TournamentConfig,
)
from clubswiss.tournament.storage import InMemoryTournamentStore
from clubswiss.type_hints import RosterEntry
from clubswiss.utils import setup_logger
from clubswiss.validation import RoundReport

logger = setup_logger(__name__)


class ResultPattern(Enum):
    """Result generation patterns for tournaments."""

    RANDOM = "random"
    FAVOURITES = "favourites"
    DRAW_HEAVY = "draw_heavy"


@dataclass
class RTGConfig:
    """Configuration for Random Tournament Generator."""

    num_players: int
    num_rounds: int
    result_pattern: ResultPattern = ResultPattern.RANDOM
    seed: Optional[int] = None
    tournament_id: str = "rtg"
    draw_percentage: int = 20
    half_point_bye_rate: float = 0.0
    withdrawal_rate: float = 0.0
    validate_rounds: bool = True


class PlayerFactory:
    """Factory for creating a simulated roster with hidden strengths."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.random = random.Random(config.seed)

    def create_players(self) -> Dict[str, int]:
        """Return player id -> strength (a rating-like number)."""
        players = {
            f"p{i:03d}": self.random.randint(800, 2200)
            for i in range(1, self.config.num_players + 1)
        }
        logger.info(f"Created {len(players)} players")
        return players


class ResultSimulator:
    """Simulates game outcomes for pairings."""

    def __init__(self, config: RTGConfig, strengths: Dict[str, int]):
        self.config = config
        self.strengths = strengths
        self.random = random.Random(config.seed)

    def simulate(self, pairing: Pairing) -> Outcome:
        if self.config.result_pattern == ResultPattern.DRAW_HEAVY:
            draw_probability = 0.6
        else:
            draw_probability = self.config.draw_percentage / 100.0

        roll = self.random.random()
        if roll < draw_probability:
            return Outcome.DRAW

        if self.config.result_pattern == ResultPattern.FAVOURITES:
            strength1 = self.strengths[pairing.player1_id]
            diff = strength1 - self.strengths[pairing.player2_id]
            expected = 1.0 / (1.0 + 10 ** (-diff / 400.0))
            first_wins = self.random.random() < expected
        else:
            first_wins = self.random.random() < 0.5
        return Outcome.PLAYER1_WIN if first_wins else Outcome.PLAYER2_WIN


class RandomTournamentGenerator:
    """Main tournament generator orchestrating roster, rounds and results."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.random = random.Random(config.seed)
        self.strengths = PlayerFactory(config).create_players()
        self.result_simulator = ResultSimulator(config, self.strengths)
        self.store = InMemoryTournamentStore()
        self.manager = RoundManager(self.store)

    def generate_complete_tournament(self) -> Dict:
        """Play every round and return the tournament history."""
        config = TournamentConfig(
            tournament_id=self.config.tournament_id,
            name=f"RTG {self.config.num_players}x{self.config.num_rounds}",
            total_rounds=self.config.num_rounds,
        )
        roster: List[RosterEntry] = [
            (player_id, f"Player {player_id}") for player_id in self.strengths
        ]
        self.manager.create_tournament(config, roster)
        logger.info(
            f"Generating tournament: {self.config.num_players} players, "
            f"{self.config.num_rounds} rounds"
        )

        tournament_data: Dict = {"config": self.config, "rounds": []}
        for round_number in range(1, self.config.num_rounds + 1):
            tournament_data["rounds"].append(self._simulate_round(round_number))

        tournament_data["standings"] = self.manager.get_standings(config.tournament_id)
        tournament_data["status"] = self.store.load_config(config.tournament_id).status
        logger.info("Tournament generation complete")
        return tournament_data

    def _simulate_round(self, round_number: int) -> Dict:
        tournament_id = self.config.tournament_id
        self._apply_administration(round_number)

        standings_before = self.manager.get_standings(tournament_id)
        round_pairings = self.manager.generate_round(tournament_id, round_number)
        report: Optional[RoundReport] = None
        if self.config.validate_rounds:
            report = self.manager.last_report(tournament_id)

        results = [
            RoundResult(
                pairing_id=pairing.id,
                outcome=self.result_simulator.simulate(pairing),
            )
            for pairing in round_pairings.pairings
        ]
        standings_after = self.manager.record_results(
            tournament_id, round_number, results
        )
        return {
            "round_number": round_number,
            "standings_before": standings_before,
            "round_pairings": round_pairings,
            "results": results,
            "report": report,
            "standings_after": standings_after,
        }

    def _apply_administration(self, round_number: int) -> None:
        """Randomly withdraw players and hand out half-point byes."""
        tournament_id = self.config.tournament_id
        active = [s for s in self.manager.get_standings(tournament_id) if s.is_active]

        if self.config.withdrawal_rate > 0 and round_number > 1:
            leaving = [
                s.player_id
                for s in active
                if self.random.random() < self.config.withdrawal_rate
            ]
            # Keep at least two players in the event
            leaving = leaving[: max(0, len(active) - 2)]
            if leaving:
                self.manager.withdraw_players(tournament_id, leaving)
                active = [s for s in active if s.player_id not in leaving]

        if self.config.half_point_bye_rate > 0:
            resting = [
                s.player_id
                for s in active
                if self.random.random() < self.config.half_point_bye_rate
            ]
            if resting:
                self.manager.assign_half_point_byes(
                    tournament_id, round_number, resting
                )


def summarize_reports(tournament_data: Dict) -> Dict[str, int]:
    """Count quality warnings by criterion over all rounds."""
    counts: Dict[str, int] = {}
    for round_data in tournament_data["rounds"]:
        report = round_data.get("report")
        if report is None:
            continue
        for warning in report.quality_warnings:
            counts[warning.criterion] = counts.get(warning.criterion, 0) + 1
    return counts


def final_table(standings: List[Standing]) -> str:
    lines = [f"{'Rank':>4}  {'Player':<14} {'Pts':>5} {'Buch':>6}  W-D-L"]
    for s in standings:
        lines.append(
            f"{s.rank:>4}  {s.player_name:<14} {s.points:>5.1f} "
            f"{s.buchholz_score:>6.1f}  {s.wins}-{s.draws}-{s.losses}"
        )
    return "\n".join(lines)


def round_overview(round_pairings: RoundPairings) -> str:
    parts = [f"{p.player1_id}-{p.player2_id}" for p in round_pairings.pairings]
    if round_pairings.forced_byes:
        parts.append(f"bye: {', '.join(round_pairings.forced_byes)}")
    if round_pairings.half_point_byes:
        parts.append(f"half-bye: {', '.join(round_pairings.half_point_byes)}")
    return f"Round {round_pairings.round}: " + "  ".join(parts)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"{APP_NAME} random tournament generator"
    )
    parser.add_argument("--players", type=int, default=9, help="Number of players")
    parser.add_argument("--rounds", type=int, default=5, help="Number of rounds")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--pattern",
        choices=[p.value for p in ResultPattern],
        default=ResultPattern.RANDOM.value,
        help="Result generation pattern",
    )
    parser.add_argument(
        "--half-bye-rate",
        type=float,
        default=0.0,
        help="Chance per player and round of a half-point bye",
    )
    parser.add_argument(
        "--withdrawal-rate",
        type=float,
        default=0.0,
        help="Chance per player and round of withdrawing",
    )
    args = parser.parse_args(argv)

    config = RTGConfig(
        num_players=args.players,
        num_rounds=args.rounds,
        result_pattern=ResultPattern(args.pattern),
        seed=args.seed,
        half_point_bye_rate=args.half_bye_rate,
        withdrawal_rate=args.withdrawal_rate,
    )
    tournament = RandomTournamentGenerator(config).generate_complete_tournament()

    print("Generated Tournament:")
    for round_data in tournament["rounds"]:
        print(round_overview(round_data["round_pairings"]))
        if round_data["report"] is not None:
            print(f"  {round_data['report'].summary}")
    print()
    print(final_table(tournament["standings"]))

    warnings = summarize_reports(tournament)
    if warnings:
        print("Quality warnings by criterion:")
        for criterion, count in sorted(warnings.items()):
            print(f"  {criterion}: {count}")
    return 0
