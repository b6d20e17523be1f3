"""Checks on a generated round.

Absolute criteria (R1-R3) describe a round that must never be produced:
a player missing or listed twice, a self pairing, or a player in both bye
lists. Quality criteria (R4-R6) describe valid but suboptimal rounds
(rematches, repeat forced byes, extra forced byes) that callers may want
to surface as warnings.
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

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from clubswiss.tournament.models import RoundPairings, Standing
from clubswiss.type_hints import StandingsView
from clubswiss.utils import setup_logger

logger = setup_logger(__name__)


class CriterionStatus(Enum):
    """Status of a round criterion."""

    COMPLIANT = "COMPLIANT"
    VIOLATION = "VIOLATION"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class ViolationType(Enum):
    """Severity of a criterion violation."""

    ABSOLUTE = "ABSOLUTE"  # R1-R3: must not happen
    QUALITY = "QUALITY"  # R4-R6: allowed, worth a warning


@dataclass
class CriterionResult:
    """Result of checking a single criterion."""

    criterion: str
    status: CriterionStatus
    violation_type: Optional[ViolationType] = None
    description: str = ""
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def is_violation(self) -> bool:
        return self.status == CriterionStatus.VIOLATION


@dataclass
class RoundReport:
    """Outcome of validating one round."""

    round: int
    criteria_results: List[CriterionResult] = field(default_factory=list)

    @property
    def violations(self) -> List[CriterionResult]:
        return [
            r
            for r in self.criteria_results
            if r.is_violation and r.violation_type == ViolationType.ABSOLUTE
        ]

    @property
    def quality_warnings(self) -> List[CriterionResult]:
        return [
            r
            for r in self.criteria_results
            if r.is_violation and r.violation_type == ViolationType.QUALITY
        ]

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def summary(self) -> str:
        if not self.violations and not self.quality_warnings:
            return f"Round {self.round}: all criteria satisfied"
        parts = [f"{r.criterion}: {r.description}" for r in self.violations]
        parts += [
            f"{r.criterion} (warning): {r.description}" for r in self.quality_warnings
        ]
        return f"Round {self.round}: " + "; ".join(parts)


def _compliant(criterion: str, description: str) -> CriterionResult:
    return CriterionResult(
        criterion=criterion, status=CriterionStatus.COMPLIANT, description=description
    )


class RoundValidator:
    """Validates a round's pairings against the standings it was built from."""

    def validate(
        self, round_pairings: RoundPairings, standings: StandingsView
    ) -> RoundReport:
        """Run every criterion and collect the results.

        Args:
            round_pairings: The generated round
            standings: Standings the round was generated from

        Returns:
            RoundReport with one result per criterion
        """
        report = RoundReport(round=round_pairings.round)
        report.criteria_results = [
            self.check_r1_partition(round_pairings, standings),
            self.check_r2_no_self_pairing(round_pairings),
            self.check_r3_disjoint_byes(round_pairings),
            self.check_r4_rematches(round_pairings, standings),
            self.check_r5_repeat_forced_bye(round_pairings, standings),
            self.check_r6_extra_forced_byes(round_pairings, standings),
        ]
        for result in report.violations:
            logger.error(
                f"Round {report.round} {result.criterion}: {result.description}"
            )
        for result in report.quality_warnings:
            logger.warning(
                f"Round {report.round} {result.criterion}: {result.description}"
            )
        return report

    def check_r1_partition(
        self, round_pairings: RoundPairings, standings: StandingsView
    ) -> CriterionResult:
        """R1: every active player and bye holder appears exactly once."""
        counts = Counter(round_pairings.player_ids())
        duplicates = sorted(pid for pid, count in counts.items() if count > 1)
        expected = {
            s.player_id
            for s in standings
            if s.is_active or round_pairings.round in s.bye_rounds
        }
        missing = sorted(expected - set(counts))
        unexpected = sorted(set(counts) - expected)
        if duplicates or missing or unexpected:
            return CriterionResult(
                criterion="R1",
                status=CriterionStatus.VIOLATION,
                violation_type=ViolationType.ABSOLUTE,
                description=(
                    f"Partition broken: duplicates={duplicates}, "
                    f"missing={missing}, unexpected={unexpected}"
                ),
                details={
                    "duplicates": duplicates,
                    "missing": missing,
                    "unexpected": unexpected,
                },
            )
        return _compliant("R1", "Every active player assigned exactly once")

    def check_r2_no_self_pairing(
        self, round_pairings: RoundPairings
    ) -> CriterionResult:
        """R2: no player is paired with themselves."""
        for pairing in round_pairings.pairings:
            if pairing.player1_id == pairing.player2_id:
                return CriterionResult(
                    criterion="R2",
                    status=CriterionStatus.VIOLATION,
                    violation_type=ViolationType.ABSOLUTE,
                    description=f"Self pairing: {pairing.player1_name}",
                    details={"pairing_id": pairing.id},
                )
        return _compliant("R2", "No self pairings")

    def check_r3_disjoint_byes(
        self, round_pairings: RoundPairings
    ) -> CriterionResult:
        """R3: forced and half-point byes do not overlap."""
        overlap = sorted(
            set(round_pairings.forced_byes) & set(round_pairings.half_point_byes)
        )
        if overlap:
            return CriterionResult(
                criterion="R3",
                status=CriterionStatus.VIOLATION,
                violation_type=ViolationType.ABSOLUTE,
                description=f"Players in both bye lists: {overlap}",
                details={"players": overlap},
            )
        return _compliant("R3", "Bye lists are disjoint")

    def check_r4_rematches(
        self, round_pairings: RoundPairings, standings: StandingsView
    ) -> CriterionResult:
        """R4: players should not meet a second time."""
        repeats = round_pairings.rematches(standings)
        if repeats:
            names = [f"{p.player1_name} vs {p.player2_name}" for p in repeats]
            return CriterionResult(
                criterion="R4",
                status=CriterionStatus.VIOLATION,
                violation_type=ViolationType.QUALITY,
                description=f"Repeat pairings: {', '.join(names)}",
                details={"pairing_ids": [p.id for p in repeats]},
            )
        return _compliant("R4", "No repeat pairings")

    def check_r5_repeat_forced_bye(
        self, round_pairings: RoundPairings, standings: StandingsView
    ) -> CriterionResult:
        """R5: a forced bye should go to a player who never had a bye."""
        if not round_pairings.forced_byes:
            return CriterionResult(
                criterion="R5",
                status=CriterionStatus.NOT_APPLICABLE,
                description="No forced bye in this round",
            )
        by_id: Dict[str, Standing] = {s.player_id: s for s in standings}
        repeated = [
            pid
            for pid in round_pairings.forced_byes
            if pid in by_id and by_id[pid].bye_rounds
        ]
        if repeated:
            return CriterionResult(
                criterion="R5",
                status=CriterionStatus.VIOLATION,
                violation_type=ViolationType.QUALITY,
                description=f"Repeat bye for {repeated}",
                details={"players": repeated},
            )
        return _compliant("R5", "Forced byes went to players without a bye")

    def check_r6_extra_forced_byes(
        self, round_pairings: RoundPairings, standings: StandingsView
    ) -> CriterionResult:
        """R6: at most one forced bye, and only when the pool is odd."""
        half = set(round_pairings.half_point_byes)
        pool_size = sum(
            1 for s in standings if s.is_active and s.player_id not in half
        )
        expected = pool_size % 2
        actual = len(round_pairings.forced_byes)
        if actual > expected:
            return CriterionResult(
                criterion="R6",
                status=CriterionStatus.VIOLATION,
                violation_type=ViolationType.QUALITY,
                description=f"{actual} forced byes where {expected} expected",
                details={"expected": expected, "actual": actual},
            )
        return _compliant("R6", "Forced bye count matches pool parity")


def create_round_validator() -> RoundValidator:
    """Create and configure a round validator instance."""
    return RoundValidator()
