"""Core data models for the pairing and standings engine.

This module defines the value types that cross the engine boundary: one
player's standing, a scheduled pairing, a round's pairing set, a round
result and the tournament configuration. Every type validates itself on
construction so malformed payloads are rejected instead of coerced.
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

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from clubswiss.constants import (
    OUTCOME_DRAW,
    OUTCOME_HALF_BYE_P1,
    OUTCOME_HALF_BYE_P2,
    OUTCOME_PLAYER1_WIN,
    OUTCOME_PLAYER2_WIN,
    PAIRING_ID_PREFIX,
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_UPCOMING,
)
from clubswiss.exceptions import (
    InvalidConfigurationError,
    InvalidPairingError,
    InvalidResultError,
    InvalidStandingError,
)
from clubswiss.type_hints import Pairings, TournamentStatus
from clubswiss.utils import format_timestamp, generate_id, parse_timestamp, utc_now

TOURNAMENT_STATUSES = (
    STATUS_UPCOMING,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
)


def _require(data: Mapping[str, Any], key: str, error: type) -> Any:
    try:
        return data[key]
    except KeyError:
        raise error(f"Missing required field '{key}'") from None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class Outcome(Enum):
    """Outcome of one pairing as entered after the round."""

    PLAYER1_WIN = OUTCOME_PLAYER1_WIN
    PLAYER2_WIN = OUTCOME_PLAYER2_WIN
    DRAW = OUTCOME_DRAW
    HALF_BYE_P1 = OUTCOME_HALF_BYE_P1
    HALF_BYE_P2 = OUTCOME_HALF_BYE_P2

    @property
    def is_half_bye(self) -> bool:
        return self in (Outcome.HALF_BYE_P1, Outcome.HALF_BYE_P2)

    @classmethod
    def parse(cls, value: Any) -> "Outcome":
        """Convert a wire tag (or an Outcome) to an Outcome."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidResultError(f"Unknown outcome tag: {value!r}") from None


@dataclass
class Standing:
    """One player's cumulative record within one tournament.

    Attributes:
        tournament_id: Tournament the standing belongs to
        player_id: Player identifier
        player_name: Display name
        games_played: Games actually played (byes excluded)
        wins: Games won
        losses: Games lost
        draws: Games drawn
        points: Tournament score, byes included
        buchholz_score: Sum of the current points of every opponent faced
        opponents_faced: Opponent ids in the order the games were played
        bye_rounds: Rounds in which the player had any bye
        rank: 1-based position after the latest ranking, 0 before any
        withdrawn: Whether the player left the tournament
        withdrawn_at: When the player was withdrawn
        last_updated: When the standing was last recomputed
    """

    tournament_id: str
    player_id: str
    player_name: str
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: float = 0.0
    buchholz_score: float = 0.0
    opponents_faced: List[str] = field(default_factory=list)
    bye_rounds: Set[int] = field(default_factory=set)
    rank: int = 0
    withdrawn: bool = False
    withdrawn_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self) -> None:
        try:
            self.opponents_faced = list(self.opponents_faced)
            self.bye_rounds = set(self.bye_rounds)
        except TypeError as exc:
            raise InvalidStandingError(
                f"{self.player_id}: opponents_faced and bye_rounds must be "
                f"collections ({exc})"
            ) from exc
        self.validate()

    def validate(self) -> None:
        """Check the record invariants.

        Raises:
            InvalidStandingError: If any invariant does not hold
        """
        if not self.tournament_id or not self.player_id:
            raise InvalidStandingError("Standing requires tournament_id and player_id")
        for name in ("games_played", "wins", "losses", "draws", "rank"):
            if not _is_count(getattr(self, name)):
                raise InvalidStandingError(
                    f"{self.player_id}: {name} must be a non-negative integer"
                )
        if self.games_played != self.wins + self.losses + self.draws:
            raise InvalidStandingError(
                f"{self.player_id}: games_played ({self.games_played}) != "
                f"wins + losses + draws ({self.wins + self.losses + self.draws})"
            )
        if self.points < 0:
            raise InvalidStandingError(f"{self.player_id}: points must be >= 0")
        if self.player_id in self.opponents_faced:
            raise InvalidStandingError(f"{self.player_id}: listed as own opponent")
        if any(not _is_count(r) or r < 1 for r in self.bye_rounds):
            raise InvalidStandingError(
                f"{self.player_id}: bye rounds must be positive integers"
            )

    @property
    def is_active(self) -> bool:
        return not self.withdrawn

    def has_faced(self, player_id: str) -> bool:
        """Check if this player has already played the given player."""
        return player_id in self.opponents_faced

    def copy(self) -> "Standing":
        """Return an independent copy (containers included)."""
        return replace(
            self,
            opponents_faced=list(self.opponents_faced),
            bye_rounds=set(self.bye_rounds),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standing to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "games_played": self.games_played,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "points": self.points,
            "buchholz_score": self.buchholz_score,
            "opponents_faced": list(self.opponents_faced),
            "bye_rounds": sorted(self.bye_rounds),
            "rank": self.rank,
            "withdrawn": self.withdrawn,
            "withdrawn_at": format_timestamp(self.withdrawn_at),
            "last_updated": format_timestamp(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Standing":
        """Deserialize standing from dictionary.

        Identity, counters, points and history are required; only derived
        or administrative fields fall back to defaults.
        """
        req = partial(_require, data, error=InvalidStandingError)
        points = req("points")
        if isinstance(points, bool) or not isinstance(points, (int, float)):
            raise InvalidStandingError(f"points must be a number, got {points!r}")
        opponents = req("opponents_faced")
        bye_rounds = req("bye_rounds")
        if not isinstance(opponents, (list, tuple)):
            raise InvalidStandingError(
                f"opponents_faced must be a list, got {opponents!r}"
            )
        if not isinstance(bye_rounds, (list, tuple, set, frozenset)):
            raise InvalidStandingError(f"bye_rounds must be a list, got {bye_rounds!r}")
        if not all(_is_count(r) for r in bye_rounds):
            raise InvalidStandingError(
                f"bye_rounds must hold round numbers, got {bye_rounds!r}"
            )
        buchholz = data.get("buchholz_score", 0.0)
        if isinstance(buchholz, bool) or not isinstance(buchholz, (int, float)):
            raise InvalidStandingError(
                f"buchholz_score must be a number, got {buchholz!r}"
            )
        try:
            withdrawn_at = parse_timestamp(data.get("withdrawn_at"))
            last_updated = parse_timestamp(data.get("last_updated"))
        except (ValueError, OverflowError) as exc:
            raise InvalidStandingError(f"Invalid timestamp: {exc}") from exc
        return cls(
            tournament_id=req("tournament_id"),
            player_id=req("player_id"),
            player_name=req("player_name"),
            games_played=req("games_played"),
            wins=req("wins"),
            losses=req("losses"),
            draws=req("draws"),
            points=float(points),
            buchholz_score=float(buchholz),
            opponents_faced=list(opponents),
            bye_rounds=set(bye_rounds),
            rank=data.get("rank", 0),
            withdrawn=bool(data.get("withdrawn", False)),
            withdrawn_at=withdrawn_at,
            last_updated=last_updated,
        )


@dataclass
class Pairing:
    """One scheduled game between two players."""

    id: str
    tournament_id: str
    round: int
    player1_id: str
    player1_name: str
    player2_id: str
    player2_name: str
    created_at: datetime

    def __post_init__(self) -> None:
        if self.player1_id == self.player2_id:
            raise InvalidPairingError(
                f"Pairing {self.id}: player {self.player1_id} paired with themselves"
            )
        if not _is_count(self.round) or self.round < 1:
            raise InvalidPairingError(f"Pairing {self.id}: invalid round {self.round}")

    @classmethod
    def create(
        cls,
        tournament_id: str,
        round_number: int,
        player1: Standing,
        player2: Standing,
        now: Optional[datetime] = None,
    ) -> "Pairing":
        """Create a pairing with a fresh unique id."""
        return cls(
            id=generate_id(f"{PAIRING_ID_PREFIX}_{tournament_id}_{round_number}"),
            tournament_id=tournament_id,
            round=round_number,
            player1_id=player1.player_id,
            player1_name=player1.player_name,
            player2_id=player2.player_id,
            player2_name=player2.player_name,
            created_at=now or utc_now(),
        )

    @property
    def player_ids(self) -> tuple:
        return self.player1_id, self.player2_id

    def involves(self, player_id: str) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pairing to dictionary."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round": self.round,
            "player1_id": self.player1_id,
            "player1_name": self.player1_name,
            "player2_id": self.player2_id,
            "player2_name": self.player2_name,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pairing":
        """Deserialize pairing from dictionary."""
        req = partial(_require, data, error=InvalidPairingError)
        try:
            created_at = parse_timestamp(req("created_at"))
        except (ValueError, OverflowError) as exc:
            raise InvalidPairingError(f"Invalid created_at: {exc}") from exc
        return cls(
            id=req("id"),
            tournament_id=req("tournament_id"),
            round=req("round"),
            player1_id=req("player1_id"),
            player1_name=req("player1_name"),
            player2_id=req("player2_id"),
            player2_name=req("player2_name"),
            created_at=created_at,
        )


@dataclass
class RoundPairings:
    """Pairings and byes produced for one round.

    Attributes:
        tournament_id: Tournament the round belongs to
        round: The round number (1-indexed)
        pairings: Scheduled games
        forced_byes: Players sitting out because of pool parity or displacement
        half_point_byes: Players holding a pre-assigned half-point bye
        is_completed: Whether this round's results have been applied
    """

    tournament_id: str
    round: int
    pairings: Pairings = field(default_factory=list)
    forced_byes: List[str] = field(default_factory=list)
    half_point_byes: List[str] = field(default_factory=list)
    is_completed: bool = False

    def __post_init__(self) -> None:
        overlap = set(self.forced_byes) & set(self.half_point_byes)
        if overlap:
            raise InvalidPairingError(
                f"Round {self.round}: players in both bye lists: {sorted(overlap)}"
            )

    def player_ids(self) -> List[str]:
        """All assigned player ids, in pairing then bye order."""
        ids: List[str] = []
        for pairing in self.pairings:
            ids.extend(pairing.player_ids)
        ids.extend(self.forced_byes)
        ids.extend(self.half_point_byes)
        return ids

    def find_pairing(self, pairing_id: str) -> Optional[Pairing]:
        for pairing in self.pairings:
            if pairing.id == pairing_id:
                return pairing
        return None

    def rematches(self, standings: Iterable[Standing]) -> List[Pairing]:
        """Pairings between players who had already met before this round."""
        by_id = {s.player_id: s for s in standings}
        repeats = []
        for pairing in self.pairings:
            first = by_id.get(pairing.player1_id)
            second = by_id.get(pairing.player2_id)
            if (first and first.has_faced(pairing.player2_id)) or (
                second and second.has_faced(pairing.player1_id)
            ):
                repeats.append(pairing)
        return repeats

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round pairings to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "round": self.round,
            "pairings": [p.to_dict() for p in self.pairings],
            "forced_byes": list(self.forced_byes),
            "half_point_byes": list(self.half_point_byes),
            "is_completed": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoundPairings":
        """Deserialize round pairings from dictionary."""
        req = partial(_require, data, error=InvalidPairingError)
        return cls(
            tournament_id=req("tournament_id"),
            round=req("round"),
            pairings=[Pairing.from_dict(p) for p in req("pairings")],
            forced_byes=list(req("forced_byes")),
            half_point_byes=list(req("half_point_byes")),
            is_completed=data.get("is_completed", False),
        )


@dataclass
class RoundResult:
    """The entered outcome of one pairing.

    Attributes:
        pairing_id: Id of the pairing the outcome belongs to
        outcome: What happened
        player_id: Optional id of the player the outcome credits (winner or
            half-bye recipient); checked against the pairing when given
    """

    pairing_id: str
    outcome: Outcome
    player_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.pairing_id:
            raise InvalidResultError("Result requires a pairing_id")
        self.outcome = Outcome.parse(self.outcome)

    def credited_player_id(self, pairing: Pairing) -> Optional[str]:
        """Id of the player the outcome favours in the given pairing."""
        if self.outcome in (Outcome.PLAYER1_WIN, Outcome.HALF_BYE_P1):
            return pairing.player1_id
        if self.outcome in (Outcome.PLAYER2_WIN, Outcome.HALF_BYE_P2):
            return pairing.player2_id
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        data: Dict[str, Any] = {
            "pairing_id": self.pairing_id,
            "outcome": self.outcome.value,
        }
        if self.player_id is not None:
            data["player_id"] = self.player_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoundResult":
        """Deserialize result from dictionary."""
        return cls(
            pairing_id=_require(data, "pairing_id", InvalidResultError),
            outcome=_require(data, "outcome", InvalidResultError),
            player_id=data.get("player_id"),
        )


@dataclass
class TournamentConfig:
    """Configuration and lifecycle state of a tournament.

    Attributes:
        tournament_id: Tournament identifier
        name: Tournament name
        total_rounds: Number of rounds to be played
        status: One of upcoming, active, completed, cancelled
        current_round: Latest round that has been paired, 0 before round 1
    """

    tournament_id: str
    name: str
    total_rounds: int
    status: TournamentStatus = STATUS_UPCOMING
    current_round: int = 0

    def __post_init__(self) -> None:
        if not self.tournament_id:
            raise InvalidConfigurationError("Tournament requires an id")
        if not _is_count(self.total_rounds) or self.total_rounds < 1:
            raise InvalidConfigurationError(
                f"total_rounds must be a positive integer, got {self.total_rounds!r}"
            )
        if self.status not in TOURNAMENT_STATUSES:
            raise InvalidConfigurationError(f"Unknown status: {self.status!r}")
        if not _is_count(self.current_round) or self.current_round > self.total_rounds:
            raise InvalidConfigurationError(
                f"current_round {self.current_round!r} outside 0..{self.total_rounds}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "name": self.name,
            "total_rounds": self.total_rounds,
            "status": self.status,
            "current_round": self.current_round,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            tournament_id=_require(data, "tournament_id", InvalidConfigurationError),
            name=data.get("name", "Untitled Tournament"),
            total_rounds=_require(data, "total_rounds", InvalidConfigurationError),
            status=data.get("status", STATUS_UPCOMING),
            current_round=data.get("current_round", 0),
        )
