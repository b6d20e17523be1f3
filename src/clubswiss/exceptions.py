"""Exceptions for use in Club Swiss"""

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


# ========== Base Application Exception ==========


class ClubSwissException(Exception):
    """Base exception for all Club Swiss errors.

    All custom exceptions in the package inherit from this class so callers
    can catch every engine error with a single except clause.
    """

    pass


# ========== Pairing Exceptions ==========


class PairingException(ClubSwissException):
    """Base exception for pairing-related errors."""

    pass


class EmptyStandingsError(PairingException):
    """Raised when pairing is requested for a tournament with no players.

    Callers should treat this as "the tournament has no active players".
    """

    pass


class InvalidPairingError(PairingException):
    """Raised when a pairing is malformed (e.g. a player paired with themselves)."""

    pass


# ========== Tournament Exceptions ==========


class TournamentException(ClubSwissException):
    """Base exception for tournament-related errors."""

    pass


class TournamentStateError(TournamentException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


class TournamentNotFoundError(TournamentException):
    """Raised when a requested tournament does not exist."""

    pass


class RoundNotFoundError(TournamentException):
    """Raised when a requested round does not exist."""

    pass


class DuplicatePlayerError(TournamentException):
    """Raised when attempting to add a player that already exists."""

    pass


class ConcurrentModificationError(TournamentException):
    """Raised when persisted standings changed since they were loaded."""

    pass


# ========== Player Exceptions ==========


class PlayerException(ClubSwissException):
    """Base exception for player-related errors."""

    pass


class PlayerNotFoundError(PlayerException):
    """Raised when a requested player cannot be found."""

    pass


class InvalidStandingError(PlayerException):
    """Raised when standing data is invalid or incomplete."""

    pass


# ========== Result Exceptions ==========


class ResultException(ClubSwissException):
    """Base exception for result recording errors."""

    pass


class UnknownPairingError(ResultException):
    """Raised when a result references a pairing id not in the round."""

    pass


class InconsistentOutcomeError(ResultException):
    """Raised when a result names a player who is not part of its pairing."""

    pass


class DuplicateResultError(ResultException):
    """Raised when attempting to record a result that already exists."""

    pass


class InvalidResultError(ResultException):
    """Raised when a result is malformed (e.g. an unknown outcome tag)."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(ClubSwissException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationError(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
