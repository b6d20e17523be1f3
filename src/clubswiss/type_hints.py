"""Type hints used in Club Swiss."""

from typing import TYPE_CHECKING, Dict, List, Literal, Sequence, Tuple

if TYPE_CHECKING:
    from clubswiss.tournament.models import Pairing, RoundResult, Standing

TournamentStatus = Literal["upcoming", "active", "completed", "cancelled"]

PlayerId = str
# (player_id, player_name) as supplied by the roster
RosterEntry = Tuple[PlayerId, str]

Standings = List["Standing"]
StandingsView = Sequence["Standing"]
StandingsById = Dict[PlayerId, "Standing"]
Pairings = List["Pairing"]
RoundResults = Sequence["RoundResult"]

#  LocalWords:  RosterEntry StandingsById
