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

# --- Constants ---
APP_NAME = "Club Swiss"
LOG_LEVEL_ENV = "CLUBSWISS_LOG_LEVEL"

# Game outcome scores
WIN_SCORE = 1.0
DRAW_SCORE = 0.5
LOSS_SCORE = 0.0

# Bye scores
HALF_POINT_BYE_SCORE = 0.5
FORCED_BYE_SCORE = 0.0

# Round outcome tags (wire values used by result entry)
OUTCOME_PLAYER1_WIN = "player1Win"
OUTCOME_PLAYER2_WIN = "player2Win"
OUTCOME_DRAW = "draw"
OUTCOME_HALF_BYE_P1 = "halfByeP1"
OUTCOME_HALF_BYE_P2 = "halfByeP2"

# Tournament status values
STATUS_UPCOMING = "upcoming"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

# Statuses in which new rounds may still be paired
PAIRABLE_STATUSES = (STATUS_UPCOMING, STATUS_ACTIVE)

PAIRING_ID_PREFIX = "pairing"
