"""Shared helpers: logging setup, id generation and timestamps."""

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

import logging
import os
import uuid
from datetime import datetime
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil import tz

from clubswiss.constants import LOG_LEVEL_ENV

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER_NAME = "clubswiss"


def setup_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the package root logger once.

    The level comes from the ``CLUBSWISS_LOG_LEVEL`` environment variable
    (default ``WARNING``).
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        root.setLevel(getattr(logging, level_name, logging.WARNING))
    return logging.getLogger(name)


def generate_id(prefix: str) -> str:
    """Generate a unique identifier with a readable prefix."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz.tzutc())


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.tzutc())
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime to ISO-8601, passing None through."""
    return value.isoformat() if value is not None else None
