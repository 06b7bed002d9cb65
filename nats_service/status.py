# Copyright 2024 The NATS Authors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class StatusType(str, Enum):
    """Tags of the non-terminal events reported by a connection."""

    ERROR = "error"
    DISCONNECT = "disconnect"
    RECONNECT = "reconnect"
    RECONNECTING = "reconnecting"
    STALE_CONNECTION = "staleConnection"
    LDM = "ldm"
    UPDATE = "update"


@dataclass(frozen=True)
class StatusEvent:
    """
    StatusEvent is one entry of a connection's status stream.

    `type` is usually a `StatusType` but transports may report tags
    this module does not know about, those are kept as plain strings.
    """
    type: Union[StatusType, str]
    data: Any = None
    error: Optional[BaseException] = None

    def as_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": _tag(self.type)}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = str(self.error)
        return result


@dataclass(frozen=True)
class ClosedEvent:
    """
    ClosedEvent is the terminal event, produced once the closed signal
    of the connection resolves.
    """
    err: Optional[BaseException] = None

    def as_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": "closed"}
        if self.err is not None:
            result["error"] = str(self.err)
        return result


def _tag(t: Union[StatusType, str]) -> str:
    return t.value if isinstance(t, StatusType) else str(t)


# Severity and message logged for each kind of status event.
_STATUS_LOG: Dict[StatusType, Tuple[int, str]] = {
    StatusType.ERROR: (logging.ERROR, "NATS error: %s"),
    StatusType.DISCONNECT: (logging.WARNING, "Disconnected from NATS server"),
    StatusType.RECONNECT: (logging.INFO, "Reconnected to NATS server"),
    StatusType.RECONNECTING: (logging.INFO, "Reconnecting to NATS server..."),
    StatusType.STALE_CONNECTION: (logging.DEBUG, "NATS connection is stale"),
    StatusType.LDM: (
        logging.WARNING, "NATS server entered lame duck mode"
    ),
    StatusType.UPDATE: (logging.DEBUG, "NATS cluster update: %s"),
}


def log_record_for(event: StatusEvent) -> Tuple[int, str, Tuple[Any, ...]]:
    """
    Returns the (level, msg, args) to log for a status event.
    """
    try:
        status_type = StatusType(event.type)
    except ValueError:
        return logging.DEBUG, "NATS status update: %s", (_tag(event.type), )

    level, msg = _STATUS_LOG[status_type]
    if status_type is StatusType.ERROR:
        return level, msg, (event.error or event.data, )
    elif status_type is StatusType.UPDATE:
        return level, msg, (event.data, )
    return level, msg, ()
