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
from .config import (
    AuthSpec,
    AuthType,
    Config,
    CredsFileAuth,
    NKeyAuth,
    TLSSpec,
    TokenAuth,
    UserPassAuth,
)
from .connection import Connection, connect
from .errors import ConfigError, ConnectError, NotConnectedError, ResolutionError
from .options import ConnectionOptions, TLSOptions
from .resolver import resolve
from .status import ClosedEvent, StatusEvent, StatusType
from .supervisor import ConnectionSupervisor

__version__ = '0.1.0'

__all__ = [
    "AuthSpec",
    "AuthType",
    "ClosedEvent",
    "Config",
    "ConfigError",
    "ConnectError",
    "Connection",
    "ConnectionOptions",
    "ConnectionSupervisor",
    "CredsFileAuth",
    "NKeyAuth",
    "NotConnectedError",
    "ResolutionError",
    "StatusEvent",
    "StatusType",
    "TLSOptions",
    "TLSSpec",
    "TokenAuth",
    "UserPassAuth",
    "connect",
    "resolve",
]
