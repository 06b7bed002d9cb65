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

from typing import Optional


class Error(Exception):

    def __init__(self, description: Optional[str] = None) -> None:
        super().__init__(description)
        self.description = description

    def __str__(self) -> str:
        desc = ''
        if self.description:
            desc = self.description
        return f"nats-service: {type(self).__name__}: {desc}"


class ConfigError(Error):
    pass


class ResolutionError(Error):
    """
    Raised when credential, certificate or key material could not be
    read or parsed while resolving the connection options.
    """

    def __init__(
        self,
        description: Optional[str] = None,
        path: Optional[str] = None
    ) -> None:
        super().__init__(description)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"nats-service: unable to resolve '{self.path}': {self.description}"
        return f"nats-service: unable to resolve options: {self.description}"


class ConnectError(Error):

    def __str__(self) -> str:
        return f"nats-service: failed to connect: {self.description}"


class NotConnectedError(Error):

    def __str__(self) -> str:
        return "nats-service: not connected"
