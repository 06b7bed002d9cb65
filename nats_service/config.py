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
"""
Declarative configuration accepted by the connection supervisor.

The shapes mirror the plugin schema: a list of servers, the reconnection
policy, an ordered list of authentication schemes and an optional TLS block.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar

from nats_service.errors import ConfigError

DEFAULT_SERVERS = ["127.0.0.1:4222"]
DEFAULT_NAME = "nats-service"
DEFAULT_MAX_RECONNECT_ATTEMPTS = -1

_B = TypeVar("_B", bound="Base")


class AuthType(str, Enum):
    TOKEN = "Token"
    USER_PASS = "UserPass"
    NKEY = "NKey"
    CREDS_FILE = "creds_file"


@dataclass
class Base:
    """
    Helper dataclass to build instances from declarative mappings.
    """

    # Alternative spellings accepted in mappings, e.g. camelCase schema keys.
    aliases: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_dict(cls: Type[_B], data: Dict[str, Any]) -> _B:
        """Read the class instance from a configuration mapping.

        Unknown keys are ignored.
        """
        if not isinstance(data, dict):
            raise ConfigError(
                f"expected a mapping for {cls.__name__}, got {type(data).__name__}"
            )
        params = {}
        for alias, name in cls.aliases.items():
            if alias in data:
                params[name] = data[alias]
        for f in fields(cls):
            if f.name in data:
                params[f.name] = data[f.name]
        try:
            return cls(**params)
        except TypeError as e:
            raise ConfigError(f"invalid {cls.__name__}: {e}") from e


@dataclass
class AuthSpec(Base):
    """
    AuthSpec is one authentication scheme; the concrete subclass is the tag.
    """
    auth_type: ClassVar[AuthType]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AuthSpec:
        if cls is not AuthSpec:
            return super().from_dict(data)
        if not isinstance(data, dict):
            raise ConfigError("authenticator entries must be mappings")
        tag = data.get("authType", data.get("auth_type"))
        try:
            auth_type = AuthType(tag)
        except ValueError:
            raise ConfigError(f"unknown authType: {tag!r}")
        return _AUTH_SPECS[auth_type].from_dict(data)


@dataclass
class TokenAuth(AuthSpec):
    auth_type: ClassVar[AuthType] = AuthType.TOKEN

    auth_token: str = field(repr=False)


@dataclass
class UserPassAuth(AuthSpec):
    auth_type: ClassVar[AuthType] = AuthType.USER_PASS
    aliases: ClassVar[Dict[str, str]] = {"pass": "password"}

    user: str
    password: Optional[str] = field(default=None, repr=False)


@dataclass
class NKeyAuth(AuthSpec):
    auth_type: ClassVar[AuthType] = AuthType.NKEY

    nkey_seed: str = field(repr=False)


@dataclass
class CredsFileAuth(AuthSpec):
    auth_type: ClassVar[AuthType] = AuthType.CREDS_FILE

    creds_file: str


_AUTH_SPECS: Dict[AuthType, Type[AuthSpec]] = {
    AuthType.TOKEN: TokenAuth,
    AuthType.USER_PASS: UserPassAuth,
    AuthType.NKEY: NKeyAuth,
    AuthType.CREDS_FILE: CredsFileAuth,
}


@dataclass
class TLSSpec(Base):
    """
    TLS material, each of cert, key and ca given either as a file path
    or as inline PEM. A path takes precedence over the inline value.
    """
    aliases: ClassVar[Dict[str, str]] = {
        "handshakeFirst": "handshake_first",
        "certFile": "cert_file",
        "keyFile": "key_file",
        "caFile": "ca_file",
    }

    handshake_first: bool = False
    cert_file: Optional[str] = None
    cert: Optional[str] = None
    key_file: Optional[str] = None
    key: Optional[str] = None
    ca_file: Optional[str] = None
    ca: Optional[str] = None


@dataclass
class Config(Base):
    """
    Config is the validated configuration of a supervised connection.
    """
    aliases: ClassVar[Dict[str, str]] = {
        "noRandomize": "no_randomize",
        "maxReconnectAttempts": "max_reconnect_attempts",
        "authenticator": "authenticators",
        "tlsEnabled": "tls_enabled",
        "tlsConfig": "tls_config",
        "noAsyncTraces": "no_async_traces",
    }

    servers: List[str] = field(default_factory=lambda: list(DEFAULT_SERVERS))
    no_randomize: bool = False
    reconnect: bool = True
    max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS
    authenticators: List[AuthSpec] = field(default_factory=list)
    tls_enabled: bool = False
    tls_config: Optional[TLSSpec] = None
    name: str = DEFAULT_NAME
    no_async_traces: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.servers, str):
            self.servers = [self.servers]
        if self.authenticators is None:
            self.authenticators = []
        if not self.servers:
            raise ConfigError("at least one server is required")
        if self.max_reconnect_attempts < -1:
            raise ConfigError(
                "max_reconnect_attempts must be -1 (unlimited) or positive"
            )
        if self.tls_enabled and self.tls_config is None:
            raise ConfigError("tls_config is required when TLS is enabled")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping")
        data = dict(data)
        for key in ("authenticator", "authenticators"):
            if data.get(key):
                data[key] = [
                    a if isinstance(a, AuthSpec) else AuthSpec.from_dict(a)
                    for a in data[key]
                ]
        for key in ("tlsConfig", "tls_config"):
            if isinstance(data.get(key), dict):
                data[key] = TLSSpec.from_dict(data[key])
        return super().from_dict(data)
