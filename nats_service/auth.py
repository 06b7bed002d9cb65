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
from typing import Any, Dict, Iterable, Optional, Union

import nkeys
from nats.aio.client import RawCredentials

from nats_service.errors import ResolutionError

_logger = logging.getLogger(__name__)


class Authenticator:
    """
    Authenticator presents one set of credentials to the server by
    contributing keyword arguments to `nats.aio.client.Client.connect`.
    """

    def connect_options(self) -> Dict[str, Any]:
        raise NotImplementedError


class TokenAuthenticator(Authenticator):

    def __init__(self, token: str) -> None:
        self._token = token

    def connect_options(self) -> Dict[str, Any]:
        return {"token": self._token}

    def __repr__(self) -> str:
        return "<TokenAuthenticator>"


class UserPasswordAuthenticator(Authenticator):

    def __init__(self, user: str, password: Optional[str] = None) -> None:
        self.user = user
        self._password = password

    def connect_options(self) -> Dict[str, Any]:
        opts: Dict[str, Any] = {"user": self.user}
        if self._password is not None:
            opts["password"] = self._password
        return opts

    def __repr__(self) -> str:
        return f"<UserPasswordAuthenticator user={self.user}>"


class NKeyAuthenticator(Authenticator):
    """
    Signs the server nonce with a user nkey seed.
    """

    def __init__(self, seed: Union[bytes, bytearray]) -> None:
        try:
            kp = nkeys.from_seed(bytearray(seed))
        except (nkeys.NkeysError, ValueError) as e:
            raise ResolutionError(f"invalid nkey seed: {e}") from e
        self.public_key = kp.public_key.decode()

        # Best effort attempt to clear from memory.
        kp.wipe()
        del kp
        self._seed = bytes(seed)

    def connect_options(self) -> Dict[str, Any]:
        return {"nkeys_seed_str": self._seed.decode()}

    def __repr__(self) -> str:
        return f"<NKeyAuthenticator public_key={self.public_key}>"


class CredsAuthenticator(Authenticator):
    """
    Authenticates with a user JWT and nkey seed taken from the contents
    of a credentials file.
    """

    def __init__(self, creds: Union[bytes, bytearray]) -> None:
        try:
            self._creds = bytes(creds).decode()
        except UnicodeDecodeError as e:
            raise ResolutionError(f"invalid credentials: {e}") from e
        if 'BEGIN NATS USER JWT' not in self._creds:
            raise ResolutionError("invalid credentials: user JWT not found")

    def connect_options(self) -> Dict[str, Any]:
        return {"user_credentials": RawCredentials(self._creds)}

    def __repr__(self) -> str:
        return "<CredsAuthenticator>"


def token_authenticator(token: str) -> Authenticator:
    return TokenAuthenticator(token)


def user_password_authenticator(
    user: str, password: Optional[str] = None
) -> Authenticator:
    return UserPasswordAuthenticator(user, password)


def nkey_authenticator(seed: Union[bytes, bytearray]) -> Authenticator:
    return NKeyAuthenticator(seed)


def creds_authenticator(creds: Union[bytes, bytearray]) -> Authenticator:
    return CredsAuthenticator(creds)


def merge_connect_options(
    authenticators: Iterable[Authenticator]
) -> Dict[str, Any]:
    """
    Combines the connect arguments of several authenticators. When two
    of them set the same argument the first one wins.
    """
    opts: Dict[str, Any] = {}
    for auth in authenticators:
        for k, v in auth.connect_options().items():
            if k in opts:
                _logger.warning(
                    "Ignoring '%s' from %r, already set by an earlier authenticator",
                    k, auth
                )
                continue
            opts[k] = v
    return opts
