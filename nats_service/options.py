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

import os
import ssl
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from nats_service.auth import Authenticator, merge_connect_options
from nats_service.errors import ResolutionError


@dataclass(frozen=True)
class TLSOptions:
    """
    TLSOptions holds resolved PEM material for a TLS connection and,
    once resolved, the SSL context built from it.
    """
    handshake_first: bool = False
    cert: Optional[str] = field(default=None, repr=False)
    key: Optional[str] = field(default=None, repr=False)
    ca: Optional[str] = field(default=None, repr=False)
    context: Optional[ssl.SSLContext] = field(
        default=None, repr=False, compare=False
    )

    def ssl_context(self) -> ssl.SSLContext:
        """
        Builds the SSL context handed to the client. The system trust
        store is used unless a CA is given.
        """
        if (self.cert is None) != (self.key is None):
            raise ResolutionError(
                "client certificate and key must be given together"
            )

        try:
            if self.ca is not None:
                ctx = ssl.create_default_context(cadata=self.ca)
            else:
                ctx = ssl.create_default_context()

            if self.cert is not None and self.key is not None:
                # load_cert_chain only accepts paths.
                certfile = _write_private_tempfile(self.cert)
                keyfile = _write_private_tempfile(self.key)
                try:
                    ctx.load_cert_chain(certfile=certfile, keyfile=keyfile)
                finally:
                    os.unlink(certfile)
                    os.unlink(keyfile)
        except ssl.SSLError as e:
            raise ResolutionError(f"invalid TLS material: {e}") from e
        return ctx


def _write_private_tempfile(contents: str) -> str:
    fd, path = tempfile.mkstemp(suffix='.pem')
    with os.fdopen(fd, 'w', encoding='utf-8') as f:
        f.write(contents)
    return path


@dataclass(frozen=True)
class ConnectionOptions:
    """
    ConnectionOptions are the resolved parameters of a connection.
    """
    servers: Tuple[str, ...]
    no_randomize: bool = False
    reconnect: bool = True
    max_reconnect_attempts: int = -1
    authenticators: Tuple[Authenticator, ...] = ()
    tls: Optional[TLSOptions] = None
    name: Optional[str] = None
    no_async_traces: bool = False
    debug: bool = False

    def connect_kwargs(self) -> Dict[str, Any]:
        """
        Returns the keyword arguments for `nats.aio.client.Client.connect`.
        """
        kwargs: Dict[str, Any] = {
            "servers": list(self.servers),
            "dont_randomize": self.no_randomize,
            "allow_reconnect": self.reconnect,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "name": self.name,
        }
        kwargs.update(merge_connect_options(self.authenticators))
        if self.tls is not None:
            ctx = self.tls.context
            if ctx is None:
                ctx = self.tls.ssl_context()
            kwargs["tls"] = ctx
            kwargs["tls_handshake_first"] = self.tls.handshake_first
        return kwargs
