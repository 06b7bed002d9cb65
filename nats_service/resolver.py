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
Turns a declarative `Config` into `ConnectionOptions`.

Only local files are read here, credential and certificate material is
never fetched over the network.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Optional

from nats_service.auth import (
    Authenticator,
    creds_authenticator,
    nkey_authenticator,
    token_authenticator,
    user_password_authenticator,
)
from nats_service.config import (
    AuthSpec,
    Config,
    CredsFileAuth,
    NKeyAuth,
    TLSSpec,
    TokenAuth,
    UserPassAuth,
)
from nats_service.errors import ResolutionError
from nats_service.options import ConnectionOptions, TLSOptions

_logger = logging.getLogger(__name__)


async def _read_file(path: str) -> bytes:
    # Delegate to a threaded executor to avoid blocking the loop.
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, Path(path).read_bytes)
    except OSError as e:
        raise ResolutionError(e.strerror or str(e), path=path) from e


async def _read_text(path: str) -> str:
    data = await _read_file(path)
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ResolutionError(str(e), path=path) from e


async def resolve_authenticator(spec: AuthSpec) -> Authenticator:
    if isinstance(spec, TokenAuth):
        return token_authenticator(spec.auth_token)
    elif isinstance(spec, UserPassAuth):
        return user_password_authenticator(spec.user, spec.password)
    elif isinstance(spec, NKeyAuth):
        return nkey_authenticator(spec.nkey_seed.encode('utf-8'))
    elif isinstance(spec, CredsFileAuth):
        creds = await _read_file(spec.creds_file)
        return creds_authenticator(creds)
    raise ResolutionError(f"unsupported authenticator: {type(spec).__name__}")


async def _resolve_slot(path: Optional[str],
                        inline: Optional[str]) -> Optional[str]:
    if path:
        return await _read_text(path)
    elif inline:
        return inline
    return None


async def resolve_tls(spec: TLSSpec) -> TLSOptions:
    """
    Reads the TLS material and builds the SSL context from it, so that
    unusable material fails here rather than when connecting.
    """
    cert, key, ca = await asyncio.gather(
        _resolve_slot(spec.cert_file, spec.cert),
        _resolve_slot(spec.key_file, spec.key),
        _resolve_slot(spec.ca_file, spec.ca),
    )
    tls = TLSOptions(
        handshake_first=spec.handshake_first,
        cert=cert,
        key=key,
        ca=ca,
    )
    # Loading the cert chain goes through temporary files.
    loop = asyncio.get_running_loop()
    ctx = await loop.run_in_executor(None, tls.ssl_context)
    return dataclasses.replace(tls, context=ctx)


async def resolve(config: Config) -> ConnectionOptions:
    """
    Resolves the configuration into the options used to connect.

    Authenticators are resolved concurrently and returned in the same
    order as configured. Any failure aborts the whole resolution with
    a `ResolutionError`.
    """
    authenticators = ()
    if config.authenticators:
        # First failure is raised, partial results are dropped.
        authenticators = tuple(
            await asyncio.gather(
                *[resolve_authenticator(a) for a in config.authenticators]
            )
        )

    tls = None
    if config.tls_enabled and config.tls_config is not None:
        tls = await resolve_tls(config.tls_config)

    _logger.debug(
        "Resolved options for %s with %d authenticator(s), tls=%s",
        config.servers, len(authenticators), tls is not None
    )
    return ConnectionOptions(
        servers=tuple(config.servers),
        no_randomize=config.no_randomize,
        reconnect=config.reconnect,
        max_reconnect_attempts=config.max_reconnect_attempts,
        authenticators=authenticators,
        tls=tls,
        name=config.name,
        no_async_traces=config.no_async_traces,
        debug=config.debug,
    )
