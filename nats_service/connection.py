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
Adapter exposing the callbacks of `nats.aio.client.Client` as a status
stream plus a single closed signal.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Optional

from nats import errors as nats_errors
from nats.aio.client import Client as NATS

from nats_service.errors import ConnectError
from nats_service.options import ConnectionOptions
from nats_service.status import StatusEvent, StatusType

_logger = logging.getLogger(__name__)

# Each server is tried twice at most, the lowest bound the client honours.
INITIAL_CONNECT_POLICY = {
    "allow_reconnect": False,
    "max_reconnect_attempts": 1,
}


class Connection:
    """
    Connection owns one NATS client and reports its lifecycle.

    ::

        conn = await connect(options)
        async for event in conn.status():
            print(event)

    """

    def __init__(
        self,
        options: ConnectionOptions,
        client: Optional[NATS] = None,
    ) -> None:
        self._options = options
        self._nc = client if client is not None else NATS()
        loop = asyncio.get_running_loop()
        self._status_queue: asyncio.Queue[StatusEvent] = asyncio.Queue()
        self._closed: asyncio.Future[Optional[BaseException]
                                     ] = loop.create_future()
        self._draining = False

    @property
    def nc(self) -> NATS:
        """
        The underlying client, used to publish, subscribe and request.
        """
        return self._nc

    @property
    def options(self) -> ConnectionOptions:
        return self._options

    @property
    def is_closed(self) -> bool:
        return self._closed.done()

    def report(self, event: StatusEvent) -> None:
        """
        Adds an event to the status stream. The client callbacks use it
        and callers may too, for events the client has no callback for.
        """
        if self._options.debug:
            _logger.debug("Status event: %s", event.as_dict())
        self._status_queue.put_nowait(event)

    async def status(self) -> AsyncIterator[StatusEvent]:
        """
        Live stream of non-terminal status events. It never ends on its
        own and is meant to have a single consumer.
        """
        while True:
            yield await self._status_queue.get()

    def closed(self) -> Awaitable[Optional[BaseException]]:
        """
        Future resolved once the connection is closed, with the error
        that caused it if any.
        """
        return self._closed

    async def drain(self) -> None:
        """
        Flushes in-flight messages, then closes the connection.
        """
        self._draining = True
        try:
            await self._nc.drain()
        except nats_errors.ConnectionClosedError:
            pass
        except nats_errors.ConnectionReconnectingError:
            # Nothing can be flushed while the link is down.
            await self._nc.close()

    async def _connect(self) -> None:
        kwargs = self._options.connect_kwargs()
        # The client retries the first connect forever when attempts are
        # unlimited, so the reconnect policy is only applied once connected.
        kwargs.update(INITIAL_CONNECT_POLICY)
        try:
            await self._nc.connect(
                error_cb=self._error_cb,
                disconnected_cb=self._disconnected_cb,
                reconnected_cb=self._reconnected_cb,
                discovered_server_cb=self._discovered_server_cb,
                closed_cb=self._closed_cb,
                **kwargs,
            )
        except Exception as e:
            raise ConnectError(str(e) or type(e).__name__) from e

        self._nc.options["allow_reconnect"] = self._options.reconnect
        self._nc.options["max_reconnect_attempts"
                         ] = self._options.max_reconnect_attempts

    async def _error_cb(self, e: Exception) -> None:
        if isinstance(e, nats_errors.StaleConnectionError):
            self.report(StatusEvent(StatusType.STALE_CONNECTION, error=e))
        else:
            self.report(StatusEvent(StatusType.ERROR, error=e))

    async def _disconnected_cb(self) -> None:
        # Closing also fires this callback, the closed signal covers it.
        if self._draining or self._nc.is_closed:
            return
        self.report(StatusEvent(StatusType.DISCONNECT))
        if self._nc.is_reconnecting:
            self.report(StatusEvent(StatusType.RECONNECTING))

    async def _reconnected_cb(self) -> None:
        url = self._nc.connected_url
        self.report(
            StatusEvent(
                StatusType.RECONNECT,
                data=url.netloc if url is not None else None
            )
        )

    async def _discovered_server_cb(self) -> None:
        self.report(
            StatusEvent(StatusType.UPDATE, data=self._nc.discovered_servers)
        )

    async def _closed_cb(self) -> None:
        if self._closed.done():
            return
        err = None if self._draining else self._nc.last_error
        self._closed.set_result(err)


async def connect(
    options: ConnectionOptions,
    client: Optional[NATS] = None,
) -> Connection:
    """
    Opens a connection with the resolved options.

    :param options: Resolved connection options.
    :param client: Client to use instead of a new `nats.aio.client.Client`.
    :raises ConnectError: The connection could not be established.
    """
    conn = Connection(options, client)
    _logger.debug("Connecting to %s", ", ".join(options.servers))
    await conn._connect()
    return conn
