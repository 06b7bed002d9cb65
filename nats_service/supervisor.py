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

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from nats.aio.client import Client as NATS

from nats_service.config import Config
from nats_service.connection import Connection, connect
from nats_service.errors import NotConnectedError
from nats_service.options import ConnectionOptions
from nats_service.resolver import resolve
from nats_service.status import ClosedEvent, StatusEvent, log_record_for

_logger = logging.getLogger(__name__)

Connector = Callable[[ConnectionOptions], Awaitable[Connection]]


class ConnectionSupervisor:
    """
    ConnectionSupervisor owns at most one NATS connection, opens it on
    `start`, drains it on `stop` and logs every lifecycle event reported
    by the connection while it is alive.

    ::

        import asyncio
        from nats_service import Config, ConnectionSupervisor

        async def main():
            config = Config(servers=["nats://127.0.0.1:4222"])
            async with ConnectionSupervisor(config) as sup:
                await sup.nc.publish("greet", b"hello")

        if __name__ == '__main__':
            asyncio.run(main())

    """

    def __init__(
        self,
        config: Config,
        connector: Optional[Connector] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.client: Optional[Connection] = None
        self._connector: Connector = connector or connect
        self._logger = logger or _logger
        self._status_task: Optional[asyncio.Task] = None

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    @property
    def nc(self) -> NATS:
        """
        The underlying NATS client of the live connection.
        """
        if self.client is None:
            raise NotConnectedError
        return self.client.nc

    @property
    def status_task(self) -> Optional[asyncio.Task]:
        return self._status_task

    async def start(self) -> None:
        """
        Resolves the configuration and connects. Calling it while a
        connection is live only logs a warning.

        :raises ResolutionError: Credential or TLS material is unreadable.
        :raises ConnectError: The connection could not be established.
        """
        if self.client is not None:
            self._logger.warning(
                "NATS client is already connected, not starting again"
            )
            return

        self._logger.info(
            "Connecting to NATS servers: %s", ", ".join(self.config.servers)
        )
        try:
            options = await resolve(self.config)
            client = await self._connector(options)
        except Exception as e:
            self._logger.error("Failed to connect to NATS: %s", e)
            self.client = None
            raise

        self.client = client
        self._logger.info("Connected to NATS")
        self._status_task = asyncio.get_running_loop().create_task(
            self._handle_status_updates(client)
        )

    async def stop(self) -> None:
        """
        Drains the connection, returning once pending messages have been
        flushed and the connection closed. The connection is released
        even if draining fails, and the error is raised.
        """
        client = self.client
        if client is None:
            return

        self._logger.info("Closing NATS connection...")
        try:
            await client.drain()
        finally:
            if self.client is client:
                self.client = None

    async def __aenter__(self) -> ConnectionSupervisor:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _handle_status_updates(self, client: Connection) -> None:
        closed = client.closed()
        closed_fut = asyncio.ensure_future(closed)
        status_iter: Optional[AsyncIterator] = client.status().__aiter__()
        next_status: Optional[asyncio.Future] = None
        try:
            while True:
                if next_status is None and status_iter is not None:
                    next_status = asyncio.ensure_future(status_iter.__anext__())
                pending = {closed_fut}
                if next_status is not None:
                    pending.add(next_status)
                await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

                event: Union[StatusEvent, ClosedEvent]
                if next_status is not None and next_status.done():
                    try:
                        event = next_status.result()
                    except StopAsyncIteration:
                        # Stream is over, only the closed signal is left.
                        status_iter = None
                        next_status = None
                        continue
                    next_status = None
                else:
                    event = ClosedEvent(closed_fut.result())

                if isinstance(event, ClosedEvent):
                    self._handle_closed(client, event)
                    break
                self._log_status(event)
        except Exception:
            self._logger.exception("NATS status listener exited unexpectedly")
        finally:
            if next_status is not None and not next_status.done():
                next_status.cancel()
                await asyncio.wait([next_status])
            if status_iter is not None:
                await status_iter.aclose()
            if closed_fut is not closed and not closed_fut.done():
                closed_fut.cancel()

    def _handle_closed(self, client: Connection, event: ClosedEvent) -> None:
        if event.err is not None:
            self._logger.error(
                "NATS connection closed with error: %s",
                event.err,
                extra={"nats_status": event.as_dict()},
            )
        else:
            self._logger.info(
                "NATS connection closed",
                extra={"nats_status": event.as_dict()},
            )
        if self.client is client:
            self.client = None

    def _log_status(self, event: StatusEvent) -> None:
        level, msg, args = log_record_for(event)
        self._logger.log(
            level, msg, *args, extra={"nats_status": event.as_dict()}
        )
