import asyncio
import json
import logging
import signal

from nats_service import Config, ConnectionSupervisor

from common import args


async def main():
    arguments, _ = args.get_args("Supervise a NATS connection until interrupted.")
    logging.basicConfig(
        level=logging.DEBUG if arguments.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if arguments.config:
        with open(arguments.config) as f:
            config = Config.from_dict(json.load(f))
    else:
        config = Config(servers=arguments.servers, debug=arguments.debug)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    async with ConnectionSupervisor(config) as sup:
        async def handler(msg):
            await msg.respond(b'OK')

        await sup.nc.subscribe('help.please', cb=handler)
        await shutdown.wait()

if __name__ == '__main__':
    asyncio.run(main())
