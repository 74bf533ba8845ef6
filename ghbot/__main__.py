import asyncio
import functools
import logging
import signal
import sys

import aiohttp
from dotenv import load_dotenv

from . import config as config_
from . import errors
from . import gateway as gateway_
from . import poller
from . import webhook

logger = logging.getLogger("ghbot")


def _on_signal(sig, stop):
    logger.info("Received %s, exiting.", sig.name)
    stop.set()


async def run(config):
    """Start the selected mode and run it until a signal arrives."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, functools.partial(_on_signal, sig, stop))

    async with aiohttp.ClientSession() as session:
        gateway = gateway_.GitHubGateway(session, config.token)
        # Fatal on a bad token, nothing else works without it.
        username = await gateway.current_user()
        logger.info("Bot started for user %s.", username)
        if config.webhook:
            worker = webhook.serve(gateway, username, port=config.port,
                                   secret=config.secret)
        else:
            worker = poller.run(gateway, username, config.interval)
        task = asyncio.ensure_future(worker)
        stopped = asyncio.ensure_future(stop.wait())
        done, _ = await asyncio.wait({task, stopped},
                                     return_when=asyncio.FIRST_COMPLETED)
        for pending in (task, stopped):
            pending.cancel()
        await asyncio.gather(task, stopped, return_exceptions=True)
        if task in done:
            task.result()


def main(argv=None):
    load_dotenv()
    config = config_.load_config(argv)
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(config))
    except errors.GatewayError as exc:
        logger.critical("Could not start: %s", exc)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
