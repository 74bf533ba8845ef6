"""Receive GitHub webhook deliveries and route them to the branch cleaner.

Only deliveries formatted the way GitHub sends them are accepted: a JSON body
with ``Content-Type``, ``X-GitHub-Event`` and ``X-GitHub-Delivery`` headers.
Anything else gets a 400.
"""
import asyncio
import logging

from aiohttp import web
import gidgethub
from gidgethub import routing
from gidgethub import sansio
import pydantic

from . import delete_branch

logger = logging.getLogger(__name__)

router = routing.Router(delete_branch.router)

GATEWAY = web.AppKey("gateway", object)
USERNAME = web.AppKey("username", str)
SECRET = web.AppKey("secret", object)


async def handler(request):
    body = await request.read()
    try:
        event = sansio.Event.from_http(request.headers, body,
                                       secret=request.app[SECRET])
    except gidgethub.ValidationFailure as exc:
        logger.warning("Rejecting delivery with a bad signature: %s", exc)
        return web.Response(status=401)
    except (gidgethub.BadRequest, KeyError, ValueError) as exc:
        logger.warning("Rejecting undecodable delivery: %r", exc)
        return web.Response(status=400)
    logger.debug("GH delivery ID %s, event %s", event.delivery_id, event.event)
    if event.event == "ping":
        return web.Response(status=200)
    if event.event != "pull_request":
        logger.debug("Skipping non PR event %s", event.event)
        return web.Response(status=200)
    try:
        await router.dispatch(event, request.app[GATEWAY], request.app[USERNAME])
    except pydantic.ValidationError as exc:
        logger.warning("Rejecting malformed pull_request payload: %s", exc)
        return web.Response(status=400)
    except Exception:
        logger.exception("Handling delivery %s failed", event.delivery_id)
        return web.Response(status=500)
    return web.Response(status=200)


async def create_app(*, gateway, username, secret=None):
    app = web.Application()
    app[GATEWAY] = gateway
    app[USERNAME] = username
    app[SECRET] = secret
    app.add_routes([web.post("/", handler)])
    return app


async def serve(gateway, username, *, port=8080, secret=None):
    """Serve webhooks on *port* until cancelled."""
    app = await create_app(gateway=gateway, username=username, secret=secret)
    runner = web.AppRunner(app)
    await runner.setup()
    try:
        site = web.TCPSite(runner, port=port)
        await site.start()
        logger.info("Listening for webhooks on port %d", port)
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
