"""Poll the notification feed for merged pull requests.

Each tick drains the feed page by page since the watermark, resolves every
pull request notification into the full pull request and hands it to
``delete_branch.close_pr``.  The first failure ends the tick; the next tick
starts over from page 1.
"""
import asyncio
import datetime
import logging

from . import delete_branch
from . import errors

logger = logging.getLogger(__name__)

PER_PAGE = 20
PULL_REQUEST = "PullRequest"


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


async def iter_pages(fetcher, since, per_page=PER_PAGE):
    """Yield notification pages until one reports there is no next page."""
    page = 1
    while True:
        result = await fetcher.list_notifications(since, page=page,
                                                  per_page=per_page)
        yield result
        if not result.has_next:
            return
        page = result.next_page


def pull_request_number(subject_url):
    """The number at the end of a ``.../pulls/<number>`` API URL."""
    if not subject_url:
        raise ValueError("notification subject has no URL")
    last = subject_url.split("/")[-1]
    try:
        return int(last)
    except ValueError:
        raise ValueError(
            f"cannot find a pull request number in {subject_url!r}") from None


async def resolve(gateway, notification):
    """Fetch the pull request behind *notification*, if it is about one."""
    if notification.subject.type != PULL_REQUEST:
        return None
    number = pull_request_number(notification.subject.url)
    repository = notification.repository
    if repository.owner is None:
        raise ValueError(f"notification for {repository.name} has no owner")
    return await gateway.get_pull_request(repository.owner.login,
                                          repository.name, number)


async def poll(gateway, username, cursor=None, *, now=None, per_page=PER_PAGE):
    """Run one draining cycle and return ``(cursor, pull_requests)``.

    *cursor* is the watermark: notifications updated before it are not
    requested.  When it is unset it becomes *now*, so the first cycle only
    sees what happens after start-up.  The returned cursor is what the next
    cycle should pass back in; it does not move once set.
    """
    if cursor is None:
        cursor = now or utcnow()
    evaluated = []
    try:
        async for page in iter_pages(gateway, cursor, per_page):
            for notification in page.items:
                pull_request = await resolve(gateway, notification)
                if pull_request is None:
                    continue
                await delete_branch.close_pr(gateway, username, pull_request)
                evaluated.append(pull_request)
    except (errors.GatewayError, ValueError) as exc:
        logger.warning("Checking notifications failed: %s", exc)
    return cursor, evaluated


async def run(gateway, username, interval, *, per_page=PER_PAGE):
    """Poll every *interval* seconds until cancelled.

    A cycle that takes longer than *interval* pushes the next one back; cycles
    never overlap.
    """
    loop = asyncio.get_running_loop()
    cursor = None
    deadline = loop.time() + interval
    while True:
        await asyncio.sleep(max(0, deadline - loop.time()))
        cursor, pull_requests = await poll(gateway, username, cursor,
                                           per_page=per_page)
        logger.debug("Checked %d pull request(s) since %s",
                     len(pull_requests), cursor.isoformat())
        deadline = max(deadline + interval, loop.time())
