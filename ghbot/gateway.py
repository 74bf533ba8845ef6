"""Everything that talks to the GitHub API."""
import asyncio
import contextlib
import http
import logging
from urllib.parse import quote

import aiohttp
import cachetools
import gidgethub
from gidgethub import aiohttp as gh_aiohttp
from gidgethub import sansio
import yarl

from . import errors
from . import models

logger = logging.getLogger(__name__)

REQUESTER = "ghbot"
NOTIFICATIONS_URL = "/notifications{?all,since,page,per_page}"

cache = cachetools.LRUCache(maxsize=500)


@contextlib.contextmanager
def translate_errors():
    """Re-raise transport and gidgethub failures as ``errors.GatewayError``."""
    try:
        yield
    except gidgethub.RateLimitExceeded as exc:
        raise errors.TransientError(str(exc)) from exc
    except gidgethub.BadRequest as exc:
        if exc.status_code == http.HTTPStatus.UNAUTHORIZED:
            raise errors.AuthError(str(exc)) from exc
        if exc.status_code == http.HTTPStatus.NOT_FOUND:
            raise errors.NotFoundError(str(exc)) from exc
        raise errors.GatewayError(str(exc)) from exc
    except gidgethub.GitHubBroken as exc:
        raise errors.TransientError(str(exc)) from exc
    except gidgethub.GitHubException as exc:
        raise errors.GatewayError(str(exc)) from exc
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise errors.TransientError(str(exc) or type(exc).__name__) from exc


def next_page_number(next_url):
    """Pull the ``page`` query parameter out of a ``Link: rel="next"`` URL."""
    if not next_url:
        return None
    page = yarl.URL(next_url).query.get("page")
    if page is None:
        return None
    return int(page)


def format_since(since):
    return since.strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubGateway:
    """Authenticated access to the handful of endpoints the bot needs."""

    def __init__(self, session, oauth_token, *, requester=REQUESTER,
                 base_url=sansio.DOMAIN, cache=cache):
        self._session = session
        self._oauth_token = oauth_token
        self._requester = requester
        self._base_url = base_url
        self.gh = gh_aiohttp.GitHubAPI(session, requester,
                                       oauth_token=oauth_token,
                                       cache=cache,
                                       base_url=base_url)

    def _log_rate_limit(self, rate_limit=None):
        rate_limit = rate_limit or self.gh.rate_limit
        if rate_limit is not None:
            logger.debug("GH requests remaining: %s", rate_limit.remaining)

    async def current_user(self):
        """Return the login of the account owning the token."""
        with translate_errors():
            user = await self.gh.getitem("/user")
        self._log_rate_limit()
        return user["login"]

    async def list_notifications(self, since, page=1, per_page=20):
        """Fetch one page of notifications updated at or after *since*."""
        url = sansio.format_url(NOTIFICATIONS_URL, {
            "all": "true",
            "since": format_since(since),
            "page": page,
            "per_page": per_page,
        }, base_url=self._base_url)
        headers = sansio.create_headers(self._requester,
                                        oauth_token=self._oauth_token)
        with translate_errors():
            async with self._session.get(url, headers=headers) as response:
                body = await response.read()
                data, rate_limit, more = sansio.decipher_response(
                    response.status, response.headers, body)
        self._log_rate_limit(rate_limit)
        return models.NotificationPage(
            items=[models.Notification.model_validate(item) for item in data],
            next_page=next_page_number(more),
        )

    async def get_pull_request(self, owner, repo, number):
        with translate_errors():
            data = await self.gh.getitem(
                "/repos/{owner}/{repo}/pulls/{number}",
                {"owner": owner, "repo": repo, "number": number})
        self._log_rate_limit()
        return models.PullRequest.model_validate(data)

    async def delete_branch(self, owner, repo, ref):
        """Delete ``refs/<ref>``, e.g. ``ref="heads/feature-x"``.

        A reference that is already gone raises ``errors.NotFoundError``.
        GitHub answers 422 rather than 404 for that case.
        """
        # Braces would otherwise be expanded as URI template variables.
        url = "/repos/{}/{}/git/refs/{}".format(
            quote(owner, safe=""), quote(repo, safe=""), quote(ref, safe="/"))
        with translate_errors():
            try:
                await self.gh.delete(url)
            except gidgethub.BadRequest as exc:
                if exc.status_code == http.HTTPStatus.UNPROCESSABLE_ENTITY:
                    raise errors.NotFoundError(str(exc)) from exc
                raise
        self._log_rate_limit()
