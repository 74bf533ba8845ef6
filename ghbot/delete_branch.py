"""Delete the head branch of merged pull requests opened from our own repos."""
import logging
from typing import NamedTuple

import gidgethub.routing

from . import errors
from . import models

logger = logging.getLogger(__name__)

router = gidgethub.routing.Router()

DEFAULT_BRANCH = "master"


class Deletion(NamedTuple):
    owner: str
    repo: str
    ref: str


class Skip(NamedTuple):
    reason: str


def evaluate(pull_request, username):
    """Decide whether the head branch of *pull_request* should go.

    Returns a ``Deletion`` naming the ref to remove, or a ``Skip`` saying why
    the pull request was left alone.  Never selects the default branch or a
    repository owned by anyone but *username*.
    """
    if pull_request.state != "closed" or not pull_request.merged:
        return Skip(f"PR {pull_request.number} is not merged")
    repo = pull_request.head.repo
    if repo is None or repo.owner is None:
        return Skip(f"PR {pull_request.number} head repository is gone")
    if repo.owner.login != username:
        return Skip(f"PR {pull_request.number} head repository belongs to "
                    f"{repo.owner.login}")
    branch = pull_request.head.ref
    if branch == DEFAULT_BRANCH:
        return Skip(f"PR {pull_request.number} was opened from {DEFAULT_BRANCH}")
    return Deletion(owner=repo.owner.login, repo=repo.name,
                    ref=f"heads/{branch}")


async def close_pr(gateway, username, pull_request):
    """Delete the head branch of *pull_request* if ``evaluate`` says so.

    A branch that no longer exists counts as deleted, so calling this twice
    for the same pull request is harmless.  Other gateway errors propagate.
    """
    decision = evaluate(pull_request, username)
    if isinstance(decision, Skip):
        logger.debug("Skipping: %s", decision.reason)
        return decision
    branch = pull_request.head.ref
    try:
        await gateway.delete_branch(decision.owner, decision.repo, decision.ref)
    except errors.NotFoundError:
        logger.info("Branch %s on %s/%s no longer exists.",
                    branch, decision.owner, decision.repo)
    else:
        logger.info("Deleted branch %s on %s/%s (PR %d).",
                    branch, decision.owner, decision.repo, pull_request.number)
    return decision


@router.register("pull_request")
async def pull_request_event(event, gateway, username, *args, **kwargs):
    """Clean up after a pull request once GitHub reports it closed."""
    cleanup = models.CleanupEvent.model_validate(event.data)
    pull_request = cleanup.pull_request
    repository = cleanup.repository.full_name if cleanup.repository else "?"
    if pull_request is None:
        logger.info("Skipping pull_request event without a pull request "
                    "(delivery %s)", event.delivery_id)
        return
    if cleanup.action != "closed":
        logger.info("Skipping PR event, PR %d on %s state %s is not closed",
                    pull_request.number, repository, cleanup.action)
        return
    try:
        await close_pr(gateway, username, pull_request)
    except errors.GatewayError as exc:
        logger.error("Failed to clean up PR %d on %s: %s",
                     pull_request.number, repository, exc)
