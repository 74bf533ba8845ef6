import pytest

from ghbot import errors
from ghbot import models


class FakeGateway:
    """Stands in for ``GitHubGateway``, recording every call made to it."""

    def __init__(self, *, pages=None, pull_requests=None, delete=None):
        self._pages = pages or {}
        self._pull_requests = pull_requests or {}
        self._delete_return = delete
        self.list_calls = []
        self.getitem_calls = []
        self.delete_calls = []

    async def list_notifications(self, since, page=1, per_page=20):
        self.list_calls.append((since, page, per_page))
        return self._pages.get(page, models.NotificationPage(items=[]))

    async def get_pull_request(self, owner, repo, number):
        self.getitem_calls.append((owner, repo, number))
        to_return = self._pull_requests.get((owner, repo, number))
        if to_return is None:
            raise errors.NotFoundError(f"{owner}/{repo}#{number}")
        if isinstance(to_return, Exception):
            raise to_return
        return to_return

    async def delete_branch(self, owner, repo, ref):
        self.delete_calls.append((owner, repo, ref))
        to_return = self._delete_return
        if isinstance(to_return, list):
            to_return = to_return.pop(0) if to_return else None
        if isinstance(to_return, Exception):
            raise to_return


def make_pull_request(number=42, *, state="closed", merged=True,
                      owner="bot", repo="project", ref="feature-x"):
    head = {"ref": ref, "repo": None}
    if repo is not None:
        head["repo"] = {
            "name": repo,
            "full_name": f"{owner}/{repo}",
            "owner": {"login": owner},
        }
    return models.PullRequest.model_validate({
        "number": number,
        "state": state,
        "merged": merged,
        "head": head,
    })


def make_notification(number, *, owner="upstream", repo="project",
                      type="PullRequest"):
    return models.Notification.model_validate({
        "id": str(number),
        "subject": {
            "type": type,
            "url": f"https://api.github.com/repos/{owner}/{repo}/pulls/{number}",
        },
        "repository": {"name": repo, "owner": {"login": owner}},
    })


@pytest.fixture
def fake_gateway():
    return FakeGateway
