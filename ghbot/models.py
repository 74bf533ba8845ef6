"""Snapshots of the GitHub payloads the bot looks at.

Only the fields the bot needs are declared; everything else in the payload is
ignored.  Fields GitHub may leave out or null (a deleted head repository, a
notification subject without an API URL) are ``Optional``.
"""
from typing import List, Optional

from pydantic import BaseModel


class Owner(BaseModel):
    login: str


class Repository(BaseModel):
    name: str
    full_name: Optional[str] = None
    owner: Optional[Owner] = None


class Head(BaseModel):
    ref: str
    repo: Optional[Repository] = None


class PullRequest(BaseModel):
    number: int
    state: str
    merged: bool = False
    head: Head


class Subject(BaseModel):
    type: str
    url: Optional[str] = None


class Notification(BaseModel):
    subject: Subject
    repository: Repository


class NotificationPage(BaseModel):
    """One page of the notification feed."""

    items: List[Notification]
    next_page: Optional[int] = None

    @property
    def has_next(self):
        return self.next_page is not None


class CleanupEvent(BaseModel):
    """The parts of a ``pull_request`` webhook payload the bot uses."""

    action: str = ""
    pull_request: Optional[PullRequest] = None
    repository: Optional[Repository] = None
