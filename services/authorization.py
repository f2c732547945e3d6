from enum import Enum
from typing import Optional

from models.post import Post
from models.user import Identity, User


class AccessOutcome(str, Enum):
    ALLOWED = "allowed"
    ANONYMOUS = "anonymous"
    NOT_FOUND = "not_found"
    NOT_AUTHOR = "not_author"


class AccessDenied(Exception):
    """A guarded request may not proceed. Answered with a silent redirect home."""

    def __init__(self, outcome: AccessOutcome, post_id: Optional[int] = None):
        super().__init__(outcome.value)
        self.outcome = outcome
        self.post_id = post_id


def authorize(identity: Identity) -> AccessOutcome:
    if isinstance(identity, User):
        return AccessOutcome.ALLOWED
    return AccessOutcome.ANONYMOUS


def check_ownership(post: Optional[Post], identity: Identity) -> AccessOutcome:
    """Only a post's author may edit or delete it."""
    if post is None:
        return AccessOutcome.NOT_FOUND
    if not isinstance(identity, User):
        return AccessOutcome.ANONYMOUS
    if post.author_id != identity.user_id:
        return AccessOutcome.NOT_AUTHOR
    return AccessOutcome.ALLOWED


def require(outcome: AccessOutcome, post_id: Optional[int] = None):
    if outcome is not AccessOutcome.ALLOWED:
        raise AccessDenied(outcome, post_id)
