import re
from dataclasses import dataclass, field
from typing import Any, List

import bleach

from services.database import BlogDB

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 10
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 20

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9]+")

INVALID_CREDENTIALS = "Invalid username/password"
USERNAME_TAKEN = "Username is already taken."


@dataclass
class PostInput:
    title: str
    content: str
    errors: List[str] = field(default_factory=list)


@dataclass
class CommentInput:
    content: str
    errors: List[str] = field(default_factory=list)


@dataclass
class Credentials:
    username: str
    password: str
    errors: List[str] = field(default_factory=list)


def as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def sanitize_text(value: Any) -> str:
    """Strip every tag and attribute from user text. Sanitizing twice is a no-op."""
    cleaned = bleach.clean(as_text(value).strip(), tags=set(), attributes={}, strip=True)
    return cleaned.strip()


def validate_post(title: Any, body: Any) -> PostInput:
    post = PostInput(title=sanitize_text(title), content=sanitize_text(body))
    if not post.title:
        post.errors.append("You must provide a title.")
    if not post.content:
        post.errors.append("You must provide content.")
    return post


def validate_comment(body: Any) -> CommentInput:
    comment = CommentInput(content=sanitize_text(body))
    if not comment.content:
        comment.errors.append("You must provide a comment.")
    return comment


def validate_registration(username: Any, password: Any, db: BlogDB) -> Credentials:
    """Collect every username/password problem, including a taken username."""
    creds = Credentials(username=as_text(username).strip(), password=as_text(password))
    errors = creds.errors

    name = creds.username
    if not name:
        errors.append("You must provide a username.")
    else:
        if len(name) < USERNAME_MIN_LENGTH:
            errors.append(f"Your username must have at least {USERNAME_MIN_LENGTH} characters.")
        if len(name) > USERNAME_MAX_LENGTH:
            errors.append(f"Your username can have max {USERNAME_MAX_LENGTH} characters.")
        if not USERNAME_PATTERN.fullmatch(name):
            errors.append("Username can only contain letters and numbers.")

    pw = creds.password
    if not pw:
        errors.append("You must provide a password.")
    else:
        if len(pw) < PASSWORD_MIN_LENGTH:
            errors.append(f"Your password must have at least {PASSWORD_MIN_LENGTH} characters.")
        if len(pw) > PASSWORD_MAX_LENGTH:
            errors.append(f"Your password can have max {PASSWORD_MAX_LENGTH} characters.")

    if name and db.username_exists(name):
        errors.append(USERNAME_TAKEN)

    return creds


def validate_login(username: Any, password: Any) -> Credentials:
    creds = Credentials(username=as_text(username).strip(), password=as_text(password))
    if not creds.username or not creds.password:
        creds.errors = [INVALID_CREDENTIALS]
    return creds
