from typing import Union

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """Authenticated identity decoded from a session token."""
    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str


class Anonymous(BaseModel):
    """No valid session on the request."""
    model_config = ConfigDict(frozen=True)


ANONYMOUS = Anonymous()

Identity = Union[User, Anonymous]


class StoredUser(BaseModel):
    id: int
    username: str
    password: str
