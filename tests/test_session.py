"""Session codec: signed tokens with a fixed lifetime, never raising on bad input."""

import pytest
from itsdangerous import URLSafeSerializer

from models.user import ANONYMOUS, User
from services.session import SESSION_TTL_SECONDS, SessionCodec

ALICE = User(user_id=1, username="alice")


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_issue_then_verify_returns_identity(codec):
    token = codec.issue(ALICE)
    assert codec.verify(token) == ALICE


@pytest.mark.parametrize("token", [None, "", "not-a-token", "abc.def"])
def test_missing_or_garbage_token_is_anonymous(codec, token):
    assert codec.verify(token) == ANONYMOUS


def test_tampered_token_is_anonymous(codec):
    token = codec.issue(ALICE)
    _, signature = token.rsplit(".", 1)
    forged_payload = URLSafeSerializer("x", salt="session-cookie").dumps(
        {"userid": 2, "username": "bob", "exp": 9999999999}
    ).rsplit(".", 1)[0]
    tampered = f"{forged_payload}.{signature}"
    assert codec.verify(tampered) == ANONYMOUS


def test_token_signed_with_another_secret_is_anonymous(codec):
    other = SessionCodec("another-secret")
    assert codec.verify(other.issue(ALICE)) == ANONYMOUS


@pytest.mark.parametrize("payload", [
    [1, "alice"],
    {"username": "alice", "exp": 9999999999},
    {"userid": "1", "username": "alice", "exp": 9999999999},
    {"userid": True, "username": "alice", "exp": 9999999999},
    {"userid": 1, "username": "", "exp": 9999999999},
    {"userid": 1, "username": "alice"},
    {"userid": 1, "username": "alice", "exp": "tomorrow"},
])
def test_correctly_signed_but_malformed_payload_is_anonymous(codec, payload):
    forged = URLSafeSerializer("test-secret", salt="session-cookie").dumps(payload)
    assert codec.verify(forged) == ANONYMOUS


def test_token_expires_after_24_hours():
    clock = FakeClock(1_700_000_000)
    codec = SessionCodec("test-secret", clock=clock)
    token = codec.issue(ALICE)

    clock.now += SESSION_TTL_SECONDS - 1
    assert codec.verify(token) == ALICE

    clock.now += 2
    assert codec.verify(token) == ANONYMOUS


def test_custom_ttl_per_token():
    clock = FakeClock(1_700_000_000)
    codec = SessionCodec("test-secret", clock=clock)
    token = codec.issue(ALICE, ttl_seconds=60)

    clock.now += 61
    assert codec.verify(token) == ANONYMOUS


def test_empty_secret_is_rejected():
    with pytest.raises(ValueError):
        SessionCodec("")
