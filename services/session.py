import logging
import time
from typing import Callable, Optional

from itsdangerous import BadData, URLSafeSerializer

from models.user import ANONYMOUS, Identity, User

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "ourSimpleApp"
SESSION_TTL_SECONDS = 60 * 60 * 24


class SessionCodec:
    """
    Issues and verifies signed session tokens.

    A token carries {userid, username, exp}; exp is an absolute epoch second.
    verify() never raises: any missing, tampered, malformed or expired token
    resolves to ANONYMOUS.
    """

    def __init__(self, secret: str, ttl_seconds: int = SESSION_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        if not secret:
            raise ValueError("A session secret is required")
        self.ttl_seconds = ttl_seconds
        self._serializer = URLSafeSerializer(secret, salt="session-cookie")
        self._clock = clock

    def issue(self, user: User, ttl_seconds: Optional[int] = None) -> str:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        payload = {
            "userid": user.user_id,
            "username": user.username,
            "exp": int(self._clock()) + ttl,
        }
        return self._serializer.dumps(payload)

    def verify(self, token: Optional[str]) -> Identity:
        if not token:
            return ANONYMOUS

        try:
            payload = self._serializer.loads(token)
        except BadData as e:
            logger.debug(f"Rejected session token: {e}")
            return ANONYMOUS

        if not isinstance(payload, dict):
            return ANONYMOUS

        user_id = payload.get("userid")
        username = payload.get("username")
        exp = payload.get("exp")
        # bool is an int subclass and must not pass as an id or expiry
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return ANONYMOUS
        if not isinstance(username, str) or not username:
            return ANONYMOUS
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return ANONYMOUS

        if exp <= self._clock():
            logger.debug("Rejected expired session token", extra={"user_id": user_id})
            return ANONYMOUS

        return User(user_id=user_id, username=username)
