import logging
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from models.user import ANONYMOUS, Identity, User
from services.session import SESSION_COOKIE_NAME

logger = logging.getLogger(__name__)

identity_context: ContextVar[Identity] = ContextVar("identity_context", default=ANONYMOUS)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Resolves the session cookie into an identity for every request.

    The identity lands on request.state.identity and in identity_context.
    A missing codec or a bad cookie degrades to ANONYMOUS.
    """

    async def dispatch(self, request: Request, call_next):
        codec = getattr(request.app.state, "session_codec", None)
        token = request.cookies.get(SESSION_COOKIE_NAME)
        identity = codec.verify(token) if codec is not None else ANONYMOUS

        request.state.identity = identity
        logger.debug(f"{request.method} {request.url.path} as {identity!r}")

        context_token = identity_context.set(identity)
        try:
            return await call_next(request)
        finally:
            identity_context.reset(context_token)


class IdentityLogFilter(logging.Filter):
    """Tags log records emitted during a request with the caller's user id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "user_id", None) is None:
            identity = identity_context.get()
            if isinstance(identity, User):
                record.user_id = identity.user_id
        return True
