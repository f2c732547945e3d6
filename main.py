import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request

from config import Settings, get_settings
from context import IdentityLogFilter, RequestContextMiddleware
from routes.auth import router as auth_router
from routes.posts import router as posts_router
from services.authorization import AccessDenied
from services.database import BlogDB
from services.session import SessionCodec
from utils.errors import BlogError
from utils.observability import setup_logging
from utils.rendering import redirect, render

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, db: Optional[BlogDB] = None) -> FastAPI:
    """
    Build the application.

    The store and the session codec are owned by the app instance and handed
    to handlers through dependencies, so tests can pass an isolated store.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format, filters=[IdentityLogFilter()])
        owns_db = db is None
        store = db or BlogDB.from_url(settings.database_url)
        store.create_tables()

        app.state.settings = settings
        app.state.db = store
        app.state.session_codec = SessionCodec(settings.session_secret, settings.session_ttl_seconds)
        logger.info("Blog started")

        yield
        # Cleanup resources
        if owns_db:
            store.close()
        logger.info("Blog shutting down")

    app = FastAPI(lifespan=lifespan)

    # middleware to resolve the session cookie into an identity
    app.add_middleware(RequestContextMiddleware)

    # Include routers
    app.include_router(auth_router, tags=["auth"])
    app.include_router(posts_router, tags=["posts"])

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied):
        """Guard failures and missing posts are silent redirects home"""
        logger.info(
            f"Access denied on {request.url.path}",
            extra={"reason": exc.outcome.value, "post_id": exc.post_id, "path": request.url.path},
        )
        return redirect("/")

    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError):
        logger.error(
            f"BlogError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return render(request, "error.html", status_code=exc.http_status)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: log it, never leak internals"""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return render(request, "error.html", status_code=500)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
