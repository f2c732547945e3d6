from typing import Annotated

from fastapi import Request, Depends

from config import Settings
from models.user import ANONYMOUS, Identity, User
from services.authorization import authorize, require
from services.database import BlogDB
from services.session import SessionCodec


async def get_app_settings(request: Request) -> Settings:
    """Get settings the app was created with"""
    return request.app.state.settings


async def get_db(request: Request) -> BlogDB:
    """Get the blog store from app state"""
    return request.app.state.db


async def get_session_codec(request: Request) -> SessionCodec:
    """Get the session codec from app state"""
    return request.app.state.session_codec


async def get_identity(request: Request) -> Identity:
    """Identity resolved by RequestContextMiddleware, anonymous when absent"""
    return getattr(request.state, "identity", ANONYMOUS)


async def get_current_user(identity: Identity = Depends(get_identity)) -> User:
    """
    Login guard: lets the request through only with a valid session.
    Anonymous callers get AccessDenied, which redirects them home.
    """
    require(authorize(identity))
    return identity


# Type annotations for dependency injection
AppSettings = Annotated[Settings, Depends(get_app_settings)]
BlogStore = Annotated[BlogDB, Depends(get_db)]
Codec = Annotated[SessionCodec, Depends(get_session_codec)]
CurrentIdentity = Annotated[Identity, Depends(get_identity)]
CurrentUser = Annotated[User, Depends(get_current_user)]
