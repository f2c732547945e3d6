import logging
from typing import Annotated

from fastapi import APIRouter, Form, Request
from starlette.responses import Response

from config import Settings
from dependencies import AppSettings, BlogStore, Codec
from models.user import User
from services.passwords import hash_password, verify_password
from services.session import SESSION_COOKIE_NAME
from services.validation import INVALID_CREDENTIALS, USERNAME_TAKEN, validate_login, validate_registration
from utils.errors import UsernameTakenError
from utils.rendering import redirect, render

logger = logging.getLogger(__name__)

router = APIRouter()


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


@router.get("/login")
async def login_form(request: Request):
    return render(request, "login.html")


@router.post("/login")
async def login(
        request: Request,
        db: BlogStore,
        codec: Codec,
        settings: AppSettings,
        username: Annotated[str, Form()] = "",
        password: Annotated[str, Form()] = "",
):
    """Log in with username and password; every failure gets the same message"""
    creds = validate_login(username, password)
    if creds.errors:
        return render(request, "login.html", errors=creds.errors, username=creds.username)

    stored = db.get_user_by_username(creds.username)
    # Unknown user and wrong password must be indistinguishable
    if stored is None or not verify_password(creds.password, stored.password):
        logger.info("Failed login attempt")
        return render(request, "login.html", errors=[INVALID_CREDENTIALS], username=creds.username)

    token = codec.issue(User(user_id=stored.id, username=stored.username))
    response = redirect("/")
    set_session_cookie(response, token, settings)
    logger.info("User logged in", extra={"user_id": stored.id})
    return response


@router.get("/logout")
async def logout(settings: AppSettings):
    # Clear the session cookie
    response = redirect("/")
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return response


@router.post("/register")
async def register(
        request: Request,
        db: BlogStore,
        codec: Codec,
        settings: AppSettings,
        username: Annotated[str, Form()] = "",
        password: Annotated[str, Form()] = "",
):
    """Create an account and log the new user in"""
    creds = validate_registration(username, password, db)
    if creds.errors:
        # Registration lives on the homepage, so errors are shown there
        return render(request, "homepage.html", errors=creds.errors, username=creds.username)

    try:
        stored = db.create_user(creds.username, hash_password(creds.password))
    except UsernameTakenError:
        # Lost a race with another registration for the same name
        return render(request, "homepage.html", errors=[USERNAME_TAKEN], username=creds.username)

    token = codec.issue(User(user_id=stored.id, username=stored.username))
    response = redirect("/")
    set_session_cookie(response, token, settings)
    logger.info(f"Registered user {stored.username}", extra={"user_id": stored.id})
    return response
