import os
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from markupsafe import Markup
from starlette.responses import RedirectResponse

from models.user import ANONYMOUS, User

template_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")
templates = Jinja2Templates(directory=template_dir)


def plain_text(value: Any) -> str:
    """
    Stored text is bleach output, so entities like &amp; are already escaped.
    Decode them once here and let autoescape encode them again on output.
    """
    if not value:
        return ""
    return Markup(str(value)).unescape()


templates.env.filters["plain"] = plain_text


def current_user(request: Request) -> Optional[User]:
    identity = getattr(request.state, "identity", ANONYMOUS)
    return identity if isinstance(identity, User) else None


def render(request: Request, template: str, status_code: int = 200, **context: Any):
    """Render a template with the caller's identity and an error list always present."""
    params: Dict[str, Any] = {"user": current_user(request), "errors": []}
    params.update(context)
    return templates.TemplateResponse(request, template, params, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    # 302 so a POST is followed by a GET
    return RedirectResponse(url, status_code=302)
