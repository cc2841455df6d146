"""
Jinja2 template environment shared by the routers and the error handlers.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.templating import Jinja2Templates

from realty.config import settings
from realty.schemas.forms import FormErrors

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["app_name"] = settings.app_name


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    form_errors: Optional[FormErrors] = None,
):
    """
    Render a template with the CSRF token, the signed-in user and any form errors.
    """
    ctx = {
        "csrf_token": getattr(request.state, "csrf_token", ""),
        "current_user": getattr(request.state, "user", None),
        "errors": [],
        "data": {},
    }
    if form_errors is not None:
        ctx["errors"] = form_errors.errors
        ctx["data"] = form_errors.data
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
