"""
Template rendering utilities
"""
from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from lawdesk.models.law import LAW_TEXT_MAX_LENGTH, LawCategory

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
TEMPLATES_DIR = BASE_DIR / "frontend" / "templates"

# Jinja2Templates enables autoescaping for .html templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals.update(
    law_categories=LawCategory.values(),
    law_text_max_length=LAW_TEXT_MAX_LENGTH,
)


def render_template(
    template_name: str,
    context: dict,
    request: Request,
    status_code: int = 200,
    headers: Optional[dict] = None,
):
    """Render template with context"""
    return templates.TemplateResponse(
        request,
        template_name,
        context,
        status_code=status_code,
        headers=headers,
    )
