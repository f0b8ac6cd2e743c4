"""
Web pages for adding laws
"""
from typing import Callable, ContextManager

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from lawdesk.core.database import get_session_opener
from lawdesk.core.errors import PersistenceError, ValidationError
from lawdesk.core.logging_config import LoggingConfig
from lawdesk.core.metrics import law_submissions_total
from lawdesk.core.templates import render_template
from lawdesk.services.law_service import LawService
from lawdesk.services.law_validator import validate_law

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(tags=["laws"])

ADD_LAW_PATH = "/laws/add"
SUCCESS_PATH = "/laws/success"


def _render_form(request: Request, error_message=None):
    return render_template(
        "laws/add.html",
        {"error_message": error_message, "form_action": ADD_LAW_PATH},
        request,
    )


@router.get("/", include_in_schema=False)
async def index():
    """Send visitors to the form"""
    return RedirectResponse(url=ADD_LAW_PATH, status_code=303)


@router.get(ADD_LAW_PATH, response_class=HTMLResponse)
async def add_law_page(request: Request):
    """Empty add-law form"""
    return _render_form(request)


@router.post(ADD_LAW_PATH, response_class=HTMLResponse)
def submit_law(
    request: Request,
    law_text: str = Form(""),
    category: str = Form(""),
    open_session: Callable[[], ContextManager[Session]] = Depends(get_session_opener),
):
    """
    Handle an add-law submission

    Redirects to the confirmation page once the row is stored. Validation
    and database failures re-render the form with a single message.
    """
    try:
        validated = validate_law(law_text, category)
    except ValidationError as e:
        law_submissions_total.labels(outcome="validation_failed").inc()
        logger.info("Law submission failed validation", extra={"reason": e.message})
        return _render_form(request, e.message)

    try:
        with open_session() as db:
            law = LawService(db).create_law(validated)
    except PersistenceError as e:
        law_submissions_total.labels(outcome="persistence_failed").inc()
        return _render_form(request, e.message)

    law_submissions_total.labels(outcome="created").inc()
    logger.info("Law submission stored", extra={"law_id": law.id})
    return RedirectResponse(url=SUCCESS_PATH, status_code=303)


@router.get(SUCCESS_PATH, response_class=HTMLResponse)
async def law_success_page(request: Request):
    """Confirmation shown after a law is stored"""
    return render_template("laws/success.html", {"add_url": ADD_LAW_PATH}, request)
